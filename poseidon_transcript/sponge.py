"""
Poseidon sponge with IO-pattern domain separation.

The permutation state is [capacity | rate] = [tag, r0, r1]. The capacity
element is the domain-separation tag derived from the declared IOPattern and
the caller's domain-separator bytes; absorb and squeeze only ever touch the
rate elements.

Usage:
    pattern = IOPattern([SpongeOp.absorb(2), SpongeOp.squeeze(1)])
    sponge = PoseidonSponge(Fp, b"my-protocol", io_pattern=pattern)
    sponge.absorb([Fp(1), Fp(2)])
    challenge, = sponge.squeeze(1)
    sponge.finish()
"""

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Type

import galois

from .constants import SpongeCurve, load_constants
from .errors import ConfigurationError, IOPatternMismatchError
from .field import byte_length, from_bytes
from .poseidon import STATE_WIDTH, Poseidon

logger = logging.getLogger(__name__)

CAPACITY = 1
RATE = STATE_WIDTH - CAPACITY

# Marks absorb words in the encoded IO pattern
ABSORB_FLAG = 0x8000_0000

# Bytes of the tag hash kept in the tag
TAG_BYTES = 16


class SpongeOpKind(Enum):
    ABSORB = "absorb"
    SQUEEZE = "squeeze"


@dataclass(frozen=True)
class SpongeOp:
    """One declared sponge call: absorb or squeeze of `count` elements."""
    kind: SpongeOpKind
    count: int

    def __post_init__(self):
        if self.count < 0:
            raise ConfigurationError(f"sponge op count must be >= 0, got {self.count}")

    @classmethod
    def absorb(cls, count: int) -> "SpongeOp":
        return cls(SpongeOpKind.ABSORB, count)

    @classmethod
    def squeeze(cls, count: int) -> "SpongeOp":
        return cls(SpongeOpKind.SQUEEZE, count)

    def word(self) -> int:
        """32-bit encoding: absorbs carry ABSORB_FLAG, squeezes are the bare count."""
        if self.count >= ABSORB_FLAG:
            raise ConfigurationError(f"sponge op count {self.count} does not fit in 31 bits")
        if self.kind is SpongeOpKind.ABSORB:
            return self.count + ABSORB_FLAG
        return self.count


class IOPattern:
    """
    Declared sequence of sponge operations.

    Binds the sponge's domain-separation tag and is checked against the
    number of realized calls in PoseidonSponge.finish().
    """

    def __init__(self, ops: Iterable[SpongeOp]):
        self.ops: Tuple[SpongeOp, ...] = tuple(ops)

    def __len__(self) -> int:
        return len(self.ops)

    def __iter__(self) -> Iterator[SpongeOp]:
        return iter(self.ops)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IOPattern):
            return NotImplemented
        return self.ops == other.ops

    def __hash__(self) -> int:
        return hash(self.ops)

    def __repr__(self) -> str:
        return f"IOPattern({list(self.ops)!r})"

    def words(self) -> List[int]:
        return [op.word() for op in self.ops]

    def aggregated_words(self) -> List[int]:
        """
        Encoded words with runs of same-direction operations merged.

        Absorb(2), Absorb(3), Squeeze(1), Squeeze(1) encodes as
        [ABSORB_FLAG + 5, 2]. The merged word keeps the absorb flag.
        """
        aggregated: List[int] = []
        for word in self.words():
            if aggregated and (aggregated[-1] & ABSORB_FLAG) == (word & ABSORB_FLAG):
                count = (aggregated[-1] & ~ABSORB_FLAG) + (word & ~ABSORB_FLAG)
                if count >= ABSORB_FLAG:
                    raise ConfigurationError("aggregated IO pattern word overflows 31 bits")
                aggregated[-1] = (word & ABSORB_FLAG) | count
            else:
                aggregated.append(word)
        return aggregated


def derive_tag(
    field: Type[galois.FieldArray],
    io_pattern: Optional[IOPattern],
    domain_separator: bytes,
) -> galois.FieldArray:
    """
    Domain-separation tag for the capacity element.

    SHA3-256 over the big-endian aggregated IO words followed by the
    domain-separator bytes; the first 128 bits of the digest become the low
    128 bits of the tag.

    Args:
        field: Field of the sponge state
        io_pattern: Declared pattern, or None for an open-ended sponge
        domain_separator: Caller context bytes

    Returns:
        Tag as a field element
    """
    words = io_pattern.aggregated_words() if io_pattern is not None else []

    h = hashlib.sha3_256()
    for word in words:
        h.update(word.to_bytes(4, "big"))
    h.update(bytes(domain_separator))
    digest = h.digest()

    width = byte_length(field)
    return from_bytes(field, bytes(width - TAG_BYTES) + digest[:TAG_BYTES])


class PoseidonSponge:
    """
    Sponge over the Poseidon permutation with rate 2 and capacity 1.

    Attributes:
        absorb_pos: Next rate slot absorb writes to, in [0, RATE]
        squeeze_pos: Next rate slot squeeze reads from, in [0, RATE]
        io_count: Number of non-empty absorb/squeeze calls made
        io_pattern: Declared pattern checked by finish(), if any
        rate: Rate elements (RATE)
        capacity: Capacity elements (CAPACITY)
    """

    def __init__(
        self,
        field: Type[galois.FieldArray],
        domain_separator: bytes = b"",
        curve: SpongeCurve = SpongeCurve.K256,
        io_pattern: Optional[IOPattern] = None,
    ):
        self.field = field
        self.rate = RATE
        self.capacity = CAPACITY

        self.io_pattern = io_pattern
        self.absorb_pos = 0
        self.squeeze_pos = 0
        self.io_count = 0

        self.poseidon = Poseidon(load_constants(curve, field))
        self.tag = derive_tag(field, io_pattern, domain_separator)
        self.poseidon.state[0] = self.tag

        logger.debug(
            "Constructed Poseidon sponge over %s (declared ops: %s)",
            curve.name,
            len(io_pattern) if io_pattern is not None else "none",
        )

    @property
    def state(self) -> galois.FieldArray:
        return self.poseidon.state

    def absorb(self, xs: Sequence[galois.FieldArray]) -> None:
        """
        Absorb field elements into the rate part of the state.

        An empty input is a no-op and does not count as an operation. After
        any absorb the next squeeze starts with a fresh permutation.
        """
        if len(xs) == 0:
            return

        for x in xs:
            if self.absorb_pos == self.rate:
                self._permute()
                self.absorb_pos = 0

            self.poseidon.state[self.capacity + self.absorb_pos] = x
            self.absorb_pos += 1

        self.io_count += 1
        self.squeeze_pos = self.rate

    def squeeze(self, length: int) -> List[galois.FieldArray]:
        """
        Squeeze `length` field elements from the rate part of the state.

        Returns:
            List of field elements in generation order; [] for length 0,
            which does not count as an operation
        """
        if length < 0:
            raise ValueError(f"squeeze length must be >= 0, got {length}")
        if length == 0:
            return []

        y = []
        for _ in range(length):
            if self.squeeze_pos == self.rate:
                self._permute()
                self.squeeze_pos = 0
                self.absorb_pos = 0

            y.append(self.poseidon.state[self.capacity + self.squeeze_pos])
            self.squeeze_pos += 1

        self.io_count += 1
        return y

    def finish(self) -> None:
        """
        Check the realized calls against the declared IOPattern.

        Only the number of operations is compared, not the size of each call.

        Raises:
            IOPatternMismatchError: If a pattern was declared and the count differs
        """
        if self.io_pattern is None:
            return
        if self.io_count != len(self.io_pattern):
            raise IOPatternMismatchError(len(self.io_pattern), self.io_count)

    def _permute(self) -> None:
        self.poseidon.permute()
        self.poseidon.pos = 0
