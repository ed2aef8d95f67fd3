"""
Poseidon permutation over a prime field of width 3.

Implements the HADES round structure of Poseidon (eprint 2019/458):
R_F / 2 full rounds, R_P partial rounds, R_F / 2 full rounds. Every round
adds 3 round keys, applies the x^5 S-box (to all elements in a full round,
to element 0 only in a partial round) and multiplies by the MDS matrix.

The field is not fixed here: it is the galois FieldArray class of the
round-key array handed in through PoseidonConstants.
"""

from dataclasses import dataclass
from typing import Sequence, Type

import galois

from .errors import ConfigurationError
from .field import from_decimal

# State width t
STATE_WIDTH = 3

# S-box exponent. Requires gcd(5, p - 1) = 1.
ALPHA = 5

# Domain tag of the fixed-arity hash: 2^arity - 1 for arity t - 1 = 2
HASH_DOMAIN_TAG = (1 << (STATE_WIDTH - 1)) - 1


@dataclass(frozen=True, eq=False)
class PoseidonConstants:
    """
    Round keys and MDS matrix of one Poseidon instance.

    Attributes:
        round_keys: Flat 1-D FieldArray, consumed STATE_WIDTH keys per round
        mds_matrix: STATE_WIDTH x STATE_WIDTH FieldArray over the same field
        num_full_rounds: R_F, split evenly around the partial rounds
        num_partial_rounds: R_P
    """
    round_keys: galois.FieldArray
    mds_matrix: galois.FieldArray
    num_full_rounds: int
    num_partial_rounds: int

    def __post_init__(self):
        if type(self.round_keys) is not type(self.mds_matrix):
            raise ConfigurationError("round keys and MDS matrix must share one field")
        if self.mds_matrix.shape != (STATE_WIDTH, STATE_WIDTH):
            raise ConfigurationError(
                f"MDS matrix must be {STATE_WIDTH}x{STATE_WIDTH}, got {self.mds_matrix.shape}"
            )
        if self.num_full_rounds < 0 or self.num_partial_rounds < 0:
            raise ConfigurationError("round counts must be non-negative")
        if self.num_full_rounds % 2 != 0:
            raise ConfigurationError(
                f"full round count must be even, got {self.num_full_rounds}"
            )
        if self.round_keys.ndim != 1 or len(self.round_keys) < self.keys_per_permutation:
            raise ConfigurationError(
                f"need at least {self.keys_per_permutation} round keys, "
                f"got {self.round_keys.size}"
            )

    @property
    def field(self) -> Type[galois.FieldArray]:
        return type(self.round_keys)

    @property
    def keys_per_permutation(self) -> int:
        """Round keys consumed by one call to Poseidon.permute()."""
        return STATE_WIDTH * (self.num_full_rounds + self.num_partial_rounds)

    @classmethod
    def from_decimal_table(
        cls,
        field: Type[galois.FieldArray],
        round_constants: Sequence[str],
        mds_matrix: Sequence[Sequence[str]],
        num_full_rounds: int,
        num_partial_rounds: int,
    ) -> "PoseidonConstants":
        """
        Parse decimal-string tables into field elements.

        Raises:
            ConfigurationError: On any malformed entry or inconsistent table
        """
        if not mds_matrix or any(len(row) != len(mds_matrix) for row in mds_matrix):
            raise ConfigurationError("MDS matrix table must be square")
        keys = [int(from_decimal(field, c)) for c in round_constants]
        mds = [[int(from_decimal(field, m)) for m in row] for row in mds_matrix]

        return cls(
            round_keys=field(keys),
            mds_matrix=field(mds),
            num_full_rounds=num_full_rounds,
            num_partial_rounds=num_partial_rounds,
        )


class Poseidon:
    """
    Poseidon permutation state.

    Attributes:
        state: STATE_WIDTH field elements
        constants: Round keys and MDS matrix
        pos: Number of round keys consumed since the last reset
    """

    def __init__(self, constants: PoseidonConstants):
        self.constants = constants
        self.field = constants.field
        self.state = self.field.Zeros(STATE_WIDTH)
        self.pos = 0

    def permute(self) -> None:
        """
        Apply the full permutation to self.state in place.

        Leaves self.pos at constants.keys_per_permutation; the owner resets
        it before the next call.
        """
        full_rounds_half = self.constants.num_full_rounds // 2

        for _ in range(full_rounds_half):
            self._full_round()

        for _ in range(self.constants.num_partial_rounds):
            self._partial_round()

        for _ in range(full_rounds_half):
            self._full_round()

    def hash(self, inputs: Sequence[galois.FieldArray]) -> galois.FieldArray:
        """
        Fixed-arity Poseidon hash of STATE_WIDTH - 1 field elements.

        The state is set to [HASH_DOMAIN_TAG, *inputs], permuted once, and
        element 1 is returned.
        """
        if len(inputs) != STATE_WIDTH - 1:
            raise ValueError(
                f"hash takes exactly {STATE_WIDTH - 1} inputs, got {len(inputs)}"
            )
        self.state = self.field([HASH_DOMAIN_TAG] + [int(x) for x in inputs])
        self.pos = 0
        self.permute()

        return self.state[1]

    def _add_round_keys(self) -> None:
        keys = self.constants.round_keys[self.pos:self.pos + STATE_WIDTH]
        self.state = self.state + keys

    def _mix(self) -> None:
        self.state = self.constants.mds_matrix @ self.state

    def _full_round(self) -> None:
        self._add_round_keys()
        self.state = self.state ** ALPHA
        self._mix()
        self.pos += STATE_WIDTH

    def _partial_round(self) -> None:
        self._add_round_keys()
        self.state[0] = self.state[0] ** ALPHA
        self._mix()
        self.pos += STATE_WIDTH
