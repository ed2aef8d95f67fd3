"""
Poseidon round-constant and MDS generation with the Grain LFSR.

This reproduces the parameter generation procedure published with Poseidon
(eprint 2019/458, Appendix F): an 80-bit Grain LFSR seeded with the instance
description, run in self-shrinking mode, drives rejection sampling of the
round constants and then the sampling of a Cauchy MDS matrix.

Only prime fields with an x^alpha S-box are supported (field kind 1, S-box
kind 0 in the seed encoding).
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Tuple

# Seed field encodings
FIELD_PRIME = 1
SBOX_POWER = 0

# Taps of the Grain feedback polynomial
_TAPS = (62, 51, 38, 23, 13, 0)
_STATE_BITS = 80
_WARMUP_CLOCKS = 160


@dataclass(frozen=True)
class PoseidonParameters:
    """
    Decimal-string tables for one Poseidon instance.

    Attributes:
        round_constants: Flat list, width * (full_rounds + partial_rounds) entries
        mds_matrix: width rows of width entries
        full_rounds: R_F
        partial_rounds: R_P
    """
    round_constants: Tuple[str, ...]
    mds_matrix: Tuple[Tuple[str, ...], ...]
    full_rounds: int
    partial_rounds: int


def _bits(value: int, width: int) -> List[int]:
    return [int(b) for b in format(value, "b").zfill(width)]


class GrainLFSR:
    """
    Self-shrinking Grain LFSR used as the parameter generator.

    The 80-bit initial state is
    field(2) | sbox(4) | field_size(12) | width(12) | R_F(10) | R_P(10) | 1^30.
    """

    def __init__(
        self,
        field_kind: int,
        sbox: int,
        field_size: int,
        width: int,
        full_rounds: int,
        partial_rounds: int,
    ):
        seed = (
            _bits(field_kind, 2)
            + _bits(sbox, 4)
            + _bits(field_size, 12)
            + _bits(width, 12)
            + _bits(full_rounds, 10)
            + _bits(partial_rounds, 10)
            + [1] * 30
        )
        if len(seed) != _STATE_BITS:
            raise ValueError("Grain seed parameters do not fit the 80-bit state")

        self.state: Deque[int] = deque(seed, maxlen=_STATE_BITS)
        for _ in range(_WARMUP_CLOCKS):
            self._clock()

    def _clock(self) -> int:
        new_bit = 0
        for tap in _TAPS:
            new_bit ^= self.state[tap]
        # maxlen drops state[0]
        self.state.append(new_bit)
        return new_bit

    def next_bit(self) -> int:
        """Next output bit in self-shrinking mode."""
        while True:
            selector = self._clock()
            candidate = self._clock()
            if selector == 1:
                return candidate

    def random_bits(self, num_bits: int) -> int:
        """Read num_bits output bits as an integer, first bit most significant."""
        value = 0
        for _ in range(num_bits):
            value = (value << 1) | self.next_bit()
        return value


def generate_round_constants(lfsr: GrainLFSR, modulus: int, count: int) -> List[int]:
    """Rejection-sample count integers below modulus."""
    field_size = modulus.bit_length()
    constants = []
    for _ in range(count):
        value = lfsr.random_bits(field_size)
        while value >= modulus:
            value = lfsr.random_bits(field_size)
        constants.append(value)
    return constants


def generate_cauchy_mds(lfsr: GrainLFSR, modulus: int, width: int) -> List[List[int]]:
    """
    Sample a Cauchy matrix M[i][j] = 1 / (x_i + y_j).

    2 * width values are drawn and reduced mod p; the whole batch is redrawn
    while it contains duplicates, and the matrix is redrawn if any x_i + y_j
    vanishes.

    The Poseidon authors' parameter script additionally rejects matrices
    that admit invariant subspaces (its Algorithms 1-3). Those checks are not
    run here: the first valid Cauchy matrix is accepted, which matches the
    published K256 tables.
    """
    field_size = modulus.bit_length()
    while True:
        values = [lfsr.random_bits(field_size) % modulus for _ in range(2 * width)]
        while len(set(values)) != len(values):
            values = [lfsr.random_bits(field_size) % modulus for _ in range(2 * width)]
        xs, ys = values[:width], values[width:]

        if any((x + y) % modulus == 0 for x in xs for y in ys):
            continue

        return [[pow(x + y, -1, modulus) for y in ys] for x in xs]


def generate_parameters(
    modulus: int, width: int, full_rounds: int, partial_rounds: int
) -> PoseidonParameters:
    """
    Generate the round constants and MDS matrix of a Poseidon instance.

    Round constants are drawn first and the MDS matrix second, from the same
    generator, so both tables are fixed by the instance description alone.

    Args:
        modulus: Field prime p
        width: State width t
        full_rounds: R_F (even)
        partial_rounds: R_P

    Returns:
        PoseidonParameters with decimal-string tables
    """
    lfsr = GrainLFSR(
        FIELD_PRIME, SBOX_POWER, modulus.bit_length(), width, full_rounds, partial_rounds
    )
    round_constants = generate_round_constants(
        lfsr, modulus, width * (full_rounds + partial_rounds)
    )
    mds = generate_cauchy_mds(lfsr, modulus, width)

    return PoseidonParameters(
        round_constants=tuple(str(c) for c in round_constants),
        mds_matrix=tuple(tuple(str(m) for m in row) for row in mds),
        full_rounds=full_rounds,
        partial_rounds=partial_rounds,
    )
