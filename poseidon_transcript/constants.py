"""
Per-curve Poseidon parameters.

Each SpongeCurve selects a field modulus and round counts. The decimal
round-constant and MDS tables for that selection are generated once with the
Grain LFSR (see grain.py) and then parsed into whatever galois field the
caller supplies.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Type

import galois

from .field import SECP256K1_P
from .grain import PoseidonParameters, generate_parameters
from .poseidon import ALPHA, STATE_WIDTH, PoseidonConstants

logger = logging.getLogger(__name__)


class SpongeCurve(Enum):
    """Curve whose field the sponge runs over."""
    K256 = "k256"


@dataclass(frozen=True)
class CurveParameters:
    """
    Poseidon instance description for one curve.

    Attributes:
        modulus: Prime of the field the permutation runs over
        full_rounds: R_F
        partial_rounds: R_P
        width: State width t
        alpha: S-box exponent
    """
    modulus: int
    full_rounds: int = 8
    partial_rounds: int = 56
    width: int = STATE_WIDTH
    alpha: int = ALPHA


CURVE_PARAMETERS = {
    # 128-bit security, t = 3, alpha = 5 over the 256-bit secp256k1 base field
    SpongeCurve.K256: CurveParameters(modulus=SECP256K1_P),
}


def curve_parameters(curve: SpongeCurve) -> CurveParameters:
    try:
        return CURVE_PARAMETERS[curve]
    except KeyError:
        raise ValueError(f"no Poseidon parameters for {curve!r}") from None


@lru_cache(maxsize=None)
def decimal_tables(curve: SpongeCurve) -> PoseidonParameters:
    """
    Decimal-string round constants and MDS matrix for a curve.

    Generated on first use and cached for the life of the process.
    """
    params = curve_parameters(curve)
    logger.debug(
        "Generating Poseidon tables for %s (t=%d, R_F=%d, R_P=%d)",
        curve.name, params.width, params.full_rounds, params.partial_rounds,
    )
    return generate_parameters(
        params.modulus, params.width, params.full_rounds, params.partial_rounds
    )


def load_constants(
    curve: SpongeCurve, field: Type[galois.FieldArray]
) -> PoseidonConstants:
    """
    Parse the tables for curve into PoseidonConstants over field.

    Raises:
        ConfigurationError: If any table entry is not a canonical element of field
    """
    tables = decimal_tables(curve)
    return PoseidonConstants.from_decimal_table(
        field,
        tables.round_constants,
        tables.mds_matrix,
        tables.full_rounds,
        tables.partial_rounds,
    )
