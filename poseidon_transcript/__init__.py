"""
Poseidon transcript

A Python implementation of the Poseidon permutation over the secp256k1 base
field, a sponge with IO-pattern domain separation on top of it, and a
Fiat-Shamir transcript for secq256k1 proof protocols.

This package provides:
- secp256k1 / secq256k1 prime fields (via galois)
- Grain LFSR generation of the Poseidon round constants and MDS matrix
- Poseidon permutation and fixed-arity hash
- Poseidon sponge with IO patterns
- Fiat-Shamir transcript

Usage:
    from poseidon_transcript import PoseidonTranscript, SECQ256K1

    transcript = PoseidonTranscript(b"my-protocol", SECQ256K1)
    transcript.append_point(commitment)
    challenge, = transcript.squeeze(1)
"""

# Field arithmetic (via galois)
from .field import (
    Fp,
    Fq,
    SECP256K1_P,
    SECP256K1_N,
    byte_length,
    from_decimal,
    from_u64,
    to_bytes,
    from_bytes,
    to_repr,
    from_repr,
    from_bytes_wide,
)

# Errors
from .errors import (
    PoseidonError,
    ConfigurationError,
    IOPatternMismatchError,
)

# Parameter generation
from .grain import (
    GrainLFSR,
    PoseidonParameters,
    generate_parameters,
)

# Permutation
from .poseidon import (
    Poseidon,
    PoseidonConstants,
    STATE_WIDTH,
    ALPHA,
)

# Per-curve constants
from .constants import (
    SpongeCurve,
    CurveParameters,
    curve_parameters,
    decimal_tables,
    load_constants,
)

# Sponge
from .sponge import (
    PoseidonSponge,
    IOPattern,
    SpongeOp,
    SpongeOpKind,
    derive_tag,
    RATE,
    CAPACITY,
)

# Curves and transcript
from .curve import (
    AffinePoint,
    Curve,
    SECP256K1,
    SECQ256K1,
)
from .transcript import PoseidonTranscript

__version__ = "0.1.0"
__all__ = [
    # Field
    "Fp",
    "Fq",
    "SECP256K1_P",
    "SECP256K1_N",
    "byte_length",
    "from_decimal",
    "from_u64",
    "to_bytes",
    "from_bytes",
    "to_repr",
    "from_repr",
    "from_bytes_wide",
    # Errors
    "PoseidonError",
    "ConfigurationError",
    "IOPatternMismatchError",
    # Parameters
    "GrainLFSR",
    "PoseidonParameters",
    "generate_parameters",
    # Permutation
    "Poseidon",
    "PoseidonConstants",
    "STATE_WIDTH",
    "ALPHA",
    # Constants
    "SpongeCurve",
    "CurveParameters",
    "curve_parameters",
    "decimal_tables",
    "load_constants",
    # Sponge
    "PoseidonSponge",
    "IOPattern",
    "SpongeOp",
    "SpongeOpKind",
    "derive_tag",
    "RATE",
    "CAPACITY",
    # Transcript
    "AffinePoint",
    "Curve",
    "SECP256K1",
    "SECQ256K1",
    "PoseidonTranscript",
]
