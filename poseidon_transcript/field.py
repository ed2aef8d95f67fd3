"""
Prime fields of the secp256k1/secq256k1 cycle using the galois library.

Fp is the secp256k1 base field, which is also the scalar field of secq256k1.
Fq is the secp256k1 group order, which is also the base field of secq256k1.
The sponge and transcript run over Fp; Fq only carries secq256k1 point
coordinates.

Everything outside this module treats a field as an opaque galois FieldArray
class passed in by the caller. The helpers below add the encodings galois
does not provide: strict decimal parsing for constant tables, fixed-width
big-endian bytes (point coordinates, sponge tags), the little-endian repr
used by published test vectors, and little-endian wide reduction.
"""

import re
from typing import Type

import galois

from .errors import ConfigurationError

# secp256k1 base field prime: p = 2^256 - 2^32 - 977
SECP256K1_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Multiplicative generators are passed explicitly so galois does not try to
# factor p - 1 at import time.
Fp = galois.GF(SECP256K1_P, primitive_element=3, verify=False)
"""secp256k1 base field GF(p) = secq256k1 scalar field."""

Fq = galois.GF(SECP256K1_N, primitive_element=7, verify=False)
"""secp256k1 scalar field GF(n) = secq256k1 base field."""

_DECIMAL = re.compile(r"[0-9]+")


def byte_length(field: Type[galois.FieldArray]) -> int:
    """Canonical encoding width of a field element in bytes."""
    return (field.order.bit_length() + 7) // 8


def from_decimal(field: Type[galois.FieldArray], text: str) -> galois.FieldArray:
    """
    Parse a canonical decimal string into a field element.

    Constant tables are parsed through here; a malformed or out-of-range
    entry must abort loading rather than silently reduce.

    Raises:
        ConfigurationError: If text is not a plain decimal number below the modulus
    """
    if not isinstance(text, str) or _DECIMAL.fullmatch(text) is None:
        raise ConfigurationError(f"malformed decimal field element: {text!r}")
    value = int(text)
    if value >= field.order:
        raise ConfigurationError(
            f"decimal value {text} is not below the field modulus {field.order}"
        )
    return field(value)


def from_u64(field: Type[galois.FieldArray], value: int) -> galois.FieldArray:
    """Embed a small non-negative integer (domain tags, test inputs)."""
    if not 0 <= value < 1 << 64:
        raise ValueError(f"value must fit in 64 bits, got {value}")
    return field(value)


def to_bytes(element: galois.FieldArray) -> bytes:
    """Fixed-width big-endian encoding of a field element."""
    return int(element).to_bytes(byte_length(type(element)), "big")


def from_bytes(field: Type[galois.FieldArray], data: bytes) -> galois.FieldArray:
    """
    Decode the fixed-width big-endian encoding produced by to_bytes.

    Raises:
        ValueError: If data has the wrong length or encodes a value >= modulus
    """
    width = byte_length(field)
    if len(data) != width:
        raise ValueError(f"expected {width} bytes, got {len(data)}")
    value = int.from_bytes(data, "big")
    if value >= field.order:
        raise ValueError("non-canonical field element encoding")
    return field(value)


def to_repr(element: galois.FieldArray) -> bytes:
    """Fixed-width little-endian repr, the byte order of the published test vectors."""
    return int(element).to_bytes(byte_length(type(element)), "little")


def from_repr(field: Type[galois.FieldArray], data: bytes) -> galois.FieldArray:
    """
    Decode the little-endian repr produced by to_repr.

    Raises:
        ValueError: If data has the wrong length or encodes a value >= modulus
    """
    width = byte_length(field)
    if len(data) != width:
        raise ValueError(f"expected {width} bytes, got {len(data)}")
    value = int.from_bytes(data, "little")
    if value >= field.order:
        raise ValueError("non-canonical field element repr")
    return field(value)


def from_bytes_wide(field: Type[galois.FieldArray], data: bytes) -> galois.FieldArray:
    """
    Reduce a double-width little-endian integer modulo p.

    Args:
        field: Target field
        data: Exactly 2 * byte_length(field) bytes

    Returns:
        The integer encoded by data, reduced into the field
    """
    width = 2 * byte_length(field)
    if len(data) != width:
        raise ValueError(f"expected {width} bytes, got {len(data)}")
    return field(int.from_bytes(data, "little") % field.order)
