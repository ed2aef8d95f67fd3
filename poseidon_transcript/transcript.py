"""
Fiat-Shamir transcript over a Poseidon sponge.

The sponge runs over the scalar field of the curve whose points are appended,
so squeezed challenges are directly usable as scalars. Transcripts are
open-ended: no IOPattern is declared and there is no finish() check.
"""

from typing import List

import galois

from .constants import SpongeCurve, curve_parameters
from .curve import AffinePoint, Curve
from .errors import ConfigurationError
from .field import from_bytes_wide, to_bytes
from .sponge import PoseidonSponge

# append_bytes pads to one wide-reduction input
MAX_APPEND_BYTES = 64


class PoseidonTranscript:
    """
    Transcript binding a domain separator to a curve's scalar field.

    Attributes:
        curve: Curve whose scalar field the sponge runs over
        sponge: Underlying PoseidonSponge (no declared IO pattern)
    """

    def __init__(
        self,
        domain_separator: bytes,
        curve: Curve,
        selector: SpongeCurve = SpongeCurve.K256,
    ):
        """
        Args:
            domain_separator: Protocol label mixed into the sponge tag
            curve: Curve of the points and scalars that will be appended
            selector: Poseidon parameter set; its modulus must equal the
                curve's scalar field modulus

        Raises:
            ConfigurationError: If the curve's scalar field does not match selector
        """
        expected = curve_parameters(selector).modulus
        if curve.scalar_field.order != expected:
            raise ConfigurationError(
                f"{curve.name} scalar field modulus {curve.scalar_field.order:#x} "
                f"does not match {selector.name} modulus {expected:#x}"
            )

        self.curve = curve
        self.sponge = PoseidonSponge(curve.scalar_field, domain_separator, selector)

    def append_bytes(self, data: bytes) -> None:
        """
        Append up to 64 bytes as a single scalar.

        The bytes are right-padded with zeros to 64 and wide-reduced.

        Raises:
            ConfigurationError: If more than 64 bytes are given
        """
        if len(data) > MAX_APPEND_BYTES:
            raise ConfigurationError(
                f"append_bytes takes at most {MAX_APPEND_BYTES} bytes, got {len(data)}"
            )
        padded = bytes(data) + bytes(MAX_APPEND_BYTES - len(data))
        self.sponge.absorb([from_bytes_wide(self.curve.scalar_field, padded)])

    def append_point(self, point: AffinePoint) -> None:
        """
        Append a curve point as its two 32-byte big-endian coordinates.

        Raises:
            ValueError: If point is the identity
        """
        x, y = point.coordinates()
        self.append_bytes(to_bytes(x))
        self.append_bytes(to_bytes(y))

    def append_scalar(self, scalar: galois.FieldArray) -> None:
        self.sponge.absorb([scalar])

    def squeeze(self, length: int) -> List[galois.FieldArray]:
        """Squeeze `length` scalar challenges."""
        return self.sponge.squeeze(length)
