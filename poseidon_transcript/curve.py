"""
Short Weierstrass curves y^2 = x^3 + a*x + b in affine form.

Only what the transcript consumes is modelled: affine coordinates, the
identity, the curve equation and the scalar field. Group arithmetic lives in
whatever curve library produces the points.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Type

import galois
import numpy as np

from .field import Fp, Fq


@dataclass(frozen=True, eq=False)
class AffinePoint:
    """
    Curve point; x and y are None for the point at infinity.
    """
    curve: "Curve"
    x: Optional[galois.FieldArray] = None
    y: Optional[galois.FieldArray] = None

    @property
    def is_identity(self) -> bool:
        return self.x is None

    def coordinates(self) -> Tuple[galois.FieldArray, galois.FieldArray]:
        """
        Affine (x, y) of the point.

        Raises:
            ValueError: For the identity, which has no affine coordinates
        """
        if self.is_identity:
            raise ValueError("the identity has no affine coordinates")
        return self.x, self.y

    def __eq__(self, other) -> bool:
        if not isinstance(other, AffinePoint):
            return NotImplemented
        if self.curve is not other.curve:
            return False
        if self.is_identity or other.is_identity:
            return self.is_identity and other.is_identity
        return bool(self.x == other.x) and bool(self.y == other.y)

    def __hash__(self) -> int:
        if self.is_identity:
            return hash((self.curve.name, None))
        return hash((self.curve.name, int(self.x), int(self.y)))


@dataclass(frozen=True)
class Curve:
    """
    Attributes:
        name: Curve name
        base_field: Field of the coordinates
        scalar_field: Field of scalars (the group order)
        a: Curve coefficient a
        b: Curve coefficient b
    """
    name: str
    base_field: Type[galois.FieldArray]
    scalar_field: Type[galois.FieldArray]
    a: int
    b: int

    def _rhs(self, x: galois.FieldArray) -> galois.FieldArray:
        F = self.base_field
        return x ** 3 + F(self.a) * x + F(self.b)

    def is_on_curve(self, x: galois.FieldArray, y: galois.FieldArray) -> bool:
        return bool(y ** 2 == self._rhs(x))

    def point(self, x: int, y: int) -> AffinePoint:
        """
        Affine point from integer coordinates.

        Raises:
            ValueError: If (x, y) does not satisfy the curve equation
        """
        F = self.base_field
        fx, fy = F(x), F(y)
        if not self.is_on_curve(fx, fy):
            raise ValueError(f"({x}, {y}) is not on {self.name}")
        return AffinePoint(self, fx, fy)

    def identity(self) -> AffinePoint:
        return AffinePoint(self)

    def is_x_coordinate(self, x: int) -> bool:
        """True when some point on the curve has abscissa x."""
        return bool(self._rhs(self.base_field(x)).is_square())

    def lift_x(self, x: int) -> AffinePoint:
        """
        Point with abscissa x and the smaller of the two candidate ordinates.

        Raises:
            ValueError: If no point on the curve has abscissa x
        """
        F = self.base_field
        fx = F(x)
        rhs = self._rhs(fx)
        if not rhs.is_square():
            raise ValueError(f"{x} is not the x-coordinate of a point on {self.name}")
        # np.sqrt needs a 1-d array; galois returns the smaller root
        y = np.sqrt(F([int(rhs)]))[0]
        return AffinePoint(self, fx, y)


SECP256K1 = Curve(name="secp256k1", base_field=Fp, scalar_field=Fq, a=0, b=7)

SECQ256K1 = Curve(name="secq256k1", base_field=Fq, scalar_field=Fp, a=0, b=7)
