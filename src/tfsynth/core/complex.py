"""Complex-number arithmetic for pole placement.

Classes:
    Complex: Immutable complex value with polar-form exponentiation

Functions:
    is_zero: Tolerance check used for pole cancellation and coefficient cleanup

Example:
    >>> from tfsynth.core.complex import Complex
    >>> p = Complex(0.0, 1.0).to_power(2.0)
    >>> p.isclose(Complex(-1.0, 0.0))
    True
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Absolute tolerance for values that should be exactly zero
EPSILON = 1e-12


def is_zero(value: float, scale: float = 1.0, tolerance: float = EPSILON) -> bool:
    """Check whether a value is effectively zero.

    Args:
        value: Value to test
        scale: Magnitude the value is compared against (tolerance is relative
            to it when larger than one)
        tolerance: Relative tolerance

    Returns:
        True if |value| <= tolerance * max(1, |scale|)
    """
    return abs(value) <= tolerance * max(1.0, abs(scale))


@dataclass(frozen=True)
class Complex:
    """Complex number with value semantics.

    Arithmetic works between two Complex values and between a Complex and a
    real scalar. Equality is exact; use isclose() when comparing computed
    values.

    Args:
        real: Real component
        imaginary: Imaginary component
    """

    real: float = 0.0
    imaginary: float = 0.0

    @classmethod
    def from_polar(cls, length: float, angle: float) -> Complex:
        """Create a complex value from polar coordinates."""
        return cls(length * math.cos(angle), length * math.sin(angle))

    @staticmethod
    def _coerce(value: Complex | float) -> Complex:
        if isinstance(value, Complex):
            return value
        return Complex(float(value), 0.0)

    def __add__(self, other: Complex | float) -> Complex:
        other = self._coerce(other)
        return Complex(self.real + other.real, self.imaginary + other.imaginary)

    __radd__ = __add__

    def __sub__(self, other: Complex | float) -> Complex:
        other = self._coerce(other)
        return Complex(self.real - other.real, self.imaginary - other.imaginary)

    def __rsub__(self, other: float) -> Complex:
        return self._coerce(other) - self

    def __mul__(self, other: Complex | float) -> Complex:
        other = self._coerce(other)
        return Complex(
            self.real * other.real - self.imaginary * other.imaginary,
            self.real * other.imaginary + self.imaginary * other.real,
        )

    __rmul__ = __mul__

    def __truediv__(self, other: Complex | float) -> Complex:
        other = self._coerce(other)
        denominator = other.real * other.real + other.imaginary * other.imaginary
        if denominator == 0.0:
            raise ZeroDivisionError(f"Division of {self} by zero complex value")
        return Complex(
            (self.real * other.real + self.imaginary * other.imaginary) / denominator,
            (self.imaginary * other.real - self.real * other.imaginary) / denominator,
        )

    def __rtruediv__(self, other: float) -> Complex:
        return self._coerce(other) / self

    def __neg__(self) -> Complex:
        return Complex(-self.real, -self.imaginary)

    def __abs__(self) -> float:
        return self.polar_length

    def __complex__(self) -> complex:
        return complex(self.real, self.imaginary)

    def __str__(self) -> str:
        if self.imaginary >= 0:
            return f"{self.real:0.3f} + {self.imaginary:0.3f} i"
        return f"{self.real:0.3f} - {-self.imaginary:0.3f} i"

    @property
    def polar_length(self) -> float:
        """Magnitude sqrt(re^2 + im^2)."""
        return math.hypot(self.real, self.imaginary)

    @property
    def polar_angle(self) -> float:
        """Principal argument atan2(im, re) in radians."""
        return math.atan2(self.imaginary, self.real)

    def conjugate(self) -> Complex:
        """Return the complex conjugate."""
        return Complex(self.real, -self.imaginary)

    def to_power(self, power: Complex | float) -> Complex:
        """Raise to a real or complex power on the principal branch.

        For a real exponent p, r^p at angle p*theta (De Moivre). For a complex
        exponent p, the magnitude is r^Re(p) * exp(-Im(p)*theta) and the angle
        is Im(p)*ln(r) + Re(p)*theta.

        Args:
            power: Exponent

        Returns:
            Result as a new Complex
        """
        r = self.polar_length
        theta = self.polar_angle

        if not isinstance(power, Complex):
            return Complex.from_polar(r ** float(power), theta * float(power))

        if r == 0.0:
            if power.real > 0.0:
                return Complex(0.0, 0.0)
            raise ZeroDivisionError("Zero raised to a power with non-positive real part")

        factor = r**power.real * math.exp(-power.imaginary * theta)
        angle = power.imaginary * math.log(r) + power.real * theta
        return Complex.from_polar(factor, angle)

    def isclose(self, other: Complex | float, tolerance: float = 1e-9) -> bool:
        """Compare with a tolerance relative to the larger magnitude.

        Args:
            other: Value to compare against
            tolerance: Relative tolerance (absolute for magnitudes below one)

        Returns:
            True if the two values are within tolerance
        """
        other = self._coerce(other)
        scale = max(1.0, self.polar_length, other.polar_length)
        return (self - other).polar_length <= tolerance * scale

    def is_zero(self, tolerance: float = EPSILON) -> bool:
        """Check whether both components are effectively zero."""
        return is_zero(self.real, tolerance=tolerance) and is_zero(
            self.imaginary, tolerance=tolerance
        )
