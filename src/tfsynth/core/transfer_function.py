"""Rational transfer functions in the s or z domain.

Classes:
    TransferFunctionSpec: Numerator/denominator coefficient pair

Coefficients are stored highest power first. In the s domain that is
s^n ... s^0. In the z domain the coefficients multiply z^0, z^-1, ... z^-n,
which is the order the difference equation consumes them in.

Example:
    >>> from tfsynth.core.transfer_function import TransferFunctionSpec
    >>> tf = TransferFunctionSpec.from_text("4", "s^2+2*s+4")
    >>> tf.denominator
    (1.0, 2.0, 4.0)
    >>> tf.steady_state_gain()
    1.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from tfsynth.core.expression import parse
from tfsynth.core.polynomial import Polynomial
from tfsynth.exceptions import ConfigurationError

Domain = Literal["s", "z"]


@dataclass(frozen=True)
class TransferFunctionSpec:
    """Numerator and denominator coefficients of a transfer function.

    Args:
        numerator: Numerator coefficients, highest power first
        denominator: Denominator coefficients, highest power first
        domain: "s" for continuous time, "z" for discrete time (delay order)

    Raises:
        ConfigurationError: If either sequence is empty or not finite, or the
            leading denominator coefficient is zero
    """

    numerator: tuple[float, ...]
    denominator: tuple[float, ...]
    domain: Domain = "s"

    def __post_init__(self) -> None:
        numerator = tuple(float(c) for c in self.numerator)
        denominator = tuple(float(c) for c in self.denominator)
        if not numerator or not denominator:
            raise ConfigurationError("Numerator and denominator must not be empty")
        if not all(math.isfinite(c) for c in numerator + denominator):
            raise ConfigurationError("Transfer function coefficients must be finite")
        if denominator[0] == 0.0:
            raise ConfigurationError(
                "Leading denominator coefficient must be nonzero"
            )
        if self.domain not in ("s", "z"):
            raise ConfigurationError(f"Unknown domain: {self.domain}")
        object.__setattr__(self, "numerator", numerator)
        object.__setattr__(self, "denominator", denominator)

    @classmethod
    def from_polynomials(
        cls, numerator: Polynomial, denominator: Polynomial
    ) -> TransferFunctionSpec:
        """Build an s-domain transfer function from expanded polynomials.

        Raises:
            ConfigurationError: If either polynomial has negative powers or
                the denominator is zero
        """
        for name, polynomial in (("numerator", numerator), ("denominator", denominator)):
            if polynomial.lowest_power < 0:
                raise ConfigurationError(
                    f"The {name} '{polynomial.to_text()}' has negative powers of s"
                )
        if denominator.is_zero:
            raise ConfigurationError("Denominator must not be zero")
        return cls(
            tuple(numerator.coefficient_array(numerator.degree)),
            tuple(denominator.coefficient_array(denominator.degree)),
        )

    @classmethod
    def from_text(
        cls, numerator: str, denominator: str, variable: str = "s"
    ) -> TransferFunctionSpec:
        """Parse and expand s-domain numerator and denominator expressions.

        Args:
            numerator: Numerator expression, e.g. "4"
            denominator: Denominator expression, e.g. "(s^2+2*s+4)*(s+2)"
            variable: Name of the Laplace variable

        Raises:
            ParseError: On malformed expression text
            EvaluationError: If an expression does not reduce to a polynomial
            ConfigurationError: If the result is not a valid transfer function
        """
        return cls.from_polynomials(
            parse(numerator, variable).expand(),
            parse(denominator, variable).expand(),
        )

    @property
    def order(self) -> int:
        """Highest power across numerator and denominator."""
        return max(len(self.numerator), len(self.denominator)) - 1

    def _polynomial(self, coefficients: tuple[float, ...]) -> Polynomial:
        if self.domain == "s":
            return Polynomial.from_coefficients(coefficients)
        return Polynomial.from_terms((-k, c) for k, c in enumerate(coefficients))

    def numerator_polynomial(self) -> Polynomial:
        return self._polynomial(self.numerator)

    def denominator_polynomial(self) -> Polynomial:
        return self._polynomial(self.denominator)

    def evaluate(self, x: complex) -> complex:
        """Evaluate the transfer function at a point of its domain."""
        return complex(self.numerator_polynomial().evaluate(x)) / complex(
            self.denominator_polynomial().evaluate(x)
        )

    def steady_state_gain(self) -> float:
        """Gain for a constant input.

        The value of the transfer function at s = 0 (s domain) or z = 1
        (z domain).

        Returns:
            The gain; math.inf if only the denominator vanishes at DC and
            math.nan if both do
        """
        if self.domain == "s":
            num, den = self.numerator[-1], self.denominator[-1]
        else:
            num, den = math.fsum(self.numerator), math.fsum(self.denominator)
        scale = max(abs(c) for c in self.denominator)
        if abs(den) <= 1e-12 * scale:
            return math.nan if abs(num) <= 1e-12 * scale else math.inf
        return num / den

    def numerator_text(self) -> str:
        return self.numerator_polynomial().to_text(self.domain)

    def denominator_text(self) -> str:
        return self.denominator_polynomial().to_text(self.domain)

    def __str__(self) -> str:
        return f"({self.numerator_text()}) / ({self.denominator_text()})"
