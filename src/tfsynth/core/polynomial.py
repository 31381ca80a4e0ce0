"""Polynomial values in a single variable.

Polynomials are stored densely, lowest power first, with an integer offset so
that negative powers (the delay operator z^-1) are representable. Products are
computed by convolving coefficient arrays, which keeps expansions of
high-order binomials exact for integer coefficients.

Classes:
    PolynomialTerm: One (power, coefficient) pair
    Polynomial: Immutable Laurent polynomial with exact-convolution arithmetic

Functions:
    format_number: Shortest text that parses back to the same float
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from tfsynth.exceptions import EvaluationError, NumericDegeneracyError

# Largest power (in magnitude) an expansion may produce
MAX_DEGREE = 1000


def format_number(value: float) -> str:
    """Format a float so that parsing the text gives back the same value.

    Integral values print without a decimal point.

    Args:
        value: Number to format

    Returns:
        Text such as "2", "-0.25" or "1e-05"
    """
    value = float(value)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _check_degree(highest: int, lowest: int) -> None:
    power = highest if abs(highest) >= abs(lowest) else lowest
    if abs(power) > MAX_DEGREE:
        raise EvaluationError(
            f"Expansion reaches power {power}, beyond the maximum degree {MAX_DEGREE}"
        )


@dataclass(frozen=True, order=True)
class PolynomialTerm:
    """Single monomial: coefficient * variable ^ power."""

    power: int
    coefficient: float

    def __iter__(self):
        # Allows `power, coefficient = term`
        yield self.power
        yield self.coefficient


@dataclass(frozen=True)
class Polynomial:
    """Polynomial with integer (possibly negative) powers.

    Args:
        coefficients: Coefficients from the lowest power upward
        offset: Power of the first coefficient

    Note:
        Construct through the classmethods; they trim zero coefficients at
        both ends so that equal polynomials compare equal.
    """

    coefficients: tuple[float, ...] = ()
    offset: int = 0

    # -----------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------

    @classmethod
    def _normalized(cls, coefficients: Iterable[float], offset: int) -> Polynomial:
        values = [float(c) for c in coefficients]
        if not all(math.isfinite(v) for v in values):
            raise EvaluationError("Coefficient is not finite (overflow or undefined value)")
        start = 0
        while start < len(values) and values[start] == 0.0:
            start += 1
        end = len(values)
        while end > start and values[end - 1] == 0.0:
            end -= 1
        if start == end:
            return cls((), 0)
        return cls(tuple(values[start:end]), offset + start)

    @classmethod
    def zero(cls) -> Polynomial:
        return cls((), 0)

    @classmethod
    def constant(cls, value: float) -> Polynomial:
        return cls._normalized([value], 0)

    @classmethod
    def monomial(cls, coefficient: float, power: int) -> Polynomial:
        return cls._normalized([coefficient], int(power))

    @classmethod
    def from_terms(
        cls, terms: Iterable[PolynomialTerm | tuple[int, float]]
    ) -> Polynomial:
        """Build from (power, coefficient) pairs, summing repeated powers."""
        collected: dict[int, float] = {}
        for power, coefficient in terms:
            collected[int(power)] = collected.get(int(power), 0.0) + float(coefficient)
        if not collected:
            return cls.zero()
        low = min(collected)
        dense = [0.0] * (max(collected) - low + 1)
        for power, coefficient in collected.items():
            dense[power - low] = coefficient
        return cls._normalized(dense, low)

    @classmethod
    def from_coefficients(cls, coefficients: Sequence[float]) -> Polynomial:
        """Build from coefficients ordered highest power first, ending at power 0."""
        return cls._normalized(list(coefficients)[::-1], 0)

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    @property
    def is_zero(self) -> bool:
        return not self.coefficients

    @property
    def degree(self) -> int:
        """Highest power with a nonzero coefficient (0 for the zero polynomial)."""
        if self.is_zero:
            return 0
        return self.offset + len(self.coefficients) - 1

    @property
    def lowest_power(self) -> int:
        return self.offset if not self.is_zero else 0

    @property
    def is_constant(self) -> bool:
        return self.is_zero or (len(self.coefficients) == 1 and self.offset == 0)

    @property
    def is_monomial(self) -> bool:
        return len(self.coefficients) == 1

    def coefficient(self, power: int) -> float:
        index = power - self.offset
        if 0 <= index < len(self.coefficients):
            return self.coefficients[index]
        return 0.0

    def constant_value(self) -> float:
        """Value of a constant polynomial."""
        if not self.is_constant:
            raise EvaluationError(f"Expected a constant, got '{self.to_text()}'")
        return self.coefficient(0)

    def terms(self) -> list[PolynomialTerm]:
        """Nonzero terms, highest power first."""
        return [
            PolynomialTerm(self.offset + i, c)
            for i, c in reversed(list(enumerate(self.coefficients)))
            if c != 0.0
        ]

    def dense_terms(self) -> list[PolynomialTerm]:
        """Terms for every power from max(degree, 0) down to min(lowest, 0).

        Missing powers are present with a zero coefficient.
        """
        high = max(self.degree, 0)
        low = min(self.lowest_power, 0)
        return [PolynomialTerm(p, self.coefficient(p)) for p in range(high, low - 1, -1)]

    def coefficient_array(self, highest: int, lowest: int = 0) -> NDArray[np.float64]:
        """Zero-filled coefficients from `highest` power down to `lowest`.

        Args:
            highest: First (largest) power in the result
            lowest: Last (smallest) power in the result

        Returns:
            Array of length highest - lowest + 1

        Raises:
            NumericDegeneracyError: If a nonzero term lies outside the range
        """
        if not self.is_zero and (self.degree > highest or self.lowest_power < lowest):
            raise NumericDegeneracyError(
                f"Polynomial '{self.to_text()}' has powers outside "
                f"the expected range [{lowest}, {highest}]"
            )
        return np.array(
            [self.coefficient(p) for p in range(highest, lowest - 1, -1)],
            dtype=np.float64,
        )

    def evaluate(self, x: complex | float) -> complex | float:
        """Evaluate at a point (Horner's rule)."""
        result: complex | float = 0.0
        for c in reversed(self.coefficients):
            result = result * x + c
        if self.offset:
            result = result * x**self.offset
        return result

    # -----------------------------------------------------------------
    # Arithmetic
    # -----------------------------------------------------------------

    @staticmethod
    def _coerce(other: Polynomial | float) -> Polynomial:
        if isinstance(other, Polynomial):
            return other
        return Polynomial.constant(other)

    def __add__(self, other: Polynomial | float) -> Polynomial:
        other = self._coerce(other)
        if self.is_zero:
            return other
        if other.is_zero:
            return self
        low = min(self.offset, other.offset)
        high = max(self.degree, other.degree)
        return Polynomial._normalized(
            [self.coefficient(p) + other.coefficient(p) for p in range(low, high + 1)],
            low,
        )

    __radd__ = __add__

    def __neg__(self) -> Polynomial:
        return Polynomial(tuple(-c for c in self.coefficients), self.offset)

    def __sub__(self, other: Polynomial | float) -> Polynomial:
        return self + (-self._coerce(other))

    def __rsub__(self, other: float) -> Polynomial:
        return self._coerce(other) - self

    def __mul__(self, other: Polynomial | float) -> Polynomial:
        other = self._coerce(other)
        if self.is_zero or other.is_zero:
            return Polynomial.zero()
        _check_degree(self.degree + other.degree, self.lowest_power + other.lowest_power)
        product = np.convolve(
            np.asarray(self.coefficients, dtype=np.float64),
            np.asarray(other.coefficients, dtype=np.float64),
        )
        return Polynomial._normalized(product, self.offset + other.offset)

    __rmul__ = __mul__

    def __truediv__(self, other: Polynomial | float) -> Polynomial:
        """Divide by a constant or a single monomial.

        Raises:
            EvaluationError: If the divisor is zero or has more than one term
        """
        other = self._coerce(other)
        if other.is_zero:
            raise EvaluationError("Division by zero")
        if not other.is_monomial:
            raise EvaluationError(
                f"Cannot divide by multi-term polynomial '{other.to_text()}'"
            )
        inverse = Polynomial.monomial(1.0 / other.coefficients[0], -other.offset)
        return self * inverse

    def __pow__(self, exponent: int | float) -> Polynomial:
        """Raise to an integer power by repeated multiplication.

        Negative powers are allowed for monomials only. Constants accept any
        real exponent that yields a real result.
        """
        exponent = float(exponent)
        if self.is_constant:
            base = self.constant_value()
            if base == 0.0 and exponent < 0.0:
                raise EvaluationError("Division by zero")
            if base < 0.0 and not exponent.is_integer():
                raise EvaluationError(
                    f"Fractional power {format_number(exponent)} of negative "
                    f"value {format_number(base)}"
                )
            try:
                return Polynomial.constant(base**exponent)
            except OverflowError as e:
                raise EvaluationError(
                    f"{format_number(base)}^{format_number(exponent)} overflows"
                ) from e
        if not exponent.is_integer():
            raise EvaluationError(
                f"Cannot raise '{self.to_text()}' to non-integer power "
                f"{format_number(exponent)}"
            )

        n = int(exponent)
        span = max(abs(self.degree), abs(self.lowest_power))
        if abs(n) * span > MAX_DEGREE:
            raise EvaluationError(
                f"'{self.to_text()}' raised to the power {format_number(exponent)} exceeds "
                f"the maximum degree {MAX_DEGREE}"
            )
        if n < 0:
            if self.is_zero:
                raise EvaluationError("Division by zero")
            if not self.is_monomial:
                raise EvaluationError(
                    f"Cannot raise multi-term polynomial '{self.to_text()}' "
                    f"to negative power {n}"
                )
            try:
                coefficient = self.coefficients[0] ** n
            except OverflowError as e:
                raise EvaluationError(f"'{self.to_text()}'^{n} overflows") from e
            return Polynomial.monomial(coefficient, self.offset * n)

        result = Polynomial.constant(1.0)
        for _ in range(n):
            result = result * self
        return result

    # -----------------------------------------------------------------
    # Text
    # -----------------------------------------------------------------

    def to_text(self, variable: str = "s") -> str:
        """Canonical text: terms by descending power, coefficient 1 omitted.

        Example:
            >>> Polynomial.from_coefficients([1, -3, 2]).to_text("s")
            's^2-3*s+2'
        """
        parts: list[str] = []
        for power, coefficient in self.terms():
            magnitude = abs(coefficient)
            if power == 0:
                body = format_number(magnitude)
            else:
                symbol = variable if power == 1 else f"{variable}^{power}"
                body = symbol if magnitude == 1.0 else f"{format_number(magnitude)}*{symbol}"
            if coefficient < 0.0:
                parts.append("-" + body)
            else:
                parts.append(("+" if parts else "") + body)
        return "".join(parts) if parts else "0"

    def __str__(self) -> str:
        return self.to_text()

    def isclose(self, other: Polynomial, rel_tol: float = 1e-9, abs_tol: float = 1e-12) -> bool:
        """Coefficient-wise comparison with a tolerance."""
        low = min(self.lowest_power, other.lowest_power)
        high = max(self.degree, other.degree)
        return all(
            math.isclose(self.coefficient(p), other.coefficient(p), rel_tol=rel_tol, abs_tol=abs_tol)
            for p in range(low, high + 1)
        )
