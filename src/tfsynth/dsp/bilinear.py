"""Continuous-to-discrete conversion with the bilinear transform.

Substitutes s = 2 * (1 - z^-1) / (T * (1 + z^-1)) into an s-domain transfer
function, T being the sample period. Every term c * s^p is multiplied through
by (T * (1 + z^-1))^order, which clears the rational denominator and leaves

    c * (2 * (1 - z^-1))^p * (T * (1 + z^-1))^(order - p)

for each coefficient. The numerator and denominator share the same scale
factor, so their ratio is the transformed transfer function.

Functions:
    bilinear_expression: Expression tree for one substituted polynomial
    coefficients_from_expression: Expand and read delay-ordered coefficients
    bilinear_transform: s-domain TransferFunctionSpec to z-domain

Example:
    >>> from tfsynth.dsp.bilinear import bilinear_transform
    >>> tf = bilinear_transform([1.0], [1.0, 1.0], sample_rate=2.0)
    >>> tf.numerator, tf.denominator
    ((0.2, 0.2), (1.0, -0.6))
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from tfsynth.core.complex import EPSILON
from tfsynth.core.expression import (
    Expression,
    Number,
    Variable,
    extract_power_coefficient_pairs,
    solve,
    split_additive_terms,
)
from tfsynth.core.polynomial import Polynomial
from tfsynth.core.transfer_function import TransferFunctionSpec
from tfsynth.exceptions import ConfigurationError


def bilinear_expression(
    coefficients: Sequence[float],
    order: int,
    sample_rate: float,
    variable: str = "z",
) -> Expression:
    """Build the substituted polynomial for one side of a transfer function.

    Args:
        coefficients: s-domain coefficients, highest power first
        order: Order of the whole transfer function (>= len(coefficients) - 1)
        sample_rate: Sample rate in Hz
        variable: Name of the discrete operator

    Returns:
        Expression tree in powers of variable^-1

    Example:
        >>> str(bilinear_expression([1.0, 3.0], 1, 10.0))
        '1*(2*(1-z^-1))+3*(0.1*(1+z^-1))'
    """
    z = Variable(variable)
    delay = z**-1
    forward = 2 * (1 - delay)
    backward = (1.0 / sample_rate) * (1 + delay)

    result: Expression | None = None
    for i, coefficient in enumerate(coefficients):
        if coefficient == 0.0:
            continue
        power = len(coefficients) - 1 - i

        term: Expression = Number(abs(coefficient))
        if power > 0:
            term = term * (forward if power == 1 else forward**power)
        if order - power > 0:
            term = term * (backward if order == power + 1 else backward ** (order - power))

        if result is None:
            result = -term if coefficient < 0.0 else term
        elif coefficient < 0.0:
            result = result - term
        else:
            result = result + term

    return result if result is not None else Number(0.0)


def coefficients_from_expression(
    expression: Expression | str, order: int, variable: str = "z"
) -> NDArray[np.float64]:
    """Read delay-ordered coefficients from a polynomial in z^-1.

    Text goes through the canonical text pipeline (solve, split into terms,
    extract and collect powers); trees are expanded directly. Powers that do
    not appear get a zero coefficient.

    Args:
        expression: Expression tree or text
        order: Highest delay expected
        variable: Name of the discrete operator

    Returns:
        Array of order + 1 coefficients for z^0, z^-1, ... z^-order

    Raises:
        NumericDegeneracyError: If a power outside 0..-order is present
    """
    if isinstance(expression, str):
        terms = split_additive_terms(solve(expression, variable))
        polynomial = Polynomial.from_terms(extract_power_coefficient_pairs(terms, variable))
    else:
        polynomial = expression.expand()
    return polynomial.coefficient_array(0, -order)


def _validate_sample_rate(sample_rate: float) -> float:
    sample_rate = float(sample_rate)
    if not math.isfinite(sample_rate) or sample_rate <= 0.0:
        raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")
    return sample_rate


def bilinear_transform(
    numerator: Sequence[float] | TransferFunctionSpec,
    denominator: Sequence[float] | None = None,
    sample_rate: float = 1.0,
) -> TransferFunctionSpec:
    """Convert an s-domain transfer function to z-domain coefficients.

    The result is normalized so that the leading denominator coefficient is
    one.

    Args:
        numerator: s-domain numerator coefficients (highest power first), or
            a complete s-domain TransferFunctionSpec
        denominator: s-domain denominator coefficients (highest power first)
        sample_rate: Sample rate in Hz

    Returns:
        z-domain TransferFunctionSpec; coefficient k multiplies z^-k

    Raises:
        ConfigurationError: If the sample rate is not positive, the
            s-domain coefficients are invalid or the transformed leading
            denominator coefficient is zero

    Example:
        >>> tf = bilinear_transform([1.0], [1.0, 1.0], sample_rate=2.0)
        >>> tf.denominator
        (1.0, -0.6)
    """
    sample_rate = _validate_sample_rate(sample_rate)
    if isinstance(numerator, TransferFunctionSpec):
        spec = numerator
        if spec.domain != "s":
            raise ConfigurationError("bilinear_transform() expects an s-domain transfer function")
    else:
        if denominator is None:
            raise ConfigurationError("Denominator coefficients are required")
        spec = TransferFunctionSpec(tuple(numerator), tuple(denominator))

    order = spec.order
    a = coefficients_from_expression(
        bilinear_expression(spec.numerator, order, sample_rate), order
    )
    b = coefficients_from_expression(
        bilinear_expression(spec.denominator, order, sample_rate), order
    )

    # Relative test; the coefficients carry a factor of T^order
    if abs(b[0]) <= EPSILON * float(np.max(np.abs(b))):
        raise ConfigurationError(
            "Leading discrete denominator coefficient is zero; the s-domain "
            f"denominator has a root at s = {2.0 * sample_rate:g}"
        )

    return TransferFunctionSpec(tuple(a / b[0]), tuple(b / b[0]), domain="z")
