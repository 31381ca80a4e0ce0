"""Algebra primitives: complex numbers, polynomials, expressions.

Classes:
    Complex: Complex value with polar-form exponentiation
    Polynomial: Polynomial with integer (possibly negative) powers
    PolynomialTerm: Single (power, coefficient) pair
    TransferFunctionSpec: Numerator/denominator coefficient pair
"""

from tfsynth.core.complex import EPSILON, Complex, is_zero
from tfsynth.core.expression import (
    Expression,
    collect_like_terms,
    extract_power_coefficient_pairs,
    parse,
    solve,
    split_additive_terms,
    try_solve,
)
from tfsynth.core.polynomial import Polynomial, PolynomialTerm, format_number
from tfsynth.core.transfer_function import TransferFunctionSpec

__all__ = [
    # Complex
    "Complex",
    "EPSILON",
    "is_zero",
    # Polynomials
    "Polynomial",
    "PolynomialTerm",
    "format_number",
    # Expressions
    "Expression",
    "parse",
    "solve",
    "try_solve",
    "split_additive_terms",
    "extract_power_coefficient_pairs",
    "collect_like_terms",
    # Transfer functions
    "TransferFunctionSpec",
]
