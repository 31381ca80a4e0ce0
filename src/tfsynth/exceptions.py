"""Exceptions for expression parsing and filter synthesis."""

from __future__ import annotations


class TFSynthError(ValueError):
    """Base exception for transfer-function synthesis errors."""

    pass


class ParseError(TFSynthError):
    """Raised when an expression cannot be parsed.

    This occurs when:
    - A character or token is not part of the grammar
    - Parentheses are mismatched
    - More than one free variable appears in the expression
    """

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.position = position


class EvaluationError(TFSynthError):
    """Raised when a parsed expression cannot be reduced to a polynomial.

    This occurs when:
    - A sub-expression divides by a constant that evaluates to zero
    - A sub-expression divides by a polynomial with more than one term
    - A multi-term polynomial is raised to a negative or fractional power
    """

    pass


class ConfigurationError(TFSynthError):
    """Raised when filter settings or coefficients are invalid.

    This occurs when:
    - Sample rate, cutoff or damping ratio is not strictly positive
    - Band width is negative or order is less than one
    - The leading denominator coefficient is zero
    """

    pass


class NumericDegeneracyError(TFSynthError):
    """Raised when coefficient extraction finds an unexpected power.

    Missing powers are zero-filled. A power outside the expected range means
    the expression is not a causal polynomial in the delay operator.
    """

    pass
