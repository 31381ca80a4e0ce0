"""
tfsynth - transfer-function synthesis for digital filters.

Main exports:
- solve: Expand a one-variable expression into canonical polynomial text
- TransferFunctionSpec: s- or z-domain numerator/denominator coefficients
- bilinear_transform: Analog transfer function to digital coefficients
- DigitalFilter: Recursive filter applied one sample at a time
- FilterParameters, design_filter: Low/high/band-pass, band-stop, custom designs
"""

from tfsynth.core import (
    Complex,
    Polynomial,
    PolynomialTerm,
    TransferFunctionSpec,
    parse,
    solve,
    split_additive_terms,
    extract_power_coefficient_pairs,
)
from tfsynth.dsp import (
    DigitalFilter,
    FilterParameters,
    bilinear_transform,
    build_transfer_function,
    design_filter,
    filter_name,
)
from tfsynth.exceptions import (
    ConfigurationError,
    EvaluationError,
    NumericDegeneracyError,
    ParseError,
    TFSynthError,
)

# Submodules for more specific imports
from . import core, dsp

__version__ = "0.1.0"

__all__ = [
    # Algebra
    "Complex",
    "Polynomial",
    "PolynomialTerm",
    "TransferFunctionSpec",
    "parse",
    "solve",
    "split_additive_terms",
    "extract_power_coefficient_pairs",
    # Synthesis and filtering
    "bilinear_transform",
    "DigitalFilter",
    "FilterParameters",
    "build_transfer_function",
    "design_filter",
    "filter_name",
    # Errors
    "TFSynthError",
    "ParseError",
    "EvaluationError",
    "ConfigurationError",
    "NumericDegeneracyError",
    # Submodules
    "core",
    "dsp",
]
