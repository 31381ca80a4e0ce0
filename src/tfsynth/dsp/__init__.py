"""Filter synthesis and recursive filtering.

This module converts analog (s-domain) designs into digital difference
equations and applies them sample by sample.

Classes:
    DigitalFilter: Direct-form I recursive filter
    FilterParameters: Design settings for low/high/band/custom filters

Example:
    >>> from tfsynth.dsp import FilterParameters, design_filter
    >>> params = FilterParameters(type="highpass", order=2, cutoff_frequency=50.0,
    ...                           damping_ratio=0.707)
    >>> highpass = design_filter(params, sample_rate=8000.0)
    >>> filtered = highpass.process([0.0, 1.0, 1.0, 1.0])
"""

from tfsynth.dsp.bilinear import (
    bilinear_expression,
    bilinear_transform,
    coefficients_from_expression,
)
from tfsynth.dsp.design import (
    FilterParameters,
    FilterType,
    build_transfer_function,
    butterworth_denominator,
    butterworth_poles,
    design_filter,
    filter_name,
    is_wide_band,
    poly_from_roots,
    standard_denominator,
    transfer_function_text,
    warn_if_above_nyquist,
)
from tfsynth.dsp.filter import DigitalFilter

__all__ = [
    # Synthesis
    "bilinear_transform",
    "bilinear_expression",
    "coefficients_from_expression",
    # Filtering
    "DigitalFilter",
    # Design
    "FilterParameters",
    "FilterType",
    "butterworth_poles",
    "poly_from_roots",
    "butterworth_denominator",
    "standard_denominator",
    "is_wide_band",
    "transfer_function_text",
    "build_transfer_function",
    "design_filter",
    "warn_if_above_nyquist",
    "filter_name",
]
