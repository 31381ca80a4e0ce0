"""Analog filter design by pole placement.

Builds s-domain transfer functions for low-pass, high-pass, band-pass and
band-stop filters (or takes a user-typed custom one) and turns them into
DigitalFilter instances via the bilinear transform.

Designs are produced as expression text first, the same text a design dialog
shows the user, and parsed into a TransferFunctionSpec afterwards.

Classes:
    FilterParameters: Design settings with validation

Functions:
    butterworth_poles: Poles evenly spaced on the left half of a circle
    poly_from_roots: Characteristic polynomial from its roots
    butterworth_denominator: Butterworth denominator text
    standard_denominator: Cascaded damped second-order sections as text
    is_wide_band: Whether a band filter is built from separate LP/HP sections
    transfer_function_text: (numerator, denominator) text for a design
    build_transfer_function: Design to s-domain TransferFunctionSpec
    design_filter: Design to DigitalFilter at a sample rate
    filter_name: Human-readable description of a design

Example:
    >>> from tfsynth.dsp.design import FilterParameters, design_filter, filter_name
    >>> params = FilterParameters(type="lowpass", order=4, cutoff_frequency=10.0,
    ...                           butterworth=True)
    >>> lowpass = design_filter(params, sample_rate=1000.0)
    >>> filter_name(params)
    '4th Order Low-Pass, 10 Hz, Butterworth'
"""

from __future__ import annotations

import math
import warnings
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal

from tfsynth.core.complex import Complex
from tfsynth.core.transfer_function import TransferFunctionSpec
from tfsynth.dsp.filter import DigitalFilter
from tfsynth.exceptions import ConfigurationError

FilterType = Literal["lowpass", "highpass", "bandpass", "bandstop", "custom"]
FILTER_TYPES: tuple[str, ...] = ("lowpass", "highpass", "bandpass", "bandstop", "custom")

# Significant digits in generated expression text
DEFAULT_PRECISION = 15
DISPLAY_PRECISION = 4

# Imaginary remainder (relative) tolerated when combining conjugate poles
_IMAGINARY_TOLERANCE = 1e-9

_TYPE_NAMES = {
    "lowpass": "Low-Pass",
    "highpass": "High-Pass",
    "bandpass": "Band-Pass",
    "bandstop": "Band-Stop",
}


@dataclass
class FilterParameters:
    """Settings for a filter design.

    Frequencies are in Hz. Defaults match a fresh design dialog.

    Args:
        type: Filter type ('lowpass', 'highpass', 'bandpass', 'bandstop', 'custom')
        order: Filter order (>= 1); narrow band filters are always second order
        cutoff_frequency: Cutoff (LP/HP) or center (band) frequency in Hz
        damping_ratio: Damping of the second-order sections; ignored when
            order <= 1 or butterworth is set
        width: Band width in Hz (band types only)
        butterworth: Place poles on a Butterworth circle instead of using
            repeated damped sections
        phaseless: Filter forward and backward for zero phase
        numerator: s-domain numerator text (custom type only)
        denominator: s-domain denominator text (custom type only)

    Raises:
        ConfigurationError: If a setting used by the chosen type is invalid
    """

    type: FilterType = "lowpass"
    order: int = 2
    cutoff_frequency: float = 5.0
    damping_ratio: float = 1.0
    width: float = 5.0
    butterworth: bool = False
    phaseless: bool = False
    numerator: str = ""
    denominator: str = ""

    def __post_init__(self) -> None:
        if self.type not in FILTER_TYPES:
            raise ConfigurationError(
                f"Unknown filter type '{self.type}'; expected one of {', '.join(FILTER_TYPES)}"
            )

        if self.type == "custom":
            if not self.numerator.strip() or not self.denominator.strip():
                raise ConfigurationError(
                    "Custom filters need both numerator and denominator expressions"
                )
            return

        if isinstance(self.order, bool) or int(self.order) != self.order or self.order < 1:
            raise ConfigurationError(f"Order must be a positive integer, got {self.order}")
        self.order = int(self.order)

        if not (math.isfinite(self.cutoff_frequency) and self.cutoff_frequency > 0.0):
            raise ConfigurationError(
                f"Cutoff frequency must be strictly positive, got {self.cutoff_frequency}"
            )
        if self.uses_damping and not (
            math.isfinite(self.damping_ratio) and self.damping_ratio > 0.0
        ):
            raise ConfigurationError(
                f"Damping ratio must be strictly positive, got {self.damping_ratio}"
            )
        if self.type in ("bandpass", "bandstop") and not (
            math.isfinite(self.width) and self.width >= 0.0
        ):
            raise ConfigurationError(f"Width must be positive, got {self.width}")

    @property
    def uses_damping(self) -> bool:
        """Whether damping_ratio affects the design."""
        return self.type != "custom" and not self.butterworth and self.order > 1

    @property
    def is_wide_band(self) -> bool:
        return is_wide_band(self.type, self.cutoff_frequency, self.width)


# =============================================================================
# Pole placement
# =============================================================================


def _format(value: float, precision: int) -> str:
    return f"{value:.{precision}g}"


def butterworth_poles(order: int, cutoff: float) -> list[Complex]:
    """Poles of a Butterworth filter.

    Pole k (k = 1..order) is cutoff * exp(j * (2k + order - 1) * pi / (2 * order)),
    which puts all poles on the left half of a circle of radius cutoff.

    Args:
        order: Number of poles
        cutoff: Cutoff frequency in rad/s

    Returns:
        Poles in order of increasing angle
    """
    e = Complex(math.e, 0.0)
    return [
        cutoff * e.to_power(Complex(0.0, (2.0 * k + order - 1.0) * math.pi / (2.0 * order)))
        for k in range(1, order + 1)
    ]


def poly_from_roots(roots: Sequence[Complex]) -> list[float]:
    """Expand prod(s - root) into real coefficients, highest power first.

    Roots must come in conjugate pairs (or be real). The imaginary part left
    over from rounding is dropped; a RuntimeWarning is issued if it is larger
    than rounding can explain.

    Args:
        roots: Polynomial roots

    Returns:
        len(roots) + 1 coefficients, leading coefficient 1
    """
    terms = [Complex(1.0, 0.0)] + [Complex(0.0, 0.0)] * len(roots)
    for i, root in enumerate(roots):
        for j in range(i + 1, 0, -1):
            terms[j] = terms[j] - root * terms[j - 1]

    scale = max(abs(t) for t in terms)
    residual = max(abs(t.imaginary) for t in terms)
    if residual > _IMAGINARY_TOLERANCE * scale:
        warnings.warn(
            f"Roots do not form conjugate pairs; discarding imaginary "
            f"remainder {residual:g} (scale {scale:g})",
            RuntimeWarning,
            stacklevel=2,
        )
    return [t.real for t in terms]


def _polynomial_text(coefficients: Sequence[float], precision: int) -> str:
    """Text for an s polynomial, highest power first; unit coefficients omitted."""
    parts: list[str] = []
    degree = len(coefficients) - 1
    for i, coefficient in enumerate(coefficients):
        if coefficient == 0.0:
            continue
        power = degree - i
        number = "" if math.isclose(coefficient, 1.0, rel_tol=1e-12) else _format(coefficient, precision)
        if power == 0:
            body = number or "1"
        else:
            symbol = "s" if power == 1 else f"s^{power}"
            body = f"{number}*{symbol}" if number else symbol
        if parts and not body.startswith("-"):
            body = "+" + body
        parts.append(body)
    return "".join(parts) if parts else "0"


def butterworth_denominator(
    order: int, cutoff: float, precision: int = DEFAULT_PRECISION
) -> str:
    """Denominator text of a Butterworth filter.

    Args:
        order: Filter order
        cutoff: Cutoff frequency in rad/s
        precision: Significant digits for coefficients

    Example:
        >>> butterworth_denominator(2, 1.0, precision=6)
        's^2+1.41421*s+1'
    """
    return _polynomial_text(poly_from_roots(butterworth_poles(order, cutoff)), precision)


def standard_denominator(
    order: int, cutoff: float, damping_ratio: float, precision: int = DEFAULT_PRECISION
) -> str:
    """Denominator text of repeated damped second-order sections.

    (s^2 + 2*zeta*w*s + w^2)^(order // 2), times (s + w) for odd orders.

    Args:
        order: Filter order
        cutoff: Natural frequency w in rad/s
        damping_ratio: Damping ratio zeta
        precision: Significant digits for coefficients

    Example:
        >>> standard_denominator(3, 2.0, 0.5)
        '(s^2+2*s+4)*(s+2)'
    """
    text = ""
    if order > 1:
        text = (
            f"s^2+{_format(2.0 * cutoff * damping_ratio, precision)}*s"
            f"+{_format(cutoff * cutoff, precision)}"
        )

    if order > 2:
        text = f"({text})"
        if order > 3:
            text += f"^{order // 2}"

    if order % 2 == 1:
        first_order = f"s+{_format(cutoff, precision)}"
        text = f"{text}*({first_order})" if text else first_order

    return text


def is_wide_band(filter_type: str, cutoff: float, width: float) -> bool:
    """Whether a band filter is built from separate low- and high-pass parts.

    A single second-order band section becomes poorly conditioned when the
    band is wide relative to its center. Band-stop filters switch at
    cutoff <= 1.5 * width, band-pass filters at cutoff <= 5/6 * width.

    Args:
        filter_type: Filter type
        cutoff: Center frequency
        width: Band width, in the same units as cutoff

    Returns:
        False for non-band filter types
    """
    if filter_type == "bandstop":
        return cutoff <= width * 1.5
    if filter_type == "bandpass":
        return cutoff <= width * 5.0 / 6.0
    return False


# =============================================================================
# Transfer functions by type
# =============================================================================


def _angular(frequency_hz: float) -> float:
    return 2.0 * math.pi * frequency_hz


def _denominator(params: FilterParameters, cutoff: float, order: int, precision: int) -> str:
    if params.butterworth:
        return butterworth_denominator(order, cutoff, precision)
    return standard_denominator(order, cutoff, params.damping_ratio, precision)


def _lowpass(params: FilterParameters, cutoff: float, order: int, precision: int) -> tuple[str, str]:
    return _format(cutoff**order, precision), _denominator(params, cutoff, order, precision)


def _highpass(params: FilterParameters, cutoff: float, order: int, precision: int) -> tuple[str, str]:
    numerator = "s" if order == 1 else f"s^{order}"
    return numerator, _denominator(params, cutoff, order, precision)


def _split_order(order: int) -> tuple[int, int]:
    """Orders of the (low-pass, high-pass) parts of a wide band filter."""
    return max(1, order // 2), max(1, order - order // 2)


def _positive_edge(edge: float, params: FilterParameters) -> float:
    if edge <= 0.0:
        raise ConfigurationError(
            f"Band of width {params.width} Hz around {params.cutoff_frequency} Hz "
            "extends below 0 Hz"
        )
    return edge


def _lowpass_text(params: FilterParameters, precision: int) -> tuple[str, str]:
    return _lowpass(params, _angular(params.cutoff_frequency), params.order, precision)


def _highpass_text(params: FilterParameters, precision: int) -> tuple[str, str]:
    return _highpass(params, _angular(params.cutoff_frequency), params.order, precision)


def _bandpass_text(params: FilterParameters, precision: int) -> tuple[str, str]:
    cutoff = _angular(params.cutoff_frequency)
    width = _angular(params.width)

    if is_wide_band("bandpass", cutoff, width):
        low_order, high_order = _split_order(params.order)
        low_num, low_den = _lowpass(params, cutoff + width * 0.5, low_order, precision)
        high_num, high_den = _highpass(
            params, _positive_edge(cutoff - width * 0.5, params), high_order, precision
        )
        return f"({high_num})*({low_num})", f"({high_den})*({low_den})"

    numerator = f"{_format(width, precision)}*s"
    return numerator, standard_denominator(2, cutoff, width / cutoff * 0.5, precision)


def _bandstop_text(params: FilterParameters, precision: int) -> tuple[str, str]:
    cutoff = _angular(params.cutoff_frequency)
    width = _angular(params.width)

    if is_wide_band("bandstop", cutoff, width):
        # Parallel low- and high-pass over a common (cascaded) denominator
        low_order, high_order = _split_order(params.order)
        low_num, low_den = _lowpass(
            params, _positive_edge(cutoff - width * 0.5, params), low_order, precision
        )
        high_num, high_den = _highpass(params, cutoff + width * 0.5, high_order, precision)
        numerator = f"({low_num})*({high_den})+({high_num})*({low_den})"
        return numerator, f"({high_den})*({low_den})"

    numerator = f"s^2+{_format(cutoff * cutoff, precision)}"
    return numerator, standard_denominator(2, cutoff, width / cutoff * 0.5, precision)


def _custom_text(params: FilterParameters, precision: int) -> tuple[str, str]:
    return params.numerator, params.denominator


_BUILDERS: dict[str, Callable[[FilterParameters, int], tuple[str, str]]] = {
    "lowpass": _lowpass_text,
    "highpass": _highpass_text,
    "bandpass": _bandpass_text,
    "bandstop": _bandstop_text,
    "custom": _custom_text,
}


def transfer_function_text(
    params: FilterParameters, precision: int = DEFAULT_PRECISION
) -> tuple[str, str]:
    """s-domain (numerator, denominator) text for a design.

    Args:
        params: Design settings
        precision: Significant digits for generated coefficients

    Returns:
        Tuple of expression strings in s
    """
    return _BUILDERS[params.type](params, precision)


def build_transfer_function(
    params: FilterParameters, precision: int = DEFAULT_PRECISION
) -> TransferFunctionSpec:
    """Expand a design into an s-domain TransferFunctionSpec.

    Raises:
        ParseError: If custom expression text is malformed
        EvaluationError: If custom text does not reduce to polynomials
        ConfigurationError: If the design is not a valid transfer function
    """
    numerator, denominator = transfer_function_text(params, precision)
    return TransferFunctionSpec.from_text(numerator, denominator)


def _highest_frequency(params: FilterParameters) -> float:
    if params.type in ("bandpass", "bandstop") and params.is_wide_band:
        return params.cutoff_frequency + params.width * 0.5
    return params.cutoff_frequency


def warn_if_above_nyquist(
    params: FilterParameters, sample_rate: float, stacklevel: int = 2
) -> None:
    """Warn with RuntimeWarning if a design frequency is at or above Nyquist.

    Custom designs carry no frequency and are never checked.
    """
    if params.type == "custom" or sample_rate <= 0.0:
        return
    highest = _highest_frequency(params)
    if highest >= sample_rate / 2.0:
        warnings.warn(
            f"Filter frequency {highest:g} Hz is at or above the Nyquist "
            f"frequency {sample_rate / 2.0:g} Hz",
            RuntimeWarning,
            stacklevel=stacklevel,
        )


def design_filter(
    params: FilterParameters,
    sample_rate: float,
    initial_value: float = 0.0,
    precision: int = DEFAULT_PRECISION,
) -> DigitalFilter:
    """Design a digital filter at the given sample rate.

    Warns with RuntimeWarning if a design frequency is at or above the
    Nyquist frequency; the bilinear transform folds it into the digital band.

    Args:
        params: Design settings
        sample_rate: Sample rate in Hz
        initial_value: Starting value of the filter histories
        precision: Significant digits for generated coefficients

    Returns:
        DigitalFilter ready for apply()
    """
    warn_if_above_nyquist(params, sample_rate, stacklevel=3)
    return DigitalFilter.from_transfer_function(
        build_transfer_function(params, precision), sample_rate, initial_value
    )


# =============================================================================
# Names
# =============================================================================


def order_string(order: int) -> str:
    """Ordinal order label, e.g. '1st Order', '12th Order', '22nd Order'."""
    if order % 100 in (11, 12, 13):
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(order % 10, "th")
    return f"{order}{suffix} Order"


def filter_name(params: FilterParameters) -> str:
    """Human-readable name of a design.

    Example:
        >>> filter_name(FilterParameters(type="highpass", order=2,
        ...                              cutoff_frequency=5.0, damping_ratio=0.7))
        '2nd Order High-Pass, 5 Hz, zeta = 0.7'
    """
    if params.type == "custom":
        name = f"{params.numerator} / {params.denominator}"
    else:
        name = (
            f"{order_string(params.order)} {_TYPE_NAMES[params.type]}, "
            f"{_format(params.cutoff_frequency, DISPLAY_PRECISION)} Hz"
        )
        if params.type in ("bandpass", "bandstop"):
            name += f" x {_format(params.width, DISPLAY_PRECISION)} Hz"
        elif params.order > 1 + int(params.phaseless):
            if params.butterworth:
                name += ", Butterworth"
            else:
                name += f", zeta = {_format(params.damping_ratio, DISPLAY_PRECISION)}"

    if params.phaseless:
        name += ", Phaseless"
    return name
