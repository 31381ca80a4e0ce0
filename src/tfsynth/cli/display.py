"""Terminal display for filter designs.

Provides rich tables for:
- Design summary (name, s-domain transfer function, sample rate, gain)
- Discrete coefficients of the difference equation
"""

import math

from rich.console import Console
from rich.table import Table

from tfsynth.core.transfer_function import TransferFunctionSpec
from tfsynth.dsp.filter import DigitalFilter


def format_gain(gain: float) -> str:
    """Format a steady-state gain for display.

    Args:
        gain: Gain value (may be inf or nan)

    Returns:
        Formatted string like "1", "0.5" or "unbounded"
    """
    if math.isnan(gain):
        return "undefined"
    if math.isinf(gain):
        return "unbounded"
    return f"{gain:.6g}"


def is_unusual_gain(gain: float) -> bool:
    """True for gains other than (approximately) 0 or 1."""
    if math.isnan(gain) or math.isinf(gain):
        return True
    return not (math.isclose(gain, 1.0, abs_tol=1e-9) or math.isclose(gain, 0.0, abs_tol=1e-9))


def print_design_info(
    console: Console,
    name: str,
    transfer_function: TransferFunctionSpec,
    digital_filter: DigitalFilter,
):
    """Print the design summary table.

    Args:
        console: Rich console instance
        name: Filter name
        transfer_function: s-domain transfer function
        digital_filter: Synthesized filter
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Filter", name)
    table.add_row("Numerator", transfer_function.numerator_text())
    table.add_row("Denominator", transfer_function.denominator_text())
    table.add_row("Sample rate", f"{digital_filter.sample_rate:g} Hz")
    table.add_row("Order", str(digital_filter.order))
    table.add_row("Steady-state gain", format_gain(transfer_function.steady_state_gain()))

    console.print(table)
    console.print()


def print_coefficients(console: Console, digital_filter: DigitalFilter):
    """Print the z-domain coefficients, one row per delay.

    Args:
        console: Rich console instance
        digital_filter: Synthesized filter
    """
    a = digital_filter.numerator
    b = digital_filter.denominator

    table = Table(title="Difference equation coefficients")
    table.add_column("Delay", justify="right", style="cyan")
    table.add_column("a (input)", justify="right")
    table.add_column("b (output)", justify="right")

    for k in range(max(a.size, b.size)):
        table.add_row(
            f"z^-{k}" if k else "z^0",
            f"{a[k]:.12g}" if k < a.size else "",
            f"{b[k]:.12g}" if k < b.size else "",
        )

    console.print(table)
