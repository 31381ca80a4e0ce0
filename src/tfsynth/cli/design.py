"""Command-line tool for designing and applying digital filters.

The tfsynth CLI designs a filter from the same parameters a design dialog
collects (type, order, cutoff, damping, width, Butterworth flag, or custom
transfer-function text), prints the synthesized difference equation, and
can run a sample stream through it.
"""

import sys
import warnings
from pathlib import Path

import click
import numpy as np
from rich.console import Console

from tfsynth.core.transfer_function import TransferFunctionSpec
from tfsynth.dsp.design import (
    FILTER_TYPES,
    FilterParameters,
    build_transfer_function,
    filter_name,
    warn_if_above_nyquist,
)
from tfsynth.dsp.filter import DigitalFilter
from tfsynth.exceptions import ConfigurationError, TFSynthError

from .display import format_gain, is_unusual_gain, print_coefficients, print_design_info

console = Console()
err_console = Console(stderr=True)


def filter_options(command):
    """Attach the design parameter options to a command."""
    options = [
        click.option(
            "--type",
            "-t",
            "filter_type",
            type=click.Choice(list(FILTER_TYPES)),
            default="lowpass",
            show_default=True,
            help="Filter type",
        ),
        click.option("--order", "-n", type=int, default=2, show_default=True, help="Filter order"),
        click.option(
            "--cutoff",
            "-f",
            type=float,
            default=5.0,
            show_default=True,
            help="Cutoff (or band center) frequency in Hz",
        ),
        click.option(
            "--damping", "-z", type=float, default=1.0, show_default=True, help="Damping ratio"
        ),
        click.option(
            "--width", "-w", type=float, default=5.0, show_default=True, help="Band width in Hz"
        ),
        click.option("--butterworth", is_flag=True, help="Use Butterworth pole placement"),
        click.option("--numerator", help="Custom s-domain numerator, e.g. '4'"),
        click.option("--denominator", help="Custom s-domain denominator, e.g. 's^2+2*s+4'"),
        click.option(
            "--sample-rate",
            "-r",
            type=float,
            required=True,
            help="Sample rate in Hz",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _parameters(
    filter_type: str,
    order: int,
    cutoff: float,
    damping: float,
    width: float,
    butterworth: bool,
    numerator: str | None,
    denominator: str | None,
    phaseless: bool = False,
) -> FilterParameters:
    return FilterParameters(
        type=filter_type,
        order=order,
        cutoff_frequency=cutoff,
        damping_ratio=damping,
        width=width,
        butterworth=butterworth,
        phaseless=phaseless,
        numerator=numerator or "",
        denominator=denominator or "",
    )


def _design(
    output_console: Console,
    params: FilterParameters,
    sample_rate: float,
    initial_value: float = 0.0,
) -> tuple[TransferFunctionSpec, DigitalFilter]:
    """Synthesize a filter, showing design warnings on the console."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        transfer_function = build_transfer_function(params)
        warn_if_above_nyquist(params, sample_rate)
        digital_filter = DigitalFilter.from_transfer_function(
            transfer_function, sample_rate, initial_value
        )
    for warning in caught:
        output_console.print(f"[yellow]Warning:[/yellow] {warning.message}")
    return transfer_function, digital_filter


@click.group()
@click.version_option(version="0.1.0", prog_name="tfsynth")
def main():
    """Design digital filters from analog transfer functions."""


@main.command()
@filter_options
@click.option("--phaseless", is_flag=True, help="Describe the filter as zero-phase")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with debug info")
def design(
    filter_type: str,
    order: int,
    cutoff: float,
    damping: float,
    width: float,
    butterworth: bool,
    numerator: str | None,
    denominator: str | None,
    sample_rate: float,
    phaseless: bool,
    verbose: bool,
):
    """Synthesize a filter and print its difference equation.

    Example:

    \b
        tfsynth design --type lowpass --order 4 --cutoff 10 --butterworth -r 1000
        tfsynth design --type custom --numerator 4 --denominator "s^2+2*s+4" -r 100
    """
    try:
        params = _parameters(
            filter_type, order, cutoff, damping, width, butterworth,
            numerator, denominator, phaseless,
        )
        transfer_function, digital_filter = _design(console, params, sample_rate)
    except TFSynthError as e:
        console.print(f"\n[bold red]Error Defining Filter:[/bold red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)

    console.print(f"\n[bold]Filter Design:[/bold] {filter_type}", style="blue")
    console.print("─" * 60)
    print_design_info(console, filter_name(params), transfer_function, digital_filter)
    print_coefficients(console, digital_filter)

    gain = transfer_function.steady_state_gain()
    if is_unusual_gain(gain):
        console.print(
            f"\n[yellow]Warning:[/yellow] The steady-state gain for the specified "
            f"filter is {format_gain(gain)} (typically 1.0 or 0.0)"
        )


@main.command()
@filter_options
@click.argument("input_file", metavar="INPUT", type=click.File("r"), default="-")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output file (default: stdout)")
@click.option("--phaseless", is_flag=True, help="Filter forward and backward for zero phase")
@click.option("--initial", type=float, help="Initial history value (default: first sample)")
def apply(
    filter_type: str,
    order: int,
    cutoff: float,
    damping: float,
    width: float,
    butterworth: bool,
    numerator: str | None,
    denominator: str | None,
    sample_rate: float,
    input_file,
    output: Path | None,
    phaseless: bool,
    initial: float | None,
):
    """Filter whitespace-separated samples from INPUT (default: stdin).

    One filtered value is written per line.
    """
    try:
        samples = np.array(input_file.read().split(), dtype=np.float64)
    except ValueError as e:
        err_console.print(f"[bold red]Error:[/bold red] Could not read samples: {e}")
        sys.exit(1)

    try:
        if samples.size == 0:
            raise ConfigurationError("No samples to filter")
        params = _parameters(
            filter_type, order, cutoff, damping, width, butterworth,
            numerator, denominator, phaseless,
        )
        start = float(samples[0]) if initial is None else initial
        _, digital_filter = _design(err_console, params, sample_rate, initial_value=start)
    except TFSynthError as e:
        err_console.print(f"[bold red]Error Defining Filter:[/bold red] {e}")
        sys.exit(1)

    if phaseless:
        filtered = digital_filter.process_phaseless(samples)
    else:
        filtered = digital_filter.process(samples)

    text = "\n".join(f"{value:.12g}" for value in filtered) + "\n"
    if output is None:
        click.echo(text, nl=False)
    else:
        output.write_text(text)


if __name__ == "__main__":
    main()
