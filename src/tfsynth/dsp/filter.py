"""Recursive (direct-form I) digital filter.

Classes:
    DigitalFilter: z-domain coefficients plus input/output sample histories

Each filter owns copies of its coefficients and histories; copying a filter
copies its state, so two filters never share buffers.

Example:
    >>> from tfsynth.core.transfer_function import TransferFunctionSpec
    >>> from tfsynth.dsp.filter import DigitalFilter
    >>> tf = TransferFunctionSpec.from_text("10", "s+10")
    >>> lowpass = DigitalFilter.from_transfer_function(tf, sample_rate=1000.0)
    >>> lowpass.initialize(1.0)
    >>> round(lowpass.apply(1.0), 9)
    1.0
"""

from __future__ import annotations

import copy
import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import signal as sig

from tfsynth.core.transfer_function import TransferFunctionSpec
from tfsynth.dsp.bilinear import bilinear_transform
from tfsynth.exceptions import ConfigurationError


class DigitalFilter:
    """IIR filter applying a difference equation one sample at a time.

    The output for input u is

        y[0] = (sum(a[i] * u[i]) - sum(b[i] * y[i] for i >= 1)) / b[0]

    where u[i] and y[i] are the input and output i samples ago.

    Args:
        sample_rate: Sample rate in Hz
        numerator: z-domain numerator coefficients a (z^0, z^-1, ...)
        denominator: z-domain denominator coefficients b (z^0, z^-1, ...)
        initial_value: Value the input and output histories start at

    Raises:
        ConfigurationError: If the sample rate is not positive, a coefficient
            sequence is empty or not finite, or b[0] is zero
    """

    def __init__(
        self,
        sample_rate: float,
        numerator: Sequence[float] | ArrayLike,
        denominator: Sequence[float] | ArrayLike,
        initial_value: float = 0.0,
    ):
        sample_rate = float(sample_rate)
        if not math.isfinite(sample_rate) or sample_rate <= 0.0:
            raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")

        a = np.array(numerator, dtype=np.float64).ravel()
        b = np.array(denominator, dtype=np.float64).ravel()
        if a.size == 0 or b.size == 0:
            raise ConfigurationError("Filter coefficients must not be empty")
        if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
            raise ConfigurationError("Filter coefficients must be finite")
        if b[0] == 0.0:
            raise ConfigurationError("Leading denominator coefficient b[0] must be nonzero")

        self._sample_rate = sample_rate
        self._a = a
        self._b = b
        self._u = np.empty_like(a)
        self._y = np.empty_like(b)
        self.initialize(initial_value)

    @classmethod
    def from_transfer_function(
        cls,
        transfer_function: TransferFunctionSpec,
        sample_rate: float,
        initial_value: float = 0.0,
    ) -> DigitalFilter:
        """Create a filter from an s- or z-domain transfer function.

        s-domain transfer functions are converted with the bilinear transform
        at the given sample rate.

        Raises:
            ConfigurationError: If synthesis produces invalid coefficients
        """
        if transfer_function.domain == "s":
            transfer_function = bilinear_transform(transfer_function, sample_rate=sample_rate)
        return cls(
            sample_rate,
            transfer_function.numerator,
            transfer_function.denominator,
            initial_value=initial_value,
        )

    # -----------------------------------------------------------------
    # State
    # -----------------------------------------------------------------

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def numerator(self) -> NDArray[np.float64]:
        """Copy of the numerator coefficients a."""
        return self._a.copy()

    @property
    def denominator(self) -> NDArray[np.float64]:
        """Copy of the denominator coefficients b."""
        return self._b.copy()

    @property
    def order(self) -> int:
        return max(self._a.size, self._b.size) - 1

    @property
    def transfer_function(self) -> TransferFunctionSpec:
        """Coefficients as a z-domain TransferFunctionSpec."""
        return TransferFunctionSpec(tuple(self._a), tuple(self._b), domain="z")

    def initialize(self, value: float) -> None:
        """Fill the input and output histories with a constant.

        Starting a low-pass filter at the first sample value suppresses the
        start-up transient.
        """
        self._u.fill(value)
        self._y.fill(value)

    def copy(self) -> DigitalFilter:
        """Independent copy including the current histories."""
        return copy.deepcopy(self)

    def __deepcopy__(self, memo: dict) -> DigitalFilter:
        clone = object.__new__(DigitalFilter)
        clone._sample_rate = self._sample_rate
        clone._a = self._a.copy()
        clone._b = self._b.copy()
        clone._u = self._u.copy()
        clone._y = self._y.copy()
        return clone

    __copy__ = copy

    # -----------------------------------------------------------------
    # Filtering
    # -----------------------------------------------------------------

    def apply(self, sample: float) -> float:
        """Filter one new input sample.

        Args:
            sample: New raw input value

        Returns:
            New filtered output value
        """
        u, y = self._u, self._y
        u[1:] = u[:-1]
        u[0] = sample
        y[1:] = y[:-1]
        y[0] = (np.dot(self._a, u) - np.dot(self._b[1:], y[1:])) / self._b[0]
        return float(y[0])

    def process(self, samples: ArrayLike) -> NDArray[np.float64]:
        """Filter a block of samples, continuing from the current state.

        Args:
            samples: 1-D sequence of input samples

        Returns:
            Filtered samples as a float64 array
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(f"Expected a 1-D sample array, got shape {samples.shape}")
        return np.fromiter(
            (self.apply(x) for x in samples), dtype=np.float64, count=samples.size
        )

    def process_phaseless(self, samples: ArrayLike) -> NDArray[np.float64]:
        """Filter forward then backward for zero phase shift.

        Each pass runs on a fresh copy of this filter initialized to the
        boundary sample, so this filter's own state is left unchanged. The
        magnitude response is applied twice.

        Args:
            samples: 1-D sequence of input samples

        Returns:
            Zero-phase filtered samples as a float64 array
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.size == 0:
            return samples.copy()

        forward = self.copy()
        forward.initialize(samples[0])
        result = forward.process(samples)

        backward = self.copy()
        backward.initialize(result[-1])
        return backward.process(result[::-1])[::-1].copy()

    # -----------------------------------------------------------------
    # Analysis
    # -----------------------------------------------------------------

    def frequency_response(self, frequencies: ArrayLike) -> NDArray[np.complex128]:
        """Complex frequency response at the given frequencies in Hz."""
        frequencies = np.atleast_1d(np.asarray(frequencies, dtype=np.float64))
        _, response = sig.freqz(self._a, self._b, worN=frequencies, fs=self._sample_rate)
        return response

    def steady_state_gain(self) -> float:
        """Output/input ratio for a constant input (response at z = 1)."""
        return self.transfer_function.steady_state_gain()

    def __repr__(self) -> str:
        return (
            f"DigitalFilter(sample_rate={self._sample_rate!r}, "
            f"numerator={self._a.tolist()!r}, denominator={self._b.tolist()!r})"
        )
