"""Shared fixtures for the tfsynth test suite."""

import numpy as np
import pytest

from tfsynth.core.transfer_function import TransferFunctionSpec


@pytest.fixture
def sample_rate():
    """Sample rate well above every design frequency used in the tests."""
    return 1000.0


@pytest.fixture
def second_order_lowpass():
    """Critically damped 2nd order low-pass, w = 2 rad/s: 4 / (s^2+4s+4)."""
    return TransferFunctionSpec((4.0,), (1.0, 4.0, 4.0))


@pytest.fixture
def noise():
    """Reproducible white noise test signal."""
    rng = np.random.default_rng(42)
    return rng.standard_normal(500)
