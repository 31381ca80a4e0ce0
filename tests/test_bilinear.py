"""
Unit tests for bilinear-transform synthesis.

Tests verify:
- Coefficients agree with scipy.signal.bilinear
- Absent powers of z^-1 are zero-filled
- The text pipeline and the expression tree give the same coefficients
- DC gain is preserved and invalid inputs are rejected
"""

import numpy as np
import pytest
from scipy import signal as sig

from tfsynth.core.transfer_function import TransferFunctionSpec
from tfsynth.dsp.bilinear import (
    bilinear_expression,
    bilinear_transform,
    coefficients_from_expression,
)
from tfsynth.exceptions import ConfigurationError


class TestBilinearTransform:
    """Tests for bilinear_transform()."""

    def test_first_order_example(self):
        """Test 1/(s+1) at 2 Hz gives 0.2(1+z^-1) / (1-0.6z^-1)."""
        tf = bilinear_transform([1.0], [1.0, 1.0], sample_rate=2.0)
        assert tf.domain == "z"
        assert tf.numerator == pytest.approx((0.2, 0.2))
        assert tf.denominator == pytest.approx((1.0, -0.6))

    def test_matches_scipy_second_order(self, second_order_lowpass, sample_rate):
        """Test a 2nd order low-pass against scipy."""
        tf = bilinear_transform(second_order_lowpass, sample_rate=sample_rate)
        b, a = sig.bilinear(
            second_order_lowpass.numerator, second_order_lowpass.denominator, fs=sample_rate
        )

        np.testing.assert_allclose(tf.numerator, b, rtol=1e-12)
        np.testing.assert_allclose(tf.denominator, a, rtol=1e-12)

    def test_matches_scipy_butterworth(self):
        """Test an analog 6th order Butterworth against scipy."""
        b_s, a_s = sig.butter(6, 2 * np.pi * 40.0, analog=True)
        tf = bilinear_transform(b_s, a_s, sample_rate=1000.0)
        b, a = sig.bilinear(b_s, a_s, fs=1000.0)

        np.testing.assert_allclose(tf.numerator, b, rtol=1e-9, atol=1e-15)
        np.testing.assert_allclose(tf.denominator, a, rtol=1e-9, atol=1e-12)

    def test_highpass_numerator(self):
        """Test s/(s+1) has an exact zero at z = 1."""
        tf = bilinear_transform([1.0, 0.0], [1.0, 1.0], sample_rate=10.0)
        assert len(tf.numerator) == 2
        assert sum(tf.numerator) == pytest.approx(0.0, abs=1e-15)

    def test_zero_fill(self):
        """Test a constant numerator still gets order + 1 coefficients."""
        tf = bilinear_transform([4.0], [1.0, 2.0, 4.0], sample_rate=100.0)
        assert len(tf.numerator) == 3
        assert len(tf.denominator) == 3

    def test_pure_gain(self):
        """Test an order-0 transfer function."""
        tf = bilinear_transform([3.0], [2.0], sample_rate=50.0)
        assert tf.numerator == (1.5,)
        assert tf.denominator == (1.0,)

    def test_dc_gain_preserved(self, second_order_lowpass, sample_rate):
        """Test s = 0 maps to z = 1."""
        tf = bilinear_transform(second_order_lowpass, sample_rate=sample_rate)
        assert tf.steady_state_gain() == pytest.approx(second_order_lowpass.steady_state_gain())

    def test_leading_coefficient_normalized(self):
        """Test b[0] is one after synthesis."""
        tf = bilinear_transform([1.0], [3.0, 5.0, 7.0], sample_rate=20.0)
        assert tf.denominator[0] == 1.0

    def test_root_at_twice_sample_rate(self):
        """Test a denominator root at s = 2 * sample_rate makes b[0] zero."""
        with pytest.raises(ConfigurationError, match="root at s = 4"):
            bilinear_transform([1.0], [1.0, -4.0], sample_rate=2.0)

    @pytest.mark.parametrize("sample_rate", [0.0, -10.0, float("nan")])
    def test_invalid_sample_rate(self, sample_rate):
        """Test the sample rate must be positive and finite."""
        with pytest.raises(ConfigurationError, match="Sample rate"):
            bilinear_transform([1.0], [1.0, 1.0], sample_rate=sample_rate)

    def test_requires_s_domain(self):
        """Test a z-domain transfer function is rejected."""
        tf = TransferFunctionSpec((1.0,), (1.0, -0.5), domain="z")
        with pytest.raises(ConfigurationError, match="s-domain"):
            bilinear_transform(tf, sample_rate=10.0)

    def test_requires_denominator(self):
        """Test coefficient input needs both sides."""
        with pytest.raises(ConfigurationError, match="Denominator"):
            bilinear_transform([1.0], sample_rate=10.0)


class TestBilinearExpression:
    """Tests for the substituted expression and coefficient extraction."""

    def test_expression_text(self):
        """Test the rendered substitution for s + 3."""
        assert str(bilinear_expression([1.0, 3.0], 1, 10.0)) == "1*(2*(1-z^-1))+3*(0.1*(1+z^-1))"

    def test_negative_and_zero_coefficients(self):
        """Test zero coefficients are skipped and signs become subtraction."""
        text = str(bilinear_expression([-1.0, 0.0, 2.0], 2, 1.0))
        assert text == "-(1*(2*(1-z^-1))^2)+2*(1*(1+z^-1))^2"

    def test_text_and_tree_agree(self):
        """Test the text pipeline matches direct tree expansion."""
        tree = bilinear_expression([1.0, 2.6131, 3.4142, 2.6131, 1.0], 4, 48000.0)
        from_tree = coefficients_from_expression(tree, 4)
        from_text = coefficients_from_expression(str(tree), 4)
        np.testing.assert_allclose(from_text, from_tree, rtol=1e-12)

    def test_unit_circle_binomial(self):
        """Test (1-z^-1)^3 extraction gives binomial coefficients."""
        np.testing.assert_array_equal(
            coefficients_from_expression("(1-z^-1)^3", 3), [1.0, -3.0, 3.0, -1.0]
        )

    def test_missing_powers_zero_filled(self):
        """Test powers absent from the expression read as zero."""
        np.testing.assert_array_equal(
            coefficients_from_expression("2-z^-3", 4), [2.0, 0.0, 0.0, -1.0, 0.0]
        )
