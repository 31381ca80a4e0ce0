"""
Unit tests for complex arithmetic.

Tests verify:
- Field operations against Python's builtin complex
- Polar form and principal-branch exponentiation
- Division by zero and tolerance helpers
"""

import math

import pytest

from tfsynth.core.complex import EPSILON, Complex, is_zero


class TestArithmetic:
    """Tests for Complex operators."""

    def test_operations_match_builtin_complex(self):
        """Test +, -, * and / agree with Python complex numbers."""
        a, b = Complex(1.5, -2.0), Complex(-0.5, 3.0)
        ca, cb = complex(a), complex(b)

        assert complex(a + b) == pytest.approx(ca + cb)
        assert complex(a - b) == pytest.approx(ca - cb)
        assert complex(a * b) == pytest.approx(ca * cb)
        assert complex(a / b) == pytest.approx(ca / cb)

    def test_scalar_operands(self):
        """Test real scalars on either side of an operator."""
        z = Complex(1.0, 2.0)
        assert 2 * z == Complex(2.0, 4.0)
        assert z * 2 == Complex(2.0, 4.0)
        assert 1 + z == Complex(2.0, 2.0)
        assert 1 - z == Complex(0.0, -2.0)
        assert complex(1 / z) == pytest.approx(1 / complex(1, 2))

    def test_negation_and_conjugate(self):
        """Test unary minus and conjugation."""
        z = Complex(3.0, -4.0)
        assert -z == Complex(-3.0, 4.0)
        assert z.conjugate() == Complex(3.0, 4.0)
        assert abs(z) == 5.0

    def test_division_by_zero_raises(self):
        """Test dividing by a zero-magnitude value raises ZeroDivisionError."""
        with pytest.raises(ZeroDivisionError):
            Complex(1.0, 1.0) / Complex(0.0, 0.0)
        with pytest.raises(ZeroDivisionError):
            Complex(1.0, 1.0) / 0.0

    def test_values_are_immutable(self):
        """Test Complex instances cannot be modified."""
        z = Complex(1.0, 2.0)
        with pytest.raises(AttributeError):
            z.real = 5.0

    def test_string_form(self):
        """Test text rendering of both signs of the imaginary part."""
        assert str(Complex(1.0, 2.0)) == "1.000 + 2.000 i"
        assert str(Complex(1.0, -2.0)) == "1.000 - 2.000 i"


class TestPolarForm:
    """Tests for polar coordinates and powers."""

    def test_polar_round_trip(self):
        """Test from_polar inverts polar_length and polar_angle."""
        z = Complex.from_polar(2.0, 3 * math.pi / 4)
        assert z.polar_length == pytest.approx(2.0)
        assert z.polar_angle == pytest.approx(3 * math.pi / 4)

    def test_real_power(self):
        """Test i^2 = -1 and a fractional power on the principal branch."""
        assert Complex(0.0, 1.0).to_power(2.0).isclose(Complex(-1.0, 0.0))
        root = Complex(-4.0, 0.0).to_power(0.5)
        assert root.isclose(Complex(0.0, 2.0))

    def test_complex_power_matches_builtin(self):
        """Test a general complex exponent against Python's ** operator."""
        base, exponent = Complex(1.2, 0.7), Complex(0.3, -1.1)
        expected = complex(base) ** complex(exponent)
        assert complex(base.to_power(exponent)) == pytest.approx(expected)

    def test_euler_identity(self):
        """Test e^(j*theta) lies on the unit circle at angle theta."""
        e = Complex(math.e, 0.0)
        point = e.to_power(Complex(0.0, 5 * math.pi / 8))
        assert point.polar_length == pytest.approx(1.0)
        assert point.polar_angle == pytest.approx(5 * math.pi / 8)

    def test_zero_base(self):
        """Test zero to a complex power."""
        zero = Complex(0.0, 0.0)
        assert zero.to_power(Complex(2.0, 1.0)) == Complex(0.0, 0.0)
        with pytest.raises(ZeroDivisionError):
            zero.to_power(Complex(-1.0, 0.0))


class TestTolerance:
    """Tests for is_zero and isclose."""

    def test_is_zero_absolute_and_relative(self):
        """Test the tolerance scales with values larger than one."""
        assert is_zero(EPSILON / 2)
        assert not is_zero(1e-6)
        assert is_zero(1e-6, scale=1e7)

    def test_complex_is_zero(self):
        """Test both components must vanish."""
        assert Complex(1e-14, -1e-14).is_zero()
        assert not Complex(0.0, 1e-3).is_zero()

    def test_isclose(self):
        """Test relative comparison of nearly equal values."""
        assert Complex(1e6, 0.0).isclose(Complex(1e6 + 1e-4, 0.0))
        assert not Complex(1.0, 0.0).isclose(Complex(1.0, 1e-6))
