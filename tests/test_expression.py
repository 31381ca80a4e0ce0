"""
Unit tests for expression parsing and expansion.

Tests verify:
- solve() expands products and powers into canonical text
- solve() output is a fixed point
- Term splitting and power/coefficient extraction
- Parse and evaluation errors
"""

import math

import pytest

from tfsynth.core.expression import (
    Add,
    Number,
    Power,
    Variable,
    collect_like_terms,
    extract_power_coefficient_pairs,
    parse,
    solve,
    split_additive_terms,
    try_solve,
)
from tfsynth.core.polynomial import PolynomialTerm
from tfsynth.exceptions import EvaluationError, ParseError


class TestSolve:
    """Tests for solve()."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("(s+1)*(s+2)", "s^2+3*s+2"),
            ("(s+1)^2", "s^2+2*s+1"),
            ("(s^2+2*s+4)*(s+2)", "s^3+4*s^2+8*s+8"),
            ("2*(1-z^-1)", "2-2*z^-1"),
            ("s - s", "0"),
            ("-s^2", "-s^2"),
            ("4", "4"),
            ("(s^2 + 0.5*s) / (2*s)", "0.5*s+0.25"),
            ("2^3*s", "8*s"),
        ],
    )
    def test_expansion(self, text, expected):
        """Test canonical text for typical inputs."""
        assert solve(text) == expected

    def test_implicit_multiplication(self):
        """Test juxtaposed factors multiply."""
        assert solve("2s") == "2*s"
        assert solve("2(s+1)") == "2*s+2"
        assert solve("(s+1)(s-1)") == "s^2-1"

    def test_power_is_right_associative(self):
        """Test 2^3^2 = 2^9."""
        assert solve("2^3^2") == "512"

    @pytest.mark.parametrize(
        "text",
        ["(s+1)^5", "(2*(1-z^-1))^3*(0.001*(1+z^-1))", "(s^2+1.41421*s+1)*(s+0.3)", "1e-05*s+3"],
    )
    def test_idempotent(self, text):
        """Test solve(solve(x)) == solve(x)."""
        once = solve(text)
        assert solve(once) == once

    def test_order_20_binomial(self):
        """Test (1-z^-1)^20 expands to exact binomial coefficients."""
        terms = split_additive_terms(solve("(1-z^-1)^20"))
        pairs = extract_power_coefficient_pairs(terms)
        assert len(pairs) == 21
        for power, coefficient in pairs:
            assert coefficient == (-1) ** -power * math.comb(20, -power)

    def test_variable_is_enforced(self):
        """Test a required variable name."""
        assert solve("z+1", variable="z") == "z+1"
        with pytest.raises(ParseError, match="Expected variable 'z'"):
            solve("s+1", variable="z")


class TestErrors:
    """Tests for malformed and non-polynomial input."""

    @pytest.mark.parametrize(
        "text,message",
        [
            ("", "Empty expression"),
            ("(s+1", "Mismatched parentheses"),
            ("s+1)", "Mismatched parentheses"),
            ("s+", "Unexpected end"),
            ("s*#", "Unexpected character"),
            ("sin(s)", "Unknown token"),
            ("s+x", "more than one free variable"),
            ("1.2.3", "Unexpected number '\\.3'"),
            ("2..5", "Unexpected number '\\.5'"),
            ("2 3", "Unexpected number '3'"),
        ],
    )
    def test_parse_errors(self, text, message):
        """Test ParseError messages for malformed text."""
        with pytest.raises(ParseError, match=message):
            solve(text)

    def test_parse_error_position(self):
        """Test the character offset of the offending token is kept."""
        with pytest.raises(ParseError) as exc_info:
            solve("s*#")
        assert exc_info.value.position == 2

    def test_number_after_number_position(self):
        """Test a second number without an operator is reported where it starts."""
        with pytest.raises(ParseError) as exc_info:
            solve("2 3")
        assert exc_info.value.position == 2

    def test_division_by_zero(self):
        """Test division by a constant that evaluates to zero."""
        with pytest.raises(EvaluationError, match="Division by zero"):
            solve("s/(2-2)")

    def test_non_polynomial(self):
        """Test division by a sum is rejected."""
        with pytest.raises(EvaluationError):
            solve("1/(s+1)")

    @pytest.mark.parametrize("text", ["(s+1)^1e12", "s^1e300", "s^600*s^600", "s^-2000"])
    def test_degree_limit(self, text):
        """Test expansions past the maximum degree fail instead of looping."""
        with pytest.raises(EvaluationError, match="maximum degree"):
            solve(text)

    @pytest.mark.parametrize("text", ["1e308*10*s", "1e400-1e400", "1e400"])
    def test_non_finite_coefficients(self, text):
        """Test overflowing or undefined coefficients are rejected."""
        with pytest.raises(EvaluationError, match="not finite"):
            solve(text)

    def test_errors_are_value_errors(self):
        """Test library errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            solve("(s")

    def test_try_solve(self):
        """Test try_solve reports errors as values."""
        assert try_solve("(s+1)^2") == ("s^2+2*s+1", "")
        text, error = try_solve("(s+1")
        assert text == ""
        assert "Mismatched parentheses" in error


class TestSplitAdditiveTerms:
    """Tests for split_additive_terms()."""

    def test_top_level_only(self):
        """Test signs inside parentheses do not split."""
        assert split_additive_terms("(s+1)*(s-1)+2*s-3") == ["(s+1)*(s-1)", "2*s", "-3"]

    def test_leading_signs(self):
        """Test a leading + is dropped and a leading - kept."""
        assert split_additive_terms("+s^2-s") == ["s^2", "-s"]
        assert split_additive_terms("-s^2+1") == ["-s^2", "1"]

    def test_unary_signs_and_exponents(self):
        """Test signs after operators and inside number exponents."""
        assert split_additive_terms("2*z^-1-1e-05*z^-2") == ["2*z^-1", "-1e-05*z^-2"]
        assert split_additive_terms("3*-s") == ["3*-s"]

    def test_mismatched_parentheses(self):
        """Test unbalanced text is rejected."""
        with pytest.raises(ParseError):
            split_additive_terms("(s+1")
        with pytest.raises(ParseError):
            split_additive_terms("s)+(1")


class TestExtractPowerCoefficientPairs:
    """Tests for extract_power_coefficient_pairs() and collect_like_terms()."""

    def test_pairs(self):
        """Test powers default to 1 for a bare variable and 0 without one."""
        pairs = extract_power_coefficient_pairs(["3*z^-2", "-z", "0.5"])
        assert pairs == [
            PolynomialTerm(1, -1.0),
            PolynomialTerm(0, 0.5),
            PolynomialTerm(-2, 3.0),
        ]

    def test_like_terms_are_summed(self):
        """Test repeated powers are collected into one pair."""
        pairs = extract_power_coefficient_pairs(["2*s", "3*s", "1"])
        assert pairs == [PolynomialTerm(1, 5.0), PolynomialTerm(0, 1.0)]

    def test_mixed_variables_rejected(self):
        """Test terms must share one variable."""
        with pytest.raises(ParseError):
            extract_power_coefficient_pairs(["s", "z"])

    def test_collect_like_terms(self):
        """Test collection from raw tuples keeps zero sums."""
        terms = collect_like_terms([(1, 2.0), (3, 1.0), (1, -2.0)])
        assert terms == [PolynomialTerm(3, 1.0), PolynomialTerm(1, 0.0)]


class TestExpressionTree:
    """Tests for building and printing trees."""

    def test_parse_structure(self):
        """Test precedence: s+2^3 is s + (2^3)."""
        assert parse("s+2^3") == Add(Variable("s"), Power(Number(2.0), Number(3.0)))

    def test_operators_build_trees(self):
        """Test trees assembled with Python operators print and expand."""
        z = Variable("z")
        tree = 2 * (1 - z**-1)
        assert str(tree) == "2*(1-z^-1)"
        assert tree.expand().to_text("z") == "2-2*z^-1"

    def test_printed_tree_reparses(self):
        """Test str() of a parsed tree parses to the same polynomial."""
        tree = parse("-(s+1)^2*(s-3)/2")
        assert parse(str(tree)).expand() == tree.expand()
