"""Tests for numeric kinds and numeric helpers."""

from fractions import Fraction
import math

import mpmath
import pytest

from boxmath import numeric


class TestKinds:
    """Tests for classification of numeric values."""

    def test_integers_are_rationals(self):
        """Python ints are normalized to Fractions."""
        value = numeric.normalize(3)
        assert isinstance(value, Fraction)
        assert value == 3

    def test_number_kind(self):
        """Each representation has its kind."""
        assert numeric.number_kind(Fraction(1, 2)) == numeric.RATIONAL
        assert numeric.number_kind(1.5) == numeric.MACHINE
        assert numeric.number_kind(mpmath.mpf('1.5')) == numeric.BIGNUM
        assert numeric.number_kind(2j) == numeric.COMPLEX
        assert numeric.number_kind(mpmath.mpc(1, 2)) == numeric.COMPLEX

    def test_unsupported_value(self):
        """Non-numeric values are rejected."""
        with pytest.raises(TypeError):
            numeric.normalize("3")

    def test_sign(self):
        """Sign of real values, None for NaN and non-real values."""
        assert numeric.sign(Fraction(-2)) == -1
        assert numeric.sign(0.0) == 0
        assert numeric.sign(mpmath.mpf(3)) == 1
        assert numeric.sign(math.nan) is None
        assert numeric.sign(1j) is None
        assert numeric.sign(complex(2, 0)) == 1

    def test_is_integer_value(self):
        """Integer-valued floats count as integers."""
        assert numeric.is_integer_value(Fraction(4))
        assert numeric.is_integer_value(4.0)
        assert not numeric.is_integer_value(4.5)
        assert not numeric.is_integer_value(math.inf)


class TestArithmetic:
    """Tests for mixed-kind arithmetic."""

    def test_exact_add(self):
        """Rationals stay exact."""
        assert numeric.add(Fraction(1, 3), Fraction(1, 6)) == Fraction(1, 2)

    def test_promotion_to_float(self):
        """Rational and machine numbers combine as floats."""
        result = numeric.mul(Fraction(1, 2), 3.0)
        assert isinstance(result, float)
        assert result == 1.5

    def test_promotion_to_bignum(self):
        """Bignums win over floats."""
        result = numeric.add(mpmath.mpf(1), 0.5)
        assert isinstance(result, mpmath.mpf)

    def test_division_by_zero_is_nan(self):
        """Division by zero yields NaN rather than raising."""
        assert math.isnan(numeric.div(Fraction(1), Fraction(0)))

    def test_exact_power(self):
        """Integer powers of rationals are exact."""
        assert numeric.power(Fraction(2, 3), Fraction(3)) == Fraction(8, 27)

    def test_compare(self):
        """Comparison across kinds."""
        assert numeric.compare(Fraction(1, 2), 0.25) == 1
        assert numeric.compare(0.5, Fraction(1, 2)) == 0
        assert numeric.compare(math.nan, 1.0) is None

    def test_chop(self):
        """Values below the tolerance become exact zero."""
        assert numeric.chop(1e-12, 1e-10) == 0
        assert isinstance(numeric.chop(1e-12, 1e-10), Fraction)
        assert numeric.chop(0.5, 1e-10) == 0.5
        assert numeric.chop(complex(2.0, 1e-14), 1e-10) == 2.0

    def test_factor_perfect_square(self):
        """n = a^2 * b."""
        assert numeric.factor_perfect_square(12) == (2, 3)
        assert numeric.factor_perfect_square(16) == (4, 1)
        assert numeric.factor_perfect_square(7) == (1, 7)

    def test_exact_root(self):
        """Integer roots of perfect powers."""
        assert numeric.exact_root(27, 3) == 3
        assert numeric.exact_root(28, 3) is None


class TestFunctions:
    """Tests for transcendental dispatch."""

    def test_machine(self):
        """Machine evaluation uses floats."""
        assert numeric.apply_function('sin', Fraction(0), False) == 0.0

    def test_bignum(self):
        """Bignum evaluation uses mpmath."""
        with mpmath.workdps(30):
            result = numeric.apply_function('sqrt', Fraction(2), True)
            assert isinstance(result, mpmath.mpf)
            assert mpmath.almosteq(result * result, 2)

    def test_outside_real_domain(self):
        """Arguments outside the real domain give complex results."""
        result = numeric.apply_function('sqrt', Fraction(-4), False)
        assert isinstance(result, complex)
        assert result == 2j

    def test_unknown_function(self):
        """Unknown names raise KeyError."""
        with pytest.raises(KeyError):
            numeric.apply_function('frobnicate', Fraction(1), False)


class TestText:
    """Tests for number text and MathJSON forms."""

    def test_parse_integer(self):
        """Integers are exact."""
        assert numeric.parse_number_string('42') == Fraction(42)

    def test_parse_decimal(self):
        """Short decimals are machine floats."""
        assert numeric.parse_number_string('3.5') == 3.5

    def test_parse_long_decimal(self):
        """Long decimals are bignums."""
        value = numeric.parse_number_string('3.14159265358979323846')
        assert isinstance(value, mpmath.mpf)

    def test_parse_special(self):
        """NaN and infinities."""
        assert math.isnan(numeric.parse_number_string('NaN'))
        assert numeric.parse_number_string('-Infinity') == -math.inf

    def test_parse_invalid(self):
        """Invalid text raises ValueError."""
        with pytest.raises(ValueError):
            numeric.parse_number_string('abc')

    def test_format(self):
        """MathJSON for each kind."""
        assert numeric.format_number(Fraction(4)) == 4
        assert numeric.format_number(Fraction(1, 3)) == ['Rational', 1, 3]
        assert numeric.format_number(2.5) == 2.5
        assert numeric.format_number(math.nan) == {'num': 'NaN'}
        assert numeric.format_number(math.inf) == {'num': '+Infinity'}
        assert numeric.format_number(complex(1, 2)) == ['Complex', 1.0, 2.0]
