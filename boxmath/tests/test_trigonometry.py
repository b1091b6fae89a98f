"""Tests for the trigonometry library."""

import math

import pytest

from boxmath import ComputeEngine


class TestConstructibleValues:
    """Exact values at rational multiples of pi."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def evaluate(self, expr):
        return self.ce.box(expr, canonical=True).evaluate()

    def test_quadrants(self):
        """Angles outside [0, pi/2] are reduced by the quadrant identities."""
        assert self.evaluate(['Sin', ['Divide', ['Multiply', 5, 'Pi'], 6]]).json == ['Rational', 1, 2]
        assert self.evaluate(['Sin', ['Divide', ['Multiply', 7, 'Pi'], 6]]).json == ['Rational', -1, 2]
        assert self.evaluate(['Cos', ['Divide', 'Pi', 2]]).json == 0

    def test_radicals(self):
        """Values with radicals."""
        result = self.evaluate(['Cos', ['Divide', 'Pi', 4]])
        assert result.is_same(self.ce.parse('\\frac{\\sqrt{2}}{2}', canonical=True))
        assert self.evaluate(['Tan', ['Divide', 'Pi', 3]]).json == ['Sqrt', 3]

    def test_undefined_values_stay(self):
        """tan(pi/2) has no value."""
        assert self.evaluate(['Tan', ['Divide', 'Pi', 2]]).head == 'Tan'

    def test_symbolic_argument(self):
        """Unknown angles stay symbolic."""
        assert self.evaluate(['Sin', 'x']).json == ['Sin', 'x']

    def test_degrees(self):
        """\\sin 30\\degree is 1/2."""
        assert self.ce.parse('\\sin 30\\degree').evaluate().json == ['Rational', 1, 2]


class TestInverseFunction:
    """Tests for the InverseFunction head."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_known_inverses(self):
        """Known inverses are replaced by their name."""
        assert self.ce.box([['InverseFunction', 'Cos'], 'x'], canonical=True).json == ['Arccos', 'x']
        assert self.ce.box([['InverseFunction', 'Exp'], 'x'], canonical=True).json == ['Ln', 'x']

    def test_unmapped_inverse(self):
        """Csc has no named inverse."""
        expr = self.ce.box([['InverseFunction', 'Csc'], 'x'], canonical=True)
        assert expr.json == [['InverseFunction', 'Csc'], 'x']


class TestNumericTrigonometry:
    """Machine precision values."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine(numeric_mode='machine')

    def N(self, expr):
        return self.ce.box(expr, canonical=True).N().value

    def test_circular(self):
        """Sin, Cos and Cot of 1."""
        assert self.N(['Sin', 1]) == pytest.approx(math.sin(1))
        assert self.N(['Cos', 1]) == pytest.approx(math.cos(1))
        assert self.N(['Cot', 1]) == pytest.approx(1 / math.tan(1))

    def test_arctan2(self):
        """Two-argument arctangent."""
        assert self.N(['Arctan2', 1, 1]) == pytest.approx(math.pi / 4)

    def test_hyperbolic(self):
        """Hyperbolic functions."""
        assert self.N(['Sinh', 1]) == pytest.approx(math.sinh(1))
        assert self.N(['Sech', 1]) == pytest.approx(1 / math.cosh(1))
        assert self.N(['Csch', 1]) == pytest.approx(1 / math.sinh(1))
        assert self.N(['Coth', 2]) == pytest.approx(1 / math.tanh(2))

    def test_template(self):
        """Haversine is given by a template."""
        assert self.ce.box(['Haversine', 'Pi'], canonical=True).evaluate().json == 1
