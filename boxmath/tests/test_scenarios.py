"""End to end: LaTeX in, canonical/simplified MathJSON and LaTeX out."""

import pytest

from boxmath import ComputeEngine


class TestScenarios:
    """Parse, transform and serialize."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_fraction_of_pi(self):
        """\\frac{\\pi}{2} parses to a division."""
        assert self.ce.parse('\\frac{\\pi}{2}').json == ['Divide', 'Pi', 2]

    def test_invisible_multiplication(self):
        """2x is a canonical product."""
        assert self.ce.parse('2x', canonical=True).json == ['Multiply', 2, 'x']

    def test_simplify_radical(self):
        """\\sqrt{12} simplifies to 2\\sqrt{3}."""
        result = self.ce.parse('\\sqrt{12}').simplify()
        assert result.json == ['Multiply', 2, ['Sqrt', 3]]
        assert result.latex == '2\\sqrt{3}'

    def test_sum_of_integers(self):
        """Canonical sums keep their terms, simplify adds them."""
        expr = self.ce.parse('7 + 2 + 5', canonical=True)
        assert expr.json == ['Add', 7, 2, 5]
        assert expr.simplify().json == 14

    def test_negated_fraction(self):
        """Negations in numerator and denominator cancel."""
        assert self.ce.parse('\\frac{-x}{-n}', canonical=True).json == ['Divide', 'x', 'n']

    def test_serialize_fraction(self):
        """A product with a rational factor is a fraction."""
        assert self.ce.serialize(['Multiply', 2, ['Rational', 1, 3]]) == '\\frac{2}{3}'


class TestWorkflows:
    """Longer pipelines."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine(numeric_mode='machine')

    def test_numeric_value_of_latex(self):
        """\\cos\\frac{\\pi}{3} is 1/2 exactly and numerically."""
        expr = self.ce.parse('\\cos\\frac{\\pi}{3}')
        assert expr.evaluate().json == ['Rational', 1, 2]
        assert expr.N().value == pytest.approx(0.5)

    def test_trig_identity_from_latex(self):
        """\\sin^2 x+\\cos^2 x simplifies to 1."""
        assert self.ce.parse('\\sin^2 x+\\cos^2 x').simplify().json == 1

    def test_rewrite_then_serialize(self):
        """Parsed input rewritten with MathJSON rules and serialized back."""
        expr = self.ce.parse('\\operatorname{f}(x)+1')
        rewritten = expr.replace([(['f', '_a'], ['Sin', '_a'])])
        assert rewritten.json == ['Add', ['Sin', 'x'], 1]
        assert rewritten.latex == '\\sin(x)+1'

    def test_sum_from_latex(self):
        """\\sum_{i=1}^{4} i is 10."""
        assert self.ce.parse('\\sum_{i=1}^{4} i').evaluate().json == 10

    def test_root_of_square_from_latex(self):
        """\\sqrt{x^2} simplifies to |x|."""
        assert self.ce.parse('\\sqrt{x^2}').simplify().json == ['Abs', 'x']
