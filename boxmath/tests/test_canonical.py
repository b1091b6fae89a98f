"""Tests for canonical forms and signature validation."""

from boxmath import ComputeEngine


class TestCanonicalArithmetic:
    """Tests for the canonical forms of arithmetic."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def canonical(self, expr):
        return self.ce.box(expr, canonical=True).json

    def test_add_flattens(self):
        """Nested Add applications are merged."""
        assert self.canonical(['Add', 'x', ['Add', 'y', 'z']]) == ['Add', 'x', 'y', 'z']

    def test_add_drops_zero(self):
        """Exact zeros vanish from sums."""
        assert self.canonical(['Add', 'x', 0]) == 'x'
        assert self.canonical(['Add', 0, 0]) == 0

    def test_add_keeps_operand_order(self):
        """Sums are not reordered."""
        assert self.canonical(['Add', 'y', 'x']) == ['Add', 'y', 'x']

    def test_multiply_coefficient_first(self):
        """Exact factors fold into a leading coefficient, others are sorted."""
        assert self.canonical(['Multiply', 'y', 2, 'x']) == ['Multiply', 2, 'x', 'y']
        assert self.canonical(['Multiply', 2, 3]) == 6

    def test_multiply_by_zero(self):
        """An exact zero factor gives 0."""
        assert self.canonical(['Multiply', 'x', 0]) == 0

    def test_multiply_negate(self):
        """Negated factors contribute their sign."""
        assert self.canonical(['Multiply', 'x', ['Negate', 'y']]) == ['Negate', ['Multiply', 'x', 'y']]
        assert self.canonical(['Multiply', -2, ['Negate', 'x']]) == ['Multiply', 2, 'x']

    def test_negate(self):
        """Negation of numbers folds, double negation cancels."""
        assert self.canonical(['Negate', 3]) == -3
        assert self.canonical(['Negate', ['Negate', 'x']]) == 'x'

    def test_subtract_zero(self):
        """Subtracting zero is the identity."""
        assert self.canonical(['Subtract', 'x', 0]) == 'x'
        assert self.canonical(['Subtract', 0, 'x']) == ['Negate', 'x']

    def test_divide_exact(self):
        """Exact quotients fold to rationals."""
        assert self.canonical(['Divide', 6, 4]) == ['Rational', 3, 2]
        assert self.canonical(['Divide', 'x', 1]) == 'x'

    def test_divide_by_number(self):
        """Division by an exact number is multiplication by its inverse."""
        assert self.canonical(['Divide', 'x', 2]) == ['Multiply', ['Rational', 1, 2], 'x']

    def test_divide_negates_cancel(self):
        """(-a)/(-b) is a/b."""
        assert self.canonical(['Divide', ['Negate', 'x'], ['Negate', 'y']]) == ['Divide', 'x', 'y']

    def test_divide_by_zero_is_kept(self):
        """1/0 is left as written."""
        assert self.canonical(['Divide', 1, 0]) == ['Divide', 1, 0]

    def test_sqrt_factors_perfect_squares(self):
        """Perfect square factors leave the radical."""
        assert self.canonical(['Sqrt', 12]) == ['Multiply', 2, ['Sqrt', 3]]
        assert self.canonical(['Sqrt', 16]) == 4
        assert self.canonical(['Sqrt', ['Rational', 1, 4]]) == ['Rational', 1, 2]
        assert self.canonical(['Sqrt', 2]) == ['Sqrt', 2]

    def test_power_special_exponents(self):
        """Exponents 0, 1, 2 and 1/2."""
        assert self.canonical(['Power', 'x', 0]) == 1
        assert self.canonical(['Power', 'x', 1]) == 'x'
        assert self.canonical(['Power', 'x', 2]) == ['Square', 'x']
        assert self.canonical(['Power', 'x', ['Rational', 1, 2]]) == ['Sqrt', 'x']
        assert self.canonical(['Power', 'x', ['Rational', 1, 3]]) == ['Root', 'x', 3]

    def test_power_exact(self):
        """Exact integer powers fold."""
        assert self.canonical(['Power', 2, 10]) == 1024
        assert self.canonical(['Power', 2, -1]) == ['Rational', 1, 2]

    def test_power_of_e(self):
        """Powers of e are exponentials."""
        assert self.canonical(['Power', 'ExponentialE', 'x']) == ['Exp', 'x']

    def test_root(self):
        """Exact roots of perfect powers fold."""
        assert self.canonical(['Root', 27, 3]) == 3

    def test_log_bases(self):
        """Logarithms in base 10, 2 and e have their own heads."""
        assert self.canonical(['Log', 'x', 10]) == ['Lg', 'x']
        assert self.canonical(['Log', 'x', 2]) == ['Lb', 'x']
        assert self.canonical(['Ln', 1]) == 0

    def test_abs(self):
        """Abs of numbers and negations."""
        assert self.canonical(['Abs', -3]) == 3
        assert self.canonical(['Abs', ['Negate', 'x']]) == ['Abs', 'x']


class TestCanonicalStructure:
    """Tests for the structural canonicalization rules."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def canonical(self, expr):
        return self.ce.box(expr, canonical=True).json

    def test_sequence_spliced(self):
        """Sequence operands are spliced into their parent."""
        assert self.canonical(['f', ['Sequence', 1, 2], 3]) == ['f', 1, 2, 3]

    def test_single_sequence(self):
        """A one-element Sequence is its element."""
        assert self.canonical(['Sequence', 'x']) == 'x'

    def test_delimiter(self):
        """Delimiters disappear, or become tuples."""
        assert self.canonical(['Delimiter', 'x']) == 'x'
        assert self.canonical(['Delimiter', ['Sequence', 1, 2]]) == ['Tuple', 1, 2]

    def test_involution(self):
        """Not(Not(p)) is p."""
        assert self.canonical(['Not', ['Not', 'p']]) == 'p'

    def test_commutative_sort(self):
        """Operands of commutative functions are sorted."""
        assert self.canonical(['And', 'q', 'p']) == ['And', 'p', 'q']

    def test_idempotent(self):
        """And(And(p)) is And(p)."""
        assert self.canonical(['And', ['And', 'p']]) == ['And', 'p']

    def test_inverse_function_head(self):
        """Known inverse functions are replaced by their name."""
        assert self.canonical([['InverseFunction', 'Sin'], 'x']) == ['Arcsin', 'x']

    def test_canonical_is_fixed_point(self):
        """Canonicalizing a canonical expression changes nothing."""
        expr = self.ce.box(['Multiply', 'y', 2, ['Add', 'x', 0]], canonical=True)
        assert self.ce.box(expr.json, canonical=True).json == expr.json


class TestValidation:
    """Tests for signature validation."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_incompatible_domain(self):
        """A string cannot be added to a number."""
        expr = self.ce.box(['Add', 1, "'hello'"], canonical=True)
        assert not expr.is_valid
        assert expr.json == ['Add', 1, ['Error', ['ErrorCode', "'incompatible-domain'", 'Number', 'String']]]

    def test_missing_argument(self):
        """Missing operands are error markers."""
        expr = self.ce.box(['Divide', 1], canonical=True)
        assert not expr.is_valid
        assert expr.json == ['Divide', 1, ['Error', ['ErrorCode', "'missing'", 'Number']]]

    def test_unexpected_argument(self):
        """Extra operands are error markers."""
        expr = self.ce.box(['Sqrt', 4, 2], canonical=True)
        assert not expr.is_valid
        assert expr.json == ['Sqrt', 4, ['Error', "'unexpected-argument'", 2]]

    def test_wildcards_are_not_checked(self):
        """Wildcards are accepted in any position."""
        assert self.ce.box(['Add', 1, '_x'], canonical=True).is_valid

    def test_invalid_expressions_are_inert(self):
        """simplify, evaluate and N return an invalid expression unchanged."""
        expr = self.ce.box(['Divide', 1], canonical=True)
        assert expr.simplify() is expr
        assert expr.evaluate() is expr
        assert expr.N() is expr

    def test_valid(self):
        """Well-formed expressions are valid."""
        assert self.ce.box(['Add', 1, 'x'], canonical=True).is_valid
