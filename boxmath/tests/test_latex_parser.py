"""Tests for parsing LaTeX to MathJSON."""

from boxmath import ComputeEngine, LatexSyntax


class TestParseArithmetic:
    """Tests for operators, numbers and symbols."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def parse(self, latex):
        return self.ce.latex_syntax.parse(latex)

    def test_numbers(self):
        """Integers, decimals and long decimals."""
        assert self.parse('42') == 42
        assert self.parse('1.5') == 1.5
        assert self.parse('.5') == 0.5
        assert self.parse('3.14159265358979323846') == {'num': '3.14159265358979323846'}

    def test_add(self):
        """Sums are flattened."""
        assert self.parse('1+2') == ['Add', 1, 2]
        assert self.parse('7 + 2 + 5') == ['Add', 7, 2, 5]

    def test_subtract_and_negate(self):
        """Binary and unary minus."""
        assert self.parse('x-1') == ['Subtract', 'x', 1]
        assert self.parse('-x') == ['Negate', 'x']
        assert self.parse('-2') == -2

    def test_invisible_multiply(self):
        """Juxtaposition is multiplication."""
        assert self.parse('2x') == ['Multiply', 2, 'x']
        assert self.parse('2xy') == ['Multiply', 2, 'x', 'y']
        assert self.parse('2\\times3') == ['Multiply', 2, 3]

    def test_mixed_number(self):
        """An integer followed by a small fraction is a sum."""
        assert self.parse('3\\frac{1}{8}') == ['Add', 3, ['Rational', 1, 8]]

    def test_power(self):
        """Superscripts."""
        assert self.parse('x^2') == ['Power', 'x', 2]
        assert self.parse('x^{10}') == ['Power', 'x', 10]

    def test_fraction(self):
        """\\frac and /."""
        assert self.parse('\\frac{1}{2}') == ['Divide', 1, 2]
        assert self.parse('\\frac{\\pi}{2}') == ['Divide', 'Pi', 2]
        assert self.parse('x/2') == ['Divide', 'x', 2]

    def test_roots(self):
        """Square roots and roots with an index."""
        assert self.parse('\\sqrt{x}') == ['Sqrt', 'x']
        assert self.parse('\\sqrt[3]{x}') == ['Root', 'x', 3]

    def test_factorial(self):
        """Postfix !"""
        assert self.parse('5!') == ['Factorial', 5]

    def test_delimiters(self):
        """Parentheses and absolute values."""
        assert self.parse('(1+2)') == ['Delimiter', ['Add', 1, 2]]
        assert self.parse('|x|') == ['Abs', 'x']

    def test_symbols(self):
        """Letters, subscripts, Greek letters and constants."""
        assert self.parse('x') == 'x'
        assert self.parse('x_1') == 'x_1'
        assert self.parse('\\alpha') == 'alpha'
        assert self.parse('\\pi') == 'Pi'
        assert self.parse('e') == 'ExponentialE'
        assert self.parse('\\infty') == 'PositiveInfinity'

    def test_operatorname(self):
        """Named functions and multi-letter symbols."""
        assert self.parse('\\operatorname{f}(x)') == ['f', 'x']
        assert self.parse('\\mathrm{speed}') == 'speed'

    def test_text(self):
        """\\text is a string."""
        assert self.parse('\\text{hello}') == "'hello'"


class TestParseFunctions:
    """Tests for functions, relations and big operators."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def parse(self, latex):
        return self.ce.latex_syntax.parse(latex)

    def test_trig(self):
        """Implicit and explicit arguments."""
        assert self.parse('\\sin x') == ['Sin', 'x']
        assert self.parse('\\sin(x)') == ['Sin', 'x']
        assert self.parse('\\sin^2 x') == ['Power', ['Sin', 'x'], 2]

    def test_inverse(self):
        """An exponent of -1 is the inverse function."""
        assert self.parse('\\sin^{-1} x') == [['InverseFunction', 'Sin'], 'x']

    def test_implicit_argument_stops_at_function(self):
        """\\sin x\\cos x is a product."""
        assert self.parse('\\sin x\\cos x') == ['Multiply', ['Sin', 'x'], ['Cos', 'x']]

    def test_logarithms(self):
        """Bases 2 and 10 have their own heads."""
        assert self.parse('\\ln x') == ['Ln', 'x']
        assert self.parse('\\log_2 x') == ['Lb', 'x']
        assert self.parse('\\log_{10} x') == ['Lg', 'x']
        assert self.parse('\\log_3 x') == ['Log', 'x', 3]

    def test_relations(self):
        """Relational operators."""
        assert self.parse('x=1') == ['Equal', 'x', 1]
        assert self.parse('x<1') == ['Less', 'x', 1]
        assert self.parse('x\\le 1') == ['LessEqual', 'x', 1]
        assert self.parse('x\\in\\R') == ['Element', 'x', 'RealNumber']

    def test_sequence_and_list(self):
        """Commas make sequences, brackets make lists."""
        assert self.parse('1, 2') == ['Sequence', 1, 2]
        assert self.parse('\\lbrack 1, 2\\rbrack') == ['List', 1, 2]

    def test_sum(self):
        """The index of a big operator becomes the lambda argument."""
        assert self.parse('\\sum_{i=1}^{3} i^2') == [
            'Sum', ['Lambda', ['Power', '_', 2]], ['Tuple', 'i', 1, 3]]

    def test_sum_scope_is_released(self):
        """The index is only declared while parsing the body."""
        self.parse('\\sum_{i=1}^{3} i')
        assert self.parse('i') == 'ImaginaryUnit'

    def test_partial_derivative(self):
        """Leibniz notation."""
        assert self.parse('\\frac{\\partial f}{\\partial x}') == ['PartialDerivative', 'f', 'x', 1]

    def test_cases(self):
        """cases environments are piecewise functions."""
        latex = '\\begin{cases}1 & x>0\\\\0 & \\text{otherwise}\\end{cases}'
        assert self.parse(latex) == ['Piecewise', ['List',
                                                   ['Pair', ['Greater', 'x', 0], 1],
                                                   ['Pair', 'True', 0]]]

    def test_matrix(self):
        """Matrix environments."""
        latex = '\\begin{pmatrix}1 & 2\\\\3 & 4\\end{pmatrix}'
        assert self.parse(latex) == ['Matrix', ['List', ['List', 1, 2], ['List', 3, 4]]]


class TestParseErrors:
    """Malformed input gives Error nodes, never an exception."""

    def setup_method(self):
        """Set up a syntax without an engine."""
        self.syntax = LatexSyntax()

    def test_missing_operand(self):
        """Operators without an operand."""
        assert self.syntax.parse('1+') == ['Add', 1, ['Error', "'missing'"]]
        assert self.syntax.parse('\\frac{1}') == ['Divide', 1, ['Error', "'missing'"]]

    def test_empty_scripts(self):
        """Empty superscripts and subscripts are missing operands."""
        missing = ['Error', "'missing'"]
        assert self.syntax.parse('\\sin^{} x') == ['Power', ['Sin', 'x'], missing]
        assert self.syntax.parse('\\log_{} x') == ['Log', 'x', missing]
        assert self.syntax.parse('\\sum_{i=1}^{} i') == [
            'Sum', ['Lambda', '_'], ['Tuple', 'i', 1, missing]]
        assert self.syntax.parse('\\frac{\\partial^{} f}{\\partial x}') == [
            'PartialDerivative', 'f', 'x', missing]

    def test_unexpected_command(self):
        """Unknown commands are reported with their LaTeX."""
        assert self.syntax.parse('\\foo') == ['Sequence', [
            'Error', ['ErrorCode', "'unexpected-command'", "'\\foo'"], ['Latex', "'\\foo'"]]]

    def test_trailing_tokens(self):
        """What follows a complete expression is kept as an error after it."""
        assert self.syntax.parse('x\\foo') == ['Sequence', 'x', [
            'Error', ['ErrorCode', "'unexpected-command'", "'\\foo'"], ['Latex', "'\\foo'"]]]

    def test_unclosed_delimiter(self):
        """An open parenthesis without its match."""
        result = self.syntax.parse('(x')
        assert result[0] == 'Error'
        assert result[1] == "'expected-close-delimiter'"

    def test_unknown_environment(self):
        """Environments must be in the dictionary."""
        result = self.syntax.parse('\\begin{foo}1\\end{foo}')
        assert result[:2] == ['Error', ['ErrorCode', "'unknown-environment'", "'foo'"]]

    def test_empty(self):
        """Empty input is an empty sequence."""
        assert self.syntax.parse('') == ['Sequence']

    def test_constant_letters_without_engine(self):
        """Without an engine e and i are constants."""
        assert self.syntax.parse('i') == 'ImaginaryUnit'


class TestEngineParse:
    """Tests for ComputeEngine.parse()."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_not_canonical_by_default(self):
        """Parsed expressions keep their structure."""
        expr = self.ce.parse('2x')
        assert not expr.is_canonical
        assert expr.json == ['Multiply', 2, 'x']

    def test_canonical(self):
        """canonical=True canonicalizes."""
        assert self.ce.parse('\\frac{-x}{-n}', canonical=True).json == ['Divide', 'x', 'n']

    def test_errors_are_boxed(self):
        """Malformed input boxes to an invalid expression."""
        for latex in ['\\frac{\\partial^{} f}{\\partial x}', '\\sin^{} x', '\\foo']:
            assert not self.ce.parse(latex).is_valid
            assert not self.ce.parse(latex, canonical=True).is_valid

    def test_declared_symbols_shadow_constants(self):
        """A declared e is a symbol."""
        self.ce.declare('e', 'RealNumber')
        assert self.ce.parse('e').json == 'e'

    def test_defined_functions_take_arguments(self):
        """Known functions are applied to a parenthesized argument list."""
        self.ce.box(['g', 'x'], canonical=True)
        assert self.ce.parse('g(1, 2)').json == ['g', 1, 2]
