"""
LaTeX definitions for arithmetic: operators, fractions, powers and roots,
logarithms, rounding and big operators.
"""

from fractions import Fraction

from .parser import CONSTANT_LETTERS, negate_literal, replace_symbol
from .tokenizer import GROUP_CLOSE, GROUP_OPEN


# ============================================================
# Helpers over MathJSON
# ============================================================

def exact_number(expr):
    """int or Fraction for an exact number literal, None otherwise."""
    if isinstance(expr, bool):
        return None
    if isinstance(expr, int):
        return expr
    if (isinstance(expr, list) and len(expr) == 3 and expr[0] == 'Rational'
            and isinstance(expr[1], int) and isinstance(expr[2], int) and expr[2] != 0):
        return Fraction(expr[1], expr[2])
    return None


def is_number_literal(expr) -> bool:
    if isinstance(expr, bool):
        return False
    if isinstance(expr, (int, float)) or isinstance(expr, dict) and 'num' in expr:
        return True
    return isinstance(expr, list) and bool(expr) and expr[0] in ('Rational', 'Complex')


def is_negative_literal(expr) -> bool:
    if isinstance(expr, bool):
        return False
    if isinstance(expr, (int, float)):
        return expr < 0
    if isinstance(expr, dict) and isinstance(expr.get('num'), str):
        return expr['num'].startswith('-')
    value = exact_number(expr)
    return value is not None and value < 0


def negate_number(expr):
    if isinstance(expr, list) and expr[:1] == ['Rational']:
        return ['Rational', -expr[1], expr[2]]
    return negate_literal(expr)


def _fraction_json(value: Fraction):
    if value.denominator == 1:
        return value.numerator
    return ['Rational', value.numerator, value.denominator]


def _superscript(text: str) -> str:
    return text if len(text) == 1 else '{' + text + '}'


# ============================================================
# Parsing
# ============================================================

def _parse_negate(parser, until):
    operand = parser.parse_expression(until, 400)
    if operand is None:
        return ['Negate', parser.error('missing')]
    literal = negate_literal(operand)
    return literal if literal is not None else ['Negate', operand]


def _parse_unary_plus(parser, until):
    operand = parser.parse_expression(until, 400)
    return operand if operand is not None else parser.error('missing')


def _parse_power(parser, lhs, until):
    exponent = parser.parse_argument()
    return ['Power', lhs, exponent if exponent is not None else parser.error('missing')]


def _parse_sqrt(parser, until):
    index = parser.parse_optional_argument()
    base = parser.parse_argument()
    if base is None:
        base = parser.error('missing')
    if index is not None:
        return ['Root', base, index]
    return ['Sqrt', base]


def _parse_leibniz(parser, until):
    """
    \\frac{\\partial^n f}{\\partial x \\partial y}, the \\frac already consumed.

    Returns None when the fraction is not in Leibniz notation.
    """
    start = parser.index
    if not (parser.match(GROUP_OPEN) and parser.match('\\partial')):
        parser.index = start
        return None
    order = 1
    if parser.match('^'):
        order = parser.parse_argument()
        if order is None:
            order = parser.error('missing')
    fn = parser.parse_expression(lambda p: p.peek == GROUP_CLOSE)
    if not parser.match(GROUP_CLOSE) or not parser.match(GROUP_OPEN):
        parser.index = start
        return None
    variables = []
    while parser.match('\\partial'):
        var = parser.parse_argument()
        if var is None:
            parser.index = start
            return None
        if parser.match('^'):
            power = parser.parse_argument()
            variables.extend([var] * (power if isinstance(power, int) and power > 0 else 1))
        else:
            variables.append(var)
    if not variables or not parser.match(GROUP_CLOSE):
        parser.index = start
        return None
    if fn is None:
        fn = parser.parse_expression(until, 390)
        if fn is None:
            fn = parser.error('missing')
    return ['PartialDerivative', fn, variables[0] if len(variables) == 1 else ['List'] + variables, order]


def _parse_frac(parser, until):
    leibniz = _parse_leibniz(parser, until)
    if leibniz is not None:
        return leibniz
    numer = parser.parse_argument()
    denom = parser.parse_argument()
    return ['Divide',
            numer if numer is not None else parser.error('missing'),
            denom if denom is not None else parser.error('missing')]


def function_parser(name, inverse=True):
    """
    Parser for functions accepting an exponent and an implicit argument:
    \\sin x, \\sin(x), \\sin^2 x, \\sin^{-1} x.
    """
    def parse(parser, until):
        exponent = None
        is_inverse = False
        if parser.match('^'):
            exponent = parser.parse_argument()
            if exponent is None:
                exponent = parser.error('missing')
            elif inverse and exponent == -1 and not isinstance(exponent, bool):
                is_inverse = True
                exponent = None
        head = ['InverseFunction', name] if is_inverse else name
        args = parser.parse_function_arguments(until)
        result = head if args is None else [head] + args
        if exponent is not None:
            return ['Power', result, exponent]
        return result
    return parse


def _parse_log(name):
    def parse(parser, until):
        base = None
        if parser.match('_'):
            base = parser.parse_argument()
            if base is None:
                base = parser.error('missing')
        args = parser.parse_function_arguments(until)
        if args is None:
            return name if base is None else ['Log', parser.error('missing'), base]
        if base is None:
            return [name] + args
        if base == 10:
            return ['Lg'] + args
        if base == 2:
            return ['Lb'] + args
        return ['Log', args[0], base]
    return parse


def _parse_big_op_index(parser):
    """The subscript of a big operator: (index, lower, condition)."""
    if parser.peek != GROUP_OPEN:
        token = parser.peek
        if len(token) == 1 and token.isalpha():
            parser.next()
            return token, None, None
        return None, None, parser.parse_argument()
    start = parser.index
    parser.next()
    parser.skip_space()
    token = parser.peek
    if len(token) == 1 and token.isalpha():
        parser.next()
        if parser.match(GROUP_CLOSE):
            return token, None, None
        if parser.match('='):
            lower = parser.parse_expression()
            if parser.match(GROUP_CLOSE):
                return token, lower if lower is not None else parser.error('missing'), None
    parser.index = start
    return None, None, parser.parse_argument()


def _parse_big_op(name):
    def parse(parser, until):
        index = lower = upper = condition = None
        has_sub = has_sup = False
        for _ in range(2):
            if not has_sub and parser.match('_'):
                has_sub = True
                index, lower, condition = _parse_big_op_index(parser)
                if index is None and condition is None:
                    condition = parser.error('missing')
            elif not has_sup and parser.match('^'):
                has_sup = True
                upper = parser.parse_argument()
                if upper is None:
                    upper = parser.error('missing')

        with parser.scoped_symbol(index):
            body = parser.parse_expression(until, 266)
        if body is None:
            body = parser.error('missing')
        if index is not None:
            body = replace_symbol(body, index, '_')
            if parser.ce is None and index in CONSTANT_LETTERS:
                body = replace_symbol(body, CONSTANT_LETTERS[index], '_')
        fn = ['Lambda', body]

        if condition is not None:
            return [name, fn, condition]
        if index is None and upper is None:
            return [name, fn]
        if index is not None and lower is None and upper is None:
            return [name, fn, ['Tuple', index]]
        return [name, fn, ['Tuple', index or 'Nothing', lower if lower is not None else 1,
                           upper if upper is not None else 'PositiveInfinity']]
    return parse


def _parse_abs(parser, body):
    return ['Abs', body if body is not None else parser.error('missing')]


# ============================================================
# Serialization
# ============================================================

def _serialize_add(s, expr):
    terms = expr[1:]
    if not terms:
        return '0'
    s.level -= 1
    result = s.wrap(terms[0], 275)
    previous = terms[0]
    for term in terms[1:]:
        value = exact_number(term)
        before = exact_number(previous)
        if (isinstance(before, int) and abs(before) <= 1000 and isinstance(value, Fraction)
                and 1 < value.denominator <= 100 and 0 < value.numerator <= 100):
            result += s.options['invisible_plus'] + s.serialize(term)
        elif isinstance(term, list) and term[:1] == ['Negate']:
            result += '-' + s.wrap(term[1], 276)
        else:
            text = s.wrap(term, 275)
            result += text if text.startswith('-') else '+' + text
        previous = term
    s.level += 1
    return result


def _serialize_subtract(s, expr):
    if len(expr) != 3:
        return s.serialize_function('Subtract', expr[1:])
    return s.wrap(expr[1], 275) + '-' + s.wrap(expr[2], 276)


def _serialize_negate(s, expr):
    op = expr[1]
    if is_number_literal(op) and not is_negative_literal(op):
        literal = negate_number(op)
        if literal is not None:
            return s.serialize(literal)
    return '-' + s.wrap(op, 276)


def _join_factor(s, result: str, term: str) -> str:
    if not result:
        return term
    if term[:1].isdigit() or term[:1] in ('.', '-'):
        return result + s.options['multiply'] + term
    # A control word followed by a letter would merge into a single command
    tail = result[result.rfind('\\'):] if '\\' in result else ''
    if term[:1].isalpha() and tail[1:].isalpha():
        return result + ' ' + term
    return result + s.options['invisible_multiply'] + term


def _split_fraction(ops):
    """Numerator factors, denominator factors and the sign of a product."""
    numer, denom = [], []
    sign = 1
    for op in ops:
        if isinstance(op, list) and op[:1] == ['Negate'] and len(op) == 2:
            sign = -sign
            op = op[1]
        value = exact_number(op)
        if value is not None:
            if value < 0:
                sign = -sign
                value = -value
            if isinstance(value, Fraction) and value.denominator != 1:
                if value.numerator != 1:
                    numer.append(value.numerator)
                denom.append(value.denominator)
            elif value != 1 or len(ops) == 1:
                numer.append(_fraction_json(Fraction(value)))
            continue
        if is_negative_literal(op):
            sign = -sign
            op = negate_number(op)
        if isinstance(op, list) and len(op) == 3 and op[0] == 'Power':
            exponent = exact_number(op[2])
            if exponent is not None and exponent < 0:
                denom.append(op[1] if exponent == -1 else ['Power', op[1], _fraction_json(-Fraction(exponent))])
                continue
        if isinstance(op, list) and len(op) == 3 and op[0] == 'Divide' and op[1] == 1:
            denom.append(op[2])
            continue
        numer.append(op)
    return numer, denom, sign


def _product(factors):
    if not factors:
        return 1
    if len(factors) == 1:
        return factors[0]
    return ['Multiply'] + factors


def _serialize_multiply(s, expr):
    ops = expr[1:]
    if not ops:
        return '1'
    numer, denom, sign = _split_fraction(ops)
    prefix = '-' if sign < 0 else ''
    if denom:
        return prefix + s.serialize(['Divide', _product(numer), _product(denom)])

    s.level -= 1
    result = ''
    for op in numer:
        if is_number_literal(op):
            term = s.serialize(op)
        elif (isinstance(op, list) and len(op) == 3 and op[0] == 'Power'
              and isinstance(exact_number(op[2]), Fraction) and exact_number(op[2]).numerator == 1):
            term = s.serialize(['Root', op[1], exact_number(op[2]).denominator])
        else:
            term = s.wrap(op, 390)
        result = _join_factor(s, result, term)
    s.level += 1
    return prefix + (result or '1')


def _serialize_divide(s, expr):
    if len(expr) != 3:
        return s.serialize_function('Divide', expr[1:])
    num, den = expr[1], expr[2]
    style = s.style('fraction_style', expr)
    if style in ('inline-solidus', 'nice-solidus'):
        op = '\\/' if style == 'inline-solidus' else '/'
        return s.wrap(num, 660) + op + s.wrap(den, 661)
    if style == 'reciprocal':
        return _join_factor(s, s.wrap(num, 390), s.wrap(den, 721) + '^{-1}')
    if style == 'factor':
        return '\\frac{1}{' + s.serialize(den) + '}' + s.wrap(num, 390)
    return '\\frac{' + s.serialize(num) + '}{' + s.serialize(den) + '}'


def _serialize_root(s, base, index):
    style = s.style('root_style', ['Root', base, index])
    if style == 'solidus':
        return s.wrap(base, 721) + '^{1/' + s.serialize(index) + '}'
    if style == 'quotient':
        return s.wrap(base, 721) + '^{\\frac{1}{' + s.serialize(index) + '}}'
    if index == 2:
        return '\\sqrt{' + s.serialize(base) + '}'
    return '\\sqrt[' + s.serialize(index) + ']{' + s.serialize(base) + '}'


def _serialize_power(s, expr):
    if len(expr) != 3:
        return s.serialize_function('Power', expr[1:])
    base, exponent = expr[1], expr[2]
    value = exact_number(exponent)
    if value == -1:
        return s.serialize(['Divide', 1, base])
    if value is not None and value < 0:
        return s.serialize(['Divide', 1, ['Power', base, _fraction_json(-Fraction(value))]])
    if isinstance(value, Fraction) and value.numerator == 1 and value.denominator > 1:
        return _serialize_root(s, base, value.denominator)
    if base == 'ExponentialE':
        return 'e^{' + s.serialize(exponent) + '}'
    if isinstance(value, Fraction) and value.denominator != 1:
        if s.style('power_style', expr) == 'quotient':
            text = '\\frac{' + str(value.numerator) + '}{' + str(value.denominator) + '}'
        else:
            text = str(value.numerator) + '/' + str(value.denominator)
        return s.wrap(base, 721) + '^{' + text + '}'
    return s.wrap(base, 721) + '^' + _superscript(s.serialize(exponent))


def _serialize_rational(s, expr):
    value = exact_number(expr)
    if value is None:
        return s.serialize_function('Rational', expr[1:])
    if value.denominator == 1:
        return str(value.numerator)
    prefix = '-' if value < 0 else ''
    return prefix + '\\frac{' + str(abs(value.numerator)) + '}{' + str(value.denominator) + '}'


def _serialize_complex(s, expr):
    if len(expr) != 3:
        return s.serialize_function('Complex', expr[1:])
    re, im = expr[1], expr[2]
    imaginary = 'i' if im == 1 else ('-i' if im == -1 else s.serialize(im) + 'i')
    if re == 0:
        return imaginary
    if imaginary.startswith('-'):
        return s.serialize(re) + imaginary
    return s.serialize(re) + '+' + imaginary


def _serialize_log(s, expr):
    if len(expr) == 3:
        return '\\log_{' + s.serialize(expr[2]) + '}' + s.serialize_arguments(expr[1:2])
    return '\\log' + s.serialize_arguments(expr[1:])


def _serialize_big_op(command):
    def serialize(s, expr):
        fn = expr[1] if len(expr) > 1 else None
        body = fn[1] if isinstance(fn, list) and fn[:1] == ['Lambda'] and len(fn) > 1 else fn
        limits = expr[2] if len(expr) > 2 else None
        index = 'n'
        bounds = ''
        if isinstance(limits, list) and limits[:1] == ['Tuple']:
            if len(limits) > 1 and isinstance(limits[1], str) and limits[1] != 'Nothing':
                index = limits[1]
            if len(limits) > 2:
                bounds = '_{' + index + '=' + s.serialize(limits[2]) + '}'
            elif len(limits) > 1:
                bounds = '_{' + index + '}'
            if len(limits) > 3:
                bounds += '^{' + s.serialize(limits[3]) + '}'
        elif limits is not None:
            bounds = '_{' + s.serialize(limits) + '}'
        return command + bounds + s.wrap(replace_symbol(body, '_', index), 266)
    return serialize


def _delimited(open_, close):
    def serialize(s, expr):
        return open_ + (s.serialize(expr[1]) if len(expr) > 1 else '') + close
    return serialize


DEFINITIONS = [
    {'kind': 'infix', 'name': 'Add', 'trigger': '+', 'precedence': 275,
     'associativity': 'both', 'serialize': _serialize_add},
    {'kind': 'prefix', 'trigger': '+', 'precedence': 275, 'parse': _parse_unary_plus},
    {'kind': 'infix', 'name': 'Subtract', 'trigger': '-', 'precedence': 275,
     'associativity': 'left', 'serialize': _serialize_subtract},
    {'kind': 'prefix', 'name': 'Negate', 'trigger': '-', 'precedence': 275,
     'parse': _parse_negate, 'serialize': _serialize_negate},
    {'kind': 'infix', 'name': 'Multiply', 'trigger': '\\times', 'precedence': 390,
     'associativity': 'both', 'serialize': _serialize_multiply},
    {'kind': 'infix', 'name': 'Multiply', 'trigger': '\\cdot', 'precedence': 390,
     'associativity': 'both'},
    {'kind': 'infix', 'name': 'Multiply', 'trigger': '*', 'precedence': 390,
     'associativity': 'both'},
    {'kind': 'function', 'name': 'Divide', 'trigger': '\\frac', 'parse': _parse_frac,
     'serialize': _serialize_divide},
    {'kind': 'function', 'trigger': '\\dfrac', 'parse': _parse_frac},
    {'kind': 'function', 'trigger': '\\tfrac', 'parse': _parse_frac},
    {'kind': 'infix', 'name': 'Divide', 'trigger': '/', 'precedence': 660, 'associativity': 'left'},
    {'kind': 'infix', 'name': 'Divide', 'trigger': '\\/', 'precedence': 660, 'associativity': 'left'},
    {'kind': 'infix', 'name': 'Divide', 'trigger': '\\div', 'precedence': 660, 'associativity': 'left'},
    {'kind': 'infix', 'name': 'Divide', 'trigger': '\\over', 'precedence': 660, 'associativity': 'left'},
    {'kind': 'infix', 'name': 'Power', 'trigger': '^', 'precedence': 720,
     'associativity': 'right', 'parse': _parse_power, 'serialize': _serialize_power},
    {'kind': 'postfix', 'name': 'Factorial', 'trigger': '!', 'precedence': 810},
    {'kind': 'function', 'name': 'Square', 'serialize': lambda s, expr: s.wrap(expr[1], 721) + '^2'},
    {'kind': 'function', 'name': 'Sqrt', 'trigger': '\\sqrt', 'parse': _parse_sqrt,
     'serialize': lambda s, expr: _serialize_root(s, expr[1], 2)},
    {'kind': 'function', 'name': 'Root', 'serialize': lambda s, expr: _serialize_root(s, expr[1], expr[2])},
    {'kind': 'function', 'name': 'Exp', 'trigger': '\\exp', 'parse': function_parser('Exp'),
     'serialize': lambda s, expr: 'e^{' + s.serialize(expr[1]) + '}', 'implicit': True},
    {'kind': 'function', 'name': 'Ln', 'trigger': '\\ln', 'parse': _parse_log('Ln'), 'implicit': True},
    {'kind': 'function', 'name': 'Log', 'trigger': '\\log', 'parse': _parse_log('Log'),
     'serialize': _serialize_log, 'implicit': True},
    {'kind': 'function', 'name': 'Lg', 'trigger': '\\lg', 'parse': function_parser('Lg'), 'implicit': True},
    {'kind': 'function', 'name': 'Lb', 'trigger': '\\lb', 'parse': function_parser('Lb'), 'implicit': True},
    {'kind': 'matchfix', 'name': 'Abs', 'trigger': '\\left|', 'close': '\\right|', 'parse': _parse_abs},
    {'kind': 'matchfix', 'name': 'Abs', 'trigger': '|', 'close': '|', 'parse': _parse_abs,
     'serialize': _delimited('|', '|')},
    {'kind': 'matchfix', 'name': 'Floor', 'trigger': '\\lfloor', 'close': '\\rfloor',
     'serialize': _delimited('\\lfloor ', '\\rfloor')},
    {'kind': 'matchfix', 'name': 'Ceil', 'trigger': '\\lceil', 'close': '\\rceil',
     'serialize': _delimited('\\lceil ', '\\rceil')},
    {'kind': 'function', 'name': 'Max', 'trigger': '\\max'},
    {'kind': 'function', 'name': 'Min', 'trigger': '\\min'},
    {'kind': 'function', 'name': 'Sum', 'trigger': '\\sum', 'parse': _parse_big_op('Sum'),
     'serialize': _serialize_big_op('\\sum')},
    {'kind': 'function', 'name': 'Product', 'trigger': '\\prod', 'parse': _parse_big_op('Product'),
     'serialize': _serialize_big_op('\\prod')},
    {'kind': 'function', 'name': 'Rational', 'serialize': _serialize_rational},
    {'kind': 'function', 'name': 'Complex', 'serialize': _serialize_complex},
    {'name': 'Half', 'serialize': lambda s, expr: '\\frac{1}{2}'},
]
