"""
LaTeX definitions for structural heads, relations, logic, collections,
Greek letters, number sets and environments.
"""

from .parser import quote

GREEK_LETTERS = [
    'alpha', 'beta', 'gamma', 'delta', 'epsilon', 'varepsilon', 'zeta', 'eta',
    'theta', 'vartheta', 'iota', 'kappa', 'lambda', 'mu', 'nu', 'xi', 'rho',
    'varrho', 'sigma', 'varsigma', 'tau', 'upsilon', 'phi', 'varphi', 'chi',
    'psi', 'omega', 'Gamma', 'Delta', 'Theta', 'Lambda', 'Xi', 'Sigma',
    'Upsilon', 'Phi', 'Psi', 'Omega',
]

# name -> (compact trigger, blackboard letter)
NUMBER_SETS = {
    'RealNumber': ('\\R', 'R'),
    'Integer': ('\\Z', 'Z'),
    'RationalNumber': ('\\Q', 'Q'),
    'ComplexNumber': ('\\C', 'C'),
    'NonNegativeInteger': ('\\N', 'N'),
}


def _serialize_sequence(s, expr):
    return ', '.join(s.serialize(x) for x in expr[1:])


def _serialize_tuple(s, expr):
    return '(' + ', '.join(s.serialize(x) for x in expr[1:]) + ')'


def _serialize_list(s, expr):
    return '\\lbrack ' + ', '.join(s.serialize(x) for x in expr[1:]) + '\\rbrack'


def _serialize_delimiter(s, expr):
    if len(expr) == 1:
        return '()'
    return '(' + s.serialize(expr[1]) + ')'


def _serialize_error(s, expr):
    code = expr[1] if len(expr) > 1 else None
    if code == quote('missing'):
        return s.options['missing_symbol']
    for op in expr[2:]:
        if isinstance(op, list) and op and op[0] == 'Latex':
            return '\\texttt{' + s.serialize(op) + '}'
    return s.serialize_function('Error', expr[1:])


def _serialize_latex(s, expr):
    return ''.join(x[1:-1] if isinstance(x, str) and x.startswith("'") else s.serialize(x)
                   for x in expr[1:])


def _serialize_subscript(s, expr):
    return s.wrap(expr[1], 1000) + '_{' + s.serialize(expr[2]) + '}'


def _parse_text(parser, until):
    text = parser.parse_raw_group()
    if text is None:
        return None
    return quote(text)


def _parse_mathbb(parser, until):
    letter = parser.parse_raw_group()
    for name, (_, blackboard) in NUMBER_SETS.items():
        if blackboard == letter:
            return name
    return None


def _number_set(name, trigger):
    def serialize(s, expr):
        if s.style('numeric_set_style', expr) == 'compact':
            return trigger
        return '\\mathbb{' + NUMBER_SETS[name][1] + '}'
    return {'kind': 'symbol', 'name': name, 'trigger': trigger, 'serialize': serialize}


def _parse_cases(parser, rows):
    pairs = []
    for row in rows:
        value = row[0] if row and row[0] is not None else parser.error('missing')
        condition = row[1] if len(row) > 1 else None
        if condition is None or (isinstance(condition, str) and condition.startswith("'")):
            condition = 'True'
        pairs.append(['Pair', condition, value])
    return ['Piecewise', ['List'] + pairs]


def _serialize_piecewise(s, expr):
    branches = expr[1] if len(expr) > 1 else ['List']
    if not (isinstance(branches, list) and branches and branches[0] == 'List'):
        return s.serialize_function('Piecewise', expr[1:])
    rows = []
    for branch in branches[1:]:
        if isinstance(branch, list) and len(branch) == 3 and branch[0] == 'Pair':
            condition, value = branch[1], branch[2]
            cond = '\\text{otherwise}' if condition == 'True' else s.serialize(condition)
            rows.append(s.serialize(value) + ' & ' + cond)
        else:
            rows.append(s.serialize(branch))
    return '\\begin{cases}' + '\\\\'.join(rows) + '\\end{cases}'


def _parse_matrix(parser, rows):
    return ['Matrix', ['List'] + [
        ['List'] + [cell if cell is not None else 'Nothing' for cell in row]
        for row in rows
    ]]


def _serialize_matrix(s, expr):
    rows = expr[1] if len(expr) > 1 else ['List']
    if not (isinstance(rows, list) and rows and rows[0] == 'List'):
        return s.serialize_function('Matrix', expr[1:])
    lines = []
    for row in rows[1:]:
        cells = row[1:] if isinstance(row, list) and row and row[0] == 'List' else [row]
        lines.append(' & '.join(s.serialize(cell) for cell in cells))
    return '\\begin{pmatrix}' + '\\\\'.join(lines) + '\\end{pmatrix}'


def _serialize_partial(s, expr):
    fn = expr[1] if len(expr) > 1 else None
    variables = expr[2] if len(expr) > 2 else []
    order = expr[3] if len(expr) > 3 else 1
    if isinstance(variables, list) and variables and variables[0] == 'List':
        variables = variables[1:]
    elif not isinstance(variables, list):
        variables = [variables]
    numerator = '\\partial' if order == 1 else '\\partial^{' + s.serialize(order) + '}'
    denominator = ''.join('\\partial ' + s.serialize(v) for v in variables)
    return '\\frac{' + numerator + '}{' + denominator + '}' + s.wrap(fn, 390)


DEFINITIONS = [
    # Structure
    {'kind': 'infix', 'name': 'Sequence', 'trigger': ',', 'precedence': 20,
     'associativity': 'both', 'serialize': _serialize_sequence},
    {'kind': 'matchfix', 'name': 'Delimiter', 'trigger': '\\left(', 'close': '\\right)'},
    {'kind': 'matchfix', 'name': 'Delimiter', 'trigger': '(', 'close': ')',
     'serialize': _serialize_delimiter},
    {'kind': 'matchfix', 'name': 'List', 'trigger': '\\lbrack', 'close': '\\rbrack',
     'parse': lambda parser, body: ['List'] if body is None else (
         ['List'] + body[1:] if isinstance(body, list) and body[:1] == ['Sequence'] else ['List', body]),
     'serialize': _serialize_list},
    {'kind': 'matchfix', 'name': 'Norm', 'trigger': '\\|', 'close': '\\|',
     'serialize': lambda s, expr: '\\|' + s.serialize(expr[1]) + '\\|'},
    {'kind': 'function', 'name': 'Tuple', 'serialize': _serialize_tuple},
    {'kind': 'function', 'name': 'Pair', 'serialize': _serialize_tuple},
    {'kind': 'function', 'name': 'Error', 'serialize': _serialize_error},
    {'kind': 'function', 'name': 'Latex', 'serialize': _serialize_latex},
    {'kind': 'function', 'name': 'Hold', 'serialize': lambda s, expr: s.serialize(expr[1])},
    {'kind': 'function', 'name': 'Subscript', 'serialize': _serialize_subscript},
    {'kind': 'function', 'trigger': '\\text', 'parse': _parse_text},
    {'kind': 'function', 'trigger': '\\mathbb', 'parse': _parse_mathbb},

    # Relations
    {'kind': 'infix', 'name': 'Equal', 'trigger': '=', 'precedence': 260},
    {'kind': 'infix', 'name': 'NotEqual', 'trigger': '\\ne', 'precedence': 245},
    {'kind': 'infix', 'name': 'NotEqual', 'trigger': '\\neq', 'precedence': 245},
    {'kind': 'infix', 'name': 'Less', 'trigger': '<', 'precedence': 245},
    {'kind': 'infix', 'name': 'Less', 'trigger': '\\lt', 'precedence': 245},
    {'kind': 'infix', 'name': 'LessEqual', 'trigger': '\\le', 'precedence': 245},
    {'kind': 'infix', 'name': 'LessEqual', 'trigger': '\\leq', 'precedence': 245},
    {'kind': 'infix', 'name': 'Greater', 'trigger': '>', 'precedence': 245},
    {'kind': 'infix', 'name': 'Greater', 'trigger': '\\gt', 'precedence': 245},
    {'kind': 'infix', 'name': 'GreaterEqual', 'trigger': '\\ge', 'precedence': 245},
    {'kind': 'infix', 'name': 'GreaterEqual', 'trigger': '\\geq', 'precedence': 245},
    {'kind': 'infix', 'name': 'Element', 'trigger': '\\in', 'precedence': 240},

    # Logic
    {'kind': 'infix', 'name': 'And', 'trigger': '\\land', 'precedence': 317, 'associativity': 'both'},
    {'kind': 'infix', 'name': 'And', 'trigger': '\\wedge', 'precedence': 317, 'associativity': 'both'},
    {'kind': 'infix', 'name': 'Or', 'trigger': '\\lor', 'precedence': 310, 'associativity': 'both'},
    {'kind': 'infix', 'name': 'Or', 'trigger': '\\vee', 'precedence': 310, 'associativity': 'both'},
    {'kind': 'prefix', 'name': 'Not', 'trigger': '\\lnot', 'precedence': 880},
    {'kind': 'prefix', 'name': 'Not', 'trigger': '\\neg', 'precedence': 880},

    # Plus or minus
    {'kind': 'infix', 'name': 'PlusMinus', 'trigger': '\\pm', 'precedence': 270,
     'associativity': 'both'},
    {'kind': 'prefix', 'name': 'PlusMinus', 'trigger': '\\pm', 'precedence': 270,
     'operand_precedence': 400},
    {'kind': 'infix', 'name': 'MinusPlus', 'trigger': '\\mp', 'precedence': 270,
     'associativity': 'both'},
    {'kind': 'prefix', 'name': 'MinusPlus', 'trigger': '\\mp', 'precedence': 270,
     'operand_precedence': 400},

    # Constants
    {'kind': 'symbol', 'name': 'PositiveInfinity', 'trigger': '\\infty'},
    {'name': 'NegativeInfinity', 'serialize': lambda s, expr: '-\\infty'},
    {'name': 'NaN', 'serialize': lambda s, expr: '\\operatorname{NaN}'},
    {'name': 'ExponentialE', 'serialize': lambda s, expr: 'e'},
    {'name': 'ImaginaryUnit', 'serialize': lambda s, expr: 'i'},

    # Collections and notation
    {'kind': 'environment', 'name': 'Piecewise', 'trigger': 'cases', 'parse': _parse_cases,
     'serialize': _serialize_piecewise},
    {'kind': 'environment', 'name': 'Piecewise', 'trigger': 'dcases', 'parse': _parse_cases},
    {'kind': 'environment', 'name': 'Matrix', 'trigger': 'pmatrix', 'parse': _parse_matrix,
     'serialize': _serialize_matrix},
    {'kind': 'environment', 'name': 'Matrix', 'trigger': 'matrix', 'parse': _parse_matrix},
    {'kind': 'environment', 'name': 'Matrix', 'trigger': 'bmatrix', 'parse': _parse_matrix},
    {'kind': 'function', 'name': 'PartialDerivative', 'serialize': _serialize_partial},
]

DEFINITIONS += [
    {'kind': 'symbol', 'name': letter, 'trigger': '\\' + letter} for letter in GREEK_LETTERS
]

DEFINITIONS += [_number_set(name, trigger) for name, (trigger, _) in NUMBER_SETS.items()]
