"""
Standard simplification rules.

These run after the simplify handlers of the definitions, which already
fold exact numbers, combine like terms and collect powers. The rules cover
identities that involve more than one head.
"""


def _not_zero(bindings, ce) -> bool:
    return not bindings['_x'].is_zero


def _is_real(bindings, ce) -> bool:
    return bindings['_x'].is_real is not False


STANDARD_RULES = [
    {
        'name': 'sqrt-of-square',
        'description': 'sqrt(x^2) = |x|',
        'lhs': ['Sqrt', ['Square', '_x']],
        'rhs': ['Abs', '_x'],
    },
    {
        'name': 'divide-self',
        'description': 'x / x = 1',
        'lhs': ['Divide', '_x', '_x'],
        'rhs': 1,
        'condition': _not_zero,
    },
    {
        'name': 'multiply-reciprocal',
        'description': 'x * 1/x = 1',
        'lhs': ['Multiply', '_x', ['Divide', 1, '_x']],
        'rhs': 1,
        'condition': _not_zero,
    },
    {
        'name': 'exp-of-ln',
        'lhs': ['Exp', ['Ln', '_x']],
        'rhs': '_x',
    },
    {
        'name': 'ln-of-exp',
        'lhs': ['Ln', ['Exp', '_x']],
        'rhs': '_x',
        'condition': _is_real,
    },
    {
        'name': 'subtract-self',
        'description': 'x - x = 0',
        'lhs': ['Subtract', '_x', '_x'],
        'rhs': 0,
    },
    {
        'name': 'pythagorean-identity',
        'description': 'sin^2 x + cos^2 x = 1',
        'lhs': ['Add', '___a', ['Square', ['Sin', '_x']], ['Square', ['Cos', '_x']], '___b'],
        'rhs': ['Add', 1, '___a', '___b'],
        'tags': ['trigonometry'],
    },
    {
        'name': 'pythagorean-identity-reversed',
        'description': 'cos^2 x + sin^2 x = 1',
        'lhs': ['Add', '___a', ['Square', ['Cos', '_x']], ['Square', ['Sin', '_x']], '___b'],
        'rhs': ['Add', 1, '___a', '___b'],
        'tags': ['trigonometry'],
    },
]
