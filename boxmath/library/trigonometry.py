"""
Trigonometry library.

Circular and hyperbolic functions, their inverses, the InverseFunction
head and the constants Pi and Degrees.

Exact evaluation and simplification of Sin, Cos, Tan, Cot, Sec and Csc
recognize the constructible angles: an angle is reduced to its quadrant
and to a residual in [0, pi/2], and the residual is looked up in a table
of rational multiples of pi with known radical values.
"""

import math
from fractions import Fraction

import mpmath

from .. import numeric
from .arithmetic import numeric_function

# Values at pi * n / d, keyed by (n, d), for a residual angle in [0, pi/2]
CONSTRUCTIBLE_VALUES = {
    (0, 1): {'Sin': '0', 'Cos': '1', 'Tan': '0', 'Sec': '1'},
    (1, 12): {
        'Sin': r'\frac{\sqrt{6}-\sqrt{2}}{4}', 'Cos': r'\frac{\sqrt{6}+\sqrt{2}}{4}',
        'Tan': r'2-\sqrt{3}', 'Cot': r'2+\sqrt{3}',
        'Sec': r'\sqrt{6}-\sqrt{2}', 'Csc': r'\sqrt{6}+\sqrt{2}',
    },
    (1, 10): {
        'Sin': r'\frac{\sqrt{5}-1}{4}', 'Cos': r'\frac{\sqrt{10+2\sqrt{5}}}{4}',
        'Tan': r'\frac{\sqrt{25-10\sqrt{5}}}{5}', 'Cot': r'\sqrt{5+2\sqrt{5}}',
        'Sec': r'\frac{\sqrt{50-10\sqrt{5}}}{5}', 'Csc': r'\sqrt{5}+1',
    },
    (1, 8): {
        'Sin': r'\frac{\sqrt{2-\sqrt{2}}}{2}', 'Cos': r'\frac{\sqrt{2+\sqrt{2}}}{2}',
        'Tan': r'\sqrt{2}-1', 'Cot': r'\sqrt{2}+1',
        'Sec': r'\sqrt{4-2\sqrt{2}}', 'Csc': r'\sqrt{4+2\sqrt{2}}',
    },
    (1, 6): {
        'Sin': r'\frac{1}{2}', 'Cos': r'\frac{\sqrt{3}}{2}',
        'Tan': r'\frac{\sqrt{3}}{3}', 'Cot': r'\sqrt{3}',
        'Sec': r'\frac{2\sqrt{3}}{3}', 'Csc': '2',
    },
    (1, 5): {
        'Sin': r'\frac{\sqrt{10-2\sqrt{5}}}{4}', 'Cos': r'\frac{1+\sqrt{5}}{4}',
        'Tan': r'\sqrt{5-2\sqrt{5}}', 'Cot': r'\frac{\sqrt{25+10\sqrt{5}}}{5}',
        'Sec': r'\sqrt{5}-1', 'Csc': r'\frac{\sqrt{50+10\sqrt{5}}}{5}',
    },
    (1, 4): {
        'Sin': r'\frac{\sqrt{2}}{2}', 'Cos': r'\frac{\sqrt{2}}{2}',
        'Tan': '1', 'Cot': '1', 'Sec': r'\sqrt{2}', 'Csc': r'\sqrt{2}',
    },
    (3, 10): {
        'Sin': r'\frac{1+\sqrt{5}}{4}', 'Cos': r'\frac{\sqrt{10-2\sqrt{5}}}{4}',
        'Tan': r'\frac{\sqrt{25+10\sqrt{5}}}{5}', 'Cot': r'\sqrt{5-2\sqrt{5}}',
        'Sec': r'\frac{\sqrt{50+10\sqrt{5}}}{5}', 'Csc': r'\sqrt{5}-1',
    },
    (1, 3): {
        'Sin': r'\frac{\sqrt{3}}{2}', 'Cos': r'\frac{1}{2}',
        'Tan': r'\sqrt{3}', 'Cot': r'\frac{\sqrt{3}}{3}',
        'Sec': '2', 'Csc': r'\frac{2\sqrt{3}}{3}',
    },
    (3, 8): {
        'Sin': r'\frac{\sqrt{2+\sqrt{2}}}{2}', 'Cos': r'\frac{\sqrt{2-\sqrt{2}}}{2}',
        'Tan': r'\sqrt{2}+1', 'Cot': r'\sqrt{2}-1',
        'Sec': r'\sqrt{4+2\sqrt{2}}', 'Csc': r'\sqrt{4-2\sqrt{2}}',
    },
    (2, 5): {
        'Sin': r'\frac{\sqrt{10+2\sqrt{5}}}{4}', 'Cos': r'\frac{\sqrt{5}-1}{4}',
        'Tan': r'\sqrt{5+2\sqrt{5}}', 'Cot': r'\frac{\sqrt{25-10\sqrt{5}}}{5}',
        'Sec': r'\sqrt{5}+1', 'Csc': r'\frac{\sqrt{50-10\sqrt{5}}}{5}',
    },
    (5, 12): {
        'Sin': r'\frac{\sqrt{6}+\sqrt{2}}{4}', 'Cos': r'\frac{\sqrt{6}-\sqrt{2}}{4}',
        'Tan': r'2+\sqrt{3}', 'Cot': r'2-\sqrt{3}',
        'Sec': r'\sqrt{6}+\sqrt{2}', 'Csc': r'\sqrt{6}-\sqrt{2}',
    },
    (1, 2): {'Sin': '1', 'Cos': '0', 'Cot': '0', 'Csc': '1'},
}

# f(q * pi/2 + phi) = sign * g(phi), indexed by quadrant q
QUADRANT_IDENTITIES = {
    'Sin': [(1, 'Sin'), (1, 'Cos'), (-1, 'Sin'), (-1, 'Cos')],
    'Cos': [(1, 'Cos'), (-1, 'Sin'), (-1, 'Cos'), (1, 'Sin')],
    'Tan': [(1, 'Tan'), (-1, 'Cot'), (1, 'Tan'), (-1, 'Cot')],
    'Cot': [(1, 'Cot'), (-1, 'Tan'), (1, 'Cot'), (-1, 'Tan')],
    'Sec': [(1, 'Sec'), (-1, 'Csc'), (-1, 'Sec'), (1, 'Csc')],
    'Csc': [(1, 'Csc'), (1, 'Sec'), (-1, 'Csc'), (-1, 'Sec')],
}

INVERSE_FUNCTIONS = {
    'Sin': 'Arcsin', 'Cos': 'Arccos', 'Tan': 'Arctan',
    'Arcsin': 'Sin', 'Arccos': 'Cos', 'Arctan': 'Tan',
    'Sinh': 'Arsinh', 'Cosh': 'Arcosh', 'Tanh': 'Artanh',
    'Arsinh': 'Sinh', 'Arcosh': 'Cosh', 'Artanh': 'Tanh',
    'Exp': 'Ln', 'Ln': 'Exp',
}


def _has_inexact(expr) -> bool:
    if expr.is_number_literal:
        return not expr.is_exact
    if expr.ops is None:
        return False
    return any(_has_inexact(op) for op in expr.ops)


def constructible_values(ce):
    """The table of constructible values, boxed once per engine."""
    def build():
        return {
            key: {head: ce.parse(latex, canonical=True) for head, latex in values.items()}
            for key, values in CONSTRUCTIBLE_VALUES.items()
        }
    return ce.cache('constructible-values', build)


def constructible_value(ce, head: str, x):
    """Exact value of head(x) when x is a constructible angle, None otherwise."""
    if head not in QUADRANT_IDENTITIES or _has_inexact(x) or not x.is_pure:
        return None
    theta = x.N()
    if not theta.is_number_literal:
        return None
    theta = numeric.to_float(theta.value)
    if theta is None or not math.isfinite(theta):
        return None

    theta = math.fmod(theta, 2 * math.pi)
    if theta < 0:
        theta += 2 * math.pi
    quadrant = min(3, int(theta // (math.pi / 2)))
    residual = theta - quadrant * math.pi / 2
    sign, reduced = QUADRANT_IDENTITIES[head][quadrant]

    table = constructible_values(ce)
    for (n, d), values in table.items():
        if numeric.is_zero(ce.chop(residual - math.pi * n / d)):
            value = values.get(reduced)
            if value is None:
                return None
            return value if sign > 0 else ce.negate(value)
    return None


def _constructible(head: str):
    def handler(ce, ops):
        return constructible_value(ce, head, ops[0])
    return handler


def _chopped(handler):
    def wrapper(ce, ops):
        result = handler(ce, ops)
        if result is None or not result.is_number_literal:
            return result
        return ce.number(ce.chop(result.value))
    return wrapper


def _reciprocal(name: str):
    """N handler of 1 / name(x)."""
    def handler(ce, ops):
        if not ops[0].is_number_literal:
            return None
        value = numeric.apply_function(name, ops[0].value, ce.prefers_bignum)
        return ce.number(numeric.div(Fraction(1), value))
    return handler


def _n_arctan2(ce, ops):
    if not ops[0].is_number_literal or not ops[1].is_number_literal:
        return None
    y, x = ops[0].value, ops[1].value
    if ce.prefers_bignum:
        return ce.number(mpmath.atan2(numeric.to_bignum(y), numeric.to_bignum(x)))
    fy, fx = numeric.to_float(y), numeric.to_float(x)
    if fy is None or fx is None:
        return None
    return ce.number(math.atan2(fy, fx))


def _evaluate_inverse_function(ce, ops):
    name = ops[0].symbol
    inverse = INVERSE_FUNCTIONS.get(name) if name else None
    if inverse is None:
        return None
    return ce.symbol(inverse)


def _circular(complexity: int, name: str, numeric_name: str = None, N=None, wikidata=None):
    entry = {
        'complexity': complexity, 'numeric': True,
        'signature': {
            'domain': ['Function', 'Number', 'Number'],
            'N': _chopped(N or numeric_function(numeric_name)),
        },
    }
    if wikidata:
        entry['wikidata'] = wikidata
    if name in QUADRANT_IDENTITIES:
        entry['signature']['simplify'] = _constructible(name)
        entry['signature']['evaluate'] = _constructible(name)
    return entry


LIBRARY = {
    'symbols': {
        'Pi': {
            'domain': 'TranscendentalNumber', 'constant': True, 'hold': True,
            'wikidata': 'Q167', 'is_positive': True,
            'value': lambda ce: numeric.pi(ce.prefers_bignum),
        },
        'Degrees': {
            'domain': 'RealNumber', 'constant': True, 'is_positive': True,
            'value': ['Divide', 'Pi', 180],
        },
    },
    'functions': {
        'Sin': _circular(5000, 'Sin', 'sin', wikidata='Q162435'),
        'Cos': _circular(5050, 'Cos', 'cos', wikidata='Q152415'),
        'Tan': _circular(5100, 'Tan', 'tan', wikidata='Q192413'),
        'Cot': _circular(5600, 'Cot', 'cot'),
        'Sec': _circular(5500, 'Sec', 'sec'),
        'Csc': _circular(5600, 'Csc', 'csc'),
        'Arcsin': _circular(5500, 'Arcsin', 'asin'),
        'Arccos': _circular(5550, 'Arccos', 'acos'),
        'Arctan': _circular(5200, 'Arctan', 'atan'),
        'Arctan2': {
            'complexity': 5200, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number', 'Number'],
                'N': _chopped(_n_arctan2),
            },
        },
        'Sinh': _circular(6000, 'Sinh', 'sinh'),
        'Cosh': _circular(6050, 'Cosh', 'cosh'),
        'Tanh': _circular(6200, 'Tanh', 'tanh'),
        'Coth': _circular(6300, 'Coth', N=_reciprocal('tanh')),
        'Sech': _circular(6200, 'Sech', N=_reciprocal('cosh')),
        'Csch': _circular(6200, 'Csch', N=_reciprocal('sinh')),
        'Arsinh': _circular(6100, 'Arsinh', 'asinh'),
        'Arcosh': _circular(6200, 'Arcosh', 'acosh'),
        'Artanh': _circular(6300, 'Artanh', 'atanh'),
        'Hypot': {
            'complexity': 5200, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number', 'NonNegativeNumber'],
                'evaluate': ['Sqrt', ['Add', ['Square', '_1'], ['Square', '_2']]],
            },
        },
        'Haversine': {
            'complexity': 5200, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number'],
                'evaluate': ['Divide', ['Subtract', 1, ['Cos', '_1']], 2],
            },
        },
        'InverseHaversine': {
            'complexity': 5200, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number'],
                'evaluate': ['Multiply', 2, ['Arcsin', ['Sqrt', '_1']]],
            },
        },
        'InverseFunction': {
            'complexity': 1000,
            'signature': {
                'domain': ['Function', 'Function', 'Function'],
                'evaluate': _evaluate_inverse_function,
            },
        },
    },
}
