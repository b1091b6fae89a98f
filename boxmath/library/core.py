"""
Core library: structural heads, collections, logic and relations.
"""

import math

from .. import numeric
from ..domains import DOMAIN_PARENTS

ANY_ARGS = ['Function', ['Sequence', 'Anything'], 'Anything']
RELATION = ['Function', 'Anything', 'Anything', 'Boolean']


def _boolean(ce, value):
    if value is None:
        return None
    return ce.symbol('True' if value else 'False')


def _canonical_sequence(ce, ops):
    if len(ops) == 1:
        return ops[0]
    return ce._fn('Sequence', ops)


def _canonical_delimiter(ce, ops):
    if not ops:
        return ce.symbol('Nothing')
    if len(ops) == 1:
        return ops[0]
    return ce._fn('Tuple', ops)


# ============================================================
# Relations
# ============================================================

def _difference_sign(ce, lhs, rhs):
    """Sign of lhs - rhs after numeric evaluation, 'complex' or None."""
    diff = ce.add([lhs, ce.negate(rhs)]).N()
    if not diff.is_number_literal:
        return None
    value = ce.chop(diff.value)
    s = numeric.sign(value)
    if s is None:
        return None if numeric.is_nan(value) else 'complex'
    return s


def _evaluate_equal(ce, ops):
    lhs, rhs = ops
    if lhs.is_same(rhs):
        return ce.symbol('True')
    s = _difference_sign(ce, lhs, rhs)
    if s is None:
        return None
    return _boolean(ce, s == 0)


def _evaluate_not_equal(ce, ops):
    result = _evaluate_equal(ce, ops)
    if result is None:
        return None
    return _boolean(ce, result.symbol == 'False')


def _relation(test):
    def handler(ce, ops):
        s = _difference_sign(ce, ops[0], ops[1])
        if s is None or s == 'complex':
            return None
        return _boolean(ce, test(s))
    return handler


def _evaluate_element(ce, ops):
    x, dom = ops
    name = dom.symbol
    if name not in DOMAIN_PARENTS:
        return None
    return _boolean(ce, x._domain_test(name))


# ============================================================
# Logic
# ============================================================

def _evaluate_and(ce, ops):
    rest = []
    for op in ops:
        if op.symbol == 'False':
            return op
        if op.symbol != 'True':
            rest.append(op)
    if not rest:
        return ce.symbol('True')
    return None


def _evaluate_or(ce, ops):
    rest = []
    for op in ops:
        if op.symbol == 'True':
            return op
        if op.symbol != 'False':
            rest.append(op)
    if not rest:
        return ce.symbol('False')
    return None


def _evaluate_not(ce, ops):
    name = ops[0].symbol
    if name == 'True':
        return ce.symbol('False')
    if name == 'False':
        return ce.symbol('True')
    return None


def _evaluate_piecewise(ce, ops):
    """Value of the first branch whose condition evaluates to True."""
    branches = ops[0]
    if branches.head != 'List':
        return None
    for branch in branches.ops:
        if branch.head != 'Pair':
            return None
        condition = branch.op1.evaluate()
        if condition.symbol == 'True':
            return branch.op2.evaluate()
        if condition.symbol != 'False':
            return None
    return ce.symbol('Nothing')


def _n_norm(ce, ops):
    if len(ops) == 1 and ops[0].is_number_literal:
        return ce.number(abs(ops[0].value))
    return None


LIBRARY = {
    'symbols': {
        'True': {'domain': 'Boolean', 'constant': True},
        'False': {'domain': 'Boolean', 'constant': True},
        'Nothing': {'domain': 'Nothing', 'constant': True},
        'ExponentialE': {
            'domain': 'TranscendentalNumber', 'constant': True, 'hold': True,
            'wikidata': 'Q82435', 'is_positive': True,
            'value': lambda ce: numeric.e(ce.prefers_bignum),
        },
        'ImaginaryUnit': {
            'domain': 'ImaginaryNumber', 'constant': True, 'hold': True,
            'wikidata': 'Q193796', 'is_real': False, 'is_not_zero': True,
            'value': lambda ce: numeric.to_complex(1j, ce.prefers_bignum),
        },
        'PositiveInfinity': {
            'domain': 'ExtendedRealNumber', 'constant': True, 'value': math.inf,
            'is_positive': True,
        },
        'NegativeInfinity': {
            'domain': 'ExtendedRealNumber', 'constant': True, 'value': -math.inf,
            'is_negative': True,
        },
        'NaN': {'domain': 'Number', 'constant': True, 'value': math.nan, 'is_real': False},
    },
    'functions': {
        'Error': {'complexity': 500, 'hold': 'all', 'pure': False},
        'ErrorCode': {'complexity': 500, 'hold': 'all', 'pure': False},
        'Latex': {
            'complexity': 500, 'hold': 'all',
            'signature': {'domain': ['Function', ['Sequence', 'Anything'], 'String']},
        },
        'Hold': {'complexity': 500, 'hold': 'all'},
        'Sequence': {
            'complexity': 500, 'associative': True,
            'signature': {'domain': ANY_ARGS, 'canonical': _canonical_sequence},
        },
        'Delimiter': {
            'complexity': 500,
            'signature': {'domain': ANY_ARGS, 'canonical': _canonical_delimiter},
        },
        'Tuple': {
            'complexity': 8000,
            'signature': {'domain': ['Function', ['Sequence', 'Anything'], 'Tuple']},
        },
        'Pair': {
            'complexity': 8000,
            'signature': {'domain': ['Function', 'Anything', 'Anything', 'Tuple']},
        },
        'List': {
            'complexity': 8200,
            'signature': {'domain': ['Function', ['Sequence', 'Anything'], 'List']},
        },
        'Matrix': {
            'complexity': 9000, 'hold': 'all',
            'signature': {'domain': ['Function', 'Anything', 'List']},
        },
        'Lambda': {'complexity': 9000, 'hold': 'all'},
        'Piecewise': {
            'complexity': 9000, 'hold': 'all',
            'signature': {
                'domain': ['Function', 'Anything', 'Anything'],
                'evaluate': _evaluate_piecewise,
            },
        },
        'PartialDerivative': {'complexity': 9000, 'hold': 'all'},
        'Subscript': {'complexity': 9000},
        'PlusMinus': {'complexity': 1300},
        'MinusPlus': {'complexity': 1300},
        'Norm': {
            'complexity': 1200,
            'signature': {'domain': ANY_ARGS, 'N': _n_norm},
        },
        'Element': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _evaluate_element},
        },
        'Equal': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _evaluate_equal},
        },
        'NotEqual': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _evaluate_not_equal},
        },
        'Less': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _relation(lambda s: s < 0)},
        },
        'LessEqual': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _relation(lambda s: s <= 0)},
        },
        'Greater': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _relation(lambda s: s > 0)},
        },
        'GreaterEqual': {
            'complexity': 11000,
            'signature': {'domain': RELATION, 'evaluate': _relation(lambda s: s >= 0)},
        },
        'And': {
            'complexity': 10000, 'associative': True, 'commutative': True, 'idempotent': True,
            'signature': {
                'domain': ['Function', ['Sequence', 'Anything'], 'Boolean'],
                'evaluate': _evaluate_and,
            },
        },
        'Or': {
            'complexity': 10000, 'associative': True, 'commutative': True, 'idempotent': True,
            'signature': {
                'domain': ['Function', ['Sequence', 'Anything'], 'Boolean'],
                'evaluate': _evaluate_or,
            },
        },
        'Not': {
            'complexity': 10100, 'involution': True,
            'signature': {
                'domain': ['Function', 'Anything', 'Boolean'],
                'evaluate': _evaluate_not,
            },
        },
    },
}
