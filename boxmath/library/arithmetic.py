"""
Arithmetic library.

Canonical constructors for the arithmetic heads (also used by the engine
helpers ce.add(), ce.mul(), ...), and the simplify, evaluate, N and sgn
handlers of Add, Subtract, Negate, Multiply, Divide, Power, Square, Sqrt,
Root, Exp, logarithms, Abs, rounding, Factorial, Max/Min and the Sum and
Product big operators.

Canonical constructors and simplify/evaluate handlers only use exact
(Fraction) arithmetic. Floating point, bignum and complex arithmetic
happen in the N handlers.
"""

from fractions import Fraction
from functools import reduce
from typing import Any, Callable, List, Optional, Tuple
import math

from .. import numeric
from ..canonical import flatten_ops
from ..expression import NotReal
from ..function import apply_lambda
from ..order import sort_ops

# Exact powers whose result would exceed this many bits are left symbolic
MAX_EXACT_POWER_BITS = 4096


def exact_value(expr) -> Optional[Fraction]:
    """The Fraction value of an exact number literal, None otherwise."""
    if expr.is_number_literal and expr.is_exact:
        return expr.value
    return None


def _is_exact_zero(expr) -> bool:
    return exact_value(expr) == 0


# ============================================================
# Canonical constructors
# ============================================================

def canonical_add(ce, ops: List) -> Any:
    ops = [op for op in flatten_ops(list(ops), 'Add') if not _is_exact_zero(op)]
    if not ops:
        return ce.number(0)
    if len(ops) == 1:
        return ops[0]
    return ce._fn('Add', ops)


def canonical_negate(ce, x) -> Any:
    if x.is_number_literal:
        return ce.number(numeric.neg(x.value))
    if x.head == 'Negate':
        return x.op1
    if x.head == 'Multiply':
        c = exact_value(x.op1)
        if c is not None:
            return canonical_multiply(ce, [ce.number(-c)] + list(x.ops[1:]))
    return ce._fn('Negate', [x])


def canonical_multiply(ce, ops: List) -> Any:
    """
    Fold exact factors into a leading coefficient and sort the others.

    Negate operands contribute their sign to the coefficient, so that
    x(-y) becomes -(xy) and (-2)(-x) becomes 2x.
    """
    coefficient = Fraction(1)
    factors = []
    pending = list(reversed(ops))
    while pending:
        op = pending.pop()
        if op.head == 'Negate':
            coefficient = -coefficient
            pending.append(op.op1)
            continue
        if op.head in ('Multiply', 'Sequence') and op.ops is not None:
            pending.extend(reversed(op.ops))
            continue
        if op.symbol == 'Nothing':
            continue
        c = exact_value(op)
        if c is not None:
            coefficient *= c
            continue
        factors.append(op)

    if coefficient == 0:
        return ce.number(0)
    if not factors:
        return ce.number(coefficient)
    factors = sort_ops(factors)
    product = factors[0] if len(factors) == 1 else ce._fn('Multiply', factors)
    if coefficient == 1:
        return product
    if coefficient == -1:
        return ce._fn('Negate', [product])
    return ce._fn('Multiply', [ce.number(coefficient)] + factors)


def canonical_subtract(ce, a, b) -> Any:
    if _is_exact_zero(b):
        return a
    if _is_exact_zero(a):
        return canonical_negate(ce, b)
    return ce._fn('Subtract', [a, b])


def canonical_divide(ce, num, den) -> Any:
    n, d = exact_value(num), exact_value(den)
    if d == 1:
        return num
    if n is not None and d is not None:
        if d == 0:
            return ce._fn('Divide', [num, den])
        return ce.number(n / d)
    if num.head == 'Negate' and den.head == 'Negate':
        return canonical_divide(ce, num.op1, den.op1)
    if n == 0:
        return ce.number(0)
    if d is not None and d != 0:
        return canonical_multiply(ce, [ce.number(1 / d), num])
    if den.head == 'Divide':
        return canonical_multiply(ce, [num, canonical_divide(ce, den.op2, den.op1)])
    return ce._fn('Divide', [num, den])


def canonical_square(ce, x) -> Any:
    v = exact_value(x)
    if v is not None:
        return ce.number(v * v)
    if x.head == 'Negate':
        return canonical_square(ce, x.op1)
    if x.head == 'Sqrt':
        return x.op1
    return ce._fn('Square', [x])


def canonical_sqrt(ce, x) -> Any:
    """Sqrt with the perfect square factors of exact operands taken out."""
    v = exact_value(x)
    if v == 0:
        return ce.number(0)
    if v is not None and v > 0:
        num_out, num_in = numeric.factor_perfect_square(v.numerator)
        den_out, den_in = numeric.factor_perfect_square(v.denominator)
        if num_in == 1 and den_in == 1:
            return ce.number(Fraction(num_out, den_out))
        if v.denominator == 1 and num_out != 1:
            return canonical_multiply(ce, [ce.number(num_out), ce._fn('Sqrt', [ce.number(num_in)])])
    if x.head == 'Square' and x.op1.is_nonnegative:
        return x.op1
    return ce._fn('Sqrt', [x])


def canonical_root(ce, x, n) -> Any:
    k = exact_value(n)
    if k is not None and k.denominator == 1:
        if k == 1:
            return x
        if k == 2:
            return canonical_sqrt(ce, x)
        v = exact_value(x)
        if v is not None and v >= 0 and k > 0:
            num = numeric.exact_root(v.numerator, int(k))
            den = numeric.exact_root(v.denominator, int(k))
            if num is not None and den is not None:
                return ce.number(Fraction(num, den))
    return ce._fn('Root', [x, n])


def _exact_power_fits(b: Fraction, e: int) -> bool:
    bits = max(b.numerator.bit_length(), b.denominator.bit_length())
    return bits * abs(e) <= MAX_EXACT_POWER_BITS


def canonical_power(ce, base, exponent) -> Any:
    e = exact_value(exponent)
    b = exact_value(base)
    if e is not None:
        if e == 0:
            return ce.number(1)
        if e == 1:
            return base
        if b is not None and e.denominator == 1:
            if not (b == 0 and e < 0) and _exact_power_fits(b, e.numerator):
                return ce.number(b ** e.numerator)
        if e == 2:
            return canonical_square(ce, base)
        if e == Fraction(1, 2):
            return canonical_sqrt(ce, base)
        if e.numerator == 1 and e.denominator > 2:
            return canonical_root(ce, base, ce.number(e.denominator))
        if base.head == 'Power' and e.denominator == 1:
            inner = exact_value(base.op2)
            if inner is not None and inner.denominator == 1:
                return canonical_power(ce, base.op1, ce.number(inner * e))
        if base.head == 'Square' and e.denominator == 1:
            return canonical_power(ce, base.op1, ce.number(2 * e))
    if b == 1:
        return ce.number(1)
    if base.symbol == 'ExponentialE':
        return ce.fn('Exp', [exponent])
    return ce._fn('Power', [base, exponent])


def _canonical_exp(ce, ops):
    if _is_exact_zero(ops[0]):
        return ce.number(1)
    return ce._fn('Exp', ops)


def _canonical_ln(ce, ops):
    if exact_value(ops[0]) == 1:
        return ce.number(0)
    if ops[0].symbol == 'ExponentialE':
        return ce.number(1)
    return ce._fn('Ln', ops)


def _canonical_log(ce, ops):
    if len(ops) == 1:
        return ce._fn('Log', ops)
    x, b = ops
    base = exact_value(b)
    if base == 10:
        return ce._fn('Lg', [x])
    if base == 2:
        return ce._fn('Lb', [x])
    if b.symbol == 'ExponentialE':
        return _canonical_ln(ce, [x])
    return ce._fn('Log', [x, b])


def _canonical_abs(ce, ops):
    x = ops[0]
    if x.is_number_literal:
        value = x.value
        if numeric.number_kind(value) == numeric.COMPLEX:
            return ce._fn('Abs', [x])
        return ce.number(abs(value))
    if x.head == 'Negate':
        return _canonical_abs(ce, [x.op1])
    if x.is_nonnegative:
        return x
    return ce._fn('Abs', [x])


def _canonical_rational(ce, ops):
    if len(ops) == 1:
        return ops[0]
    n, d = exact_value(ops[0]), exact_value(ops[1])
    if n is not None and d is not None and d != 0 and n.denominator == 1 and d.denominator == 1:
        return ce.number(n / d)
    return canonical_divide(ce, ops[0], ops[1])


def _canonical_complex(ce, ops):
    re_part = ops[0]
    im_part = ops[1] if len(ops) > 1 else ce.number(0)
    if not re_part.is_number_literal or not im_part.is_number_literal:
        return None
    if _is_exact_zero(im_part):
        return re_part
    return ce.number(numeric.add(re_part.value, numeric.mul(im_part.value, 1j)))


# ============================================================
# Simplification
# ============================================================

def split_coefficient(ce, expr) -> Tuple[Fraction, Any]:
    """Split a term as (exact coefficient, rest)."""
    if expr.head == 'Negate':
        c, rest = split_coefficient(ce, expr.op1)
        return -c, rest
    if expr.head == 'Multiply':
        c = exact_value(expr.op1)
        if c is not None:
            rest = expr.ops[1:]
            return c, rest[0] if len(rest) == 1 else ce._fn('Multiply', list(rest))
    return Fraction(1), expr


def split_terms(ce, ops: List) -> List:
    """The summands of ops, with nested sums and differences spliced in."""
    result = []
    for op in ops:
        if op.head == 'Add':
            result.extend(split_terms(ce, op.ops))
        elif op.head == 'Subtract':
            result.extend(split_terms(ce, [op.op1]))
            result.extend(canonical_negate(ce, t) for t in split_terms(ce, [op.op2]))
        elif op.head == 'Negate' and op.op1.head in ('Add', 'Subtract'):
            result.extend(canonical_negate(ce, t) for t in split_terms(ce, [op.op1]))
        else:
            result.append(op)
    return result


def split_factors(ce, ops: List) -> List:
    """The factors of ops, with nested products and quotients spliced in."""
    result = []
    for op in ops:
        if op.head == 'Multiply':
            result.extend(split_factors(ce, op.ops))
        elif op.head == 'Divide':
            result.extend(split_factors(ce, [op.op1]))
            result.extend(canonical_power(ce, f, ce.number(-1)) for f in split_factors(ce, [op.op2]))
        else:
            result.append(op)
    return result


def normal_form(ce, expr) -> Any:
    """
    Rewrite differences and quotients as sums and products.

    Subtract(a, b) becomes a + (-b) and Divide(a, b) becomes a * b^-1 at
    every level, so that equal sums and products compare term by term.
    """
    if expr.ops is None or not expr.is_valid:
        return expr
    ops = [normal_form(ce, op) for op in expr.ops]
    head = expr.head
    if head in ('Add', 'Subtract'):
        return canonical_add(ce, split_terms(ce, [ce._fn(head, ops)]))
    if head in ('Multiply', 'Divide'):
        return canonical_multiply(ce, split_factors(ce, [ce._fn(head, ops)]))
    if all(new is old for new, old in zip(ops, expr.ops)):
        return expr
    return ce.fn(head, ops)


def simplify_add(ce, ops: List) -> Any:
    """Fold exact numbers and combine like terms."""
    constant = Fraction(0)
    terms: List[list] = []
    inexact = []
    for op in split_terms(ce, ops):
        v = exact_value(op)
        if v is not None:
            constant += v
            continue
        if op.is_number_literal:
            inexact.append(op)
            continue
        coefficient, rest = split_coefficient(ce, op)
        for entry in terms:
            if entry[1].is_same(rest):
                entry[0] += coefficient
                break
        else:
            terms.append([coefficient, rest])

    result = []
    for coefficient, rest in terms:
        if coefficient == 0:
            continue
        result.append(rest if coefficient == 1 else canonical_multiply(ce, [ce.number(coefficient), rest]))
    result.extend(inexact)
    if constant != 0:
        result.append(ce.number(constant))
    return canonical_add(ce, result)


def base_exponent(expr) -> Tuple[Any, Fraction]:
    """Split a factor as (base, exact exponent)."""
    head = expr.head
    if head == 'Square':
        return expr.op1, Fraction(2)
    if head == 'Sqrt':
        return expr.op1, Fraction(1, 2)
    if head == 'Root':
        k = exact_value(expr.op2)
        if k is not None and k != 0:
            return expr.op1, 1 / k
    if head == 'Power':
        e = exact_value(expr.op2)
        if e is not None:
            if expr.op1.head == 'Square' and e.denominator == 1:
                return expr.op1.op1, 2 * e
            return expr.op1, e
    if head == 'Divide' and exact_value(expr.op1) == 1:
        return expr.op2, Fraction(-1)
    return expr, Fraction(1)


def simplify_multiply(ce, ops: List) -> Any:
    """Fold the coefficient and combine the exponents of equal bases."""
    product = canonical_multiply(ce, split_factors(ce, ops))
    negative = product.head == 'Negate'
    if negative:
        product = product.op1
    if product.is_number_literal:
        return canonical_negate(ce, product) if negative else product

    factors = list(product.ops) if product.head == 'Multiply' else [product]
    coefficient = exact_value(factors[0])
    if coefficient is None:
        coefficient = Fraction(1)
    else:
        factors = factors[1:]
    if negative:
        coefficient = -coefficient

    groups: List[list] = []
    for factor in factors:
        base, exponent = base_exponent(factor)
        for group in groups:
            if group[0].is_same(base):
                group[1] += exponent
                break
        else:
            groups.append([base, exponent])

    result = [ce.number(coefficient)]
    result.extend(canonical_power(ce, base, ce.number(exponent)) for base, exponent in groups)
    return canonical_multiply(ce, result)


def simplify_divide(ce, ops: List) -> Any:
    num, den = ops
    current = canonical_divide(ce, num, den)
    candidate = simplify_multiply(ce, [num, canonical_power(ce, den, ce.number(-1))])
    if ce.cost(candidate) < ce.cost(current):
        return candidate
    return current


def simplify_subtract(ce, ops: List) -> Any:
    a, b = ops
    x, y = exact_value(a), exact_value(b)
    if x is not None and y is not None:
        return ce.number(x - y)
    if a.is_same(b):
        return ce.number(0)
    current = canonical_subtract(ce, a, b)
    candidate = simplify_add(ce, [a, canonical_negate(ce, b)])
    if ce.cost(candidate) < ce.cost(current):
        return candidate
    return current


def _evaluate_subtract(ce, ops):
    x, y = exact_value(ops[0]), exact_value(ops[1])
    if x is not None and y is not None:
        return ce.number(x - y)
    return simplify_subtract(ce, ops)


def _exact_unary(fn: Callable[[Fraction], Any]):
    def handler(ce, ops):
        v = exact_value(ops[0])
        if v is None:
            return None
        return ce.number(fn(v))
    return handler


def _exact_extremum(pick: Callable):
    def handler(ce, ops):
        values = [exact_value(op) for op in ops]
        if not values or any(v is None for v in values):
            return None
        return ce.number(pick(values))
    return handler


def _evaluate_factorial(ce, ops):
    v = exact_value(ops[0])
    if v is None or v.denominator != 1 or v < 0 or v > 1000:
        return None
    return ce.number(math.factorial(int(v)))


# ============================================================
# Numeric evaluation
# ============================================================

def _values(ops) -> Optional[List[Any]]:
    if all(op.is_number_literal for op in ops):
        return [op.value for op in ops]
    return None


def _bignum_ready(ce, value):
    """Convert exact non-integers to bignums when the engine prefers them."""
    if ce.prefers_bignum and numeric.is_exact(value):
        return numeric.to_bignum(value)
    return value


def _numeric_fold(ce, ops, fold: Callable, rebuild: Callable):
    numbers = [op.value for op in ops if op.is_number_literal]
    others = [op for op in ops if not op.is_number_literal]
    if not numbers:
        return None
    total = reduce(fold, numbers)
    if not others:
        return ce.number(total)
    return rebuild(ce, others + [ce.number(total)])


def _n_add(ce, ops):
    return _numeric_fold(ce, ops, numeric.add, canonical_add)


def _n_multiply(ce, ops):
    return _numeric_fold(ce, ops, numeric.mul, canonical_multiply)


def _n_negate(ce, ops):
    if ops[0].is_number_literal:
        return ce.number(numeric.neg(ops[0].value))
    return None


def _n_subtract(ce, ops):
    values = _values(ops)
    if values is None:
        return None
    return ce.number(numeric.add(values[0], numeric.neg(values[1])))


def _n_divide(ce, ops):
    values = _values(ops)
    if values is None:
        return None
    a, b = values
    return ce.number(numeric.div(_bignum_ready(ce, a), b))


def _n_power(ce, ops):
    values = _values(ops)
    if values is None:
        return None
    base, exponent = values
    if not numeric.is_integer_value(exponent):
        base, exponent = _bignum_ready(ce, base), _bignum_ready(ce, exponent)
    return ce.number(numeric.power(base, exponent))


def _n_square(ce, ops):
    if not ops[0].is_number_literal:
        return None
    v = ops[0].value
    return ce.number(numeric.mul(v, v))


def _n_root(ce, ops):
    values = _values(ops)
    if values is None:
        return None
    x, n = values
    x = _bignum_ready(ce, x)
    k = numeric.as_small_integer(n)
    if k is not None and k % 2 == 1 and numeric.sign(x) == -1:
        root = numeric.power(numeric.neg(x), numeric.div(_bignum_ready(ce, Fraction(1)), Fraction(k)))
        return ce.number(numeric.neg(root))
    return ce.number(numeric.power(x, numeric.div(_bignum_ready(ce, Fraction(1)), n)))


def numeric_function(name: str):
    """N handler applying a transcendental function of the numeric module."""
    def handler(ce, ops):
        if not ops[0].is_number_literal:
            return None
        return ce.number(numeric.apply_function(name, ops[0].value, ce.prefers_bignum))
    return handler


def _log_base(base_value):
    def handler(ce, ops):
        if not ops[0].is_number_literal:
            return None
        bignum = ce.prefers_bignum
        ln_x = numeric.apply_function('ln', ops[0].value, bignum)
        ln_b = numeric.apply_function('ln', base_value, bignum)
        return ce.number(numeric.div(ln_x, ln_b))
    return handler


def _n_log(ce, ops):
    base = ops[1].value if len(ops) > 1 and ops[1].is_number_literal else Fraction(10)
    if len(ops) > 1 and not ops[1].is_number_literal:
        return None
    return _log_base(base)(ce, ops[:1])


def _n_abs(ce, ops):
    if not ops[0].is_number_literal:
        return None
    value = abs(ops[0].value)
    return ce.number(value)


def _n_rounding(fn: Callable[[Any], int]):
    def handler(ce, ops):
        if not ops[0].is_number_literal:
            return None
        value = ops[0].value
        if numeric.number_kind(value) == numeric.COMPLEX or numeric.is_nan(value) \
                or numeric.is_infinite(value):
            return ops[0]
        return ce.number(Fraction(int(fn(numeric.to_float(value)))))
    return handler


def _n_factorial(ce, ops):
    exact = _evaluate_factorial(ce, ops)
    if exact is not None:
        return exact
    if not ops[0].is_number_literal:
        return None
    return ce.number(numeric.apply_function('gamma', numeric.add(ops[0].value, Fraction(1)),
                                            ce.prefers_bignum))


def _n_extremum(pick: Callable):
    def handler(ce, ops):
        values = _values(ops)
        if not values:
            return None
        if any(numeric.sign(v) is None for v in values):
            return ce.number(math.nan)
        return ce.number(reduce(lambda a, b: a if pick(numeric.compare(a, b)) else b, values))
    return handler


# ============================================================
# Sign
# ============================================================

def _sgn_negate(ce, ops):
    s = ops[0].sgn
    if s is None or s is NotReal:
        return s
    return -s


def _sgn_multiply(ce, ops):
    signs = [op.sgn for op in ops]
    if any(s is NotReal for s in signs):
        return NotReal
    if any(s == 0 for s in signs if s is not None):
        return 0
    if any(s is None for s in signs):
        return None
    result = 1
    for s in signs:
        result *= s
    return result


def _sgn_add(ce, ops):
    signs = [op.sgn for op in ops]
    if any(s is NotReal for s in signs):
        return NotReal
    if any(s is None for s in signs):
        return None
    nonzero = {s for s in signs if s != 0}
    if not nonzero:
        return 0
    if len(nonzero) == 1:
        return nonzero.pop()
    return None


def _sgn_divide(ce, ops):
    n, d = ops[0].sgn, ops[1].sgn
    if n is NotReal or d is NotReal or d == 0:
        return NotReal
    if n is None or d is None:
        return None
    return n * d


def _sgn_square(ce, ops):
    s = ops[0].sgn
    if s is NotReal or s is None:
        return None
    return 0 if s == 0 else 1


def _sgn_abs(ce, ops):
    zero = ops[0].is_zero
    if zero is None:
        return None
    return 0 if zero else 1


def _sgn_sqrt(ce, ops):
    s = ops[0].sgn
    if s is None:
        return None
    if s is NotReal or s == -1:
        return NotReal
    return s


def _sgn_exp(ce, ops):
    if ops[0].is_real:
        return 1
    return None


def _sgn_power(ce, ops):
    base, exponent = ops
    if base.is_positive:
        return 1
    e = exact_value(exponent)
    if e is not None and e.denominator == 1 and e.numerator % 2 == 0 and base.is_real \
            and base.is_not_zero:
        return 1
    return None


# ============================================================
# Big operators
# ============================================================

def _iterate(ce, ops, combine: Callable, finish: Callable):
    """Apply the lambda ops[0] to each integer of the range ops[1]."""
    if len(ops) < 2 or ops[1].head != 'Tuple' or ops[1].nops < 3:
        return None
    fn, limits = ops[0], ops[1]
    lower, upper = exact_value(limits.op2), exact_value(limits.op3)
    if lower is None or upper is None or lower.denominator != 1 or upper.denominator != 1:
        return None
    count = int(upper - lower) + 1
    if count > ce.iteration_limit:
        ce.warn(f'Iteration limit exceeded for a range of {count} terms', 'Sum')
        return None
    terms = []
    for i in range(int(lower), int(upper) + 1):
        if ce.deadline_reached():
            ce.warn('Time limit exceeded while iterating', 'Sum')
            return None
        terms.append(finish(apply_lambda(ce, fn, [ce.number(i)])))
    return combine(ce, terms)


def _sum(finish: Callable, fold: Callable):
    def handler(ce, ops):
        return _iterate(ce, ops, lambda ce, terms: fold(ce, terms) if terms else ce.number(0), finish)
    return handler


def _product(finish: Callable, fold: Callable):
    def handler(ce, ops):
        return _iterate(ce, ops, lambda ce, terms: fold(ce, terms) if terms else ce.number(1), finish)
    return handler


def _fold_n_add(ce, terms):
    return _n_add(ce, terms) or canonical_add(ce, terms)


def _fold_n_multiply(ce, terms):
    return _n_multiply(ce, terms) or canonical_multiply(ce, terms)


# ============================================================
# Definitions
# ============================================================

NUMERIC_UNARY = ['Function', 'Number', 'Number']

LIBRARY = {
    'symbols': {
        'Half': {
            'domain': 'RationalNumber', 'constant': True, 'hold': True,
            'value': Fraction(1, 2), 'is_positive': True,
        },
    },
    'functions': {
        'Add': {
            'complexity': 1300, 'associative': True, 'commutative': True, 'numeric': True,
            'signature': {
                'domain': ['Function', ['Sequence', 'Number'], 'Number'],
                'canonical': canonical_add,
                'simplify': simplify_add,
                'evaluate': simplify_add,
                'N': _n_add,
                'sgn': _sgn_add,
            },
        },
        'Subtract': {
            'complexity': 1350, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', ['Maybe', 'Number'], 'Number'],
                'canonical': lambda ce, ops: (canonical_negate(ce, ops[0]) if len(ops) == 1
                                              else canonical_subtract(ce, ops[0], ops[1])),
                'simplify': lambda ce, ops: simplify_subtract(ce, ops) if len(ops) == 2 else None,
                'evaluate': lambda ce, ops: _evaluate_subtract(ce, ops) if len(ops) == 2 else None,
                'N': lambda ce, ops: _n_subtract(ce, ops) if len(ops) == 2 else None,
            },
        },
        'Negate': {
            'complexity': 2000, 'numeric': True,
            'signature': {
                'domain': NUMERIC_UNARY,
                'canonical': lambda ce, ops: canonical_negate(ce, ops[0]),
                'N': _n_negate,
                'sgn': _sgn_negate,
            },
        },
        'Multiply': {
            'complexity': 2100, 'associative': True, 'commutative': True, 'numeric': True,
            'signature': {
                'domain': ['Function', ['Sequence', 'Number'], 'Number'],
                'canonical': canonical_multiply,
                'simplify': simplify_multiply,
                'evaluate': simplify_multiply,
                'N': _n_multiply,
                'sgn': _sgn_multiply,
            },
        },
        'Divide': {
            'complexity': 2500, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number', 'Number'],
                'canonical': lambda ce, ops: canonical_divide(ce, ops[0], ops[1]),
                'simplify': simplify_divide,
                'N': _n_divide,
                'sgn': _sgn_divide,
            },
        },
        'Power': {
            'complexity': 3500, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number', 'Number'],
                'canonical': lambda ce, ops: canonical_power(ce, ops[0], ops[1]),
                'N': _n_power,
                'sgn': _sgn_power,
            },
        },
        'Square': {
            'complexity': 3500, 'numeric': True,
            'signature': {
                'domain': NUMERIC_UNARY,
                'canonical': lambda ce, ops: canonical_square(ce, ops[0]),
                'N': _n_square,
                'sgn': _sgn_square,
            },
        },
        'Sqrt': {
            'complexity': 3600, 'numeric': True,
            'signature': {
                'domain': NUMERIC_UNARY,
                'canonical': lambda ce, ops: canonical_sqrt(ce, ops[0]),
                'N': numeric_function('sqrt'),
                'sgn': _sgn_sqrt,
            },
        },
        'Root': {
            'complexity': 3700, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number', 'Number'],
                'canonical': lambda ce, ops: canonical_root(ce, ops[0], ops[1]),
                'N': _n_root,
            },
        },
        'Exp': {
            'complexity': 3500, 'numeric': True, 'wikidata': 'Q168698',
            'signature': {
                'domain': NUMERIC_UNARY,
                'canonical': _canonical_exp,
                'N': numeric_function('exp'),
                'sgn': _sgn_exp,
            },
        },
        'Ln': {
            'complexity': 4000, 'numeric': True, 'wikidata': 'Q204037',
            'signature': {
                'domain': NUMERIC_UNARY,
                'canonical': _canonical_ln,
                'N': numeric_function('ln'),
            },
        },
        'Log': {
            'complexity': 4000, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', ['Maybe', 'Number'], 'Number'],
                'canonical': _canonical_log,
                'N': _n_log,
            },
        },
        'Lg': {
            'complexity': 4000, 'numeric': True,
            'signature': {'domain': NUMERIC_UNARY, 'N': _log_base(Fraction(10))},
        },
        'Lb': {
            'complexity': 4000, 'numeric': True,
            'signature': {'domain': NUMERIC_UNARY, 'N': _log_base(Fraction(2))},
        },
        'Abs': {
            'complexity': 1200, 'idempotent': True, 'numeric': True, 'wikidata': 'Q3317982',
            'signature': {
                'domain': ['Function', 'Number', 'NonNegativeNumber'],
                'canonical': _canonical_abs,
                'N': _n_abs,
                'sgn': _sgn_abs,
            },
        },
        'Floor': {
            'complexity': 1250, 'idempotent': True, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Integer'],
                'evaluate': _exact_unary(lambda v: math.floor(v)),
                'N': _n_rounding(math.floor),
            },
        },
        'Ceil': {
            'complexity': 1250, 'idempotent': True, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Integer'],
                'evaluate': _exact_unary(lambda v: math.ceil(v)),
                'N': _n_rounding(math.ceil),
            },
        },
        'Round': {
            'complexity': 1250, 'idempotent': True, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Integer'],
                'evaluate': _exact_unary(lambda v: round(v)),
                'N': _n_rounding(round),
            },
        },
        'Factorial': {
            'complexity': 9000, 'numeric': True,
            'signature': {
                'domain': ['Function', 'Number', 'Number'],
                'evaluate': _evaluate_factorial,
                'N': _n_factorial,
            },
        },
        'Max': {
            'complexity': 1200, 'associative': True, 'commutative': True, 'idempotent': True,
            'signature': {
                'domain': ['Function', ['Sequence', 'Number'], 'Number'],
                'evaluate': _exact_extremum(max),
                'N': _n_extremum(lambda c: c is not None and c >= 0),
            },
        },
        'Min': {
            'complexity': 1200, 'associative': True, 'commutative': True, 'idempotent': True,
            'signature': {
                'domain': ['Function', ['Sequence', 'Number'], 'Number'],
                'evaluate': _exact_extremum(min),
                'N': _n_extremum(lambda c: c is not None and c <= 0),
            },
        },
        'Rational': {
            'complexity': 2400,
            'signature': {
                'domain': ['Function', 'Number', ['Maybe', 'Number'], 'RationalNumber'],
                'canonical': _canonical_rational,
            },
        },
        'Complex': {
            'complexity': 2400,
            'signature': {
                'domain': ['Function', 'Number', ['Maybe', 'Number'], 'ComplexNumber'],
                'canonical': _canonical_complex,
            },
        },
        'Sum': {
            'complexity': 1000, 'hold': 'all',
            'signature': {
                'domain': ['Function', 'Anything', ['Sequence', 'Anything'], 'Number'],
                'evaluate': _sum(lambda x: x.evaluate(), simplify_add),
                'N': _sum(lambda x: x.N(), _fold_n_add),
            },
        },
        'Product': {
            'complexity': 1000, 'hold': 'all',
            'signature': {
                'domain': ['Function', 'Anything', ['Sequence', 'Anything'], 'Number'],
                'evaluate': _product(lambda x: x.evaluate(), simplify_multiply),
                'N': _product(lambda x: x.N(), _fold_n_multiply),
            },
        },
    },
}
