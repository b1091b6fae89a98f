"""
Total order and cost of expressions.

sort_key() maps an expression to a tuple; comparing keys gives a strict
weak order used to sort the operands of commutative functions:

    numbers < symbols < strings < functions < dictionaries

Numbers are ordered exact first, then by value. Functions are ordered by
the complexity of their head, then by operand count, then operand-wise,
then by head name.
"""

from typing import Any, Tuple

from . import numeric
from .definitions import DEFAULT_COMPLEXITY

# Complexity bands of the standard functions
COMPLEXITY = {
    'Add': 1300,
    'Subtract': 1350,
    'Negate': 2000,
    'Multiply': 2100,
    'Divide': 2500,
    'Power': 3500,
    'Square': 3500,
    'Exp': 3500,
    'Sqrt': 3600,
    'Root': 3700,
    'Ln': 4000,
    'Log': 4000,
    'Lg': 4000,
    'Lb': 4000,
    'Sin': 5000,
    'Cos': 5050,
    'Tan': 5100,
    'Arctan': 5200,
    'Cot': 5500,
    'Sec': 5500,
    'Csc': 5500,
    'Arcsin': 5500,
    'Arccos': 5550,
    'Arctan2': 5600,
    'Sinh': 6000,
    'Cosh': 6050,
    'Tanh': 6100,
    'Arsinh': 6200,
    'Arcosh': 6250,
    'Artanh': 6300,
}


def _number_key(expr) -> Tuple:
    value = expr.value
    kind = numeric.number_kind(value)
    nan = numeric.is_nan(value)
    if nan:
        return (0, numeric.KIND_RANK[kind], 1, 0.0, 0.0, '')
    if kind == numeric.COMPLEX:
        re_part, im_part = float(value.real), float(value.imag)
    else:
        re_part, im_part = numeric.to_float(value), 0.0
    # Exact values tie-break on their exact text so distinct rationals never compare equal
    return (0, numeric.KIND_RANK[kind], 0, re_part, im_part, str(value))


def head_name(expr) -> str:
    head = expr.head
    return head if isinstance(head, str) else str(head.json)


def sort_key(expr) -> Tuple:
    """Key of an expression in the canonical total order."""
    if expr.is_number_literal:
        return _number_key(expr)
    if expr.symbol is not None:
        return (1, expr.symbol)
    if expr.string is not None:
        return (2, expr.string)
    ops = expr.ops
    if ops is not None:
        return (3, expr.complexity, len(ops), tuple(sort_key(op) for op in ops), head_name(expr))
    if expr.head == 'Dictionary':
        return (4, tuple(expr.keys))
    return (5, str(expr.json))


def order(a, b) -> int:
    """-1, 0 or 1 comparing two expressions in the canonical order."""
    ka, kb = sort_key(a), sort_key(b)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def sort_ops(ops):
    return sorted(ops, key=sort_key)


def function_complexity(name: Any, definition=None) -> int:
    if definition is not None:
        return definition.complexity
    if isinstance(name, str):
        return COMPLEXITY.get(name, DEFAULT_COMPLEXITY)
    return DEFAULT_COMPLEXITY


# ============================================================
# Cost
# ============================================================

def _digits(n: int) -> int:
    return len(str(abs(n)))


def _number_cost(value) -> int:
    if numeric.is_exact(value):
        if value.denominator == 1:
            n = value.numerator
            return 1 if -10 < n < 10 else max(1, _digits(n))
        return _digits(value.numerator) + _digits(value.denominator)
    if numeric.number_kind(value) == numeric.COMPLEX:
        return 4
    return 2


def expression_cost(expr) -> int:
    """
    Cost of an expression, used to reject rewrites that grow it.

    Numbers cost by their digits, symbols and strings cost 1, a function
    costs its complexity band (1 to 10) plus the cost of its operands.
    """
    if expr.is_number_literal:
        return _number_cost(expr.value)
    ops = expr.ops
    if ops is None:
        return 1
    band = max(1, min(10, expr.complexity // 1000))
    return band + sum(expression_cost(op) for op in ops)

