"""
Example custom library for BOXMATH.

This file demonstrates how to extend a ComputeEngine with definitions of
your own: symbols with values, functions evaluated by Python handlers, and
functions given by a MathJSON template.

Usage:
    from boxmath import ComputeEngine
    from custom_library import LIBRARY

    ce = ComputeEngine(libraries=[LIBRARY])
    ce.box(['Gcd', 12, 8]).evaluate().json      # 4
"""

import math

INTEGER_PAIR = ['Function', 'Integer', 'Integer', 'Integer']


def integer_args(ops):
    """Python ints for exact integer operands, None if any operand is not one."""
    if all(op.is_number_literal and op.is_exact and op.is_integer for op in ops):
        return [int(op.value) for op in ops]
    return None


def binary_integer(fn):
    """Evaluate handler applying fn to two exact integers."""
    def handler(ce, ops):
        args = integer_args(ops)
        result = None if args is None else fn(*args)
        return None if result is None else ce.number(result)
    return handler


LIBRARY = {
    'symbols': {
        # Standard gravity, m/s^2
        'g_0': {'domain': 'RealNumber', 'value': 9.80665, 'constant': True, 'is_positive': True},
    },
    'functions': {
        # Number theory
        'Gcd': {'commutative': True,
                'signature': {'domain': INTEGER_PAIR, 'evaluate': binary_integer(math.gcd)}},
        'Lcm': {'commutative': True,
                'signature': {'domain': INTEGER_PAIR,
                              'evaluate': binary_integer(lambda a, b: a * b // math.gcd(a, b))}},
        'Mod': {'signature': {'domain': INTEGER_PAIR,
                              'evaluate': binary_integer(lambda a, b: a % b if b else None)}},

        # Templates: _ is the first argument, _1, _2... the positional ones
        'Cube': {'signature': {'domain': ['Function', 'Number', 'Number'],
                               'evaluate': ['Power', '_', 3]}},
        'Average': {'signature': {'domain': ['Function', 'Number', 'Number', 'Number'],
                                  'evaluate': ['Divide', ['Add', '_1', '_2'], 2]}},
    },
}
