"""
LaTeX definitions for trigonometric and hyperbolic functions.
"""

from .definitions_arithmetic import function_parser

# (name, trigger)
FUNCTIONS = [
    ('Sin', '\\sin'), ('Cos', '\\cos'), ('Tan', '\\tan'),
    ('Cot', '\\cot'), ('Sec', '\\sec'), ('Csc', '\\csc'),
    ('Arcsin', '\\arcsin'), ('Arccos', '\\arccos'), ('Arctan', '\\arctan'),
    ('Sinh', '\\sinh'), ('Cosh', '\\cosh'), ('Tanh', '\\tanh'), ('Coth', '\\coth'),
    ('Sech', '\\operatorname{sech}'), ('Csch', '\\operatorname{csch}'),
    ('Arsinh', '\\operatorname{arsinh}'), ('Arcosh', '\\operatorname{arcosh}'),
    ('Artanh', '\\operatorname{artanh}'),
]


DEFINITIONS = [
    {'kind': 'symbol', 'name': 'Pi', 'trigger': '\\pi'},
    {'kind': 'symbol', 'name': 'Degrees', 'trigger': '\\degree'},
    {'kind': 'postfix', 'trigger': '\\degree', 'precedence': 880,
     'parse': lambda parser, lhs: ['Multiply', lhs, 'Degrees']},
]

DEFINITIONS += [
    {'kind': 'function', 'name': name, 'trigger': trigger,
     'parse': function_parser(name), 'implicit': True}
    for name, trigger in FUNCTIONS
]
