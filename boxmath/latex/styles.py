"""
Default serialization styles.

A style is a callable `style(expr, level) -> str`, where `level` is the
nesting depth of `expr` in the expression being serialized. Pass other
callables in the serialization options to change them.
"""


def fraction_style(expr, level):
    """'quotient', 'inline-solidus', 'nice-solidus', 'reciprocal' or 'factor'."""
    return 'inline-solidus' if level > 3 else 'quotient'


def root_style(expr, level):
    """'radical', 'solidus' or 'quotient'."""
    return 'radical'


def power_style(expr, level):
    """'solidus' or 'quotient', for fractional exponents."""
    return 'solidus'


def numeric_set_style(expr, level):
    """'compact' (\\R) or 'regular' (\\mathbb{R})."""
    return 'compact'


def group_style(expr, level):
    """'paren' or 'leftright'."""
    return 'paren'


def apply_function_style(expr, level):
    """'paren' or 'leftright'."""
    return 'paren'
