"""
Standard definition libraries.

Each library is a table {"symbols": {name: {...}}, "functions": {name: {...}}}
consumed by ComputeEngine.define_symbols() and define_functions().
"""

from . import arithmetic, core, trigonometry

STANDARD_LIBRARIES = [core.LIBRARY, arithmetic.LIBRARY, trigonometry.LIBRARY]

__all__ = ['STANDARD_LIBRARIES', 'arithmetic', 'core', 'trigonometry']
