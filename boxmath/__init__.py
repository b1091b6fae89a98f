"""
BOXMATH - Boxed MathJSON expressions with LaTeX parsing

A symbolic computation core: parse LaTeX into MathJSON, canonicalize,
simplify, evaluate exactly or numerically, rewrite with patterns, and
serialize back to LaTeX.

Quick Start:
    from boxmath import ComputeEngine

    ce = ComputeEngine()

    ce.parse(r"\\frac{\\pi}{2}").json          # ['Divide', 'Pi', 2]
    ce.parse("7 + 2 + 5").simplify().json       # 14
    ce.parse(r"\\sqrt{12}").simplify().latex    # '2\\sqrt{3}'
    ce.parse(r"\\cos\\frac{\\pi}{3}").N().value

MathJSON:
    3, 1.5, {"num": "3.14159265358979323846"}   numbers
    ["Rational", 1, 3], ["Complex", 0, 1]       exact and complex numbers
    "x", "Pi"                                   symbols
    "'hello'"                                   strings
    ["Add", "x", 1]                             function applications

Patterns and Rules:
    _x      - match one expression, bind to _x
    __x     - match one or more operands
    ___x    - match zero or more operands

    ce.box(["f", "x"]).replace([(["f", "_a"], ["Sin", "_a"])])   # ['Sin', 'x']
"""

__version__ = "0.1.0"

from .engine import ComputeEngine, NUMERIC_MODES
from .expression import (
    BoxedExpression,
    BoxedNumber,
    BoxedSymbol,
    BoxedString,
    BoxedDictionary,
    NotReal,
)
from .function import BoxedFunction
from .domains import BoxedDomain
from .definitions import FunctionDefinition, SymbolDefinition, Scope
from .patterns import Bindings, NoMatch, match
from .rules import (
    Rule,
    RuleSet,
    RuleMetadata,
    RewriteStep,
    RewriteTrace,
    load_rules_from_json,
)
from .signals import (
    Signal,
    ComputeEngineError,
    RecursionLimitExceeded,
    TimeLimitExceeded,
)
from .latex import LatexSyntax, tokenize, tokens_to_string

__all__ = [
    "__version__",
    # Engine
    "ComputeEngine",
    "NUMERIC_MODES",
    # Expressions
    "BoxedExpression",
    "BoxedNumber",
    "BoxedSymbol",
    "BoxedString",
    "BoxedDictionary",
    "BoxedFunction",
    "BoxedDomain",
    "NotReal",
    # Definitions
    "FunctionDefinition",
    "SymbolDefinition",
    "Scope",
    # Patterns and rules
    "Bindings",
    "NoMatch",
    "match",
    "Rule",
    "RuleSet",
    "RuleMetadata",
    "RewriteStep",
    "RewriteTrace",
    "load_rules_from_json",
    # Signals
    "Signal",
    "ComputeEngineError",
    "RecursionLimitExceeded",
    "TimeLimitExceeded",
    # LaTeX
    "LatexSyntax",
    "tokenize",
    "tokens_to_string",
]
