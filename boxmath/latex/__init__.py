"""
LaTeX parsing and serialization for MathJSON.

    syntax = LatexSyntax(ce)
    syntax.parse(r"\\frac{\\pi}{2}")           # ['Divide', 'Pi', 2]
    syntax.serialize(['Power', 'x', 2])       # 'x^2'

Both directions work on plain MathJSON. The optional compute engine is
only consulted for symbol and function lookups and for the scopes of
bound variables while parsing.
"""

from typing import Any, Dict, Iterable, List, Optional

from . import definitions_arithmetic, definitions_core, definitions_trigonometry
from .dictionary import Entry, IndexedDictionary
from .parser import Parser
from .serializer import DEFAULT_SERIALIZE_OPTIONS, Serializer
from .tokenizer import tokenize, tokens_to_string

DEFAULT_DEFINITIONS: List[Entry] = (
    definitions_core.DEFINITIONS
    + definitions_arithmetic.DEFINITIONS
    + definitions_trigonometry.DEFINITIONS
)

DEFAULT_DICTIONARY = IndexedDictionary(DEFAULT_DEFINITIONS)


class LatexSyntax:
    """A LaTeX dictionary with serialization options."""

    def __init__(self, ce=None, options: Optional[Dict[str, Any]] = None,
                 dictionary: Optional[Iterable[Entry]] = None):
        self.ce = ce
        self.options = dict(DEFAULT_SERIALIZE_OPTIONS)
        if options:
            self.options.update(options)
        if dictionary is None:
            self.dictionary = DEFAULT_DICTIONARY
        else:
            self.dictionary = IndexedDictionary(list(DEFAULT_DEFINITIONS) + list(dictionary))

    def parse(self, latex: str) -> Any:
        """Parse LaTeX to MathJSON. Never raises: errors are ["Error", ...] nodes."""
        return Parser(tokenize(latex), self.dictionary, self.ce).parse()

    def serialize(self, expr: Any, **options) -> str:
        opts = dict(self.options)
        opts.update(options)
        return Serializer(self.dictionary, opts).serialize(expr)


__all__ = [
    'LatexSyntax',
    'IndexedDictionary',
    'DEFAULT_DEFINITIONS',
    'DEFAULT_DICTIONARY',
    'DEFAULT_SERIALIZE_OPTIONS',
    'tokenize',
    'tokens_to_string',
]
