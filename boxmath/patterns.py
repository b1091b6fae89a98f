"""
Pattern matching over boxed expressions.

Patterns are canonical boxed expressions in which some symbols are
wildcards:

    _x      match exactly one expression, bind it to "_x"
    __x     match one or more operands, bind a Sequence to "__x"
    ___x    match zero or more operands, bind a Sequence to "___x"
    _ __ ___   the same without binding

Matching is one-directional and structural: a function pattern matches a
function with the same head and operand-wise matching operands. A wildcard
that occurs twice must bind structurally identical expressions.
"""

from typing import Any, Dict, List, Optional, Set, Union


# ============================================================
# Bindings Class - Dict-like interface for match results
# ============================================================

class Bindings:
    """
    Dict-like wrapper for pattern matching bindings.

        if bindings := expr.match(["Add", "_a", "_b"]):
            print(bindings["_a"], bindings["_b"])
            print(bindings.get("_c", default=None))

    Keys are the full wildcard names. Bindings objects are truthy even when
    empty (a match without named wildcards); NoMatch is falsy.
    """

    __slots__ = ('_dict',)

    def __init__(self, mapping: Optional[Dict[str, Any]] = None):
        self._dict = dict(mapping or {})

    def __bool__(self) -> bool:
        return True

    def __getitem__(self, key: str):
        return self._dict[key]

    def get(self, key: str, default=None):
        return self._dict.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._dict

    def keys(self):
        return self._dict.keys()

    def values(self):
        return self._dict.values()

    def items(self):
        return self._dict.items()

    def __iter__(self):
        return iter(self._dict)

    def __len__(self) -> int:
        return len(self._dict)

    def __repr__(self) -> str:
        return f"Bindings({ {k: v.json for k, v in self._dict.items()} })"

    def __eq__(self, other):
        if not isinstance(other, Bindings) or self.keys() != other.keys():
            return False
        return all(v.is_same(other._dict[k]) for k, v in self._dict.items())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return self._dict.copy()


class _NoMatch:
    """
    Singleton representing a failed pattern match.

    NoMatch is falsy, allowing natural use in conditionals:

        if bindings := expr.match(pattern):
            # matched
        else:
            # NoMatch
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NoMatch"

    def __getitem__(self, key: str):
        raise KeyError(f"NoMatch has no binding for '{key}'")

    def get(self, key: str, default=None):
        return default

    def __contains__(self, key: str) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self):
        return iter([])


NoMatch = _NoMatch()

_Raw = Optional[Dict[str, Any]]

ANONYMOUS_WILDCARDS = ('_', '__', '___')


# ============================================================
# Wildcards
# ============================================================

def is_wildcard(name: Optional[str]) -> bool:
    return bool(name) and name.startswith('_')


def is_sequence_wildcard(name: Optional[str]) -> bool:
    return bool(name) and name.startswith('__')


def wildcards(expr) -> Set[str]:
    """Names of the named wildcards occurring in a pattern."""
    return {name for name in expr.symbols
            if is_wildcard(name) and name not in ANONYMOUS_WILDCARDS}


# ============================================================
# Matching
# ============================================================

def _bind(bindings: Dict[str, Any], name: str, value) -> _Raw:
    if name in ANONYMOUS_WILDCARDS:
        return bindings
    bound = bindings.get(name)
    if bound is not None:
        return bindings if bound.is_same(value) else None
    result = dict(bindings)
    result[name] = value
    return result


def _sequence(ce, items: List[Any]):
    return ce._fn('Sequence', items)


def _match(pattern, expr, bindings: Dict[str, Any]) -> _Raw:
    name = pattern.symbol
    if is_wildcard(name):
        if is_sequence_wildcard(name):
            value = _sequence(expr.engine, [expr])
            return _bind(bindings, name, value)
        return _bind(bindings, name, expr)

    if pattern.ops is None:
        return bindings if pattern.is_same(expr) else None

    if expr.ops is None:
        return None

    bindings = _match_head(pattern, expr, bindings)
    if bindings is None:
        return None
    return _match_ops(list(pattern.ops), list(expr.ops), bindings)


def _match_head(pattern, expr, bindings: Dict[str, Any]) -> _Raw:
    head, target = pattern.head, expr.head
    if isinstance(head, str):
        if is_wildcard(head) and not is_sequence_wildcard(head):
            value = expr.engine.symbol(target) if isinstance(target, str) else target
            return _bind(bindings, head, value)
        return bindings if head == target else None
    if isinstance(target, str):
        return None
    return _match(head, target, bindings)


def _min_length(patterns: List[Any]) -> int:
    count = 0
    for pattern in patterns:
        name = pattern.symbol
        if name is not None and name.startswith('___'):
            continue
        count += 1
    return count


def _match_ops(patterns: List[Any], exprs: List[Any], bindings: Dict[str, Any]) -> _Raw:
    if not patterns:
        return bindings if not exprs else None

    first, rest = patterns[0], patterns[1:]
    name = first.symbol
    if is_sequence_wildcard(name):
        shortest = 0 if name.startswith('___') else 1
        longest = len(exprs) - _min_length(rest)
        ce = first.engine
        for length in range(shortest, longest + 1):
            extended = _bind(bindings, name, _sequence(ce, exprs[:length]))
            if extended is None:
                continue
            result = _match_ops(rest, exprs[length:], extended)
            if result is not None:
                return result
        return None

    if not exprs:
        return None
    extended = _match(first, exprs[0], bindings)
    if extended is None:
        return None
    return _match_ops(rest, exprs[1:], extended)


def match(pattern, expr, bindings: Optional[Dict[str, Any]] = None) -> Union[Bindings, _NoMatch]:
    """
    Match a boxed pattern against a boxed expression.

    Args:
        pattern: Boxed pattern, possibly containing wildcards.
        expr: Boxed expression to match against.
        bindings: Bindings that must be respected by the match.

    Returns:
        Bindings on success (possibly empty), NoMatch otherwise.
    """
    initial = dict(bindings.items()) if bindings else {}
    result = _match(pattern, expr, initial)
    if result is None:
        return NoMatch
    return Bindings(result)


def substitute(template, bindings: Union[Bindings, Dict[str, Any]]):
    """Instantiate a template by replacing its wildcards with their bindings."""
    mapping = dict(bindings.items())
    if not mapping:
        return template
    return template.subs(mapping, canonical=True)
