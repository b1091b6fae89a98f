"""
Boxed expressions.

A boxed expression wraps a MathJSON value with a reference to the engine
that created it, cached properties and the algebraic operations of the
engine. This module holds the base class and the atoms (numbers, symbols,
strings, dictionaries); function applications live in function.py.
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Union
import hashlib
import json

from . import numeric
from .patterns import Bindings, NoMatch, match as match_pattern
from .rules import replace as replace_rules


class _NotReal:
    """
    Singleton sign of expressions that never have a real sign
    (complex numbers, NaN).

    NotReal is falsy so that `if expr.sgn:` reads naturally, but it is
    distinct from None, which means the sign is unknown.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NotReal"


NotReal = _NotReal()

SignType = Union[int, None, _NotReal]


def _metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (metadata or {}).items() if k in ('latex', 'wikidata') and v}


class BoxedExpression:
    """Base class of all boxed expressions."""

    def __init__(self, ce, metadata: Optional[Dict[str, Any]] = None):
        self.engine = ce
        meta = _metadata(metadata)
        self._latex: Optional[str] = meta.get('latex')
        self.wikidata: Optional[str] = meta.get('wikidata')
        self._hash: Optional[int] = None

    # ============================================================
    # Structure
    # ============================================================

    @property
    def head(self) -> Union[str, 'BoxedExpression']:
        raise NotImplementedError

    @property
    def ops(self) -> Optional[tuple]:
        """Operands of a function application, None for atoms."""
        return None

    @property
    def nops(self) -> int:
        return 0 if self.ops is None else len(self.ops)

    def _op(self, index: int) -> 'BoxedExpression':
        ops = self.ops
        if ops is None or len(ops) <= index:
            return self.engine.symbol('Nothing')
        return ops[index]

    @property
    def op1(self) -> 'BoxedExpression':
        return self._op(0)

    @property
    def op2(self) -> 'BoxedExpression':
        return self._op(1)

    @property
    def op3(self) -> 'BoxedExpression':
        return self._op(2)

    @property
    def symbol(self) -> Optional[str]:
        return None

    @property
    def string(self) -> Optional[str]:
        return None

    @property
    def is_literal(self) -> bool:
        return False

    @property
    def is_number_literal(self) -> bool:
        return False

    @property
    def is_function(self) -> bool:
        return False

    @property
    def json(self) -> Any:
        raise NotImplementedError

    @property
    def metadata(self) -> Dict[str, Any]:
        return _metadata({'latex': self._latex, 'wikidata': self.wikidata})

    @property
    def latex(self) -> str:
        if self._latex is not None:
            return self._latex
        return self.engine.serialize(self)

    @latex.setter
    def latex(self, value: str):
        self._latex = value

    @property
    def hash(self) -> int:
        """Structural hash, stable across runs."""
        if self._hash is None:
            text = json.dumps(self.json, sort_keys=True, default=str)
            self._hash = int(hashlib.md5(text.encode('utf-8')).hexdigest()[:15], 16)
        return self._hash

    @property
    def complexity(self) -> int:
        return 1

    @property
    def symbols(self) -> Set[str]:
        """Names of all the symbols in the expression."""
        return set()

    def has(self, names: Union[str, Iterable[str]]) -> bool:
        """True if the expression contains one of the symbols or heads named."""
        return False

    # ============================================================
    # Canonical form and validity
    # ============================================================

    @property
    def is_canonical(self) -> bool:
        return True

    @property
    def canonical(self) -> 'BoxedExpression':
        return self

    @property
    def is_valid(self) -> bool:
        return True

    @property
    def is_pure(self) -> bool:
        return True

    def unbind(self) -> None:
        """Drop cached values and definitions."""

    # ============================================================
    # Domain, sign and predicates
    # ============================================================

    @property
    def domain(self):
        return self.engine.domain('Anything')

    @property
    def sgn(self) -> SignType:
        """-1, 0 or 1 when known, None when unknown, NotReal when never real."""
        return None

    def _domain_test(self, name: str) -> Optional[bool]:
        dom = self.domain
        if dom.is_compatible(name):
            return True
        if dom.is_compatible(name, 'contravariant'):
            return None
        return False

    @property
    def is_zero(self) -> Optional[bool]:
        s = self.sgn
        if s is None:
            return None
        return s == 0 if s is not NotReal else False

    @property
    def is_not_zero(self) -> Optional[bool]:
        result = self.is_zero
        return None if result is None else not result

    @property
    def is_positive(self) -> Optional[bool]:
        s = self.sgn
        if s is None:
            return None
        return s is not NotReal and s > 0

    @property
    def is_negative(self) -> Optional[bool]:
        s = self.sgn
        if s is None:
            return None
        return s is not NotReal and s < 0

    @property
    def is_nonnegative(self) -> Optional[bool]:
        s = self.sgn
        if s is None:
            return None
        return s is not NotReal and s >= 0

    @property
    def is_nonpositive(self) -> Optional[bool]:
        s = self.sgn
        if s is None:
            return None
        return s is not NotReal and s <= 0

    @property
    def is_integer(self) -> Optional[bool]:
        return self._domain_test('Integer')

    @property
    def is_rational(self) -> Optional[bool]:
        return self._domain_test('RationalNumber')

    @property
    def is_real(self) -> Optional[bool]:
        return self._domain_test('RealNumber')

    @property
    def is_complex(self) -> Optional[bool]:
        return self._domain_test('ComplexNumber')

    # ============================================================
    # Comparison
    # ============================================================

    def is_same(self, rhs: 'BoxedExpression') -> bool:
        """Structural equality."""
        raise NotImplementedError

    def is_equal(self, rhs: Any) -> bool:
        """
        Mathematical equality.

        Both sides are first written as sums and products, so that a - b
        and a + (-b), or a / b and a b^-1, are the same. Then self - rhs is
        simplified, evaluated numerically and compared with zero using the
        engine tolerance.
        """
        ce = self.engine
        lhs = self.canonical
        rhs = ce.box(rhs, canonical=True)
        if lhs.is_same(rhs):
            return True
        if not lhs.is_valid or not rhs.is_valid:
            return False
        lhs, rhs = ce.normal_form(lhs), ce.normal_form(rhs)
        if lhs.is_same(rhs):
            return True
        diff = ce.add([lhs, ce.negate(rhs)]).simplify()
        if diff.is_number_literal:
            return numeric.is_zero(ce.chop(diff.value))
        diff = diff.N()
        if diff.is_number_literal:
            return numeric.is_zero(ce.chop(diff.value))
        return False

    def _compare(self, rhs: Any) -> Optional[int]:
        ce = self.engine
        diff = ce.add([self.canonical, ce.negate(ce.box(rhs, canonical=True))]).N()
        if not diff.is_number_literal:
            return None
        value = ce.chop(diff.value)
        return numeric.sign(value)

    def is_less(self, rhs: Any) -> Optional[bool]:
        s = self._compare(rhs)
        return None if s is None else s < 0

    def is_less_equal(self, rhs: Any) -> Optional[bool]:
        s = self._compare(rhs)
        return None if s is None else s <= 0

    def is_greater(self, rhs: Any) -> Optional[bool]:
        s = self._compare(rhs)
        return None if s is None else s > 0

    def is_greater_equal(self, rhs: Any) -> Optional[bool]:
        s = self._compare(rhs)
        return None if s is None else s >= 0

    # ============================================================
    # Patterns and substitution
    # ============================================================

    def match(self, pattern: Any, bindings: Optional[Dict[str, Any]] = None) -> Union[Bindings, type(NoMatch)]:
        """
        Match this expression against a pattern.

        Returns Bindings (truthy, possibly empty) on success, NoMatch otherwise.

        Example:
            if bindings := expr.match(["Add", "_a", "_b"]):
                print(bindings["_a"], bindings["_b"])
        """
        pattern = self.engine.box(pattern, canonical=True)
        return match_pattern(pattern, self, bindings)

    def subs(self, mapping: Dict[str, Any], canonical: bool = True) -> 'BoxedExpression':
        """Replace symbols by name."""
        return self

    def replace(self, rules: Any, recursive: bool = True, once: bool = False,
                iteration_limit: int = 1, trace=None) -> Optional['BoxedExpression']:
        """Apply rewriting rules, returning None if no rule matched."""
        ruleset = self.engine.rules(rules)
        return replace_rules(self, ruleset, recursive=recursive, once=once,
                             iteration_limit=iteration_limit, trace=trace)

    # ============================================================
    # Evaluation
    # ============================================================

    @property
    def value(self) -> Any:
        return None

    def simplify(self, rules: Any = None, trace=None) -> 'BoxedExpression':
        return self

    def evaluate(self) -> 'BoxedExpression':
        return self

    def N(self) -> 'BoxedExpression':
        return self

    # ============================================================
    # Python protocol
    # ============================================================

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.json!r})"

    def __str__(self) -> str:
        return self.latex


# ============================================================
# Numbers
# ============================================================

class BoxedNumber(BoxedExpression):
    """A numeric literal backed by exactly one numeric kind."""

    def __init__(self, ce, value: Any, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(ce, metadata)
        self._value = numeric.normalize(value)

    @property
    def head(self) -> str:
        return 'Number'

    @property
    def value(self) -> numeric.NumberType:
        return self._value

    @property
    def kind(self) -> str:
        return numeric.number_kind(self._value)

    @property
    def is_literal(self) -> bool:
        return True

    @property
    def is_number_literal(self) -> bool:
        return True

    @property
    def is_exact(self) -> bool:
        return numeric.is_exact(self._value)

    @property
    def is_nan(self) -> bool:
        return numeric.is_nan(self._value)

    @property
    def is_infinity(self) -> bool:
        return numeric.is_infinite(self._value)

    @property
    def as_float(self) -> Optional[float]:
        return numeric.to_float(self._value)

    @property
    def as_small_integer(self) -> Optional[int]:
        return numeric.as_small_integer(self._value)

    @property
    def as_rational(self):
        """Exact Fraction value, None for inexact numbers."""
        return self._value if self.is_exact else None

    @property
    def json(self) -> Any:
        with self.engine.numeric_context():
            return numeric.format_number(self._value)

    @property
    def complexity(self) -> int:
        return 1

    @property
    def domain(self):
        v = self._value
        ce = self.engine
        kind = self.kind
        if kind == numeric.RATIONAL:
            if v.denominator != 1:
                return ce.domain('RationalNumber')
            if v > 0:
                return ce.domain('PositiveInteger')
            if v < 0:
                return ce.domain('NegativeInteger')
            return ce.domain('NonNegativeInteger')
        if kind == numeric.COMPLEX:
            if numeric.is_nan(v):
                return ce.domain('Number')
            return ce.domain('ImaginaryNumber' if v.real == 0 else 'ComplexNumber')
        if numeric.is_nan(v):
            return ce.domain('Number')
        if numeric.is_infinite(v):
            return ce.domain('ExtendedRealNumber')
        return ce.domain('RealNumber')

    @property
    def sgn(self) -> SignType:
        s = numeric.sign(self._value)
        return NotReal if s is None else s

    @property
    def is_integer(self) -> Optional[bool]:
        return numeric.is_integer_value(self._value)

    @property
    def is_rational(self) -> Optional[bool]:
        if self.is_exact:
            return True
        return self.is_integer or None if self.kind != numeric.COMPLEX else False

    @property
    def is_real(self) -> Optional[bool]:
        return self.kind != numeric.COMPLEX and not self.is_nan

    @property
    def is_complex(self) -> Optional[bool]:
        return not self.is_nan

    def is_same(self, rhs: BoxedExpression) -> bool:
        if not isinstance(rhs, BoxedNumber) or self.kind != rhs.kind:
            return False
        if self.is_nan or rhs.is_nan:
            return self.is_nan and rhs.is_nan
        return self._value == rhs._value

    def N(self) -> BoxedExpression:
        ce = self.engine
        v = self._value
        if self.kind == numeric.RATIONAL:
            if v.denominator == 1:
                return self
            with ce.numeric_context():
                if ce.prefers_bignum:
                    return ce.number(numeric.to_bignum(v))
                return ce.number(float(v))
        return ce.apply_numeric_policy(self)


# ============================================================
# Symbols
# ============================================================

class BoxedSymbol(BoxedExpression):
    """An identifier: a constant, a variable or a function name."""

    def __init__(self, ce, name: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(ce, metadata)
        self._name = name

    @property
    def head(self) -> str:
        return 'Symbol'

    @property
    def symbol(self) -> str:
        return self._name

    @property
    def json(self) -> Any:
        return self._name

    @property
    def symbols(self) -> Set[str]:
        return {self._name}

    def has(self, names: Union[str, Iterable[str]]) -> bool:
        if isinstance(names, str):
            return self._name == names
        return self._name in names

    @property
    def symbol_definition(self):
        return self.engine.lookup_symbol(self._name)

    @property
    def function_definition(self):
        return self.engine.lookup_function(self._name)

    @property
    def is_constant(self) -> bool:
        definition = self.symbol_definition
        return definition is not None and definition.constant

    @property
    def is_pure(self) -> bool:
        return self.is_constant

    @property
    def value(self) -> Optional[BoxedExpression]:
        definition = self.symbol_definition
        return definition.value if definition is not None else None

    @property
    def domain(self):
        definition = self.symbol_definition
        if definition is not None:
            return definition.domain
        if self.function_definition is not None:
            return self.engine.domain('Function')
        if self._name.startswith('_'):
            return self.engine.domain('Anything')
        return self.engine.domain(self.engine.default_domain)

    def _flag(self, name: str) -> Optional[bool]:
        definition = self.symbol_definition
        if definition is None:
            return None
        return definition.flags.get(name)

    @property
    def sgn(self) -> SignType:
        if self._flag('is_zero'):
            return 0
        if self._flag('is_positive'):
            return 1
        if self._flag('is_negative'):
            return -1
        value = self.value
        if value is not None and value.is_number_literal:
            return value.sgn
        return None

    @property
    def is_zero(self) -> Optional[bool]:
        flag = self._flag('is_zero')
        if flag is not None:
            return flag
        if self._flag('is_not_zero'):
            return False
        return super().is_zero

    @property
    def is_nonnegative(self) -> Optional[bool]:
        flag = self._flag('is_nonnegative')
        return flag if flag is not None else super().is_nonnegative

    @property
    def is_nonpositive(self) -> Optional[bool]:
        flag = self._flag('is_nonpositive')
        return flag if flag is not None else super().is_nonpositive

    @property
    def is_integer(self) -> Optional[bool]:
        flag = self._flag('is_integer')
        return flag if flag is not None else super().is_integer

    @property
    def is_real(self) -> Optional[bool]:
        flag = self._flag('is_real')
        return flag if flag is not None else super().is_real

    def is_same(self, rhs: BoxedExpression) -> bool:
        return isinstance(rhs, BoxedSymbol) and rhs._name == self._name

    def subs(self, mapping: Dict[str, Any], canonical: bool = True) -> BoxedExpression:
        if self._name in mapping:
            return self.engine.box(mapping[self._name], canonical=canonical)
        return self

    def evaluate(self) -> BoxedExpression:
        definition = self.symbol_definition
        if definition is None or definition.hold:
            return self
        value = definition.value
        return value.evaluate() if value is not None else self

    def simplify(self, rules: Any = None, trace=None) -> BoxedExpression:
        definition = self.symbol_definition
        if definition is None or definition.hold or not definition.constant:
            return self
        value = definition.value
        if value is not None and value.is_number_literal and value.is_exact:
            return value
        return self

    def N(self) -> BoxedExpression:
        definition = self.symbol_definition
        if definition is None:
            return self
        with self.engine.numeric_context():
            value = definition.value
            if value is None:
                return self
            return value.N()


# ============================================================
# Strings
# ============================================================

class BoxedString(BoxedExpression):
    """A string literal. Its MathJSON form is the text wrapped in single quotes."""

    def __init__(self, ce, text: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(ce, metadata)
        self._text = text

    @property
    def head(self) -> str:
        return 'String'

    @property
    def string(self) -> str:
        return self._text

    @property
    def is_literal(self) -> bool:
        return True

    @property
    def json(self) -> Any:
        return f"'{self._text}'"

    @property
    def domain(self):
        return self.engine.domain('String')

    def is_same(self, rhs: BoxedExpression) -> bool:
        return isinstance(rhs, BoxedString) and rhs._text == self._text


# ============================================================
# Dictionaries
# ============================================================

class BoxedDictionary(BoxedExpression):
    """An ordered mapping from string keys to expressions."""

    def __init__(self, ce, entries: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None,
                 canonical: bool = False):
        super().__init__(ce, metadata)
        self._entries: Dict[str, BoxedExpression] = {
            key: ce.box(value, canonical=canonical) for key, value in entries.items()
        }
        self._is_canonical = canonical

    @property
    def head(self) -> str:
        return 'Dictionary'

    @property
    def keys(self) -> List[str]:
        return list(self._entries)

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    @property
    def json(self) -> Any:
        return {'dict': {key: value.json for key, value in self._entries.items()}}

    @property
    def domain(self):
        return self.engine.domain('Dictionary')

    @property
    def symbols(self) -> Set[str]:
        result: Set[str] = set()
        for value in self._entries.values():
            result |= value.symbols
        return result

    def has(self, names: Union[str, Iterable[str]]) -> bool:
        return any(value.has(names) for value in self._entries.values())

    @property
    def is_canonical(self) -> bool:
        return self._is_canonical

    @property
    def canonical(self) -> BoxedExpression:
        if self._is_canonical:
            return self
        return BoxedDictionary(self.engine, self._entries, canonical=True)

    @property
    def is_valid(self) -> bool:
        return all(value.is_valid for value in self._entries.values())

    @property
    def is_pure(self) -> bool:
        return all(value.is_pure for value in self._entries.values())

    def is_same(self, rhs: BoxedExpression) -> bool:
        if not isinstance(rhs, BoxedDictionary) or self.keys != rhs.keys:
            return False
        return all(value.is_same(rhs._entries[key]) for key, value in self._entries.items())

    def subs(self, mapping: Dict[str, Any], canonical: bool = True) -> BoxedExpression:
        entries = {key: value.subs(mapping, canonical) for key, value in self._entries.items()}
        return BoxedDictionary(self.engine, entries, canonical=canonical)

    def evaluate(self) -> BoxedExpression:
        entries = {key: value.evaluate() for key, value in self._entries.items()}
        return BoxedDictionary(self.engine, entries, canonical=True)

    def N(self) -> BoxedExpression:
        entries = {key: value.N() for key, value in self._entries.items()}
        return BoxedDictionary(self.engine, entries, canonical=True)
