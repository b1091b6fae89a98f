"""
The compute engine.

A ComputeEngine owns the scope stack of definitions, the numeric policy
(precision, numeric mode, tolerance), the resource budgets and the LaTeX
syntax. Every boxed expression holds a reference to the engine that
created it.

Example:
    from boxmath import ComputeEngine

    ce = ComputeEngine()
    expr = ce.parse(r"\\sqrt{12}")
    print(expr.simplify().json)        # ['Multiply', 2, ['Sqrt', 3]]
    print(ce.parse(r"\\frac{\\pi}{2}").N().value)
"""

from contextlib import contextmanager
from fractions import Fraction
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import logging
import time
import weakref

import mpmath

from . import numeric
from .definitions import FunctionDefinition, Scope, SymbolDefinition
from .domains import ancestors, BoxedDomain, DOMAIN_PARENTS
from .expression import BoxedDictionary, BoxedExpression, BoxedNumber, BoxedString, BoxedSymbol
from .function import BoxedFunction, make_canonical_function
from .latex import LatexSyntax
from .library import STANDARD_LIBRARIES
from .library.arithmetic import (
    canonical_add, canonical_divide, canonical_multiply, canonical_negate, canonical_power,
    normal_form,
)
from .order import expression_cost
from .rules import box_rules, RuleSet
from .signals import log_warnings, RecursionLimitExceeded, Signal, TimeLimitExceeded
from .simplify_rules import STANDARD_RULES

logger = logging.getLogger('boxmath')

NUMERIC_MODES = ('auto', 'machine', 'bignum', 'complex')

# Heads accepted by assume()
ASSUMPTION_HEADS = ('Element', 'Greater', 'Less', 'GreaterEqual', 'LessEqual', 'Equal', 'NotEqual')

# Past this multiple of the time limit, a running operation is aborted
HARD_TIME_LIMIT_FACTOR = 2


def _precision_digits(value: Union[int, str]) -> int:
    if value == 'machine':
        return numeric.MACHINE_PRECISION
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Invalid precision: {value!r}. Use a positive number of digits or 'machine'")
    return value


class ComputeEngine:
    """
    Symbolic computation over MathJSON expressions.

    Args:
        precision: Digits of bignum computations, or 'machine' (15).
        numeric_mode: 'auto', 'machine', 'bignum' or 'complex'.
        tolerance: Values closer to zero than this are treated as zero
            when comparing numerically.
        iteration_limit: Maximum iterations of loops (simplification,
            big operators).
        recursion_limit: Maximum nesting of canonical/simplify/evaluate/N.
        time_limit: Seconds allowed to a top-level operation.
        memory_limit: Advisory memory budget in bytes.
        libraries: Extra definition tables, loaded after the standard ones.
        latex_options: Serialization options of the LaTeX syntax.
        on_warning: Callable receiving a list of warning Signals. Defaults
            to logging them on the 'boxmath' logger.
        cost_function: Cost of an expression, used by simplify.
        default_domain: Domain of undeclared symbols.
    """

    def __init__(self, precision: Union[int, str] = 100, numeric_mode: str = 'auto',
                 tolerance: float = 1e-10, iteration_limit: int = 1024,
                 recursion_limit: int = 256, time_limit: Optional[float] = 2.0,
                 memory_limit: Optional[int] = None,
                 libraries: Optional[Iterable[Dict[str, Any]]] = None,
                 latex_options: Optional[Dict[str, Any]] = None,
                 on_warning: Optional[Callable[[List[Signal]], Any]] = None,
                 cost_function: Optional[Callable[[BoxedExpression], int]] = None,
                 default_domain: str = 'ExtendedRealNumber'):
        if numeric_mode not in NUMERIC_MODES:
            raise ValueError(f"Unknown numeric mode: {numeric_mode}. Use one of: {', '.join(NUMERIC_MODES)}")
        self._precision = _precision_digits(precision)
        self._numeric_mode = numeric_mode
        self._tolerance = tolerance
        self.default_domain = default_domain
        self.on_warning = on_warning if on_warning is not None else log_warnings
        self.cost_function = cost_function if cost_function is not None else expression_cost

        self._root = Scope(time_limit=time_limit, memory_limit=memory_limit,
                           recursion_limit=recursion_limit, iteration_limit=iteration_limit)
        self._scopes: List[Scope] = [self._root]
        self._domains: Dict[str, BoxedDomain] = {}
        self._caches: Dict[str, Dict[str, Any]] = {}
        self._registry: 'weakref.WeakSet[BoxedExpression]' = weakref.WeakSet()
        self._depth = 0
        self._started: Optional[float] = None
        self._pending: List[Signal] = []
        self._assumed: Dict[str, Dict[str, Any]] = {}

        for library in list(STANDARD_LIBRARIES) + list(libraries or []):
            self.define_symbols(library.get('symbols', {}))
            self.define_functions(library.get('functions', {}))

        self.latex_syntax = LatexSyntax(self, latex_options)

    def __repr__(self) -> str:
        return (f"ComputeEngine(precision={self._precision}, numeric_mode={self._numeric_mode!r}, "
                f"scopes={len(self._scopes)})")

    # ============================================================
    # Configuration
    # ============================================================

    @property
    def precision(self) -> int:
        return self._precision

    @precision.setter
    def precision(self, value: Union[int, str]):
        digits = _precision_digits(value)
        if digits != self._precision:
            self._precision = digits
            self._unbind()

    @property
    def numeric_mode(self) -> str:
        return self._numeric_mode

    @numeric_mode.setter
    def numeric_mode(self, mode: str):
        if mode not in NUMERIC_MODES:
            raise ValueError(f"Unknown numeric mode: {mode}. Use one of: {', '.join(NUMERIC_MODES)}")
        if mode != self._numeric_mode:
            self._numeric_mode = mode
            self._unbind()

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @tolerance.setter
    def tolerance(self, value: float):
        if value < 0:
            raise ValueError(f"Tolerance must be non-negative, got {value!r}")
        if value != self._tolerance:
            self._tolerance = value
            self._unbind()

    @property
    def iteration_limit(self) -> int:
        return self.context.limit('iteration_limit')

    @iteration_limit.setter
    def iteration_limit(self, value: int):
        self._root.iteration_limit = value

    @property
    def recursion_limit(self) -> int:
        return self.context.limit('recursion_limit')

    @recursion_limit.setter
    def recursion_limit(self, value: int):
        self._root.recursion_limit = value

    @property
    def time_limit(self) -> Optional[float]:
        return self.context.limit('time_limit')

    @time_limit.setter
    def time_limit(self, value: Optional[float]):
        self._root.time_limit = value

    @property
    def memory_limit(self) -> Optional[int]:
        return self.context.limit('memory_limit')

    @property
    def prefers_bignum(self) -> bool:
        """True when numeric evaluation uses mpmath at the engine precision."""
        if self._numeric_mode == 'bignum':
            return True
        return self._numeric_mode in ('auto', 'complex') and self._precision > numeric.MACHINE_PRECISION

    @property
    def allows_complex(self) -> bool:
        return self._numeric_mode in ('auto', 'complex')

    def numeric_context(self):
        """Context manager setting the mpmath working precision."""
        return mpmath.workdps(self._precision)

    def apply_numeric_policy(self, number: BoxedNumber) -> BoxedNumber:
        """
        Convert a numeric result to the representation of the numeric mode.

        Complex values lose their imaginary part in modes without complex
        numbers, bignums become floats when machine precision is preferred.
        """
        value = number.value
        kind = numeric.number_kind(value)
        if kind == numeric.COMPLEX and not self.allows_complex:
            value = numeric.real_part(value)
            kind = numeric.number_kind(value)
        if not self.prefers_bignum:
            if kind == numeric.BIGNUM:
                value = float(value)
            elif isinstance(value, mpmath.mpc):
                value = complex(value)
        if value is number.value:
            return number
        return self.number(value)

    def chop(self, value: Any) -> Any:
        return numeric.chop(value, self._tolerance)

    # ============================================================
    # Boxing
    # ============================================================

    def box(self, expr: Any, canonical: bool = False) -> BoxedExpression:
        """
        Box a MathJSON expression.

        Accepts numbers, strings (symbols, or text in single quotes),
        nested lists, metadata dictionaries and boxed expressions.
        """
        if isinstance(expr, BoxedExpression):
            return expr.canonical if canonical else expr
        if isinstance(expr, bool):
            return self.symbol('True' if expr else 'False')
        if isinstance(expr, (int, float, Fraction, complex, mpmath.mpf, mpmath.mpc)):
            return self.number(expr)
        if isinstance(expr, str):
            if len(expr) >= 2 and expr[0] == "'" and expr[-1] == "'":
                return self.string(expr[1:-1])
            return self.symbol(expr)
        if isinstance(expr, dict):
            metadata = {key: expr.get(key) for key in ('latex', 'wikidata')}
            if 'num' in expr:
                return self.number(expr['num'], metadata)
            if 'sym' in expr:
                return self.symbol(expr['sym'], metadata)
            if 'str' in expr:
                return self.string(expr['str'], metadata)
            if 'fn' in expr:
                return self._box_function(expr['fn'], canonical, metadata)
            if 'dict' in expr:
                return BoxedDictionary(self, expr['dict'], metadata, canonical=canonical)
            raise ValueError(f"Invalid MathJSON object: {expr!r}")
        if isinstance(expr, (list, tuple)):
            return self._box_function(list(expr), canonical)
        raise TypeError(f"Cannot box {type(expr).__name__}: {expr!r}")

    def _box_function(self, expr: list, canonical: bool,
                      metadata: Optional[Dict[str, Any]] = None) -> BoxedExpression:
        if not expr:
            raise ValueError("A MathJSON function expression needs a head")
        head, ops = expr[0], expr[1:]
        if head == 'Rational' and len(ops) == 2 and all(
                isinstance(x, int) and not isinstance(x, bool) for x in ops) and ops[1] != 0:
            return self.number(Fraction(ops[0], ops[1]), metadata)
        if isinstance(head, (list, tuple, dict)):
            head = self.box(head, canonical=canonical)
        elif not isinstance(head, (str, BoxedExpression)):
            raise TypeError(f"Invalid function head: {head!r}")
        if canonical:
            return make_canonical_function(self, head, ops, metadata)
        return BoxedFunction(self, head, [self.box(op) for op in ops], metadata)

    def number(self, value: Any, metadata: Optional[Dict[str, Any]] = None) -> BoxedNumber:
        if isinstance(value, str):
            with self.numeric_context():
                value = numeric.parse_number_string(value)
        elif isinstance(value, dict) and 'num' in value:
            return self.number(value['num'], metadata)
        return BoxedNumber(self, value, metadata)

    def symbol(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> BoxedSymbol:
        return BoxedSymbol(self, name, metadata)

    def string(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> BoxedString:
        return BoxedString(self, text, metadata)

    def fn(self, head: Union[str, BoxedExpression], ops: Iterable[Any],
           canonical: bool = True) -> BoxedExpression:
        """A function application, canonical by default."""
        if canonical:
            return make_canonical_function(self, head, list(ops))
        return BoxedFunction(self, head, [self.box(op) for op in ops])

    def _fn(self, head: Union[str, BoxedExpression], ops: Iterable[Any],
            metadata: Optional[Dict[str, Any]] = None, definition=None) -> BoxedFunction:
        """A canonical function node built as is, without canonicalization rules."""
        return BoxedFunction(self, head, [self.box(op, canonical=True) for op in ops],
                             metadata, canonical=True, definition=definition)

    def tuple(self, ops: Iterable[Any]) -> BoxedFunction:
        return self._fn('Tuple', ops)

    def error(self, code: Any, where: Any = None) -> BoxedFunction:
        """
        An error marker.

        `code` is an error name as a MathJSON string ("'missing'") or an
        ["ErrorCode", name, *args] expression. `where` is the offending
        expression, if any.
        """
        ops = [self.box(code)]
        if where is not None:
            ops.append(self.box(where))
        return BoxedFunction(self, 'Error', ops, canonical=True)

    def domain(self, dom: Any) -> BoxedDomain:
        if isinstance(dom, BoxedDomain):
            return dom
        if isinstance(dom, BoxedExpression):
            dom = dom.json
        key = repr(dom)
        result = self._domains.get(key)
        if result is None:
            result = BoxedDomain(self, dom)
            self._domains[key] = result
        return result

    # ============================================================
    # Arithmetic
    # ============================================================

    def add(self, ops: Iterable[Any]) -> BoxedExpression:
        return canonical_add(self, [self.box(op, canonical=True) for op in ops])

    def mul(self, ops: Iterable[Any]) -> BoxedExpression:
        return canonical_multiply(self, [self.box(op, canonical=True) for op in ops])

    def negate(self, x: Any) -> BoxedExpression:
        return canonical_negate(self, self.box(x, canonical=True))

    def divide(self, num: Any, den: Any) -> BoxedExpression:
        return canonical_divide(self, self.box(num, canonical=True), self.box(den, canonical=True))

    def power(self, base: Any, exponent: Any) -> BoxedExpression:
        return canonical_power(self, self.box(base, canonical=True), self.box(exponent, canonical=True))

    def normal_form(self, x: Any) -> BoxedExpression:
        """x with differences and quotients written as sums and products."""
        return normal_form(self, self.box(x, canonical=True))

    # ============================================================
    # Scopes and definitions
    # ============================================================

    @property
    def context(self) -> Scope:
        """The innermost scope."""
        return self._scopes[-1]

    def push_scope(self, **limits) -> Scope:
        scope = Scope(parent=self.context, **limits)
        self._scopes.append(scope)
        return scope

    def pop_scope(self) -> None:
        if len(self._scopes) == 1:
            raise ValueError("Cannot pop the root scope")
        self._scopes.pop()
        self._unbind()

    def lookup_symbol(self, name: str) -> Optional[SymbolDefinition]:
        return self.context.lookup_symbol(name)

    def lookup_function(self, name: str) -> Optional[FunctionDefinition]:
        return self.context.lookup_function(name)

    def define_symbol(self, name: str, options: Optional[Dict[str, Any]] = None) -> SymbolDefinition:
        definition = SymbolDefinition(self, name, **(options or {}))
        self.context.symbols[name] = definition
        return definition

    def define_function(self, name: str, options: Optional[Dict[str, Any]] = None) -> FunctionDefinition:
        definition = FunctionDefinition(self, name, **(options or {}))
        self.context.functions[name] = definition
        return definition

    def define_symbols(self, table: Dict[str, Dict[str, Any]]) -> None:
        for name, options in table.items():
            self.define_symbol(name, options)

    def define_functions(self, table: Dict[str, Dict[str, Any]]) -> None:
        for name, options in table.items():
            self.define_function(name, options)

    def define_default_function(self, head: str) -> FunctionDefinition:
        """Definition of an unknown function head, added to the current scope."""
        return self.define_function(head)

    def declare(self, name: str, options: Any = None) -> SymbolDefinition:
        """
        Declare a symbol in the current scope.

        `options` is a domain, or a dictionary of SymbolDefinition options:
            ce.declare('n', 'Integer')
            ce.declare('x', {'domain': 'RealNumber', 'is_positive': True})
        """
        if isinstance(options, (str, list, BoxedDomain)):
            options = {'domain': options}
        definition = self.define_symbol(name, options)
        self._unbind()
        return definition

    def assign(self, name: str, value: Any) -> None:
        """Set the value of a symbol, declaring it if needed."""
        definition = self.lookup_symbol(name)
        if definition is None:
            definition = self.define_symbol(name)
        definition.value = value
        self._unbind()

    def assume(self, predicate: Any) -> str:
        """
        Record a predicate about a symbol.

        The predicate is MathJSON or LaTeX, one of Element, Greater, Less,
        GreaterEqual, LessEqual, Equal or NotEqual with a symbol on the
        left. Comparisons with zero set the sign flags of the symbol.

        Returns 'ok'.
        """
        if isinstance(predicate, str):
            pred = self.parse(predicate, canonical=True)
        else:
            pred = self.box(predicate, canonical=True)
        if pred.head not in ASSUMPTION_HEADS or pred.nops != 2:
            raise ValueError(f"Unsupported assumption: {pred.json!r}. "
                             f"Use one of: {', '.join(ASSUMPTION_HEADS)}")
        name = pred.op1.symbol
        if name is None:
            raise ValueError(f"An assumption needs a symbol on the left: {pred.json!r}")

        definition = self.lookup_symbol(name)
        if definition is None:
            definition = self.define_symbol(name)
        if definition.constant:
            raise ValueError(f"Cannot make assumptions about constant {name}")
        saved = self._assumed.setdefault(name, {
            'definition': definition,
            'flags': dict(definition.flags),
            'domain': definition._domain,
        })
        saved.setdefault('keys', []).append(repr(pred.json))
        self.context.assumptions[repr(pred.json)] = True

        for flag, value in self._assumption_flags(pred).items():
            definition.flags[flag] = value
        if pred.head == 'Element' and pred.op2.symbol in DOMAIN_PARENTS:
            definition.domain = pred.op2.symbol
        self._unbind()
        return 'ok'

    @staticmethod
    def _assumption_flags(pred: BoxedExpression) -> Dict[str, bool]:
        head, rhs = pred.head, pred.op2
        if head == 'Element':
            names = ancestors(rhs.symbol) if rhs.symbol in DOMAIN_PARENTS else frozenset()
            flags = {}
            for dom, flag in (('Integer', 'is_integer'), ('RationalNumber', 'is_rational'),
                              ('RealNumber', 'is_real'), ('PositiveNumber', 'is_positive'),
                              ('NegativeNumber', 'is_negative'),
                              ('NonNegativeNumber', 'is_nonnegative'),
                              ('NonPositiveNumber', 'is_nonpositive')):
                if dom in names:
                    flags[flag] = True
            return flags
        s = rhs.sgn if rhs.is_number_literal else None
        if s is None or not isinstance(s, int):
            return {}
        if head == 'Equal' and s == 0:
            return {'is_zero': True, 'is_real': True}
        if head == 'NotEqual' and s == 0:
            return {'is_not_zero': True}
        if head == 'Greater' and s >= 0 or head == 'GreaterEqual' and s > 0:
            return {'is_positive': True, 'is_not_zero': True, 'is_real': True}
        if head == 'GreaterEqual' and s == 0:
            return {'is_nonnegative': True, 'is_real': True}
        if head == 'Less' and s <= 0 or head == 'LessEqual' and s < 0:
            return {'is_negative': True, 'is_not_zero': True, 'is_real': True}
        if head == 'LessEqual' and s == 0:
            return {'is_nonpositive': True, 'is_real': True}
        return {}

    def forget(self, name: Optional[str] = None) -> None:
        """Remove the assumptions about a symbol, or all of them."""
        names = list(self._assumed) if name is None else [name]
        for symbol in names:
            saved = self._assumed.pop(symbol, None)
            if saved is None:
                continue
            definition = saved['definition']
            definition.flags.update(saved['flags'])
            definition._domain = saved['domain']
            for scope in self._scopes:
                for key in saved.get('keys', []):
                    scope.assumptions.pop(key, None)
        self._unbind()

    @property
    def assumptions(self) -> Dict[str, bool]:
        return self.context.all_assumptions()

    # ============================================================
    # Rules and cost
    # ============================================================

    def rules(self, rules: Any) -> RuleSet:
        return box_rules(self, rules)

    def simplification_rules(self) -> RuleSet:
        """The standard rule set used by simplify(), boxed once per engine."""
        return self.cache('standard-rules', lambda: box_rules(self, STANDARD_RULES))

    def cost(self, expr: Any) -> int:
        return self.cost_function(self.box(expr, canonical=True))

    # ============================================================
    # Budgets, signals and caches
    # ============================================================

    @contextmanager
    def recursion_guard(self, head: Optional[str] = None):
        """
        Track the nesting of engine operations.

        The outermost entry starts the time budget and delivers the warnings
        collected during the operation when it exits.
        """
        if self._depth == 0:
            self._started = time.monotonic()
        self._depth += 1
        try:
            limit = self.recursion_limit
            if limit is not None and self._depth > limit:
                raise RecursionLimitExceeded(limit, head)
            time_limit = self.time_limit
            if time_limit is not None and self._elapsed() > time_limit * HARD_TIME_LIMIT_FACTOR:
                raise TimeLimitExceeded(time_limit)
            yield
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._started = None
                self._flush_warnings()

    def _elapsed(self) -> float:
        return 0.0 if self._started is None else time.monotonic() - self._started

    def deadline_reached(self) -> bool:
        """True when the current top-level operation has used up its time budget."""
        time_limit = self.time_limit
        return time_limit is not None and self._started is not None and self._elapsed() > time_limit

    def warn(self, message: str, head: Optional[str] = None) -> None:
        self._pending.append(Signal(message, 'warning', head))
        if self._depth == 0:
            self._flush_warnings()

    def _flush_warnings(self) -> None:
        if not self._pending:
            return
        signals, self._pending = self._pending, []
        self.on_warning(signals)

    def cache(self, name: str, build: Callable[[], Any],
              purge: Optional[Callable[[Any], Any]] = None) -> Any:
        """
        A per-engine cached value.

        `purge` is called with the cached value when cached values are
        invalidated; it returns the value to keep, or None to rebuild it
        on next access.
        """
        entry = self._caches.get(name)
        if entry is None:
            entry = {'value': build(), 'purge': purge}
            self._caches[name] = entry
        return entry['value']

    def _register(self, expr: BoxedExpression) -> None:
        self._registry.add(expr)

    def _unbind(self) -> None:
        """Invalidate cached definitions and values after a change of configuration."""
        for expr in list(self._registry):
            expr.unbind()
        self._registry = weakref.WeakSet()
        for scope in self._scopes:
            for definition in scope.symbols.values():
                definition.unbind()
        for name, entry in list(self._caches.items()):
            if entry['purge'] is None:
                continue
            value = entry['purge'](entry['value'])
            if value is None:
                del self._caches[name]
            else:
                entry['value'] = value
        logger.debug("Unbound cached values (precision=%s, mode=%s)", self._precision, self._numeric_mode)

    # ============================================================
    # LaTeX
    # ============================================================

    def parse(self, latex: str, canonical: bool = False) -> BoxedExpression:
        """Parse LaTeX. The result is not canonical unless requested."""
        return self.box(self.latex_syntax.parse(latex), canonical=canonical)

    def serialize(self, expr: Any, **options) -> str:
        """Serialize an expression (boxed or MathJSON) to LaTeX."""
        if isinstance(expr, BoxedExpression):
            expr = expr.json
        return self.latex_syntax.serialize(expr, **options)
