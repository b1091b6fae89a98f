"""
Definition registry.

Function and symbol definitions are looked up by name through a stack of
scopes. A definition is a record of flags plus optional handler callables;
the core dispatches by looking up a definition and calling the handler it
holds.

Handlers all take the engine and the (canonical) operands:

    def simplify(ce, ops) -> Optional[BoxedExpression]

and return None when they have nothing to contribute.
"""

from typing import Any, Callable, Dict, List, Optional

HOLD_POLICIES = ('none', 'all', 'first', 'rest', 'last', 'most')

DEFAULT_COMPLEXITY = 100000

FUNCTION_FLAGS = {
    'commutative': False,
    'associative': False,
    'idempotent': False,
    'involution': False,
    'threadable': False,
    'pure': True,
    'inert': False,
    'scoped': False,
    'numeric': False,
}

ASSUMPTION_FLAGS = (
    'is_positive', 'is_negative', 'is_nonnegative', 'is_nonpositive',
    'is_zero', 'is_not_zero', 'is_integer', 'is_rational', 'is_real',
    'is_complex',
)

HANDLERS = ('canonical', 'simplify', 'evaluate', 'N', 'sgn', 'compile')

Handler = Callable[..., Any]


class FunctionSignature:
    """
    Domain and handlers of a function.

    `evaluate` is either a callable or a MathJSON template using the
    positional placeholders `_1`, `_2`, ... `_`, `__` and `_#`.
    """

    def __init__(self, ce, domain: Any = None, codomain: Optional[Handler] = None,
                 canonical: Optional[Handler] = None, simplify: Optional[Handler] = None,
                 evaluate: Any = None, N: Optional[Handler] = None,
                 sgn: Optional[Handler] = None, compile: Optional[Handler] = None):
        self.engine = ce
        if domain is None or domain == 'Function':
            domain = ['Function', ['Sequence', 'Anything'], 'Anything']
        self.domain = ce.domain(domain)
        if self.domain.ctor != 'Function':
            raise ValueError(f"A function signature needs a Function domain, got {domain!r}")
        self.codomain = codomain
        self.canonical = canonical
        self.simplify = simplify
        self.evaluate = evaluate
        self.N = N
        self.sgn = sgn
        self.compile = compile
        self._template = None

    @property
    def evaluate_template(self):
        """The boxed lambda template when `evaluate` is not a callable."""
        if self.evaluate is None or callable(self.evaluate):
            return None
        if self._template is None:
            self._template = self.engine.box(self.evaluate, canonical=True)
        return self._template


class FunctionDefinition:
    """Flags, complexity, hold policy and signature of a function head."""

    def __init__(self, ce, name: str, signature: Optional[Dict[str, Any]] = None,
                 complexity: int = DEFAULT_COMPLEXITY, hold: str = 'none',
                 description: Optional[str] = None, wikidata: Optional[str] = None,
                 **flags):
        if hold not in HOLD_POLICIES:
            raise ValueError(f"Unknown hold policy for {name}: {hold}. "
                             f"Use one of: {', '.join(HOLD_POLICIES)}")
        unknown = set(flags) - set(FUNCTION_FLAGS)
        if unknown:
            raise TypeError(f"Unknown options in definition of {name}: {', '.join(sorted(unknown))}")
        self.name = name
        self.complexity = complexity
        self.hold = hold
        self.description = description
        self.wikidata = wikidata
        for flag, default in FUNCTION_FLAGS.items():
            setattr(self, flag, bool(flags.get(flag, default)))
        self.signature = FunctionSignature(ce, **(signature or {}))

    def __repr__(self) -> str:
        flags = [f for f in FUNCTION_FLAGS if getattr(self, f) and f != 'pure']
        return f"FunctionDefinition({self.name}, complexity={self.complexity}, flags={flags})"


class SymbolDefinition:
    """
    Domain, value and assumption flags of a symbol.

    The value is a number, a MathJSON expression, a boxed expression, or a
    callable `value(ce)` returning one of those; callables are consulted on
    every access so that values can depend on the engine precision.
    """

    def __init__(self, ce, name: str, domain: Any = None, value: Any = None,
                 constant: bool = False, hold: bool = False,
                 description: Optional[str] = None, wikidata: Optional[str] = None,
                 **flags):
        unknown = set(flags) - set(ASSUMPTION_FLAGS)
        if unknown:
            raise TypeError(f"Unknown options in definition of {name}: {', '.join(sorted(unknown))}")
        self.engine = ce
        self.name = name
        self.constant = constant
        self.hold = hold
        self.description = description
        self.wikidata = wikidata
        self.flags: Dict[str, Optional[bool]] = {f: flags.get(f) for f in ASSUMPTION_FLAGS}
        self._value = value
        self._boxed_value = None
        self._domain = ce.domain(domain) if domain is not None else None

    @property
    def domain(self):
        if self._domain is not None:
            return self._domain
        value = self.value
        if value is not None:
            return value.domain
        return self.engine.domain(self.engine.default_domain)

    @domain.setter
    def domain(self, dom: Any):
        self._domain = self.engine.domain(dom)

    @property
    def value(self):
        """The boxed canonical value, or None."""
        if self._value is None:
            return None
        if callable(self._value):
            return self.engine.box(self._value(self.engine), canonical=True)
        if self._boxed_value is None:
            self._boxed_value = self.engine.box(self._value, canonical=True)
        return self._boxed_value

    @value.setter
    def value(self, value: Any):
        if self.constant:
            raise ValueError(f"Cannot change the value of constant {self.name}")
        self._value = value
        self._boxed_value = None

    def unbind(self) -> None:
        if self._boxed_value is not None:
            self._boxed_value.unbind()

    def __repr__(self) -> str:
        return f"SymbolDefinition({self.name}, constant={self.constant})"


class Scope:
    """
    A frame of the scope stack.

    Holds symbol and function tables, assumptions (predicate key -> bool)
    and resource limits. Limits left as None are inherited from the parent.
    """

    def __init__(self, parent: Optional['Scope'] = None, time_limit: Optional[float] = None,
                 memory_limit: Optional[int] = None, recursion_limit: Optional[int] = None,
                 iteration_limit: Optional[int] = None):
        self.parent = parent
        self.symbols: Dict[str, SymbolDefinition] = {}
        self.functions: Dict[str, FunctionDefinition] = {}
        self.assumptions: Dict[str, bool] = {}
        self.time_limit = time_limit
        self.memory_limit = memory_limit
        self.recursion_limit = recursion_limit
        self.iteration_limit = iteration_limit

    def lookup_symbol(self, name: str) -> Optional[SymbolDefinition]:
        scope = self
        while scope is not None:
            if name in scope.symbols:
                return scope.symbols[name]
            scope = scope.parent
        return None

    def lookup_function(self, name: str) -> Optional[FunctionDefinition]:
        scope = self
        while scope is not None:
            if name in scope.functions:
                return scope.functions[name]
            scope = scope.parent
        return None

    def limit(self, name: str) -> Any:
        """Innermost non-None value of a resource limit."""
        scope = self
        while scope is not None:
            value = getattr(scope, name)
            if value is not None:
                return value
            scope = scope.parent
        return None

    def all_assumptions(self) -> Dict[str, bool]:
        """Assumptions visible from this scope, inner ones masking outer ones."""
        chain: List[Scope] = []
        scope = self
        while scope is not None:
            chain.append(scope)
            scope = scope.parent
        result: Dict[str, bool] = {}
        for scope in reversed(chain):
            result.update(scope.assumptions)
        return result
