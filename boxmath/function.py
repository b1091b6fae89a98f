"""
Function applications and the canonical/simplify/evaluate/N pipelines.

The behaviour of a function node is driven by the definition bound to its
head: the core looks the definition up by name and calls the handler it
holds, falling back to generic structural rules when the handler is absent
or returns None.
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Union

from .canonical import flatten_ops, flatten_sequence, hold_map, validate_signature
from .expression import BoxedExpression, SignType
from .order import function_complexity, sort_ops
from .rules import RewriteTrace, replace

# A rewrite is accepted only if it does not grow the cost by more than this factor
SIMPLIFY_COST_FACTOR = 1.7


def _head_name(head: Union[str, BoxedExpression]) -> str:
    return head if isinstance(head, str) else str(head.json)


class BoxedFunction(BoxedExpression):
    """
    A function application: a head and a tuple of operands.

    The head is a name or, for higher-order heads such as
    ["InverseFunction", "Sin"], a boxed expression.
    """

    def __init__(self, ce, head: Union[str, BoxedExpression], ops: Iterable[BoxedExpression],
                 metadata: Optional[Dict[str, Any]] = None, canonical: bool = False,
                 definition=None):
        super().__init__(ce, metadata)
        self._head = head
        self._ops = tuple(ops)
        self._is_canonical = canonical
        self._canonical: Optional[BoxedExpression] = self if canonical else None
        self._def = definition if canonical else None
        self._value: Optional[BoxedExpression] = None
        self._numeric_value: Optional[BoxedExpression] = None
        self._is_pure: Optional[bool] = None

    # ============================================================
    # Structure
    # ============================================================

    @property
    def head(self) -> Union[str, BoxedExpression]:
        return self._head

    @property
    def ops(self) -> tuple:
        return self._ops

    @property
    def is_function(self) -> bool:
        return True

    @property
    def json(self) -> Any:
        head = self._head if isinstance(self._head, str) else self._head.json
        return [head] + [op.json for op in self._ops]

    @property
    def complexity(self) -> int:
        return function_complexity(self._head, self.function_definition)

    @property
    def symbols(self) -> Set[str]:
        result: Set[str] = set()
        if not isinstance(self._head, str):
            result |= self._head.symbols
        for op in self._ops:
            result |= op.symbols
        return result

    def has(self, names: Union[str, Iterable[str]]) -> bool:
        if isinstance(names, str):
            names = [names]
        names = list(names)
        if isinstance(self._head, str):
            if self._head in names:
                return True
        elif self._head.has(names):
            return True
        return any(op.has(names) for op in self._ops)

    # ============================================================
    # Canonical form and definition
    # ============================================================

    @property
    def is_canonical(self) -> bool:
        return self._is_canonical

    @property
    def canonical(self) -> BoxedExpression:
        if self._canonical is None:
            self._canonical = make_canonical_function(self.engine, self._head, self._ops,
                                                      {'wikidata': self.wikidata})
        return self._canonical

    @property
    def function_definition(self):
        """The bound definition. Non-canonical nodes are never bound."""
        if not self._is_canonical or not isinstance(self._head, str):
            return None
        if self._def is None:
            self._def = self.engine.lookup_function(self._head)
            if self._def is not None:
                self.engine._register(self)
        return self._def

    @property
    def is_valid(self) -> bool:
        if self._head == 'Error':
            return False
        if not isinstance(self._head, str) and not self._head.is_valid:
            return False
        return all(op.is_valid for op in self._ops)

    @property
    def is_pure(self) -> bool:
        if self._is_pure is None:
            definition = self.function_definition
            pure = definition.pure if definition is not None else False
            self._is_pure = pure and all(op.is_pure for op in self._ops)
        return self._is_pure

    def unbind(self) -> None:
        self._value = None
        self._numeric_value = None
        self._def = None
        self._is_pure = None

    # ============================================================
    # Domain and sign
    # ============================================================

    @property
    def domain(self):
        ce = self.engine
        if not self._is_canonical:
            return self.canonical.domain
        definition = self.function_definition
        if definition is None:
            return ce.domain('Anything')
        signature = definition.signature
        if signature.codomain is not None:
            result = signature.codomain(ce, list(self._ops))
            if result is not None:
                return ce.domain(result)
        return signature.domain.codomain

    @property
    def sgn(self) -> SignType:
        if not self._is_canonical:
            return self.canonical.sgn
        if not self.is_valid:
            return None
        definition = self.function_definition
        if definition is not None and definition.signature.sgn is not None:
            result = definition.signature.sgn(self.engine, list(self._ops))
            if result is not None:
                return result
        if not self.is_pure:
            return None
        value = self.N()
        if value.is_number_literal:
            return value.sgn
        return None

    # ============================================================
    # Comparison and substitution
    # ============================================================

    def is_same(self, rhs: BoxedExpression) -> bool:
        if not isinstance(rhs, BoxedFunction) or len(rhs._ops) != len(self._ops):
            return False
        if isinstance(self._head, str):
            if self._head != rhs._head:
                return False
        elif isinstance(rhs._head, str) or not self._head.is_same(rhs._head):
            return False
        return all(a.is_same(b) for a, b in zip(self._ops, rhs._ops))

    def subs(self, mapping: Dict[str, Any], canonical: bool = True) -> BoxedExpression:
        head = self._head
        if not isinstance(head, str):
            head = head.subs(mapping, canonical)
        elif head in mapping:
            replacement = self.engine.box(mapping[head])
            if replacement.symbol is not None:
                head = replacement.symbol
            elif replacement.is_function:
                head = replacement
        ops = [op.subs(mapping, canonical) for op in self._ops]
        return self.engine.fn(head, ops, canonical=canonical)

    # ============================================================
    # Evaluation pipelines
    # ============================================================

    @property
    def value(self) -> Any:
        """Raw numeric value when the expression evaluates numerically to a number."""
        result = self.N()
        return result.value if result.is_number_literal else None

    def _cache(self, name: str, result: BoxedExpression) -> BoxedExpression:
        if self.is_pure:
            setattr(self, name, result)
            self.engine._register(self)
        return result

    def simplify(self, rules: Any = None, trace: Optional[RewriteTrace] = None) -> BoxedExpression:
        if not self.is_valid:
            return self
        if not self._is_canonical:
            return self.canonical.simplify(rules, trace)
        ce = self.engine
        with ce.recursion_guard(_head_name(self._head)):
            definition = self.function_definition
            if definition is None:
                ops = [op.simplify() for op in self._ops]
                expr = ce.fn(self._head, ops)
            else:
                ops = hold_map(self._ops, definition.hold, lambda x: x.simplify())
                if definition.inert:
                    expr = ops[0] if ops else self
                else:
                    expr = None
                    if definition.signature.simplify is not None:
                        expr = definition.signature.simplify(ce, ops)
                    if expr is None:
                        expr = ce.fn(self._head, ops)
            return simplify_with_rules(ce, expr, rules, trace)

    def evaluate(self) -> BoxedExpression:
        if not self.is_valid:
            return self
        if not self._is_canonical:
            return self.canonical.evaluate()
        if self._value is not None:
            return self._value
        ce = self.engine
        with ce.recursion_guard(_head_name(self._head)):
            definition = self.function_definition
            if definition is None:
                ops = [op.evaluate() for op in self._ops]
                return ce.fn(self._head, ops)
            ops = hold_map(self._ops, definition.hold, lambda x: x.evaluate())
            result = None
            handler = definition.signature.evaluate
            if callable(handler):
                result = handler(ce, ops)
            elif handler is not None:
                result = apply_lambda(ce, definition.signature.evaluate_template, ops).evaluate()
            if result is None:
                result = ce.fn(self._head, ops)
            return self._cache('_value', ce.box(result, canonical=True))

    def N(self) -> BoxedExpression:
        if not self.is_valid:
            return self
        if not self._is_canonical:
            return self.canonical.N()
        if self._numeric_value is not None:
            return self._numeric_value
        ce = self.engine
        with ce.recursion_guard(_head_name(self._head)), ce.numeric_context():
            definition = self.function_definition
            if definition is None:
                ops = [op.N() for op in self._ops]
                return ce.fn(self._head, ops)
            ops = hold_map(self._ops, definition.hold, lambda x: x.N())
            signature = definition.signature
            result = None
            if signature.N is not None:
                result = signature.N(ce, ops)
            if result is None:
                if callable(signature.evaluate):
                    result = signature.evaluate(ce, ops)
                elif signature.evaluate is not None:
                    result = apply_lambda(ce, signature.evaluate_template, ops).N()
            if result is None:
                result = ce.fn(self._head, ops)
            result = ce.box(result, canonical=True)
            if result.is_number_literal:
                result = ce.apply_numeric_policy(result)
            return self._cache('_numeric_value', result)


# ============================================================
# Canonical form
# ============================================================

def make_canonical_function(ce, head: Union[str, BoxedExpression], ops: Iterable[Any],
                            metadata: Optional[Dict[str, Any]] = None) -> BoxedExpression:
    """
    Build the canonical form of head(*ops).

    Operands are canonicalized (held ones included), associative heads are
    flattened, Sequence operands are spliced, and the operands are checked
    against the signature. Then the definition's canonical handler runs, or
    the generic involution/idempotence/commutative-sort rules apply.
    """
    with ce.recursion_guard(_head_name(head)):
        ops = [ce.box(op, canonical=True) for op in ops]

        if not isinstance(head, str):
            head = head.canonical
            name = head.evaluate().symbol if head.is_valid else None
            if name is None:
                return BoxedFunction(ce, head, flatten_sequence(ops), metadata, canonical=True)
            head = name

        definition = ce.lookup_function(head)
        if definition is None:
            definition = ce.define_default_function(head)

        if definition.associative:
            ops = flatten_ops(ops, head)
        ops = flatten_sequence(ops)

        checked = validate_signature(ce, definition, ops)
        if checked is not None:
            return BoxedFunction(ce, head, checked, metadata, canonical=True, definition=definition)

        if definition.signature.canonical is not None:
            result = definition.signature.canonical(ce, ops)
            if result is not None:
                return ce.box(result, canonical=True)

        if len(ops) == 1 and ops[0].head == head:
            if definition.involution:
                return ops[0].op1
            if definition.idempotent:
                return ops[0]
        if definition.commutative:
            ops = sort_ops(ops)
        return BoxedFunction(ce, head, ops, metadata, canonical=True, definition=definition)


# ============================================================
# Lambdas
# ============================================================

def apply_lambda(ce, template: BoxedExpression, args: List[BoxedExpression]) -> BoxedExpression:
    """
    Substitute arguments in a lambda template.

    `_1`, `_2`, ... are the positional arguments, `_` is the first one,
    `__` the Tuple of all of them and `_#` their count. A template of the
    form ["Lambda", body] is unwrapped first.
    """
    if template.head == 'Lambda':
        template = template.op1
    mapping: Dict[str, Any] = {f"_{i}": arg for i, arg in enumerate(args, 1)}
    if args:
        mapping['_'] = args[0]
    mapping['__'] = ce.tuple(args)
    mapping['_#'] = ce.number(len(args))
    return template.subs(mapping, canonical=True)


# ============================================================
# Rule-based simplification
# ============================================================

def simplify_with_rules(ce, expr: BoxedExpression, rules: Any = None,
                        trace: Optional[RewriteTrace] = None) -> BoxedExpression:
    """
    Rewrite with a rule set until a fixpoint.

    Each accepted rewrite is re-simplified without rules. A rewrite that
    costs more than SIMPLIFY_COST_FACTOR times the current form ends the
    loop, as do the iteration limit and the time budget.
    """
    ruleset = ce.simplification_rules() if rules is None else ce.rules(rules)
    if len(ruleset) == 0:
        return expr

    current = expr
    cost = ce.cost(current)
    for _ in range(ce.iteration_limit):
        if ce.deadline_reached():
            ce.warn('Time limit exceeded while simplifying, returning partial result',
                    _head_name(current.head))
            break
        steps = RewriteTrace() if trace is not None else None
        candidate = replace(current, ruleset, recursive=True, trace=steps)
        if candidate is None or candidate.is_same(current):
            break
        candidate = candidate.simplify(rules=[])
        candidate_cost = ce.cost(candidate)
        if candidate_cost > SIMPLIFY_COST_FACTOR * cost:
            break
        if trace is not None:
            for step in steps:
                trace.add_step(step)
        if candidate.is_same(current):
            break
        current, cost = candidate, candidate_cost
    else:
        ce.warn('Iteration limit reached while simplifying', _head_name(current.head))
    return current
