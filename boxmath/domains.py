"""
Domain system.

Domains are first-class expressions denoting mathematical sets. A domain
is either a name from the lattice below ("Number", "Integer", ...) or a
constructor applied to arguments:

    ["Function", arg1, ..., result]
    ["Union", d1, d2, ...]          ["Intersection", d1, d2, ...]
    ["Interval", lower, upper]      ["Range", lower, upper]
    ["Maybe", d]                    ["Sequence", d]
    ["Tuple", d1, d2, ...]          ["List", d]

Compatibility between domains drives signature validation:

    covariant      self is a subset of other
    contravariant  other is a subset of self
    bivariant      either of the above
    invariant      both of the above
"""

from functools import lru_cache
from typing import Any, FrozenSet, List, Optional, Tuple, Union
import math

from .expression import BoxedExpression

# Each name maps to its direct parents. The lattice has multiple inheritance.
DOMAIN_PARENTS = {
    'Anything': (),
    'Void': ('Anything',),
    'Nothing': ('Anything',),
    'Value': ('Anything',),
    'Domain': ('Anything',),
    'Symbol': ('Anything',),
    'Expression': ('Anything',),
    'Function': ('Anything',),
    'Boolean': ('Value',),
    'String': ('Value',),
    'Collection': ('Value',),
    'List': ('Collection',),
    'Tuple': ('Collection',),
    'Set': ('Collection',),
    'Dictionary': ('Collection',),
    'Number': ('Value',),
    'ExtendedComplexNumber': ('Number',),
    'ComplexNumber': ('ExtendedComplexNumber',),
    'ImaginaryNumber': ('ComplexNumber',),
    'ExtendedRealNumber': ('ExtendedComplexNumber',),
    'RealNumber': ('ComplexNumber', 'ExtendedRealNumber'),
    'AlgebraicNumber': ('ComplexNumber',),
    'TranscendentalNumber': ('RealNumber',),
    'RationalNumber': ('RealNumber', 'AlgebraicNumber'),
    'Integer': ('RationalNumber',),
    'NonNegativeNumber': ('RealNumber',),
    'PositiveNumber': ('NonNegativeNumber',),
    'NonPositiveNumber': ('RealNumber',),
    'NegativeNumber': ('NonPositiveNumber',),
    'NonNegativeInteger': ('Integer', 'NonNegativeNumber'),
    'PositiveInteger': ('NonNegativeInteger', 'PositiveNumber'),
    'NonPositiveInteger': ('Integer', 'NonPositiveNumber'),
    'NegativeInteger': ('NonPositiveInteger', 'NegativeNumber'),
}

DOMAIN_CONSTRUCTORS = frozenset([
    'Function', 'Union', 'Intersection', 'Interval', 'Range',
    'Maybe', 'Sequence', 'Tuple', 'List',
])

COMPATIBILITY_KINDS = ('covariant', 'contravariant', 'bivariant', 'invariant')


@lru_cache(maxsize=None)
def ancestors(name: str) -> FrozenSet[str]:
    """All domains containing `name`, including itself."""
    result = {name}
    for parent in DOMAIN_PARENTS.get(name, ('Anything',) if name != 'Anything' else ()):
        result |= ancestors(parent)
    return frozenset(result)


def is_domain_literal(value: Any) -> bool:
    """True if a MathJSON value looks like a domain."""
    if isinstance(value, str):
        return value in DOMAIN_PARENTS
    if isinstance(value, list) and value and isinstance(value[0], str):
        return value[0] in DOMAIN_CONSTRUCTORS
    return False


def _bound(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, dict) and 'num' in value:
        value = value['num']
    if value in ('Infinity', '+Infinity', 'PositiveInfinity'):
        return math.inf
    if value in ('-Infinity', 'NegativeInfinity'):
        return -math.inf
    if isinstance(value, list) and value and value[0] == 'Open':
        return _bound(value[1])
    return float(value)


class BoxedDomain(BoxedExpression):
    """
    A domain expression.

    Name domains keep their name in `name`; constructed domains keep the
    constructor in `ctor` and their arguments in `domain_args` (boxed
    domains, or raw bounds for Interval and Range).
    """

    def __init__(self, ce, dom: Any, metadata=None):
        super().__init__(ce, metadata)
        if isinstance(dom, BoxedDomain):
            dom = dom.json
        if isinstance(dom, str):
            self._name: Optional[str] = dom
            self._ctor: Optional[str] = None
            self._args: List[Any] = []
        elif isinstance(dom, (list, tuple)) and dom and dom[0] in DOMAIN_CONSTRUCTORS:
            self._name = None
            self._ctor = dom[0]
            if self._ctor in ('Interval', 'Range'):
                self._args = list(dom[1:])
            else:
                self._args = [BoxedDomain(ce, d) for d in dom[1:]]
        else:
            raise ValueError(f"Invalid domain: {dom!r}")

    @property
    def head(self) -> str:
        return 'Domain'

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def ctor(self) -> Optional[str]:
        return self._ctor

    @property
    def domain_args(self) -> List[Any]:
        return self._args

    @property
    def codomain(self) -> Optional['BoxedDomain']:
        """Result domain of a Function domain."""
        if self._ctor == 'Function' and self._args:
            return self._args[-1]
        return None

    @property
    def json(self) -> Any:
        if self._name is not None:
            return self._name
        if self._ctor in ('Interval', 'Range'):
            return [self._ctor] + list(self._args)
        return [self._ctor] + [arg.json for arg in self._args]

    @property
    def domain(self) -> 'BoxedDomain':
        return self.engine.domain('Domain')

    @property
    def complexity(self) -> int:
        return 1

    def is_same(self, rhs: BoxedExpression) -> bool:
        return isinstance(rhs, BoxedDomain) and self.json == rhs.json

    def is_compatible(self, dom: Union['BoxedDomain', str, list], kind: str = 'covariant') -> bool:
        """
        Check compatibility with another domain.

        Args:
            dom: Domain to compare with (boxed, name, or MathJSON).
            kind: One of 'covariant' (self is a subset of dom), 'contravariant'
                (dom is a subset of self), 'bivariant' (either) or 'invariant'
                (both).

        Examples:
            ce.domain('Integer').is_compatible('Number')           # => True
            ce.domain('Number').is_compatible('Integer')           # => False
            ce.domain('Number').is_compatible('Integer', 'contravariant')  # => True
        """
        if not isinstance(dom, BoxedDomain):
            dom = self.engine.domain(dom)
        if kind == 'covariant':
            return is_subdomain(self, dom)
        if kind == 'contravariant':
            return is_subdomain(dom, self)
        if kind == 'bivariant':
            return is_subdomain(self, dom) or is_subdomain(dom, self)
        if kind == 'invariant':
            return is_subdomain(self, dom) and is_subdomain(dom, self)
        raise ValueError(f"Unknown compatibility kind: {kind}. "
                         f"Use one of: {', '.join(COMPATIBILITY_KINDS)}")


def _base_name(dom: BoxedDomain) -> Optional[str]:
    """Name standing in for a constructed domain when compared to names."""
    if dom.name is not None:
        return dom.name
    return {
        'Interval': 'RealNumber',
        'Range': 'Integer',
        'Function': 'Function',
        'Tuple': 'Tuple',
        'List': 'List',
    }.get(dom.ctor)


def is_subdomain(a: BoxedDomain, b: BoxedDomain) -> bool:
    """True if every element of domain `a` belongs to domain `b`."""
    if b.name == 'Anything':
        return True
    if b.ctor == 'Union':
        return any(is_subdomain(a, x) for x in b.domain_args)
    if a.ctor == 'Union':
        return all(is_subdomain(x, b) for x in a.domain_args)
    if b.ctor == 'Intersection':
        return all(is_subdomain(a, x) for x in b.domain_args)
    if a.ctor == 'Intersection':
        return any(is_subdomain(x, b) for x in a.domain_args)
    if b.ctor == 'Maybe':
        return a.name == 'Nothing' or is_subdomain(a, b.domain_args[0])
    if a.ctor in ('Maybe', 'Sequence'):
        return is_subdomain(a.domain_args[0], b)
    if b.ctor == 'Sequence':
        return is_subdomain(a, b.domain_args[0])

    if a.ctor in ('Interval', 'Range') and b.ctor in ('Interval', 'Range'):
        if a.ctor == 'Interval' and b.ctor == 'Range':
            return False
        lo_a, hi_a = _bound(a.domain_args[0]), _bound(a.domain_args[1])
        lo_b, hi_b = _bound(b.domain_args[0]), _bound(b.domain_args[1])
        return lo_b <= lo_a and hi_a <= hi_b

    if a.ctor == 'Function' and b.ctor == 'Function':
        a_params, b_params = a.domain_args[:-1], b.domain_args[:-1]
        if len(a_params) != len(b_params):
            return False
        # Arguments are contravariant, the result is covariant
        if not all(is_subdomain(pb, pa) for pa, pb in zip(a_params, b_params)):
            return False
        return is_subdomain(a.codomain, b.codomain)

    if a.ctor == 'Tuple' and b.ctor == 'Tuple':
        if len(a.domain_args) != len(b.domain_args):
            return False
        return all(is_subdomain(x, y) for x, y in zip(a.domain_args, b.domain_args))
    if a.ctor == 'List' and b.ctor == 'List':
        return is_subdomain(a.domain_args[0], b.domain_args[0])

    if b.ctor is not None:
        # A name is never a subset of a constructed domain
        return False
    name = _base_name(a)
    if name is None:
        return False
    return b.name in ancestors(name)
