"""Tests for the domain system."""

import pytest

from boxmath import BoxedDomain, ComputeEngine
from boxmath.domains import ancestors, is_domain_literal


class TestLattice:
    """Tests for the lattice of domain names."""

    def test_ancestors(self):
        """Ancestors follow every parent."""
        names = ancestors('PositiveInteger')
        assert 'Integer' in names
        assert 'PositiveNumber' in names
        assert 'RealNumber' in names
        assert 'Number' in names
        assert 'Anything' in names
        assert 'Boolean' not in names

    def test_domain_literal(self):
        """Names and constructors are domain literals."""
        assert is_domain_literal('Integer')
        assert is_domain_literal(['Interval', 0, 1])
        assert not is_domain_literal('x')
        assert not is_domain_literal(['Add', 1, 2])


class TestCompatibility:
    """Tests for is_compatible()."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_covariant(self):
        """A subdomain is covariant-compatible with its ancestors."""
        assert self.ce.domain('Integer').is_compatible('Number')
        assert not self.ce.domain('Number').is_compatible('Integer')

    def test_contravariant(self):
        """Contravariance reverses the relation."""
        assert self.ce.domain('Number').is_compatible('Integer', 'contravariant')

    def test_bivariant(self):
        """Bivariance accepts either direction, and rejects disjoint domains."""
        assert self.ce.domain('Number').is_compatible('Integer', 'bivariant')
        assert self.ce.domain('Integer').is_compatible('Number', 'bivariant')
        assert not self.ce.domain('String').is_compatible('Number', 'bivariant')

    def test_invariant(self):
        """Invariance requires equal domains."""
        assert self.ce.domain('Integer').is_compatible('Integer', 'invariant')
        assert not self.ce.domain('Integer').is_compatible('Number', 'invariant')

    def test_unknown_kind(self):
        """Unknown kinds raise ValueError."""
        with pytest.raises(ValueError):
            self.ce.domain('Integer').is_compatible('Number', 'sideways')

    def test_intervals(self):
        """Nested intervals are subdomains."""
        inner = self.ce.domain(['Interval', 0, 1])
        assert inner.is_compatible(['Interval', -1, 2])
        assert not inner.is_compatible(['Interval', 0.5, 2])
        assert inner.is_compatible('RealNumber')

    def test_union(self):
        """A domain is in a union when it is in one of its members."""
        assert self.ce.domain('Integer').is_compatible(['Union', 'String', 'Number'])
        assert not self.ce.domain('Boolean').is_compatible(['Union', 'String', 'Number'])

    def test_maybe(self):
        """Maybe accepts Nothing."""
        assert self.ce.domain('Nothing').is_compatible(['Maybe', 'Number'])
        assert self.ce.domain('Integer').is_compatible(['Maybe', 'Number'])

    def test_function_domains(self):
        """Functions are contravariant in their arguments and covariant in their result."""
        narrow = self.ce.domain(['Function', 'Number', 'Integer'])
        wide = self.ce.domain(['Function', 'Integer', 'Number'])
        assert narrow.is_compatible(wide)
        assert not wide.is_compatible(narrow)


class TestBoxedDomain:
    """Tests for BoxedDomain objects."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_cached(self):
        """Domains are cached per engine."""
        assert self.ce.domain('Integer') is self.ce.domain('Integer')

    def test_json(self):
        """Constructed domains serialize their arguments."""
        dom = self.ce.domain(['Function', 'Number', ['Maybe', 'Number'], 'Number'])
        assert dom.json == ['Function', 'Number', ['Maybe', 'Number'], 'Number']
        assert dom.ctor == 'Function'
        assert dom.codomain.name == 'Number'

    def test_invalid(self):
        """Invalid domains raise ValueError."""
        with pytest.raises(ValueError):
            BoxedDomain(self.ce, ['Add', 1, 2])

    def test_domain_of_numbers(self):
        """Number literals have the narrowest domain."""
        assert self.ce.box(3).domain.name == 'PositiveInteger'
        assert self.ce.box(-3).domain.name == 'NegativeInteger'
        assert self.ce.box(['Rational', 1, 2]).domain.name == 'RationalNumber'
        assert self.ce.box(1.5).domain.name == 'RealNumber'

    def test_domain_of_undeclared_symbol(self):
        """Undeclared symbols have the default domain."""
        assert self.ce.box('x').domain.name == 'ExtendedRealNumber'

    def test_domain_of_function(self):
        """Function applications have the result domain of their signature."""
        expr = self.ce.box(['Abs', 'x'], canonical=True)
        assert expr.domain.name == 'NonNegativeNumber'
