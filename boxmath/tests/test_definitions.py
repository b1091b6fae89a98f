"""Tests for definitions and the scope stack."""

from fractions import Fraction

import pytest

from boxmath import ComputeEngine, FunctionDefinition, Scope, SymbolDefinition


class TestFunctionDefinition:
    """Tests for function definitions."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_standard_flags(self):
        """The standard library declares the flags of Add."""
        definition = self.ce.lookup_function('Add')
        assert definition.associative
        assert definition.commutative
        assert definition.pure
        assert definition.complexity == 1300

    def test_defaults(self):
        """A bare definition is pure, not commutative, and holds nothing."""
        definition = self.ce.define_function('f')
        assert definition.pure
        assert not definition.commutative
        assert definition.hold == 'none'
        assert definition.signature.domain.ctor == 'Function'

    def test_unknown_flag(self):
        """Unknown options raise TypeError."""
        with pytest.raises(TypeError):
            FunctionDefinition(self.ce, 'f', frobnicate=True)

    def test_unknown_hold_policy(self):
        """Unknown hold policies raise ValueError."""
        with pytest.raises(ValueError):
            FunctionDefinition(self.ce, 'f', hold='sometimes')

    def test_signature_needs_function_domain(self):
        """A signature domain must be a Function domain."""
        with pytest.raises(ValueError):
            self.ce.define_function('f', {'signature': {'domain': 'Number'}})

    def test_evaluate_template(self):
        """An evaluate handler can be a MathJSON lambda template."""
        self.ce.define_function('double', {
            'signature': {'domain': ['Function', 'Number', 'Number'],
                          'evaluate': ['Multiply', 2, '_1']},
        })
        assert self.ce.box(['double', 21]).evaluate().json == 42

    def test_evaluate_callable(self):
        """An evaluate handler can be a callable."""
        self.ce.define_function('answer', {
            'signature': {'evaluate': lambda ce, ops: ce.number(42)},
        })
        assert self.ce.box(['answer']).evaluate().json == 42

    def test_unknown_head_gets_default_definition(self):
        """Canonicalizing an unknown head defines it."""
        assert self.ce.lookup_function('g') is None
        self.ce.box(['g', 'x'], canonical=True)
        assert self.ce.lookup_function('g') is not None


class TestSymbolDefinition:
    """Tests for symbol definitions."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_constant(self):
        """Pi is a positive constant."""
        definition = self.ce.lookup_symbol('Pi')
        assert definition.constant
        assert definition.flags['is_positive']

    def test_constant_value_is_readonly(self):
        """Constants cannot be reassigned."""
        with pytest.raises(ValueError):
            self.ce.lookup_symbol('Pi').value = 3

    def test_unknown_flag(self):
        """Unknown assumption flags raise TypeError."""
        with pytest.raises(TypeError):
            SymbolDefinition(self.ce, 'x', is_purple=True)

    def test_value(self):
        """Values are boxed canonically."""
        definition = self.ce.define_symbol('a', {'value': ['Add', 1, 2]})
        assert definition.value.is_canonical

    def test_callable_value(self):
        """Callable values are computed on each access."""
        calls = []

        def value(ce):
            calls.append(1)
            return len(calls)

        definition = self.ce.define_symbol('counter', {'value': value})
        assert definition.value.json == 1
        assert definition.value.json == 2

    def test_domain_from_value(self):
        """Without a declared domain, the domain is the one of the value."""
        definition = self.ce.define_symbol('half', {'value': Fraction(1, 2)})
        assert definition.domain.name == 'RationalNumber'


class TestScopes:
    """Tests for the scope stack."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_inner_scope_masks_outer(self):
        """Lookup finds the innermost definition."""
        self.ce.declare('x', 'RealNumber')
        self.ce.push_scope()
        self.ce.declare('x', 'Integer')
        assert self.ce.lookup_symbol('x').domain.name == 'Integer'
        self.ce.pop_scope()
        assert self.ce.lookup_symbol('x').domain.name == 'RealNumber'

    def test_pop_removes_definitions(self):
        """Definitions of a popped scope are gone."""
        self.ce.push_scope()
        self.ce.declare('k', 'Integer')
        self.ce.pop_scope()
        assert self.ce.lookup_symbol('k') is None

    def test_pop_root(self):
        """The root scope cannot be popped."""
        with pytest.raises(ValueError):
            self.ce.pop_scope()

    def test_limits_inherited(self):
        """Limits left unset are inherited from the parent scope."""
        self.ce.push_scope(iteration_limit=10)
        assert self.ce.iteration_limit == 10
        assert self.ce.recursion_limit == 256
        self.ce.pop_scope()
        assert self.ce.iteration_limit == 1024

    def test_scope_object(self):
        """Scope lookup walks the parents."""
        root = Scope(iteration_limit=5)
        child = Scope(parent=root)
        assert child.limit('iteration_limit') == 5
        assert child.limit('time_limit') is None
        assert child.lookup_symbol('x') is None

    def test_all_assumptions(self):
        """Assumptions of inner scopes mask outer ones."""
        root = Scope()
        root.assumptions['a'] = True
        child = Scope(parent=root)
        child.assumptions['a'] = False
        child.assumptions['b'] = True
        assert child.all_assumptions() == {'a': False, 'b': True}

    def test_declare_with_options(self):
        """declare() accepts a dictionary of options."""
        definition = self.ce.declare('p', {'domain': 'RealNumber', 'is_positive': True})
        assert self.ce.box('p').is_positive
        assert definition.domain.name == 'RealNumber'
