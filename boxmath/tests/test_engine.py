"""Tests for the engine: configuration, scopes, assumptions and signals."""

import logging

import pytest

from boxmath import ComputeEngine, RecursionLimitExceeded, Signal
from boxmath.signals import ComputeEngineError


class TestConfiguration:
    """Tests for the engine settings."""

    def test_defaults(self):
        """Default configuration."""
        ce = ComputeEngine()
        assert ce.precision == 100
        assert ce.numeric_mode == 'auto'
        assert ce.tolerance == 1e-10
        assert ce.iteration_limit == 1024
        assert ce.recursion_limit == 256
        assert ce.time_limit == 2.0
        assert ce.memory_limit is None

    def test_numeric_policy(self):
        """Bignums are preferred above machine precision, complex numbers in auto mode."""
        assert ComputeEngine().prefers_bignum
        assert not ComputeEngine(precision=15).prefers_bignum
        assert ComputeEngine(precision=15, numeric_mode='bignum').prefers_bignum
        assert not ComputeEngine(numeric_mode='machine').prefers_bignum
        assert ComputeEngine().allows_complex
        assert not ComputeEngine(numeric_mode='bignum').allows_complex

    def test_setters_validate(self):
        """Invalid settings raise ValueError."""
        ce = ComputeEngine()
        with pytest.raises(ValueError):
            ce.numeric_mode = 'bogus'
        with pytest.raises(ValueError):
            ce.precision = True
        ce.precision = 'machine'
        assert ce.precision == 15

    def test_limits_are_settable(self):
        """Resource limits can be changed after construction."""
        ce = ComputeEngine()
        ce.iteration_limit = 10
        ce.recursion_limit = 20
        ce.time_limit = None
        assert (ce.iteration_limit, ce.recursion_limit, ce.time_limit) == (10, 20, None)

    def test_custom_library(self):
        """Extra libraries are loaded after the standard ones."""
        library = {
            'symbols': {'g0': {'value': 9.81, 'constant': True}},
            'functions': {'Twice': {'signature': {'domain': ['Function', 'Number', 'Number'],
                                                  'evaluate': ['Multiply', 2, '_']}}},
        }
        ce = ComputeEngine(libraries=[library])
        assert ce.lookup_symbol('g0').constant
        assert ce.box(['Twice', 4], canonical=True).evaluate().json == 8

    def test_repr(self):
        """The engine shows its numeric configuration."""
        assert repr(ComputeEngine(precision=30)).startswith('ComputeEngine(precision=30')


class TestScopes:
    """Tests for push_scope() and pop_scope()."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_declarations_are_scoped(self):
        """Symbols declared in a scope disappear with it."""
        self.ce.push_scope()
        self.ce.declare('y', 'Integer')
        assert self.ce.lookup_symbol('y') is not None
        assert self.ce.box('y').is_integer
        self.ce.pop_scope()
        assert self.ce.lookup_symbol('y') is None

    def test_limits_are_inherited(self):
        """A scope may override a limit."""
        self.ce.push_scope(iteration_limit=5)
        assert self.ce.iteration_limit == 5
        assert self.ce.recursion_limit == 256
        self.ce.pop_scope()
        assert self.ce.iteration_limit == 1024

    def test_root_scope(self):
        """The root scope cannot be popped."""
        with pytest.raises(ValueError):
            self.ce.pop_scope()


class TestAssumptions:
    """Tests for assume() and forget()."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_sign_assumption(self):
        """x > 0 makes x positive until forgotten."""
        assert self.ce.box('x').is_positive is None
        assert self.ce.assume(['Greater', 'x', 0]) == 'ok'
        assert self.ce.box('x').is_positive
        assert self.ce.box('x').is_real
        self.ce.forget('x')
        assert self.ce.box('x').is_positive is None

    def test_latex_assumption(self):
        """Assumptions can be given as LaTeX."""
        self.ce.assume('x<0')
        assert self.ce.box('x').is_negative

    def test_element(self):
        """Membership sets the domain flags."""
        self.ce.assume(['Element', 'n', 'Integer'])
        assert self.ce.box('n').is_integer
        assert self.ce.box('n').is_real

    def test_assumption_keys(self):
        """The predicates are listed until forgotten."""
        self.ce.assume(['Greater', 'x', 0])
        assert self.ce.assumptions == {repr(['Greater', 'x', 0]): True}
        self.ce.forget()
        assert self.ce.assumptions == {}

    def test_changes_sign_of_expressions(self):
        """Assumptions flow into the sign of expressions."""
        self.ce.assume(['Greater', 'x', 0])
        assert self.ce.box(['Multiply', 2, 'x'], canonical=True).is_positive

    def test_invalid_assumptions(self):
        """Unsupported predicates raise ValueError."""
        with pytest.raises(ValueError):
            self.ce.assume(['Add', 'x', 1])
        with pytest.raises(ValueError):
            self.ce.assume(['Equal', 2, 'x'])
        with pytest.raises(ValueError):
            self.ce.assume(['Greater', 'Pi', 0])


class TestSignals:
    """Tests for warnings and fatal signals."""

    def test_warn_at_top_level(self):
        """Warnings outside an operation are delivered at once."""
        received = []
        ce = ComputeEngine(on_warning=received.extend)
        ce.warn('hello', 'Sum')
        assert len(received) == 1
        signal = received[0]
        assert isinstance(signal, Signal)
        assert signal.to_dict() == {'severity': 'warning', 'message': 'hello', 'head': 'Sum'}
        assert repr(signal) == 'Signal(warning: hello in Sum)'

    def test_iteration_limit_warning(self):
        """A range longer than the iteration limit is left unevaluated with a warning."""
        received = []
        ce = ComputeEngine(iteration_limit=2, on_warning=received.extend)
        expr = ce.box(['Sum', ['Lambda', '_'], ['Tuple', 'i', 1, 10]], canonical=True)
        assert expr.evaluate().head == 'Sum'
        assert received
        assert 'Iteration limit' in received[0].message

    def test_time_limit_warning(self, monkeypatch):
        """Simplification past the time budget returns its partial result with a warning."""
        received = []
        ce = ComputeEngine(on_warning=received.extend)
        monkeypatch.setattr(ce, 'deadline_reached', lambda: True)
        expr = ce.box(['Sqrt', ['Square', 'x']], canonical=True)
        assert expr.simplify().json == ['Sqrt', ['Square', 'x']]
        messages = [signal.message for signal in received]
        assert any('Time limit exceeded while simplifying' in m for m in messages)

    def test_deadline(self):
        """The deadline is only reached inside an operation with a time limit."""
        ce = ComputeEngine()
        assert not ce.deadline_reached()
        ce.time_limit = None
        assert not ce.deadline_reached()

    def test_default_handler_logs(self, caplog):
        """Without a handler, warnings go to the 'boxmath' logger."""
        ce = ComputeEngine()
        with caplog.at_level(logging.WARNING, logger='boxmath'):
            ce.warn('careful', 'Sum')
        assert 'careful (Sum)' in caplog.text

    def test_recursion_limit(self):
        """Deep nesting raises RecursionLimitExceeded."""
        ce = ComputeEngine(recursion_limit=5)
        expr = 'x'
        for _ in range(10):
            expr = ['f', expr]
        with pytest.raises(RecursionLimitExceeded) as info:
            ce.box(expr, canonical=True)
        assert info.value.limit == 5
        assert isinstance(info.value, ComputeEngineError)

    def test_engine_usable_after_abort(self):
        """An aborted operation leaves the engine usable."""
        ce = ComputeEngine(recursion_limit=3)
        with pytest.raises(RecursionLimitExceeded):
            ce.box(['f', ['f', ['f', ['f', 'x']]]], canonical=True)
        assert ce.box(['f', 'x'], canonical=True).json == ['f', 'x']
