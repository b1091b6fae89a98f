"""Tests for pattern matching, Bindings and NoMatch."""

import pytest

from boxmath import Bindings, ComputeEngine, match, NoMatch


class TestBindings:
    """Tests for the Bindings class."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_access(self):
        """Bindings support bracket access and get()."""
        bindings = Bindings({'_x': self.ce.box(1)})
        assert bindings['_x'].json == 1
        assert bindings.get('_y') is None
        assert bindings.get('_y', 42) == 42

    def test_missing_raises(self):
        """Accessing a missing key raises KeyError."""
        with pytest.raises(KeyError):
            _ = Bindings()['_x']

    def test_always_truthy(self):
        """Bindings are truthy even when empty."""
        assert bool(Bindings())
        assert len(Bindings()) == 0

    def test_dict_protocol(self):
        """keys(), items(), iteration and to_dict()."""
        bindings = Bindings({'_a': self.ce.box('x'), '_b': self.ce.box(2)})
        assert set(bindings) == {'_a', '_b'}
        assert '_a' in bindings
        assert set(bindings.keys()) == {'_a', '_b'}
        d = bindings.to_dict()
        assert isinstance(d, dict)
        assert d['_b'].json == 2

    def test_equality(self):
        """Bindings compare their expressions structurally."""
        a = Bindings({'_x': self.ce.box(['Add', 'y', 1])})
        b = Bindings({'_x': self.ce.box(['Add', 'y', 1])})
        assert a == b
        assert a != Bindings({'_x': self.ce.box('y')})


class TestNoMatch:
    """Tests for the NoMatch singleton."""

    def test_falsy(self):
        """NoMatch is falsy and empty."""
        assert not NoMatch
        assert len(NoMatch) == 0
        assert list(NoMatch) == []

    def test_singleton(self):
        """There is a single NoMatch."""
        assert type(NoMatch)() is NoMatch

    def test_get(self):
        """get() returns the default, [] raises."""
        assert NoMatch.get('_x', 1) == 1
        assert '_x' not in NoMatch
        with pytest.raises(KeyError):
            _ = NoMatch['_x']


class TestMatch:
    """Tests for matching expressions against patterns."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_wildcards(self):
        """Single wildcards bind one operand each."""
        bindings = self.ce.box(['Add', 'x', 1]).match(['Add', '_a', '_b'])
        assert bindings['_a'].json == 'x'
        assert bindings['_b'].json == 1

    def test_head_mismatch(self):
        """Different heads do not match."""
        assert self.ce.box(['Add', 'x', 1]).match(['Multiply', '_a', '_b']) is NoMatch

    def test_repeated_wildcard(self):
        """A repeated wildcard must bind identical expressions."""
        assert self.ce.box(['Add', 'x', 'x']).match(['Add', '_a', '_a'])
        assert not self.ce.box(['Add', 'x', 'y']).match(['Add', '_a', '_a'])

    def test_literal_match(self):
        """Patterns without wildcards match equal expressions with empty bindings."""
        bindings = self.ce.box(2).match(2)
        assert bindings
        assert len(bindings) == 0
        assert not self.ce.box(2).match(3)

    def test_sequence_wildcard(self):
        """__ binds one or more operands as a Sequence."""
        bindings = self.ce.box(['f', 1, 2, 3]).match(['f', '_a', '__rest'])
        assert bindings['_a'].json == 1
        assert bindings['__rest'].json == ['Sequence', 2, 3]
        assert not self.ce.box(['f', 1]).match(['f', '_a', '__rest'])

    def test_optional_sequence_wildcard(self):
        """___ also matches zero operands."""
        bindings = self.ce.box(['f', 1]).match(['f', '_a', '___rest'])
        assert bindings['___rest'].json == ['Sequence']

    def test_head_wildcard(self):
        """A wildcard head binds the function name."""
        bindings = self.ce.box(['Sin', 'x']).match(['_f', 'x'])
        assert bindings['_f'].symbol == 'Sin'

    def test_anonymous_wildcard(self):
        """_ matches without binding."""
        bindings = self.ce.box(['Add', 'x', 1]).match(['Add', '_', '_'])
        assert bindings
        assert len(bindings) == 0

    def test_pattern_is_canonical(self):
        """Patterns are canonicalized, so coefficients come first."""
        expr = self.ce.box(['Multiply', 2, 'x'], canonical=True)
        bindings = expr.match(['Multiply', '_a', 2])
        assert bindings['_a'].json == 'x'

    def test_initial_bindings(self):
        """Bindings passed in must be respected."""
        expr = self.ce.box(['Add', 'x', 1])
        assert expr.match(['Add', '_a', 1], {'_a': self.ce.box('x')})
        assert not expr.match(['Add', '_a', 1], {'_a': self.ce.box('y')})

    def test_match_function(self):
        """match() works on boxed patterns."""
        pattern = self.ce.box(['Sqrt', '_x'], canonical=True)
        bindings = match(pattern, self.ce.box(['Sqrt', 'y']))
        assert bindings['_x'].symbol == 'y'


class TestSubs:
    """Tests for substitution of symbols."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_subs(self):
        """subs() replaces symbols and canonicalizes."""
        expr = self.ce.box(['Add', 'x', 'y'])
        assert expr.subs({'x': 1}).json == ['Add', 1, 'y']

    def test_subs_head(self):
        """Function names can be substituted."""
        expr = self.ce.box(['f', 'x'])
        assert expr.subs({'f': 'Sin'}).json == ['Sin', 'x']
