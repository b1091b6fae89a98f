"""Tests for rules, rule sets, replace() and rewrite traces."""

import json

import pytest

from boxmath import ComputeEngine, load_rules_from_json, RewriteTrace, Rule, RuleSet

RULES_JSON = json.dumps({
    "name": "demo",
    "rules": [
        {"name": "f-involution", "description": "f(f(x)) = x",
         "lhs": ["f", ["f", "_x"]], "rhs": "_x", "tags": ["demo"]},
        [["g", "_x"], ["h", "_x"]],
    ],
})


class TestBoxRules:
    """Tests for the accepted forms of rules."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_tuple(self):
        """(lhs, rhs) and (lhs, rhs, priority)."""
        ruleset = self.ce.rules([(['f', '_x'], '_x'), (['g', '_x'], '_x', 5)])
        assert len(ruleset) == 2
        assert ruleset[0].priority == 5

    def test_dict(self):
        """Dictionaries carry metadata."""
        ruleset = self.ce.rules({'name': 'drop-f', 'lhs': ['f', '_x'], 'rhs': '_x',
                                 'tags': ['cleanup']})
        rule = ruleset[0]
        assert isinstance(rule, Rule)
        assert rule.name == 'drop-f'
        assert rule.metadata.tags == ['cleanup']
        assert 'drop-f' in ruleset

    def test_json_text(self):
        """Rules can be loaded from JSON text."""
        ruleset = self.ce.rules(RULES_JSON)
        assert len(ruleset) == 2
        assert ruleset.names() == ['f-involution', 'rule[1]']

    def test_load_rules_from_json(self):
        """load_rules_from_json() returns the rule specs."""
        specs = load_rules_from_json(RULES_JSON)
        assert specs[0]['name'] == 'f-involution'
        assert load_rules_from_json('[[1, 2]]') == [[1, 2]]
        with pytest.raises(ValueError):
            load_rules_from_json('{"name": "empty"}')

    def test_invalid_rules(self):
        """Malformed rules raise."""
        with pytest.raises(ValueError):
            self.ce.rules({'lhs': ['f', '_x']})
        with pytest.raises(TypeError):
            self.ce.rules([42])
        with pytest.raises(TypeError):
            self.ce.rules([(['f', '_x'], '_x', 'high')])

    def test_priority_order(self):
        """Higher priority first, insertion order among equals."""
        ruleset = self.ce.rules([
            {'name': 'a', 'lhs': 'x', 'rhs': 1},
            {'name': 'b', 'lhs': 'x', 'rhs': 2, 'priority': 10},
            {'name': 'c', 'lhs': 'x', 'rhs': 3},
        ])
        assert ruleset.names() == ['b', 'a', 'c']

    def test_combine(self):
        """Rule sets combine with | and grow with add()."""
        a = self.ce.rules([('x', 1)])
        b = self.ce.rules([('y', 2)])
        assert len(a | b) == 2
        assert isinstance(a | b, RuleSet)
        a.add(b[0])
        assert len(a) == 2

    def test_repr(self):
        """Rules show their name and sides."""
        rule = self.ce.rules(RULES_JSON)[0]
        assert repr(rule).startswith('@f-involution')
        assert '"_x"' in repr(rule)


class TestReplace:
    """Tests for replace()."""

    def setup_method(self):
        """Set up an engine."""
        self.ce = ComputeEngine()

    def test_no_match_returns_none(self):
        """replace() returns None when no rule applies."""
        assert self.ce.box(['Add', 'x', 1]).replace([(['f', '_x'], '_x')]) is None

    def test_recursive(self):
        """Subexpressions are rewritten."""
        expr = self.ce.box(['Add', ['f', 'x'], 1])
        assert expr.replace([(['f', '_x'], ['g', '_x'])]).json == ['Add', ['g', 'x'], 1]

    def test_not_recursive(self):
        """Without recursion only the root is tried."""
        expr = self.ce.box(['Add', ['f', 'x'], 1])
        assert expr.replace([(['f', '_x'], ['g', '_x'])], recursive=False) is None

    def test_all_occurrences(self):
        """Every occurrence is rewritten in a pass."""
        expr = self.ce.box(['Add', ['f', 'x'], ['f', 'y']])
        result = expr.replace([(['f', '_x'], ['g', '_x'])])
        assert result.json == ['Add', ['g', 'x'], ['g', 'y']]

    def test_once(self):
        """With once, only the first occurrence is rewritten."""
        expr = self.ce.box(['Add', ['f', 'x'], ['f', 'y']])
        result = expr.replace([(['f', '_x'], ['g', '_x'])], once=True)
        assert result.json == ['Add', ['g', 'x'], ['f', 'y']]

    def test_priority(self):
        """The highest priority rule wins."""
        rules = [(['f', '_x'], 'a', 0), (['f', '_x'], 'b', 10)]
        assert self.ce.box(['f', 1]).replace(rules).json == 'b'

    def test_callable_condition(self):
        """Conditions are called with the bindings and the engine."""
        rules = [{'lhs': ['f', '_x'], 'rhs': 0,
                  'condition': lambda bindings, ce: bindings['_x'].is_positive}]
        assert self.ce.box(['f', 2]).replace(rules).json == 0
        assert self.ce.box(['f', -2]).replace(rules) is None

    def test_predicate_condition(self):
        """MathJSON conditions must evaluate to True."""
        rules = [{'lhs': ['f', '_x'], 'rhs': 0, 'condition': ['Greater', '_x', 0]}]
        assert self.ce.box(['f', 2]).replace(rules).json == 0
        assert self.ce.box(['f', 'y']).replace(rules) is None

    def test_callable_rhs(self):
        """A callable rhs computes the replacement."""
        rules = [(['f', '_x'], lambda ce, bindings: ce.number(bindings['_x'].value * 2))]
        assert self.ce.box(['f', 3]).replace(rules).json == 6

    def test_iteration_limit(self):
        """Several passes chain rewrites."""
        rules = [('a', 'b'), ('b', 'c')]
        assert self.ce.box('a').replace(rules).json == 'b'
        assert self.ce.box('a').replace(rules, iteration_limit=2).json == 'c'


class TestTrace:
    """Tests for rewrite traces."""

    def setup_method(self):
        """Set up an engine and a traced rewrite."""
        self.ce = ComputeEngine()
        self.trace = RewriteTrace()
        self.result = self.ce.box(['f', ['f', 'y']]).replace(RULES_JSON, trace=self.trace)

    def test_result(self):
        """The rewrite happened."""
        assert self.result.json == 'y'

    def test_steps(self):
        """Each rewrite is a step."""
        assert len(self.trace) == 1
        assert self.trace
        step = self.trace.steps[0]
        assert step.rule_name == 'f-involution'
        assert step.before.json == ['f', ['f', 'y']]
        assert step.after.json == 'y'

    def test_format_verbose(self):
        """Verbose format shows the initial and final expressions."""
        verbose = self.trace.format('verbose')
        assert 'Initial:' in verbose
        assert 'Final:' in verbose
        assert 'f-involution' in verbose

    def test_format_compact(self):
        """Compact format is a single line."""
        compact = self.trace.format('compact')
        assert '--[f-involution]-->' in compact
        assert compact.count('\n') == 0

    def test_format_rules(self):
        """Rules format lists the rule names."""
        assert self.trace.format('rules') == 'f-involution'

    def test_empty_trace(self):
        """An empty trace says so."""
        trace = RewriteTrace()
        assert not trace
        assert trace.format('rules') == '(no rules applied)'

    def test_to_dict(self):
        """Traces serialize to dictionaries."""
        data = self.trace.to_dict()
        assert data['step_count'] == 1
        assert data['initial'] == ['f', ['f', 'y']]
        assert data['final'] == 'y'
        assert data['steps'][0]['description'] == 'f(f(x)) = x'

    def test_counts(self):
        """rule_counts() and rules_applied()."""
        assert self.trace.rule_counts() == {'f-involution': 1}
        assert self.trace.rules_applied() == ['f-involution']
