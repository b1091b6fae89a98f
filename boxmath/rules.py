"""
Rewriting rules.

A rule is a pattern (lhs) and a replacement (rhs) plus an optional
priority, an optional condition and metadata. Rules can be given as:

    (lhs, rhs)
    (lhs, rhs, priority)
    (lhs, rhs, priority, condition)
    {"lhs": ..., "rhs": ..., "priority": 10, "condition": ...,
     "name": "...", "description": "...", "tags": [...]}
    Rule objects

or loaded from JSON text:

    {
        "name": "trig",
        "rules": [
            {"name": "double-negation", "lhs": ["Negate", ["Negate", "_x"]], "rhs": "_x"},
            [["Sqrt", ["Square", "_x"]], ["Abs", "_x"]]
        ]
    }

The rhs is a MathJSON template or a callable `rhs(ce, bindings)`. The
condition is a callable `condition(bindings, ce)` or a MathJSON predicate
that holds when, after substitution, it evaluates to the symbol True.

Tracing:
    Pass a RewriteTrace to replace() or simplify() to record which rules
    were applied.
"""

import json
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from .patterns import Bindings, match, substitute

Condition = Union[Callable[[Bindings, Any], bool], Any]


class RuleMetadata:
    """Name, description and tags of a rule."""

    def __init__(self, name: Optional[str] = None, description: Optional[str] = None,
                 tags: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.tags = tags or []

    def __repr__(self) -> str:
        if not self.name:
            return "<anonymous>"
        base = f"@{self.name}"
        if self.description:
            base += f" \"{self.description}\""
        return base


class Rule:
    """A boxed rule, ready for matching."""

    def __init__(self, lhs, rhs, priority: int = 0, condition: Optional[Condition] = None,
                 metadata: Optional[RuleMetadata] = None):
        self.lhs = lhs
        self.rhs = rhs
        self.priority = priority
        self.condition = condition
        self.metadata = metadata or RuleMetadata()

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name

    def __repr__(self) -> str:
        rhs = '<callable>' if callable(self.rhs) else json.dumps(self.rhs.json)
        priority = f"[{self.priority}]" if self.priority else ""
        return f"{self.metadata}{priority}: {json.dumps(self.lhs.json)} -> {rhs}"

    def check_condition(self, bindings: Bindings, ce) -> bool:
        if self.condition is None:
            return True
        if callable(self.condition):
            return bool(self.condition(bindings, ce))
        result = substitute(self.condition, bindings).evaluate()
        return result.symbol == 'True'

    def apply(self, expr) -> Optional[Any]:
        """Rewrite `expr` if the rule applies to it, None otherwise."""
        ce = expr.engine
        bindings = match(self.lhs, expr)
        if not bindings:
            return None
        if not self.check_condition(bindings, ce):
            return None
        if callable(self.rhs):
            result = self.rhs(ce, bindings)
            if result is None:
                return None
            return ce.box(result, canonical=True)
        return substitute(self.rhs, bindings)


class RuleSet:
    """
    An ordered collection of rules.

    Rules are sorted by priority, higher first. Rules with equal priority
    keep their insertion order.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: List[Rule] = list(rules)
        self._sort_by_priority()

    def _sort_by_priority(self) -> None:
        indexed = [(rule.priority, i, rule) for i, rule in enumerate(self._rules)]
        indexed.sort(key=lambda x: (-x[0], x[1]))
        self._rules = [item[2] for item in indexed]

    def add(self, rule: Rule) -> 'RuleSet':
        self._rules.append(rule)
        self._sort_by_priority()
        return self

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]

    def __contains__(self, name: str) -> bool:
        return any(rule.name == name for rule in self._rules)

    def __or__(self, other: 'RuleSet') -> 'RuleSet':
        return RuleSet(list(self._rules) + list(other._rules))

    def __repr__(self) -> str:
        return f"RuleSet({len(self._rules)} rules)"

    def names(self) -> List[str]:
        return [rule.name or f"rule[{i}]" for i, rule in enumerate(self._rules)]


# ============================================================
# Boxing and loading
# ============================================================

def box_rule(ce, rule: Any) -> Rule:
    """Convert a rule description to a Rule with a canonical boxed lhs."""
    if isinstance(rule, Rule):
        return rule
    metadata = RuleMetadata()
    priority, condition = 0, None
    if isinstance(rule, dict):
        if 'lhs' not in rule or 'rhs' not in rule:
            raise ValueError(f"A rule needs an 'lhs' and an 'rhs': {rule!r}")
        lhs, rhs = rule['lhs'], rule['rhs']
        priority = rule.get('priority', 0)
        condition = rule.get('condition')
        metadata = RuleMetadata(rule.get('name'), rule.get('description'), rule.get('tags'))
    elif isinstance(rule, (list, tuple)) and 2 <= len(rule) <= 4:
        lhs, rhs = rule[0], rule[1]
        if len(rule) > 2:
            priority = rule[2]
        if len(rule) > 3:
            condition = rule[3]
    else:
        raise TypeError(f"Invalid rule: {rule!r}")

    if not isinstance(priority, int):
        raise TypeError(f"Rule priority must be an integer, got {priority!r}")
    lhs = ce.box(lhs, canonical=True)
    if not callable(rhs):
        rhs = ce.box(rhs, canonical=True)
    if condition is not None and not callable(condition):
        condition = ce.box(condition, canonical=True)
    return Rule(lhs, rhs, priority, condition, metadata)


def box_rules(ce, rules: Any) -> RuleSet:
    """Convert a RuleSet, a Rule, a single rule description or a list of them to a RuleSet."""
    if isinstance(rules, RuleSet):
        return rules
    if isinstance(rules, (Rule, dict)):
        return RuleSet([box_rule(ce, rules)])
    if isinstance(rules, str):
        return box_rules(ce, load_rules_from_json(rules))
    return RuleSet([box_rule(ce, rule) for rule in rules])


def load_rules_from_json(text: str) -> List[Any]:
    """
    Load rule specs from JSON text.

    Expected format:
        {
            "name": "ruleset-name",
            "rules": [
                {"name": "...", "lhs": [...], "rhs": [...], "priority": 10,
                 "condition": [...], "tags": ["group1"]},
                or just [lhs, rhs]
            ]
        }

    Returns the rule specs, to be boxed by an engine.
    """
    data = json.loads(text)
    if isinstance(data, list):
        return data
    if not isinstance(data, dict) or 'rules' not in data:
        raise ValueError("A rule file must be a list of rules or an object with a 'rules' key")
    return list(data['rules'])


# ============================================================
# Tracing
# ============================================================

def _format(expr) -> str:
    return json.dumps(expr.json) if expr is not None else "None"


class RewriteStep:
    """A single step in a rewriting trace."""

    def __init__(self, rule_index: int, metadata: RuleMetadata, before, after):
        self.rule_index = rule_index
        self.metadata = metadata
        self.before = before
        self.after = after

    @property
    def rule_name(self) -> str:
        return self.metadata.name or f"rule[{self.rule_index}]"

    def __repr__(self) -> str:
        return f"{self.rule_name}: {_format(self.before)} -> {_format(self.after)}"

    def to_dict(self) -> Dict:
        return {
            "rule_index": self.rule_index,
            "rule_name": self.metadata.name,
            "description": self.metadata.description,
            "before": self.before.json,
            "after": self.after.json,
        }


class RewriteTrace:
    """
    A trace of all rewriting steps applied.

        trace = RewriteTrace()
        expr.simplify(trace=trace)
        print(trace.format("rules"))
    """

    def __init__(self):
        self.steps: List[RewriteStep] = []
        self.initial = None
        self.final = None

    def add_step(self, step: RewriteStep):
        if self.initial is None:
            self.initial = step.before
        self.final = step.after
        self.steps.append(step)

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace.

        Args:
            style: "verbose" (default), "compact" or "rules".
        """
        names = [s.rule_name for s in self.steps]
        if style == "compact":
            return f"{_format(self.initial)} --[{', '.join(names)}]--> {_format(self.final)}"
        if style == "rules":
            return " -> ".join(names) if names else "(no rules applied)"
        return repr(self)

    def __repr__(self) -> str:
        lines = [f"Initial: {_format(self.initial)}"]
        for i, step in enumerate(self.steps, 1):
            lines.append(f"  {i}. {step}")
        lines.append(f"Final: {_format(self.final)}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __bool__(self) -> bool:
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        return {
            "initial": self.initial.json if self.initial is not None else None,
            "final": self.final.json if self.final is not None else None,
            "steps": [step.to_dict() for step in self.steps],
            "step_count": len(self.steps),
        }

    def rule_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for step in self.steps:
            counts[step.rule_name] = counts.get(step.rule_name, 0) + 1
        return counts

    def rules_applied(self) -> List[str]:
        return [s.rule_name for s in self.steps]


# ============================================================
# Replace
# ============================================================

def apply_rules(expr, rules: RuleSet, trace: Optional[RewriteTrace] = None):
    """Rewrite `expr` with the first applicable rule, None if none applies."""
    for index, rule in enumerate(rules):
        result = rule.apply(expr)
        if result is None:
            continue
        if trace is not None:
            trace.add_step(RewriteStep(index, rule.metadata, expr, result))
        return result
    return None


def _replace_pass(expr, rules: RuleSet, recursive: bool, once: bool,
                  trace: Optional[RewriteTrace]):
    ce = expr.engine
    with ce.recursion_guard('replace'):
        changed = False
        current = expr
        if recursive and expr.ops:
            ops = list(expr.ops)
            for i, op in enumerate(ops):
                result = _replace_pass(op, rules, recursive, once, trace)
                if result is None:
                    continue
                ops[i] = result
                changed = True
                if once:
                    break
            if changed:
                current = ce.fn(expr.head, ops, canonical=expr.is_canonical)
                if once:
                    return current
        result = apply_rules(current, rules, trace)
        if result is not None:
            return result
        return current if changed else None


def replace(expr, rules: RuleSet, recursive: bool = True, once: bool = False,
            iteration_limit: int = 1, trace: Optional[RewriteTrace] = None):
    """
    Apply a rule set to an expression.

    Subexpressions are rewritten innermost first. With `once`, stop after
    the first rewrite anywhere in the tree; otherwise make up to
    `iteration_limit` passes over the tree.

    Returns:
        The rewritten expression, or None if no rule matched. A rewrite to
        a structurally identical expression still returns that expression.
    """
    current = expr
    rewritten = False
    for _ in range(max(1, iteration_limit)):
        result = _replace_pass(current, rules, recursive, once, trace)
        if result is None:
            break
        rewritten = True
        current = result
        if once:
            break
    return current if rewritten else None
