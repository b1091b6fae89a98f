"""
LaTeX serializer.

Serializes MathJSON to LaTeX using the `serialize` handlers and triggers
of the dictionary entries, with generic rules for numbers, symbols,
strings and functions without an entry.
"""

from typing import Any, Dict, Sequence
import math
import re

from . import styles
from .dictionary import Entry, IndexedDictionary

DEFAULT_SERIALIZE_OPTIONS: Dict[str, Any] = {
    'multiply': '\\times',
    'invisible_multiply': '',
    'invisible_plus': '',
    'missing_symbol': '\\blacksquare',
    'fraction_style': styles.fraction_style,
    'root_style': styles.root_style,
    'power_style': styles.power_style,
    'numeric_set_style': styles.numeric_set_style,
    'group_style': styles.group_style,
    'apply_function_style': styles.apply_function_style,
}

# Precedence of heads rendered without an operator entry
HEAD_PRECEDENCE = {
    'Divide': 660,
    'Rational': 660,
    'Square': 720,
    'Exp': 720,
    'Complex': 275,
}

ATOM_PRECEDENCE = 1000

_SUBSCRIPTED = re.compile(r'^([a-zA-Z])_([a-zA-Z0-9]+)$')


def _format_exponent(text: str) -> str:
    """Render 1.5e+20 as 1.5\\cdot10^{20}."""
    lower = text.lower()
    if 'e' not in lower or lower in ('inf', '-inf', 'nan'):
        return text
    mantissa, exponent = lower.split('e', 1)
    return mantissa + '\\cdot10^{' + str(int(exponent)) + '}'


class Serializer:
    def __init__(self, dictionary: IndexedDictionary, options: Dict[str, Any] = None):
        self.dictionary = dictionary
        self.options = dict(DEFAULT_SERIALIZE_OPTIONS)
        if options:
            self.options.update(options)
        self.level = -1

    def style(self, name: str, expr: Any) -> str:
        return self.options[name](expr, self.level)

    def serialize(self, expr: Any) -> str:
        self.level += 1
        try:
            return self._serialize(expr)
        finally:
            self.level -= 1

    def _serialize(self, expr: Any) -> str:
        if expr is None:
            return ''
        if isinstance(expr, bool):
            return self.serialize_symbol('True' if expr else 'False')
        if isinstance(expr, (int, float)):
            return self.serialize_number(expr)
        if isinstance(expr, str):
            if len(expr) >= 2 and expr[0] == "'" and expr[-1] == "'":
                return '\\text{' + expr[1:-1] + '}'
            return self.serialize_symbol(expr)
        if isinstance(expr, dict):
            if 'num' in expr:
                return self.serialize_number(expr)
            if 'sym' in expr:
                return self._serialize(expr['sym'])
            if 'fn' in expr:
                return self._serialize(expr['fn'])
            if 'str' in expr:
                return '\\text{' + str(expr['str']) + '}'
            if 'dict' in expr:
                items = ', '.join('\\text{' + key + '}: ' + self.serialize(value)
                                  for key, value in expr['dict'].items())
                return '\\{' + items + '\\}'
            return ''
        if isinstance(expr, (list, tuple)) and expr:
            head = expr[0]
            ops = list(expr[1:])
            if isinstance(head, str):
                if head == 'InverseFunction' and len(ops) == 1:
                    return self.serialize_symbol(ops[0]) + '^{-1}'
                entry = self.dictionary.serializer_entry(head)
                if entry is not None:
                    return self._serialize_entry(entry, list(expr))
                return self.serialize_function(head, ops)
            return self.serialize(head) + self.serialize_arguments(ops)
        return ''

    def _serialize_entry(self, entry: Entry, expr: list) -> str:
        if entry.get('serialize') is not None:
            return entry['serialize'](self, expr)
        kind = entry['kind']
        trigger = entry.get('trigger')
        ops = expr[1:]
        if not trigger:
            return self.serialize_function(expr[0], ops)
        prec = entry.get('precedence', 0)

        if kind == 'infix' and len(ops) >= 2:
            associativity = entry.get('associativity')
            operator = ' ' + trigger + ' ' if trigger[1:].isalpha() else trigger
            parts = []
            for i, op in enumerate(ops):
                if associativity == 'both':
                    parts.append(self.wrap(op, prec))
                elif associativity == 'left' and i == 0:
                    parts.append(self.wrap(op, prec))
                elif associativity == 'right' and i == len(ops) - 1:
                    parts.append(self.wrap(op, prec))
                else:
                    parts.append(self.wrap(op, prec + 1))
            return operator.join(parts)
        if kind == 'prefix' and len(ops) == 1:
            operand = self.wrap(ops[0], prec + 1)
            if trigger[1:].isalpha() and operand[:1].isalpha():
                return trigger + ' ' + operand
            return trigger + operand
        if kind == 'postfix' and len(ops) == 1:
            return self.wrap(ops[0], prec) + trigger
        if kind == 'matchfix':
            return trigger + ', '.join(self.serialize(op) for op in ops) + entry['close']
        if kind in ('function', 'symbol'):
            return trigger + self.serialize_arguments(ops)
        return self.serialize_function(expr[0], ops)

    # ============================================================
    # Precedence and grouping
    # ============================================================

    def precedence(self, expr: Any) -> int:
        if isinstance(expr, bool):
            return ATOM_PRECEDENCE
        if isinstance(expr, (int, float)):
            return 275 if expr < 0 else ATOM_PRECEDENCE
        if isinstance(expr, dict) and isinstance(expr.get('num'), str):
            return 275 if expr['num'].startswith('-') else ATOM_PRECEDENCE
        if not (isinstance(expr, (list, tuple)) and expr and isinstance(expr[0], str)):
            return ATOM_PRECEDENCE
        head = expr[0]
        if head == 'Rational' and len(expr) == 3 and expr[2] == 1:
            return 275 if isinstance(expr[1], int) and expr[1] < 0 else ATOM_PRECEDENCE
        if head in HEAD_PRECEDENCE:
            return HEAD_PRECEDENCE[head]
        entry = self.dictionary.serializer_entry(head)
        if entry is not None and entry['kind'] in ('infix', 'prefix', 'postfix'):
            return entry['precedence']
        return ATOM_PRECEDENCE

    def group(self, text: str, expr: Any = None) -> str:
        if self.style('group_style', expr) == 'leftright':
            return '\\left(' + text + '\\right)'
        return '(' + text + ')'

    def wrap(self, expr: Any, prec: int = 0) -> str:
        """Serialize `expr`, in parentheses if it binds less tightly than `prec`."""
        text = self.serialize(expr)
        if self.precedence(expr) < prec:
            return self.group(text, expr)
        return text

    def serialize_arguments(self, ops: Sequence[Any]) -> str:
        text = ', '.join(self.serialize(op) for op in ops)
        if self.style('apply_function_style', list(ops)) == 'leftright':
            return '\\left(' + text + '\\right)'
        return '(' + text + ')'

    # ============================================================
    # Atoms
    # ============================================================

    def serialize_number(self, expr: Any) -> str:
        if isinstance(expr, int):
            return str(expr)
        if isinstance(expr, float):
            if math.isnan(expr):
                return '\\operatorname{NaN}'
            if math.isinf(expr):
                return '\\infty' if expr > 0 else '-\\infty'
            return _format_exponent(repr(expr))
        text = str(expr.get('num', ''))
        if text == 'NaN':
            return '\\operatorname{NaN}'
        if text in ('Infinity', '+Infinity'):
            return '\\infty'
        if text == '-Infinity':
            return '-\\infty'
        return _format_exponent(text)

    def serialize_symbol(self, name: str) -> str:
        entry = self.dictionary.serializer_entry(name)
        if entry is not None:
            if entry['kind'] == 'symbol':
                if entry.get('serialize') is not None:
                    return entry['serialize'](self, name)
                if entry.get('trigger'):
                    return entry['trigger']
            elif entry['kind'] == 'function' and entry.get('trigger'):
                return entry['trigger']
        if len(name) == 1:
            return name
        match = _SUBSCRIPTED.match(name)
        if match:
            sub = match.group(2)
            return match.group(1) + '_' + (sub if len(sub) == 1 else '{' + sub + '}')
        return '\\mathrm{' + name + '}'

    def serialize_function(self, name: str, ops: Sequence[Any]) -> str:
        return self.serialize_symbol(name) + self.serialize_arguments(ops)
