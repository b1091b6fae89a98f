"""
LaTeX parser.

Dictionary-driven precedence climbing. parse_expression() parses a prefix
operator or a primary, then loops over postfix operators, infix operators
and juxtaposition (invisible multiplication) while their precedence is at
least the minimum precedence requested by the caller.

The parser produces MathJSON (nested lists, strings and numbers) and never
raises: malformed input yields ["Error", ...] nodes in the tree.

Custom parse handlers of dictionary entries receive the parser positioned
after the trigger:

    symbol, function   parse(parser, until) -> expr or None
    prefix             parse(parser, until) -> expr or None
    infix              parse(parser, lhs, until) -> expr or None
    postfix            parse(parser, lhs) -> expr or None
    matchfix           parse(parser, body) -> expr
    environment        parse(parser, rows) -> expr

Returning None restores the position and tries the next candidate.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Sequence
import math

from ..numeric import MACHINE_PRECISION
from .dictionary import Entry, IndexedDictionary
from .tokenizer import GROUP_CLOSE, GROUP_OPEN, SPACE, tokens_to_string

Until = Optional[Callable[['Parser'], bool]]

INVISIBLE_OPERATOR_PRECEDENCE = 390

# Tokens that end an expression in any context
CLOSING_TOKENS = frozenset([
    GROUP_CLOSE, ')', ']', '&', '\\\\', '\\end', '\\right', '\\rfloor', '\\rceil', '\\rbrack',
])

# Single letters standing for constants unless declared as symbols
CONSTANT_LETTERS = {'e': 'ExponentialE', 'i': 'ImaginaryUnit'}


def quote(text: str) -> str:
    """MathJSON string literal."""
    return f"'{text}'"


def negate_literal(expr: Any) -> Any:
    """Negated number literal, or None if `expr` is not a number literal."""
    if isinstance(expr, bool):
        return None
    if isinstance(expr, (int, float)):
        return -expr
    if isinstance(expr, dict) and isinstance(expr.get('num'), str):
        text = expr['num']
        if text.startswith('-'):
            return {'num': text[1:]}
        return {'num': '-' + text.lstrip('+')}
    return None


def number_json(text: str) -> Any:
    """MathJSON for the text of a number literal."""
    if '.' not in text and 'e' not in text.lower():
        return int(text)
    mantissa = text.lower().split('e')[0]
    digits = mantissa.replace('.', '').lstrip('0')
    if len(digits) <= MACHINE_PRECISION:
        value = float(text)
        if math.isfinite(value):
            return value
    return {'num': text}


def replace_symbol(expr: Any, name: str, replacement: str) -> Any:
    """Replace a symbol by name in a MathJSON expression."""
    if expr == name:
        return replacement
    if isinstance(expr, list):
        return [replace_symbol(x, name, replacement) for x in expr]
    return expr


class Parser:
    """A cursor over a token list with the parsing grammar."""

    def __init__(self, tokens: List[str], dictionary: IndexedDictionary, ce=None):
        self.tokens = tokens
        self.index = 0
        self.dictionary = dictionary
        self.ce = ce

    # ============================================================
    # Token stream
    # ============================================================

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.tokens)

    @property
    def peek(self) -> str:
        return self.tokens[self.index] if self.index < len(self.tokens) else ''

    def token_at(self, index: int) -> str:
        return self.tokens[index] if 0 <= index < len(self.tokens) else ''

    def next(self) -> str:
        token = self.peek
        self.index += 1
        return token

    def skip_space(self) -> None:
        while self.peek == SPACE:
            self.index += 1

    def match(self, token: str) -> bool:
        self.skip_space()
        if self.peek == token:
            self.index += 1
            return True
        return False

    def match_tokens(self, tokens: Sequence[str]) -> bool:
        start = self.index
        for token in tokens:
            if not self.match(token):
                self.index = start
                return False
        return True

    def at_tokens(self, tokens: Sequence[str]) -> bool:
        start = self.index
        found = self.match_tokens(tokens)
        self.index = start
        return found

    def latex(self, start: int, end: Optional[int] = None) -> str:
        return tokens_to_string(self.tokens[start:end if end is not None else self.index]).strip()

    def error(self, code: Any, start: Optional[int] = None) -> list:
        """
        An error node. `code` is an error name or a list [name, *args];
        with `start`, the LaTeX consumed since `start` is attached.
        """
        if isinstance(code, (list, tuple)):
            code_json = ['ErrorCode', quote(code[0])] + list(code[1:])
        else:
            code_json = quote(code)
        result = ['Error', code_json]
        if start is not None:
            result.append(['Latex', quote(self.latex(start))])
        return result

    def at_terminator(self, until: Until = None) -> bool:
        self.skip_space()
        if self.at_end or self.peek in CLOSING_TOKENS:
            return True
        return until is not None and until(self)

    def peek_definitions(self, kind: str) -> List[tuple]:
        """Entries of `kind` whose trigger matches at the current position, longest first."""
        self.skip_space()
        result = []
        remaining = len(self.tokens) - self.index
        for n in range(min(self.dictionary.lookahead, remaining), 0, -1):
            key = tuple(self.tokens[self.index:self.index + n])
            for entry in self.dictionary.lookup(kind, key):
                result.append((entry, n))
        return result

    def is_declared(self, name: str) -> bool:
        return self.ce is not None and self.ce.lookup_symbol(name) is not None

    def is_function(self, name: str) -> bool:
        return self.ce is not None and self.ce.lookup_function(name) is not None

    @contextmanager
    def scoped_symbol(self, name: Optional[str], domain: str = 'Integer') -> Iterator[None]:
        """Declare `name` in a new engine scope while parsing its scope of validity."""
        if name is None or self.ce is None:
            yield
            return
        self.ce.push_scope()
        try:
            self.ce.declare(name, {'domain': domain})
            yield
        finally:
            self.ce.pop_scope()

    # ============================================================
    # Top level
    # ============================================================

    def parse(self) -> Any:
        expr = self.parse_expression()
        self.skip_space()
        if self.at_end:
            return ['Sequence'] if expr is None else expr

        start = self.index
        for entry, n in self.peek_definitions('infix'):
            self.index += n
            lhs = expr if expr is not None else self.error('missing')
            rhs = self.parse_expression()
            self.skip_space()
            if self.at_end:
                return [entry['name'], lhs, rhs if rhs is not None else self.error('missing')]
            self.index = start
            break

        token = self.next()
        self.index = len(self.tokens)
        code = 'unexpected-command' if token.startswith('\\') and len(token) > 1 else 'unexpected-token'
        error = self.error([code, quote(tokens_to_string([token]))], start)
        return ['Sequence', error] if expr is None else ['Sequence', expr, error]

    # ============================================================
    # Expressions
    # ============================================================

    def parse_expression(self, until: Until = None, min_prec: int = 0) -> Any:
        """Parse an expression whose operators bind at least as tightly as `min_prec`."""
        if self.at_terminator(until):
            return None
        lhs = self._parse_prefix(until)
        if lhs is None:
            lhs = self.parse_primary(until)
        if lhs is None:
            return None
        while not self.at_terminator(until):
            result = self._parse_postfix(lhs, min_prec)
            if result is None:
                result = self._parse_infix(lhs, until, min_prec)
            if result is None:
                result = self._parse_juxtaposition(lhs, until, min_prec)
            if result is None:
                break
            lhs = result
        return lhs

    def _parse_prefix(self, until: Until) -> Any:
        for entry, n in self.peek_definitions('prefix'):
            start = self.index
            self.index += n
            if entry.get('parse') is not None:
                result = entry['parse'](self, until)
                if result is not None:
                    return result
                self.index = start
                continue
            operand = self.parse_expression(until, entry.get('operand_precedence', entry['precedence']))
            return [entry['name'], operand if operand is not None else self.error('missing')]
        return None

    def _parse_postfix(self, lhs: Any, min_prec: int) -> Any:
        for entry, n in self.peek_definitions('postfix'):
            if entry['precedence'] < min_prec:
                continue
            start = self.index
            self.index += n
            if entry.get('parse') is not None:
                result = entry['parse'](self, lhs)
                if result is not None:
                    return result
                self.index = start
                continue
            return [entry['name'], lhs]
        return None

    def _parse_infix(self, lhs: Any, until: Until, min_prec: int) -> Any:
        for entry, n in self.peek_definitions('infix'):
            prec = entry['precedence']
            if prec < min_prec:
                continue
            start = self.index
            self.index += n
            if entry.get('parse') is not None:
                result = entry['parse'](self, lhs, until)
                if result is not None:
                    return result
                self.index = start
                continue
            rhs_prec = prec if entry['associativity'] == 'right' else prec + 1
            rhs = self.parse_expression(until, rhs_prec)
            if rhs is None:
                rhs = self.error('missing')
            name = entry['name']
            if entry['associativity'] == 'both' and isinstance(lhs, list) and lhs and lhs[0] == name:
                return lhs + [rhs]
            return [name, lhs, rhs]
        return None

    def _starts_operator(self) -> bool:
        return bool(self.peek_definitions('infix') or self.peek_definitions('postfix'))

    def _parse_juxtaposition(self, lhs: Any, until: Until, min_prec: int) -> Any:
        if INVISIBLE_OPERATOR_PRECEDENCE < min_prec or self._starts_operator():
            return None
        start = self.index
        rhs = self.parse_expression(until, INVISIBLE_OPERATOR_PRECEDENCE + 1)
        if rhs is None:
            self.index = start
            return None
        # Mixed numbers: 3\frac{1}{8} is 3 + 1/8
        if isinstance(lhs, int) and self.token_at(start) == '\\frac' and _is_small_fraction(rhs):
            return ['Add', lhs, ['Rational', rhs[1], rhs[2]]]
        if isinstance(lhs, list) and lhs and lhs[0] == 'Multiply':
            return lhs + [rhs]
        return ['Multiply', lhs, rhs]

    # ============================================================
    # Primaries
    # ============================================================

    def parse_primary(self, until: Until = None) -> Any:
        self.skip_space()
        if self.at_end:
            return None
        start = self.index
        token = self.peek

        if token.isdigit() or (token == '.' and self.token_at(self.index + 1).isdigit()):
            return self.parse_number()

        if token == GROUP_OPEN:
            body = self.parse_group()
            return ['Sequence'] if body is None else body

        for entry, n in self.peek_definitions('matchfix'):
            return self._parse_matchfix(entry, n)

        if token == '\\begin':
            return self.parse_environment()

        for kind in ('function', 'symbol'):
            for entry, n in self.peek_definitions(kind):
                self.index += n
                if entry.get('parse') is not None:
                    result = entry['parse'](self, until)
                    if result is not None:
                        return result
                    self.index = start
                    continue
                if kind == 'symbol':
                    return entry['name']
                return self.parse_application(entry['name'], until)

        return self.parse_symbol(until)

    def parse_number(self) -> Any:
        text = ''
        while self.peek.isdigit():
            text += self.next()
        if self.peek == '.' and self.token_at(self.index + 1).isdigit():
            text += self.next()
            while self.peek.isdigit():
                text += self.next()
        if self.peek in ('e', 'E'):
            j = self.index + 1
            sign = ''
            if self.token_at(j) in ('+', '-'):
                sign = self.token_at(j)
                j += 1
            if self.token_at(j).isdigit():
                self.index = j
                exponent = ''
                while self.peek.isdigit():
                    exponent += self.next()
                text += 'e' + sign + exponent
        if text.startswith('.'):
            text = '0' + text
        return number_json(text)

    def parse_raw_group(self) -> Optional[str]:
        """The text of a group, without parsing it."""
        self.skip_space()
        if self.peek != GROUP_OPEN:
            return None
        start = self.index
        self.next()
        depth = 1
        while not self.at_end:
            token = self.next()
            if token == GROUP_OPEN:
                depth += 1
            elif token == GROUP_CLOSE:
                depth -= 1
                if depth == 0:
                    return tokens_to_string(self.tokens[start + 1:self.index - 1]).strip()
        self.index = start
        return None

    def parse_group(self) -> Any:
        """Parse {...}. Returns None for an empty group."""
        start = self.index
        if not self.match(GROUP_OPEN):
            return None
        body = self.parse_expression()
        if self.match(GROUP_CLOSE):
            return body
        # Skip what could not be parsed, up to the closing brace
        bad = self.index
        depth = 1
        while not self.at_end and depth > 0:
            token = self.next()
            if token == GROUP_OPEN:
                depth += 1
            elif token == GROUP_CLOSE:
                depth -= 1
        if depth > 0:
            return self.error('expected-close-delimiter', start)
        self.index -= 1
        token = self.token_at(bad)
        error = self.error(['unexpected-token', quote(tokens_to_string([token]))], bad)
        self.index += 1
        return error if body is None else ['Sequence', body, error]

    def parse_argument(self) -> Any:
        """
        Parse a LaTeX argument: a group, or a single token.

        Returns None when the argument is missing or empty.
        """
        self.skip_space()
        if self.peek == GROUP_OPEN:
            return self.parse_group()
        if self.at_terminator():
            return None
        token = self.peek
        if token.isdigit():
            return int(self.next())
        if len(token) == 1 and token.isalpha():
            self.next()
            if token in CONSTANT_LETTERS and not self.is_declared(token):
                return CONSTANT_LETTERS[token]
            return token
        if self._starts_operator():
            return None
        return self.parse_primary()

    def parse_optional_argument(self) -> Any:
        """Parse [...], None if absent."""
        if not self.match('['):
            return None
        body = self.parse_expression(lambda p: p.peek == ']')
        self.match(']')
        return body

    def parse_symbol(self, until: Until = None) -> Any:
        """A single letter, or a name given with \\operatorname or \\mathrm, with an optional subscript."""
        start = self.index
        token = self.peek
        explicit = token in ('\\operatorname', '\\mathrm')
        if explicit:
            self.next()
            name = self.parse_raw_group()
            if not name:
                self.index = start
                return None
            name = name.replace(' ', '')
        elif len(token) == 1 and token.isalpha():
            name = self.next()
        else:
            return None

        if self.peek == '_':
            self.next()
            sub_start = self.index
            raw = self.parse_raw_group()
            if raw is None and self.peek.isalnum():
                raw = self.next()
            if raw is not None and raw.isalnum():
                name = f"{name}_{raw}"
            else:
                self.index = sub_start
                sub = self.parse_argument()
                return ['Subscript', name, sub if sub is not None else self.error('missing')]
        elif not explicit and name in CONSTANT_LETTERS and not self.is_declared(name):
            return CONSTANT_LETTERS[name]

        if explicit or self.is_function(name):
            return self.parse_application(name, until)
        return name

    def parse_arguments(self) -> Optional[List[Any]]:
        """Parse a parenthesized argument list, None if there is none."""
        self.skip_space()
        for open_tokens, close_tokens in ((('\\left', '('), ('\\right', ')')), (('(',), (')',))):
            start = self.index
            if not self.match_tokens(open_tokens):
                continue
            body = self.parse_expression(lambda p: p.at_tokens(close_tokens))
            if not self.match_tokens(close_tokens):
                return [self.error('expected-close-delimiter', start)]
            if body is None:
                return []
            if isinstance(body, list) and body and body[0] == 'Sequence':
                return body[1:]
            return [body]
        return None

    def parse_application(self, name: Any, until: Until = None) -> Any:
        args = self.parse_arguments()
        if args is None:
            return name
        return [name] + args

    def at_implicit_function(self) -> bool:
        return any(entry.get('implicit') for entry, _ in self.peek_definitions('function'))

    def parse_implicit_argument(self, until: Until = None) -> Any:
        """
        Argument of a function written without parentheses, as in \\sin 2x.

        It extends over juxtaposed factors and stops at the next function
        of the same family, so that \\sin x\\cos x is a product.
        """
        def stop(parser: 'Parser') -> bool:
            return (until is not None and until(parser)) or parser.at_implicit_function()
        return self.parse_expression(stop, INVISIBLE_OPERATOR_PRECEDENCE)

    def parse_function_arguments(self, until: Until = None) -> Optional[List[Any]]:
        args = self.parse_arguments()
        if args is not None:
            return args
        arg = self.parse_implicit_argument(until)
        return None if arg is None else [arg]

    def _parse_matchfix(self, entry: Entry, n: int) -> Any:
        start = self.index
        self.index += n
        close = entry['close_tokens']
        body = self.parse_expression(lambda p: p.at_tokens(close))
        if not self.match_tokens(close):
            return self.error('expected-close-delimiter', start)
        if entry.get('parse') is not None:
            return entry['parse'](self, body)
        if body is None:
            return [entry['name']]
        return [entry['name'], body]

    def parse_environment(self) -> Any:
        start = self.index
        self.next()
        name = self.parse_raw_group()
        rows: List[List[Any]] = []
        row: List[Any] = []
        while True:
            row.append(self.parse_expression())
            self.skip_space()
            if self.match('&'):
                continue
            if self.match('\\\\'):
                rows.append(row)
                row = []
                continue
            if self.match('\\end'):
                self.parse_raw_group()
                rows.append(row)
                break
            if self.at_end:
                return self.error(['expected-end', quote(name or '')], start)
            bad = self.index
            token = self.next()
            row[-1] = self.error(['unexpected-token', quote(tokens_to_string([token]))], bad)

        rows = [r for r in rows if any(cell is not None for cell in r)]
        entry = self.dictionary.environment(name) if name else None
        if entry is None:
            return self.error(['unknown-environment', quote(name or '')], start)
        return entry['parse'](self, rows)


def _is_small_fraction(expr: Any) -> bool:
    if not (isinstance(expr, list) and len(expr) == 3 and expr[0] == 'Divide'):
        return False
    n, d = expr[1], expr[2]
    if not (isinstance(n, int) and isinstance(d, int)):
        return False
    return 0 < n <= 100 and 1 < d <= 100
