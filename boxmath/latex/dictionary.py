"""
LaTeX dictionary.

A dictionary is a list of entries, each a dict with:

    kind           'symbol', 'function', 'prefix', 'infix', 'postfix',
                   'matchfix' or 'environment'
    name           the MathJSON head or symbol the entry stands for
    trigger        LaTeX text starting the construct (for matchfix, the
                   opening delimiter; for environments, the environment name)
    close          closing delimiter of a matchfix entry
    precedence     binding power of operators
    associativity  'left', 'right', 'non' or 'both' (n-ary, flattened)
    parse          optional custom parser, see parser.py for signatures
    serialize      optional custom serializer `serialize(serializer, expr) -> str`

The indexed form groups entries by kind and by trigger tokens, longest
trigger first, and maps names to the entries that serialize them.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from .tokenizer import SPACE, tokenize

KINDS = ('symbol', 'function', 'prefix', 'infix', 'postfix', 'matchfix', 'environment')
ASSOCIATIVITIES = ('left', 'right', 'non', 'both')

Entry = Dict[str, Any]


def trigger_tokens(trigger: str) -> Tuple[str, ...]:
    return tuple(token for token in tokenize(trigger) if token != SPACE)


def _normalize(entry: Entry) -> Entry:
    kind = entry.get('kind', 'symbol')
    if kind not in KINDS:
        raise ValueError(f"Unknown LaTeX dictionary entry kind: {kind!r}")
    if kind != 'environment' and not entry.get('trigger') and not entry.get('name'):
        raise ValueError(f"A LaTeX dictionary entry needs a trigger or a name: {entry!r}")
    result = dict(entry)
    result['kind'] = kind
    associativity = result.setdefault('associativity', 'non' if kind == 'infix' else None)
    if kind == 'infix' and associativity not in ASSOCIATIVITIES:
        raise ValueError(f"Unknown associativity for {entry.get('name')}: {associativity!r}")
    if kind in ('prefix', 'infix', 'postfix'):
        result.setdefault('precedence', 0)
    if result.get('trigger') and kind != 'environment':
        result['tokens'] = trigger_tokens(result['trigger'])
    if kind == 'matchfix':
        result['close_tokens'] = trigger_tokens(result['close'])
    return result


class IndexedDictionary:
    """LaTeX dictionary indexed for parsing and serialization."""

    def __init__(self, entries: Iterable[Entry]):
        self.entries: List[Entry] = [_normalize(e) for e in entries]
        self._by_kind: Dict[str, Dict[Tuple[str, ...], List[Entry]]] = {k: {} for k in KINDS}
        self._by_name: Dict[str, List[Entry]] = {}
        self._environments: Dict[str, Entry] = {}
        self.lookahead = 1

        for entry in self.entries:
            kind = entry['kind']
            if kind == 'environment':
                self._environments[entry['trigger']] = entry
            elif 'tokens' in entry:
                self._by_kind[kind].setdefault(entry['tokens'], []).append(entry)
                self.lookahead = max(self.lookahead, len(entry['tokens']))
            if entry.get('name'):
                self._by_name.setdefault(entry['name'], []).append(entry)

    def lookup(self, kind: str, tokens: Tuple[str, ...]) -> List[Entry]:
        return self._by_kind[kind].get(tokens, [])

    def environment(self, name: str) -> Optional[Entry]:
        return self._environments.get(name)

    def by_name(self, name: str) -> List[Entry]:
        return self._by_name.get(name, [])

    def serializer_entry(self, name: str) -> Optional[Entry]:
        """Entry used to serialize `name`: one with a serialize handler, else the first."""
        entries = self.by_name(name)
        for entry in entries:
            if entry.get('serialize') is not None:
                return entry
        return entries[0] if entries else None

    def is_trigger(self, kind: str, token: str) -> bool:
        return any(tokens[0] == token for tokens in self._by_kind[kind])

