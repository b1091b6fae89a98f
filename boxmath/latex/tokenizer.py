"""
LaTeX tokenizer.

A token is one of:

    "\\name"    a control word (letters), or a control symbol "\\," "\\|" ...
    "<{>" "<}>" group delimiters
    "<space>"   a run of whitespace
    any other single character

Spaces following a control word are dropped, as in TeX. Comments
(from % to the end of the line) are dropped.
"""

from typing import Iterable, List

GROUP_OPEN = '<{>'
GROUP_CLOSE = '<}>'
SPACE = '<space>'


def tokenize(text: str) -> List[str]:
    """
    Split a LaTeX string into tokens.

    Examples:
        tokenize(r"\\frac{1}{2}")  -> ['\\frac', '<{>', '1', '<}>', '<{>', '2', '<}>']
        tokenize("x + 1")         -> ['x', '<space>', '+', '<space>', '1']
    """
    tokens: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == '\\':
            j = i + 1
            while j < n and text[j].isalpha():
                j += 1
            if j > i + 1:
                tokens.append(text[i:j])
                while j < n and text[j] in ' \t\n\r':
                    j += 1
                i = j
            elif j < n:
                tokens.append(text[i:j + 1])
                i = j + 1
            else:
                tokens.append('\\')
                i += 1
            continue
        if c in ' \t\n\r~':
            j = i + 1
            while j < n and text[j] in ' \t\n\r~':
                j += 1
            tokens.append(SPACE)
            i = j
            continue
        if c == '%':
            while i < n and text[i] != '\n':
                i += 1
            continue
        if c == '{':
            tokens.append(GROUP_OPEN)
        elif c == '}':
            tokens.append(GROUP_CLOSE)
        else:
            tokens.append(c)
        i += 1
    return tokens


def tokens_to_string(tokens: Iterable[str]) -> str:
    """Rebuild LaTeX text from tokens."""
    result = ''
    for token in tokens:
        if token == GROUP_OPEN:
            text = '{'
        elif token == GROUP_CLOSE:
            text = '}'
        elif token == SPACE:
            text = ' '
        else:
            text = token
        # A control word followed by a letter needs a separating space
        if result and text[:1].isalpha() and result[-1].isalpha() and '\\' in result:
            tail = result[result.rfind('\\'):]
            if tail[1:].isalpha():
                result += ' '
        result += text
    return result
