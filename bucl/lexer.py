"""Line-oriented tokenizer for BUCL.

Every physical source line is tokenized on its own. A line produces its
indentation (the raw count of leading spaces and tabs) and a list of
tokens:

* `VARIABLE` for `{name}`; the braces are depth tracked so `{a/{i}}`
  yields the raw name `a/{i}`, which is resolved at runtime.
* `QUOTED` for `"text"`, with `\\"`, `\\n`, `\\t` and `\\\\` decoded.
* `BARE` for any other run of non-whitespace characters.

Blank lines and lines whose first non-blank character is `#` produce no
line at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import BuclError, ErrorVal, PARSE_ERROR


VARIABLE = 'VARIABLE'
QUOTED = 'QUOTED'
BARE = 'BARE'

ESCAPES = {'"': '"', 'n': '\n', 't': '\t', '\\': '\\'}


@dataclass
class Token:
    type: str
    value: str
    column: int


@dataclass
class Line:
    indent: int
    tokens: List[Token] = field(default_factory=list)
    lineno: int = 0


def _error(message: str, lineno: int) -> BuclError:
    return BuclError(ErrorVal(PARSE_ERROR, message, lineno))


def tokenize_line(text: str, lineno: int = 0) -> Optional[Line]:
    """Tokenize one raw source line, or return None for blanks and comments."""
    indent = len(text) - len(text.lstrip(' \t'))
    content = text.strip()
    offset = len(text) - len(text.lstrip()) + 1
    if not content or content.startswith('#'):
        return None

    tokens: List[Token] = []
    i = 0
    length = len(content)
    while i < length:
        c = content[i]
        if c.isspace():
            i += 1
            continue
        start = i
        if c == '{':
            i += 1
            depth = 1
            name: List[str] = []
            while i < length:
                ch = content[i]
                i += 1
                if ch == '{':
                    depth += 1
                elif ch == '}':
                    depth -= 1
                    if depth == 0:
                        break
                name.append(ch)
            if depth != 0:
                raise _error(f"unterminated variable reference at column {start + offset}", lineno)
            tokens.append(Token(VARIABLE, ''.join(name), start + offset))
            continue
        if c == '"':
            i += 1
            chars: List[str] = []
            closed = False
            while i < length:
                ch = content[i]
                i += 1
                if ch == '"':
                    closed = True
                    break
                if ch == '\\':
                    if i >= length:
                        break
                    nxt = content[i]
                    i += 1
                    if nxt in ESCAPES:
                        chars.append(ESCAPES[nxt])
                    else:
                        chars.append('\\' + nxt)
                    continue
                chars.append(ch)
            if not closed:
                raise _error(f"unterminated string literal at column {start + offset}", lineno)
            tokens.append(Token(QUOTED, ''.join(chars), start + offset))
            continue
        while i < length and not content[i].isspace():
            i += 1
        tokens.append(Token(BARE, content[start:i], start + offset))

    return Line(indent, tokens, lineno)


def tokenize(source: str) -> List[Line]:
    """Tokenize a full source string into its non-empty lines."""
    lines: List[Line] = []
    for lineno, raw in enumerate(source.split('\n'), start=1):
        if raw.endswith('\r'):
            raw = raw[:-1]
        line = tokenize_line(raw, lineno)
        if line is not None:
            lines.append(line)
    return lines
