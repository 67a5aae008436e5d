"""Turn a statement tree back into BUCL source.

The printer emits four spaces per nesting level, so its output parses
back into a structurally equal tree.
"""

from __future__ import annotations

from typing import List, Union

from .ast import Argument, Literal, Program, Statement, Template, VarRef


INDENT = '    '

_QUOTE_ESCAPES = {'\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t'}


def quote(text: str) -> str:
    return '"' + ''.join(_QUOTE_ESCAPES.get(ch, ch) for ch in text) + '"'


def argument_to_source(arg: Argument) -> str:
    if isinstance(arg, VarRef):
        return '{' + arg.name + '}'
    if isinstance(arg, Template):
        return quote(arg.text)
    if isinstance(arg, Literal):
        return arg.text
    raise TypeError(f"not an argument: {arg!r}")


def statement_lines(stmt: Statement, depth: int = 0) -> List[str]:
    words = []
    if stmt.target is not None:
        words.append('{' + stmt.target + '}')
    words.append(stmt.function)
    words.extend(argument_to_source(a) for a in stmt.arguments)
    lines = [INDENT * depth + ' '.join(words)]
    for child in stmt.body or []:
        lines.extend(statement_lines(child, depth + 1))
    if stmt.continuation is not None:
        lines.extend(statement_lines(stmt.continuation, depth))
    return lines


def to_source(program: Union[Program, List[Statement]]) -> str:
    statements = program.body if isinstance(program, Program) else program
    lines: List[str] = []
    for stmt in statements:
        lines.extend(statement_lines(stmt))
    return '\n'.join(lines) + '\n'
