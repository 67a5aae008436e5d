"""Parser for the BUCL language.

The parser works on the line stream produced by :mod:`bucl.lexer`.
Blocks are delimited purely by indentation:

1. A statement whose next line is indented deeper owns that line, and
   every following line at the same depth, as its body.
2. An `if` or `elseif` followed by an `elseif`/`else` at the *same*
   depth links to it as its continuation. Those keywords never start a
   statement of their own.

Each line has the shape::

    line  = [ VARIABLE ] BARE param*
    param = VARIABLE | QUOTED | BARE

The `parse_program` function is the public entry point and returns a
`Program` node holding the top-level statements.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import Argument, Literal, Program, Statement, Template, VarRef
from .errors import BuclError, ErrorVal, PARSE_ERROR
from .lexer import BARE, QUOTED, VARIABLE, Line, Token, tokenize


CONTINUATIONS = ('elseif', 'else')
CONDITIONALS = ('if', 'elseif')


class Parser:
    def __init__(self, lines: List[Line]):
        self.lines = lines
        self.pos = 0

    def peek(self) -> Optional[Line]:
        if self.pos < len(self.lines):
            return self.lines[self.pos]
        return None

    def current_indent(self) -> Optional[int]:
        line = self.peek()
        return line.indent if line is not None else None

    def at_continuation(self) -> bool:
        line = self.peek()
        if line is None:
            return False
        first = line.tokens[0]
        return first.type == BARE and first.value in CONTINUATIONS

    def error(self, message: str, line: Optional[Line]) -> BuclError:
        return BuclError(ErrorVal(PARSE_ERROR, message, line.lineno if line else None))

    def parse_program(self) -> Program:
        body = self.parse_block(0)
        leftover = self.peek()
        if leftover is not None:
            # only an elseif/else without a matching if can stop the top level early
            raise self.error(f"'{leftover.tokens[0].value}' without a preceding 'if'", leftover)
        return Program(body)

    def parse_block(self, indent: int) -> List[Statement]:
        """Parse consecutive statements at exactly `indent`."""
        statements: List[Statement] = []
        while True:
            current = self.current_indent()
            if current is None or current < indent:
                break
            if current > indent:
                raise self.error(
                    f"unexpected indentation: expected {indent}, got {current}", self.peek())
            if self.at_continuation():
                break
            statements.append(self.parse_statement(indent))
        return statements

    def parse_statement(self, indent: int) -> Statement:
        line = self.lines[self.pos]
        self.pos += 1
        target, function, arguments = self.split_line(line)

        body = None
        deeper = self.current_indent()
        if deeper is not None and deeper > indent:
            body = self.parse_block(deeper)

        continuation = None
        if function in CONDITIONALS and self.at_continuation() and self.current_indent() == indent:
            continuation = self.parse_statement(indent)

        return Statement(target, function, arguments, body, continuation, line.lineno)

    def split_line(self, line: Line) -> Tuple[Optional[str], str, List[Argument]]:
        tokens = line.tokens
        first = tokens[0]
        if first.type == QUOTED:
            raise self.error(f'a line cannot start with a string literal: "{first.value}"', line)
        if first.type == VARIABLE:
            if len(tokens) < 2:
                raise self.error(f"expected function name after '{{{first.value}}}'", line)
            second = tokens[1]
            if second.type != BARE:
                raise self.error(
                    f"expected function name after '{{{first.value}}}', got {second.type} {second.value!r}",
                    line)
            return first.value, second.value, [to_argument(t) for t in tokens[2:]]
        return None, first.value, [to_argument(t) for t in tokens[1:]]


def to_argument(token: Token) -> Argument:
    if token.type == VARIABLE:
        return VarRef(token.value)
    if token.type == QUOTED:
        return Template(token.value)
    return Literal(token.value)


def parse_program(source: str) -> Program:
    """Parse BUCL source code into an AST Program.

    Syntax errors are raised as `BuclError` with a `ParseError` kind and
    the offending line number.
    """
    return Parser(tokenize(source)).parse_program()
