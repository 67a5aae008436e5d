"""Arithmetic expressions for the `math` builtin.

BUCL has no numeric type, so `math` hands its text to this module. The
grammar is declared for Lark and evaluated with a `Transformer`:

    primary := number | '(' add_sub ')'
    unary   := ['+' | '-'] primary
    mul_div := unary (('*' | '/' | '%') unary)*
    add_sub := mul_div (('+' | '-') mul_div)*

Numbers are runs of digits and dots, whitespace between tokens is
ignored. Division and modulo by zero are errors, and so is any input the
grammar cannot consume completely.
"""

from __future__ import annotations

import math

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, VisitError

from .errors import BuclError, ErrorVal, EVALUATION_ERROR


MATH_GRAMMAR = r"""
    ?start: add_sub

    ?add_sub: mul_div
            | add_sub "+" mul_div   -> add
            | add_sub "-" mul_div   -> sub

    ?mul_div: unary
            | mul_div "*" unary     -> mul
            | mul_div "/" unary     -> div
            | mul_div "%" unary     -> mod

    ?unary: primary
          | "-" primary             -> neg
          | "+" primary

    ?primary: NUMBER                -> number
            | "(" add_sub ")"

    NUMBER: /[0-9.]+/

    %import common.WS
    %ignore WS
"""


MATH_PARSER = Lark(
    MATH_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
)


def _error(message: str) -> BuclError:
    return BuclError(ErrorVal(EVALUATION_ERROR, f"math: {message}"))


@v_args(inline=True)
class MathTransformer(Transformer):
    """Folds the parse tree into a float."""

    def number(self, token):
        try:
            return float(token.value)
        except ValueError:
            raise _error(f"invalid number literal '{token.value}' at position {token.column}")

    def neg(self, value):
        return -value

    def add(self, left, right):
        return left + right

    def sub(self, left, right):
        return left - right

    def mul(self, left, right):
        return left * right

    def div(self, left, right):
        if right == 0.0:
            raise _error("division by zero")
        return left / right

    def mod(self, left, right):
        if right == 0.0:
            raise _error("modulo by zero")
        # the result takes the sign of the dividend
        return math.fmod(left, right)


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression and return its value."""
    try:
        tree = MATH_PARSER.parse(expression)
    except UnexpectedEOF:
        raise _error("expected number, got end of expression")
    except UnexpectedCharacters as e:
        raise _error(f"unexpected character '{e.char}' at position {e.column}")
    except UnexpectedInput as e:
        token = getattr(e, 'token', None)
        if token is None or token.type == '$END':
            raise _error("expected number, got end of expression")
        raise _error(f"unexpected '{token.value}' at position {token.column}")
    try:
        return MathTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, BuclError):
            raise e.orig_exc
        raise


def format_number(value: float) -> str:
    """Render integral values without a fractional part."""
    if value.is_integer():
        return str(int(value))
    return repr(value)
