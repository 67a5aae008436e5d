"""Abstract Syntax Tree (AST) definitions for the BUCL language.

A BUCL program is a list of statements, one per logical line. Every
statement calls a function, optionally stores the result in a target
variable and may own an indented body. `if` and `elseif` statements link
to the following `elseif`/`else` through `continuation`, which is the
only edge in the tree that is not a parent/child relation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Literal(Node):
    """An unquoted bare word or number: `42`, `=`, `true`."""
    text: str


@dataclass
class Template(Node):
    """A quoted string; `{...}` references inside are interpolated."""
    text: str


@dataclass
class VarRef(Node):
    """A stand-alone variable reference: `{name}` or `{parts/{i}}`."""
    name: str


Argument = Union[Literal, Template, VarRef]


@dataclass
class Statement(Node):
    target: Optional[str]
    function: str
    arguments: List[Argument] = field(default_factory=list)
    body: Optional[List['Statement']] = None
    continuation: Optional['Statement'] = None
    line: int = field(default=0, compare=False)


@dataclass
class Program(Node):
    body: List[Statement]
