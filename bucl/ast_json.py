"""JSON serialization/deserialization for BUCL AST.

This module converts between BUCL AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. It supports a full
round-trip for every node type, including statement bodies and
`elseif`/`else` continuations.
"""

from __future__ import annotations

from typing import Any

from .ast import Literal, Program, Statement, Template, VarRef


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Statement):
        return {
            "type": "Statement",
            "target": node.target,
            "function": node.function,
            "arguments": [ast_to_obj(a) for a in node.arguments],
            "body": ast_to_obj(node.body),
            "continuation": ast_to_obj(node.continuation),
            "line": node.line,
        }
    if isinstance(node, Literal):
        return {"type": "Literal", "text": node.text}
    if isinstance(node, Template):
        return {"type": "Template", "text": node.text}
    if isinstance(node, VarRef):
        return {"type": "VarRef", "name": node.name}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "Statement":
        return Statement(
            target=obj.get("target"),
            function=obj["function"],
            arguments=[ast_from_obj(a) for a in obj.get("arguments", [])],
            body=ast_from_obj(obj.get("body")),
            continuation=ast_from_obj(obj.get("continuation")),
            line=int(obj.get("line", 0)),
        )
    if t == "Literal":
        return Literal(text=obj["text"])
    if t == "Template":
        return Template(text=obj["text"])
    if t == "VarRef":
        return VarRef(name=obj["name"])

    raise ValueError(f"Unknown AST node type: {t}")
