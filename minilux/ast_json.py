"""JSON serialization/deserialization for Minilux AST.

This module converts between Minilux AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Each node becomes a dict
with a ``"type"`` key naming its class plus one key per field, source
positions included. Regex literals are stored as pattern, flags and
replacement and recompiled when loaded.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict

from . import ast as nodes
from .patterns import compile_regex

NODE_TYPES: Dict[str, type] = {
    cls.__name__: cls
    for cls in vars(nodes).values()
    if isinstance(cls, type) and issubclass(cls, nodes.Node) and cls is not nodes.Node
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (int, str, bool)):
        return node
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, nodes.Node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            if f.name == 'regex':
                continue
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj}
    if cls is nodes.IfStmt:
        kwargs['branches'] = [tuple(branch) for branch in kwargs['branches']]
    if cls is nodes.RegexLit:
        kwargs['regex'] = compile_regex(kwargs['pattern'], kwargs['flags'], kwargs.get('replacement'))
    return cls(**kwargs)
