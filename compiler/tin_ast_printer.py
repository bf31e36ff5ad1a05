#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import is_dataclass, fields
from enum import Enum
from typing import List, Any

from tin_ast import Node, Program, FunctionDeclaration, UnresolvedFunction


def _format_scalar(value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    return repr(value)


def format_node(node: Any, indent: int = 0) -> List[str]:
    """
    Generic, reflection-based AST dumper.

    - Shows the node class name.
    - Prints scalar fields inline (spans are never printed).
    - Recursively prints child Node / list-of-Node fields on new indented lines.
    - A resolved call target is printed by name and arity only, so recursive
      functions do not recurse here.
    """
    ind = "  " * indent

    if isinstance(node, list):
        lines: List[str] = []
        for elem in node:
            lines.extend(format_node(elem, indent))
        return lines

    if isinstance(node, Node) and is_dataclass(node):
        data_fields = [f for f in fields(node) if f.name != "span" and f.repr]
        simple_parts = []
        child_fields = []

        for f in data_fields:
            value = getattr(node, f.name)
            if f.name == "target" and isinstance(value, FunctionDeclaration):
                simple_parts.append(("target", f"{value.name}/{value.arity}"))
            elif f.name == "target" and isinstance(value, UnresolvedFunction):
                simple_parts.append(("target", f"?{value.name}/{value.arity}"))
            elif isinstance(value, Node) or isinstance(value, list):
                child_fields.append((f.name, value))
            else:
                simple_parts.append((f.name, _format_scalar(value)))

        # Header: ClassName(field1=..., field2=...)
        header = node.__class__.__name__
        if simple_parts:
            inner = ", ".join(f"{name}={value}" for name, value in simple_parts)
            header = f"{header}({inner})"

        lines = [ind + header]
        for name, value in child_fields:
            if isinstance(value, list):
                if not value:
                    continue
                lines.append(ind + "  " + f"{name}:")
                for elem in value:
                    lines.extend(format_node(elem, indent + 2))
            else:
                lines.append(ind + "  " + f"{name}:")
                lines.extend(format_node(value, indent + 2))
        return lines

    return [ind + repr(node)]


def format_program(program: Program) -> str:
    """
    Convenience: dump a whole Program as a string.
    """
    return "\n".join(format_node(program, indent=0))
