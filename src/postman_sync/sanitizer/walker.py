"""Generic traversal of parsed JSON bodies."""

from collections.abc import Callable
from typing import Any

# visit(field_name, value) -> replacement value
LeafVisitor = Callable[[str | None, Any], Any]


def walk_json(node: Any, visit: LeafVisitor, field_name: str | None = None) -> Any:
    """Rebuild ``node`` with every scalar leaf passed through ``visit``.

    Array elements inherit the name of the field holding the array, so the
    items of ``"tags": ["a", "b"]`` are visited as ``tags``.
    """
    if isinstance(node, dict):
        return {key: walk_json(value, visit, key) for key, value in node.items()}
    if isinstance(node, list):
        return [walk_json(element, visit, field_name) for element in node]
    return visit(field_name, node)
