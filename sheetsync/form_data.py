"""
sheetsync/form_data.py -- Conversion between flat form data and nested dicts.

Form widgets submit a flat mapping of dotted paths to values::

    {"data.skills.0.name": "Climbing", "data.skills.0.stat": "Speed"}

``expand_object`` turns that into nested dicts, ``flatten_object`` goes
the other way.
"""

from __future__ import annotations

from typing import Any

DELETION_PREFIX = "-="

_MISSING = object()


def expand_object(flat: dict[str, Any]) -> dict[str, Any]:
    """Expand a mapping of dotted paths into a nested dict.

    Keys are processed in insertion order.  When a path must descend
    through a key that currently holds a scalar, the scalar is replaced
    by a dict.
    """
    result: dict[str, Any] = {}
    for path, value in flat.items():
        parts = path.split(".")
        node = result
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return result


def flatten_object(nested: dict[str, Any], _prefix: str = "") -> dict[str, Any]:
    """Flatten a nested dict into dotted-path keys.

    Empty dicts are kept as leaf values so the result expands back to the
    same structure.
    """
    flat: dict[str, Any] = {}
    for key, value in nested.items():
        path = f"{_prefix}.{key}" if _prefix else str(key)
        if isinstance(value, dict) and value:
            flat.update(flatten_object(value, path))
        else:
            flat[path] = value
    return flat


def get_path(obj: dict[str, Any], path: str, default: Any = None) -> Any:
    """Return the value at dotted *path* inside *obj*, or *default*."""
    node: Any = obj
    for part in path.split("."):
        if not isinstance(node, dict):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node


def deletion_key(key: str) -> str:
    """Return the deletion sentinel key for *key*."""
    return DELETION_PREFIX + key


def is_deletion_key(key: str) -> bool:
    return key.startswith(DELETION_PREFIX)
