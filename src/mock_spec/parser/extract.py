"""Typed accessors over the decoded document tree.

Each accessor treats a missing field as "not present" (returns None) and a
present field of the wrong shape as a TypeMismatch.
"""

from typing import Any

from .errors import TypeMismatch


def is_mapping(value: Any) -> bool:
    return isinstance(value, dict) and all(isinstance(key, str) for key in value)


def is_sequence(value: Any) -> bool:
    return isinstance(value, list)


def is_integer(value: Any) -> bool:
    # YAML booleans are ints in Python
    return isinstance(value, int) and not isinstance(value, bool)


def get_mapping(node: dict, name: str) -> dict | None:
    if name not in node:
        return None
    value = node[name]
    if not is_mapping(value):
        raise TypeMismatch(name, "an object")
    return value


def get_sequence(node: dict, name: str) -> list | None:
    if name not in node:
        return None
    value = node[name]
    if not is_sequence(value):
        raise TypeMismatch(name, "an array")
    return value


def get_string(node: dict, name: str) -> str | None:
    if name not in node:
        return None
    value = node[name]
    if not isinstance(value, str):
        raise TypeMismatch(name, "a string")
    return value


def get_int(node: dict, name: str) -> int | None:
    if name not in node:
        return None
    value = node[name]
    if not is_integer(value):
        raise TypeMismatch(name, "an integer")
    return value


def fill_string(target: dict, node: dict, name: str) -> None:
    """Copy string field ``name`` into ``target`` only when it is present."""
    value = get_string(node, name)
    if value is not None:
        target[name] = value


def fill_strings(target: dict, node: dict, *names: str) -> None:
    for name in names:
        fill_string(target, node, name)


def fill_int(target: dict, node: dict, name: str) -> None:
    """Copy integer field ``name`` into ``target`` only when it is present."""
    value = get_int(node, name)
    if value is not None:
        target[name] = value
