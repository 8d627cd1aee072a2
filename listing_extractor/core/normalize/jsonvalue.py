# listing_extractor/core/normalize/jsonvalue.py
"""
Total accessors over decoded JSON.

Embedded page caches are untyped and change shape without notice, so every
lookup here returns None instead of raising when a key is missing or a node
has an unexpected type.
"""

from __future__ import annotations

from typing import TypeAlias

JsonValue: TypeAlias = "dict[str, JsonValue] | list[JsonValue] | str | int | float | bool | None"
JsonObject: TypeAlias = "dict[str, JsonValue]"


def as_obj(value: object) -> JsonObject | None:
    return value if isinstance(value, dict) else None


def as_list(value: object) -> list[JsonValue] | None:
    return value if isinstance(value, list) else None


def get_path(value: object, *path: str | int) -> JsonValue:
    """get_path(data, "props", "pageProps", "photos", 0, "url")"""
    node = value
    for step in path:
        match node, step:
            case dict(), str():
                node = node.get(step)
            case list(), int() if -len(node) <= step < len(node):
                node = node[step]
            case _:
                return None
    return node


def lookup(value: object, dotted: str) -> JsonValue:
    """Dotted-path shorthand: lookup(prop, "adTargets.sqft"), lookup(prop, "priceHistory.0.price")."""
    return get_path(value, *(int(p) if p.isdigit() else p for p in dotted.split(".")))


def first_present(value: object, *dotted_paths: str) -> JsonValue:
    """First lookup that is not None (0 and "" count as present)."""
    for dotted in dotted_paths:
        found = lookup(value, dotted)
        if found is not None:
            return found
    return None


def first_truthy(value: object, *dotted_paths: str) -> JsonValue:
    """First lookup that is a non-empty value."""
    for dotted in dotted_paths:
        found = lookup(value, dotted)
        if found not in (None, "", [], {}):
            return found
    return None


def unwrap_amount(value: JsonValue) -> JsonValue:
    """{"value": 523900, "currency": "USD"} → 523900; scalars pass through."""
    match value:
        case dict():
            for key in ("value", "amount", "price", "listPrice"):
                if value.get(key) is not None:
                    return value[key]
            return None
        case _:
            return value


__all__ = [
    "JsonValue",
    "JsonObject",
    "as_obj",
    "as_list",
    "get_path",
    "lookup",
    "first_present",
    "first_truthy",
    "unwrap_amount",
]
