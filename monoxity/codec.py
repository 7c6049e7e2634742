"""JSON boundary between stored text and application values.

Values are written with :func:`encode` and read back with :func:`decode`.
Array helpers compare elements by their canonical JSON form, so ``1`` and
``True`` stay distinct and dicts compare regardless of key order.
"""

from __future__ import annotations

import json
from typing import Any

from monoxity.errors import DecodeError, ShapeError


def encode(value: Any) -> str:
    """Serialize *value* to JSON text.  Raises ``TypeError`` if it cannot."""
    return json.dumps(value)


def decode(key: str, text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise DecodeError(key, str(exc)) from exc


def as_array(key: str, value: Any) -> list:
    """Return *value* if it is a JSON array, else raise ``ShapeError``."""
    if not isinstance(value, list):
        raise ShapeError(key)
    return value


def canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def dedupe(items: list) -> list:
    """Drop repeated elements, keeping the first occurrence of each."""
    seen: set[str] = set()
    out = []
    for item in items:
        c = canonical(item)
        if c in seen:
            continue
        seen.add(c)
        out.append(item)
    return out


def remove_first(items: list, value: Any) -> tuple[list, bool]:
    """Return *(items without the first match of value, removed?)*.

    When nothing matches the list is returned unchanged.
    """
    target = canonical(value)
    for i, item in enumerate(items):
        if canonical(item) == target:
            return items[:i] + items[i + 1:], True
    return items, False
