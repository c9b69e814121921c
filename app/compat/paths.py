"""Dot-path access over untyped, JSON-like response values.

A path such as ``"data.metadata.id"`` is split on ``.`` and walked one segment
at a time. Mappings are entered by key; lists and tuples by a decimal index
segment (``"choices.0.message"``). Strings and every other value are leaves.

Presence and value are kept apart: a key that exists with a ``None`` value is
present, while a key that does not exist yields the MISSING sentinel.
"""

from collections.abc import Mapping
from typing import Any, Tuple


class _Missing:
    """Marker for a path that resolved to nothing."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def _segments(path: str) -> Tuple[str, ...]:
    if not isinstance(path, str):
        raise TypeError(f"invalid_path type={type(path).__name__} value={path!r}")
    return tuple(path.split("."))


def _step(current: Any, key: str) -> Any:
    if isinstance(current, Mapping):
        return current[key] if key in current else MISSING
    if isinstance(current, (list, tuple)):
        if key.isascii() and key.isdigit() and int(key) < len(current):
            return current[int(key)]
    return MISSING


def get_path(obj: Any, path: str, default: Any = MISSING) -> Any:
    """Return the value stored at ``path`` inside ``obj`` or ``default``."""
    current = obj
    for key in _segments(path):
        current = _step(current, key)
        if current is MISSING:
            return default
    return current


def has_path(obj: Any, path: str) -> bool:
    return get_path(obj, path) is not MISSING
