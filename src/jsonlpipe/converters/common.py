# common.py
# SPDX-License-Identifier: MIT
"""Helpers shared by the format converters."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, time
from typing import Any

from ..core.errors import HookError, ObjectLimitExceeded, PathOrShapeError

__all__ = [
    "flatten_object",
    "unflatten_object",
    "get_path",
    "OMIT",
    "apply_replacer",
    "json_default",
    "encode_line",
    "read_document",
]


def flatten_object(obj: Mapping[str, Any], prefix: str = "", sep: str = ".") -> dict[str, Any]:
    """Flatten nested dicts into dotted keys; lists are left intact."""
    out: dict[str, Any] = {}
    for key, value in obj.items():
        name = f"{prefix}{sep}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            out.update(flatten_object(value, name, sep))
        else:
            out[name] = value
    return out


def unflatten_object(obj: Mapping[str, Any], sep: str = ".") -> dict[str, Any]:
    """Rebuild nested dicts from separator-joined keys.

    A later key that needs a dict where a scalar already sits replaces the
    scalar.
    """
    out: dict[str, Any] = {}
    for key, value in obj.items():
        parts = str(key).split(sep)
        current = out
        for part in parts[:-1]:
            nxt = current.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                current[part] = nxt
            current = nxt
        current[parts[-1]] = value
    return out


def get_path(document: Any, path: str) -> Any:
    """Walk a dotted path through dicts (and list indices); None when absent."""
    current = document
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
        if current is None:
            return None
    return current


def json_default(value: Any) -> Any:
    """Fallback encoder: ISO strings for dates and times, lists for sets."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_line(
    value: Any,
    *,
    default: Callable[[Any], Any] | None = None,
    max_size: int | None = None,
) -> str:
    """Serialize one value as compact JSON without a trailing newline.

    Raises:
        ObjectLimitExceeded: If the encoded text is longer than ``max_size``.
    """
    text = json.dumps(
        value,
        ensure_ascii=False,
        separators=(",", ":"),
        default=default or json_default,
    )
    if max_size is not None and len(text) > max_size:
        raise ObjectLimitExceeded(
            f"object size {len(text)} exceeds maximum {max_size}",
            text=text,
        )
    return text


def read_document(source: Any, *, encoding: str = "utf-8") -> str:
    """Collect a whole document from text, bytes, a file object or chunks."""
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, (bytes, bytearray)):
        return bytes(source).decode(encoding)
    if isinstance(source, str):
        return source
    if isinstance(source, Iterable):
        parts = list(source)
        if parts and all(isinstance(p, (bytes, bytearray)) for p in parts):
            return b"".join(parts).decode(encoding)
        return "".join(p.decode(encoding) if isinstance(p, (bytes, bytearray)) else p for p in parts)
    raise PathOrShapeError(f"cannot read a document from {type(source).__name__}")


# Returned by a replacer to drop a value: dict members are removed, list
# items become None and a dropped root produces no output line.
OMIT = object()


def apply_replacer(value: Any, replacer: Callable[[Any, Any], Any]) -> Any:
    """Run ``replacer(key, value)`` over ``value`` top-down before encoding.

    The root is visited first with the key ``""``; the children of whatever
    the replacer returns are visited next, dict members with their key and
    list items with their index. Containers are copied, so ``value`` itself
    is never modified.

    Returns:
        Any: The replaced value, or :data:`OMIT` when the root was dropped.

    Raises:
        HookError: If the replacer raises.
    """
    holder: dict[Any, Any] = {"": value}
    stack: list[tuple[Any, Any]] = [(holder, "")]
    while stack:
        parent, key = stack.pop()
        try:
            replaced = replacer(key, parent[key])
        except Exception as exc:
            raise HookError(f"replacer callback failed at key {key!r}: {exc}") from exc
        if replaced is OMIT:
            if isinstance(parent, dict):
                del parent[key]
            else:
                parent[key] = None
            continue
        keys: Iterable[Any] = ()
        if isinstance(replaced, dict):
            replaced = dict(replaced)
            keys = list(replaced)
        elif isinstance(replaced, list):
            replaced = list(replaced)
            keys = range(len(replaced))
        parent[key] = replaced
        for child_key in reversed(list(keys)):
            stack.append((replaced, child_key))
    return holder.get("", OMIT)
