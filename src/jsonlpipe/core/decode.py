# decode.py
# SPDX-License-Identifier: MIT
"""Decode one line of text into a JSON value."""

from __future__ import annotations

import json
from typing import Any

from .interfaces import Reviver

__all__ = ["DECODE_ERRORS", "decode_line", "decode_document", "describe_decode_error", "revive"]

# Everything json.loads raises for input it will not accept: JSONDecodeError
# (a ValueError), integers past the int digit limit and nesting past the
# interpreter's recursion limit.
DECODE_ERRORS = (ValueError, RecursionError)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def decode_document(text: str) -> Any:
    """``json.loads`` restricted to standard JSON.

    ``NaN``, ``Infinity`` and ``-Infinity`` are rejected.

    Raises:
        ValueError: If ``text`` is not valid JSON (``json.JSONDecodeError``
            for syntax errors).
        RecursionError: If nesting is too deep to decode.
    """
    return json.loads(text, parse_constant=_reject_constant)


def describe_decode_error(exc: BaseException) -> str:
    """Short reason for a decode failure, suitable for error messages."""
    if isinstance(exc, json.JSONDecodeError):
        return exc.msg
    if isinstance(exc, RecursionError):
        return "nesting too deep"
    return str(exc) or type(exc).__name__


def revive(value: Any, reviver: Reviver, key: str | int = "") -> Any:
    """Apply ``reviver`` bottom-up over a decoded structure.

    Children are revived before their container; the root is passed last
    with the key ``""``. List items receive their integer index as key.
    The walk uses an explicit stack, so deep nesting never hits the
    recursion limit.
    """
    holder: dict[Any, Any] = {key: value}
    stack: list[tuple[Any, Any, bool]] = [(holder, key, False)]
    while stack:
        parent, k, expanded = stack.pop()
        child = parent[k]
        if expanded or not isinstance(child, (dict, list)):
            parent[k] = reviver(k, child)
            continue
        stack.append((parent, k, True))
        keys = list(child) if isinstance(child, dict) else range(len(child))
        for child_key in reversed(keys):
            stack.append((child, child_key, False))
    return holder[key]


def decode_line(text: str, reviver: Reviver | None = None) -> Any:
    """Decode a single self-contained JSON text.

    Args:
        text (str): One line, already stripped of its terminator.
        reviver (Reviver | None): Optional bottom-up transform.

    Returns:
        Any: The decoded value.

    Raises:
        ValueError: If ``text`` is not valid JSON.
        RecursionError: If nesting is too deep to decode.
    """
    value = decode_document(text)
    if reviver is not None:
        value = revive(value, reviver)
    return value
