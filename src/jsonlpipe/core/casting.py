# casting.py
# SPDX-License-Identifier: MIT
"""Type coercion of decoded values."""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

from .config import CastMode, ParserOptions
from .state import RunState

__all__ = ["cast_scalar", "parse_date", "cast_value", "cast_record"]

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_RE = re.compile(r"[+-]?\d+")

_LITERALS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}


def cast_scalar(value: Any) -> Any:
    """Built-in coercion of string literals and decimal numbers.

    ``"true"``/``"false"`` become bools, ``"null"``/``"undefined"`` become
    None and decimal numeric strings (surrounding whitespace allowed) become
    int or float. Numbers too large to represent (past the int digit limit,
    or overflowing to infinity) stay strings, as does everything else.
    Non-strings are returned as is.
    """
    if not isinstance(value, str) or value == "":
        return value
    if value in _LITERALS:
        return _LITERALS[value]
    text = value.strip()
    if _INT_RE.fullmatch(text):
        try:
            return int(text)
        except ValueError:
            # Past the interpreter's int digit limit.
            return value
    if _NUMBER_RE.fullmatch(text):
        number = float(text)
        return number if math.isfinite(number) else value
    return value


def parse_date(value: Any) -> datetime | None:
    """Return a datetime when ``value`` is an ISO-8601 date/time string."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def cast_value(value: Any, options: ParserOptions, state: RunState, column: str | int | None) -> Any:
    """Apply ``cast`` then ``cast_date`` to a single value."""
    mode = options.cast_mode
    if mode == CastMode.BUILTIN:
        value = cast_scalar(value)
    elif mode == CastMode.CUSTOM:
        value = options.cast(value, state.cast_context(column))  # type: ignore[operator]

    mode = options.cast_date_mode
    if mode == CastMode.BUILTIN:
        parsed = parse_date(value)
        if parsed is not None:
            value = parsed
    elif mode == CastMode.CUSTOM:
        value = options.cast_date(value, state.cast_context(column))  # type: ignore[operator]
    return value


def cast_record(record: Any, options: ParserOptions, state: RunState) -> Any:
    """Cast the first-level values of a list or dict, or a scalar record.

    Nested containers are passed to the cast functions whole, not walked.
    """
    if options.cast_mode == CastMode.OFF and options.cast_date_mode == CastMode.OFF:
        return record
    if isinstance(record, list):
        return [cast_value(v, options, state, idx) for idx, v in enumerate(record)]
    if isinstance(record, dict):
        return {k: cast_value(v, options, state, k) for k, v in record.items()}
    return cast_value(record, options, state, None)
