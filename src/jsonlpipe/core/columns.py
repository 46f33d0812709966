# columns.py
# SPDX-License-Identifier: MIT
"""Map decoded arrays onto named columns."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .config import ColumnsMode, ParserOptions
from .log import get_logger
from .state import RunState

__all__ = ["HEADER_CONSUMED", "header_names", "zip_columns", "apply_columns"]

log = get_logger(__name__)

# Returned instead of a record when the value was consumed as the header.
HEADER_CONSUMED = object()


def _to_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def header_names(value: Any) -> list[str] | None:
    """Derive column names from a header value.

    Arrays give their stringified elements and objects their key order. A
    scalar gives no names: it is still consumed as the header, but later
    arrays pass through unchanged.
    """
    if isinstance(value, list):
        return [_to_name(v) for v in value]
    if isinstance(value, dict):
        return [str(k) for k in value]
    return None


def zip_columns(names: Sequence[str | None], values: list[Any]) -> dict[str, Any]:
    """Zip an array against column names.

    Positions past the end of ``values`` map to None; positions whose name is
    None are dropped. Values beyond the last name are ignored.
    """
    out: dict[str, Any] = {}
    for idx, name in enumerate(names):
        if name is None:
            continue
        out[name] = values[idx] if idx < len(values) else None
    return out


def apply_columns(value: Any, options: ParserOptions, state: RunState) -> Any:
    """Apply the configured column mode to one decoded value.

    Returns:
        Any: The (possibly keyed) record, or :data:`HEADER_CONSUMED` when the
        value was used as the header.
    """
    mode = options.columns_mode
    if mode == ColumnsMode.OFF:
        return value
    if mode == ColumnsMode.EXPLICIT:
        if isinstance(value, list):
            return zip_columns(options.explicit_columns, value)
        return value
    if not state.header_learned:
        if mode == ColumnsMode.HEADER:
            names = header_names(value)
        else:
            names = [_to_name(n) for n in options.columns(value)]  # type: ignore[operator]
        state.header_columns = names
        state.header_learned = True
        if names is None:
            log.debug("Scalar header on line %d; arrays will pass through", state.lines)
        else:
            log.debug("Learned %d columns from line %d: %s", len(names), state.lines, names)
        return HEADER_CONSUMED
    if isinstance(value, list) and state.header_columns is not None:
        return zip_columns(state.header_columns, value)
    return value
