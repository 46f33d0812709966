# shaping.py
# SPDX-License-Identifier: MIT
"""Record shaping helpers: empty-value detection, enrichment, keyed nesting."""

from __future__ import annotations

import json
from typing import Any

from .state import RecordContext

__all__ = ["is_empty_record", "enrich", "objname_key", "nest_by_objname"]


def _is_empty_value(value: Any) -> bool:
    return value is None or value == ""


def is_empty_record(record: Any) -> bool:
    """True when every first-level value (or the scalar itself) is empty.

    Empty means None or the empty string. Empty containers count as empty.
    """
    if isinstance(record, dict):
        return all(_is_empty_value(v) for v in record.values())
    if isinstance(record, list):
        return all(_is_empty_value(v) for v in record)
    return _is_empty_value(record)


def enrich(
    record: Any,
    *,
    context: RecordContext | None,
    raw: str | None,
) -> dict[str, Any]:
    """Wrap ``record`` with an ``info`` snapshot and/or its ``raw`` line."""
    out: dict[str, Any] = {}
    if context is not None:
        out["info"] = context.to_dict()
    if raw is not None:
        out["raw"] = raw
    out["record"] = record
    return out


def objname_key(record: Any, objname: str) -> str | None:
    """Return the nesting key for ``record``, or None when it has none.

    The field must be present and truthy. Non-string values are rendered as
    compact JSON so ``5`` keys as ``"5"`` and ``True`` as ``"true"``.
    """
    if not isinstance(record, dict):
        return None
    value = record.get(objname)
    if not value:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), default=str)


def nest_by_objname(output: Any, record: Any, objname: str) -> Any:
    """Key ``output`` by ``record[objname]`` when that field is usable."""
    key = objname_key(record, objname)
    if key is None:
        return output
    return {key: output}
