# jsonl_json.py
# SPDX-License-Identifier: MIT
"""Collect line-delimited JSON into a single JSON document."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..core.config import build_options
from ..core.errors import ObjectLimitExceeded
from ..core.interfaces import Chunk
from ..core.parser import iter_records
from .common import json_default

__all__ = ["JSONLToJSONOptions", "jsonl_to_json"]


@dataclass
class JSONLToJSONOptions:
    """Settings for JSONL to JSON document conversion.

    Attributes:
        array_wrapper (bool): Always emit an array. When False a single
            record is emitted bare.
        array_name (str | None): Nest the array under this key.
        pretty (bool): Indent the output.
        indent (int | str): Indent used when ``pretty`` is set.
        max_objects (int | None): Maximum number of records collected.
        default (Callable | None): JSON encoder fallback for unknown types.
    """

    array_wrapper: bool = True
    array_name: str | None = None
    pretty: bool = False
    indent: int | str = 2
    max_objects: int | None = None
    default: Callable[[Any], Any] | None = None


def jsonl_to_json(
    chunks: Iterable[Chunk],
    options: JSONLToJSONOptions | Any = None,
    **overrides: Any,
) -> str:
    """Parse JSONL strictly and return one JSON document.

    Raises:
        DecodeError: On the first malformed line.
        ObjectLimitExceeded: If more than ``max_objects`` records arrive.
    """
    opts: JSONLToJSONOptions = build_options(JSONLToJSONOptions, options, overrides)
    objects: list[Any] = []
    for record in iter_records(chunks, strict=True):
        objects.append(record)
        if opts.max_objects is not None and len(objects) > opts.max_objects:
            raise ObjectLimitExceeded(f"maximum object limit {opts.max_objects} exceeded")

    output: Any
    if opts.array_wrapper:
        output = {opts.array_name: objects} if opts.array_name else objects
    else:
        output = objects[0] if len(objects) == 1 else objects

    if opts.pretty:
        return json.dumps(output, ensure_ascii=False, indent=opts.indent, default=opts.default or json_default)
    return json.dumps(output, ensure_ascii=False, separators=(",", ":"), default=opts.default or json_default)
