# json_jsonl.py
# SPDX-License-Identifier: MIT
"""Split a whole JSON document into line-delimited JSON."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from ..core.config import build_options
from ..core.decode import DECODE_ERRORS, decode_document, describe_decode_error
from ..core.errors import DecodeError, PathOrShapeError
from .common import OMIT, apply_replacer, encode_line, flatten_object, get_path, read_document

__all__ = ["JSONToJSONLOptions", "json_to_jsonl"]


@dataclass
class JSONToJSONLOptions:
    """Settings for JSON document to JSONL conversion.

    Attributes:
        array_path (str | None): Dotted path to the array to split. When
            None, a top-level array is split and any other value becomes a
            single line.
        flatten (bool): Flatten nested objects into dotted keys.
        root_key (str | None): Wrap the first object under this key.
        replacer (Callable | None): ``(key, value) -> value`` run top-down
            over each item before encoding; return :data:`OMIT` to drop.
        max_object_size (int | None): Maximum encoded length per line.
        default (Callable | None): JSON encoder fallback for unknown types.
        encoding (str): Codec for byte input.
    """

    array_path: str | None = None
    flatten: bool = False
    root_key: str | None = None
    replacer: Callable[[Any, Any], Any] | None = None
    max_object_size: int | None = None
    default: Callable[[Any], Any] | None = None
    encoding: str = "utf-8"


def json_to_jsonl(source: Any, options: JSONToJSONLOptions | Any = None, **overrides: Any) -> Iterator[str]:
    """Yield one newline-terminated JSON line per item of the document.

    The whole document is buffered before decoding.

    Args:
        source: Text, bytes, a readable file object or an iterable of
            chunks.
        options (JSONToJSONLOptions | Mapping | None): Conversion settings.
        **overrides: Individual settings applied on top of ``options``.

    Raises:
        DecodeError: If the document is not valid JSON.
        PathOrShapeError: If ``array_path`` does not lead to an array.
        ObjectLimitExceeded: If an encoded item exceeds ``max_object_size``.
    """
    opts: JSONToJSONLOptions = build_options(JSONToJSONLOptions, options, overrides)
    text = read_document(source, encoding=opts.encoding)
    if not text.strip():
        return
    try:
        document = decode_document(text)
    except DECODE_ERRORS as exc:
        if isinstance(exc, json.JSONDecodeError):
            raise DecodeError(
                f"invalid JSON document at line {exc.lineno} column {exc.colno}: {exc.msg}",
                line=exc.lineno,
                text=text,
            ) from exc
        raise DecodeError(f"invalid JSON document: {describe_decode_error(exc)}", text=text) from exc

    if opts.array_path:
        items = get_path(document, opts.array_path)
        if not isinstance(items, list):
            raise PathOrShapeError(f'path "{opts.array_path}" does not point to an array')
    elif isinstance(document, list):
        items = document
    else:
        items = [document]

    for idx, item in enumerate(items):
        if opts.flatten and isinstance(item, dict):
            item = flatten_object(item)
        if opts.root_key and idx == 0:
            item = {opts.root_key: item}
        if opts.replacer is not None:
            item = apply_replacer(item, opts.replacer)
            if item is OMIT:
                continue
        yield encode_line(item, default=opts.default, max_size=opts.max_object_size) + "\n"
