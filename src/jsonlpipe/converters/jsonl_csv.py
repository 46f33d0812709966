# jsonl_csv.py
# SPDX-License-Identifier: MIT
"""Convert line-delimited JSON into CSV rows."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..core.config import build_options
from ..core.errors import HookError
from ..core.interfaces import Chunk
from ..core.log import get_logger
from ..core.parser import iter_records
from .common import json_default, unflatten_object

__all__ = ["JSONLToCSVOptions", "jsonl_to_csv", "format_cell"]

log = get_logger(__name__)


@dataclass
class JSONLToCSVOptions:
    """Settings for JSONL to CSV conversion.

    Attributes:
        delimiter (str): Field delimiter.
        quotechar (str): Quote character.
        escapechar (str | None): Escape character; quotes are doubled when
            None.
        quoted (bool): Quote every field.
        quoted_empty (bool): Quote fields whose text is empty.
        quoted_string (bool): Quote fields holding string values, header
            names included.
        header (bool): Emit a header row.
        columns (Sequence[str] | Callable | None): Column order. A callable
            receives the first record. Defaults to the first record's keys.
        unflatten (bool): Rebuild nested objects from dotted keys before
            writing; nested values are then written as JSON text.
        unflatten_separator (str): Separator used by ``unflatten``.
        cast (Mapping[str, Callable] | None): Formatters keyed by ``"bool"``,
            ``"date"``, ``"number"`` or ``"object"``.
        lineterminator (str): Row terminator.
    """

    delimiter: str = ","
    quotechar: str = '"'
    escapechar: str | None = None
    quoted: bool = False
    quoted_empty: bool = False
    quoted_string: bool = False
    header: bool = True
    columns: Sequence[str] | Callable[[Any], Sequence[str]] | None = None
    unflatten: bool = False
    unflatten_separator: str = "."
    cast: Mapping[str, Callable[[Any], str]] | None = None
    lineterminator: str = "\n"


def format_cell(value: Any, cast: Mapping[str, Callable[[Any], str]] | None = None) -> str:
    """Render one value as CSV cell text.

    None becomes the empty string, booleans ``"1"``/``""``, dates their ISO
    form and containers compact JSON, unless a ``cast`` formatter for that
    kind is given.
    """
    cast = cast or {}
    if value is None:
        return ""
    if isinstance(value, bool):
        fn = cast.get("bool")
        return fn(value) if fn else ("1" if value else "")
    if isinstance(value, (int, float)):
        fn = cast.get("number")
        return fn(value) if fn else json.dumps(value)
    if isinstance(value, (datetime, date)):
        fn = cast.get("date")
        return fn(value) if fn else value.isoformat()
    if isinstance(value, (dict, list)):
        fn = cast.get("object")
        if fn:
            return fn(value)
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=json_default)
    return str(value)


def _resolve_columns(opts: JSONLToCSVOptions, first: Any) -> list[str] | None:
    if callable(opts.columns):
        try:
            return [str(c) for c in opts.columns(first)]
        except Exception as exc:
            raise HookError(f"columns callback failed: {exc}") from exc
    if opts.columns is not None:
        return [str(c) for c in opts.columns]
    if isinstance(first, dict):
        return [str(k) for k in first]
    return None


def jsonl_to_csv(
    chunks: Iterable[Chunk],
    options: JSONLToCSVOptions | Any = None,
    **overrides: Any,
) -> Iterator[str]:
    """Yield CSV text, one row per record, header first.

    Input is parsed strictly: the first malformed line raises
    :class:`~jsonlpipe.core.errors.DecodeError`.

    Args:
        chunks (Iterable[bytes | str]): JSONL input in arbitrary pieces.
        options (JSONLToCSVOptions | Mapping | None): Conversion settings.
        **overrides: Individual settings applied on top of ``options``.
    """
    opts: JSONLToCSVOptions = build_options(JSONLToCSVOptions, options, overrides)
    write_row = _row_renderer(opts)

    columns: list[str] | None = None
    rows = 0
    for record in iter_records(chunks, strict=True):
        if opts.unflatten and isinstance(record, dict):
            record = unflatten_object(record, opts.unflatten_separator)
        if rows == 0:
            columns = _resolve_columns(opts, record)
            if opts.header and columns is not None:
                yield write_row(columns)
        if columns is not None and isinstance(record, dict):
            values = [record.get(col) for col in columns]
        elif isinstance(record, list):
            values = record
        else:
            values = [record]
        rows += 1
        yield write_row(values)
    log.debug("CSV export finished: rows=%d", rows)


def _writer_for(opts: JSONLToCSVOptions, buf: io.StringIO, quoting: int, lineterminator: str) -> Any:
    return csv.writer(
        buf,
        delimiter=opts.delimiter,
        quotechar=opts.quotechar,
        escapechar=opts.escapechar,
        doublequote=opts.escapechar is None,
        quoting=quoting,
        lineterminator=lineterminator,
    )


def _row_renderer(opts: JSONLToCSVOptions) -> Callable[[Sequence[Any]], str]:
    """Return a function turning one row of values into CSV text.

    With ``quoted_empty``/``quoted_string`` each field is rendered on its
    own, quoted or minimally quoted, and the fields are joined here.
    """
    buf = io.StringIO()

    def _drain() -> str:
        text = buf.getvalue()
        buf.seek(0)
        buf.truncate(0)
        return text

    if opts.quoted or not (opts.quoted_empty or opts.quoted_string):
        writer = _writer_for(opts, buf, csv.QUOTE_ALL if opts.quoted else csv.QUOTE_MINIMAL, opts.lineterminator)

        def render_row(values: Sequence[Any]) -> str:
            writer.writerow([format_cell(v, opts.cast) for v in values])
            return _drain()

        return render_row

    minimal = _writer_for(opts, buf, csv.QUOTE_MINIMAL, "\n")
    forced = _writer_for(opts, buf, csv.QUOTE_ALL, "\n")

    def render_field(value: Any) -> str:
        cell = format_cell(value, opts.cast)
        force = (opts.quoted_empty and cell == "") or (opts.quoted_string and isinstance(value, str))
        if not force and cell == "":
            # A lone empty field would be written as "" by the csv module.
            return ""
        (forced if force else minimal).writerow([cell])
        return _drain()[:-1]

    def render_selective(values: Sequence[Any]) -> str:
        return opts.delimiter.join(render_field(v) for v in values) + opts.lineterminator

    return render_selective
