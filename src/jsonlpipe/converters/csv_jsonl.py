# csv_jsonl.py
# SPDX-License-Identifier: MIT
"""Convert CSV/TSV text into line-delimited JSON."""

from __future__ import annotations

import csv
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from ..core.casting import cast_scalar
from ..core.config import build_options
from ..core.errors import HookError, PathOrShapeError
from ..core.log import WarningBudget, get_logger
from ..core.shaping import is_empty_record
from ..core.state import CastContext
from .common import OMIT, apply_replacer, encode_line, flatten_object

__all__ = ["CSVToJSONLOptions", "csv_to_jsonl"]

log = get_logger(__name__)


@dataclass
class CSVToJSONLOptions:
    """Settings for CSV to JSONL conversion.

    Attributes:
        delimiter (str): Field delimiter.
        quotechar (str): Quote character.
        escapechar (str | None): Escape character; quotes are escaped by
            doubling when None.
        headers (bool | Sequence[str]): True to read names from the first
            row, a sequence of names, or False to emit rows as lists.
        skip_empty_lines (bool): Ignore blank rows.
        skip_records_with_empty_values (bool): Drop rows whose cells are
            all empty.
        skip_records_with_error (bool): Drop rows whose width does not
            match the header instead of raising.
        trim (bool): Strip whitespace around each cell.
        cast (bool | Callable): True for built-in literal/number coercion,
            or ``(value, context) -> value``.
        flatten (bool): Flatten nested objects into dotted keys.
        root_key (str | None): Wrap the first object under this key.
        replacer (Callable | None): ``(key, value) -> value`` run top-down
            over each record before encoding; return :data:`OMIT` to drop.
        max_object_size (int | None): Maximum encoded length per line.
        default (Callable | None): JSON encoder fallback for unknown types.
    """

    delimiter: str = ","
    quotechar: str = '"'
    escapechar: str | None = None
    headers: bool | Sequence[str] = True
    skip_empty_lines: bool = True
    skip_records_with_empty_values: bool = False
    skip_records_with_error: bool = False
    trim: bool = True
    cast: bool | Callable[[Any, CastContext], Any] = False
    flatten: bool = False
    root_key: str | None = None
    replacer: Callable[[Any, Any], Any] | None = None
    max_object_size: int | None = None
    default: Callable[[Any], Any] | None = None


def _cast_cell(value: str, opts: CSVToJSONLOptions, ctx: CastContext) -> Any:
    if opts.cast is True:
        return cast_scalar(value)
    if callable(opts.cast):
        try:
            return opts.cast(value, ctx)
        except Exception as exc:
            raise HookError(f"cast callback failed at row {ctx.lines}: {exc}", line=ctx.lines) from exc
    return value


def csv_to_jsonl(
    lines: Iterable[str],
    options: CSVToJSONLOptions | Any = None,
    **overrides: Any,
) -> Iterator[str]:
    """Yield one JSON line (newline-terminated) per CSV row.

    Args:
        lines (Iterable[str]): CSV text lines, e.g. a file opened with
            ``newline=""``. Quoted fields may span lines.
        options (CSVToJSONLOptions | Mapping | None): Conversion settings.
        **overrides: Individual settings applied on top of ``options``.

    Raises:
        PathOrShapeError: If a row's width differs from the header and
            ``skip_records_with_error`` is off.
        ObjectLimitExceeded: If an encoded row exceeds ``max_object_size``.
    """
    opts: CSVToJSONLOptions = build_options(CSVToJSONLOptions, options, overrides)
    reader = csv.reader(
        lines,
        delimiter=opts.delimiter,
        quotechar=opts.quotechar,
        escapechar=opts.escapechar,
        doublequote=True,
    )
    names: list[str] | None = None
    if opts.headers is not True and opts.headers is not False:
        names = [str(n) for n in opts.headers]

    emitted = 0
    warnings = WarningBudget(log)
    for row in reader:
        if opts.trim:
            row = [cell.strip() for cell in row]
        if opts.skip_empty_lines and (not row or all(cell == "" for cell in row)):
            continue
        if opts.headers is True and names is None:
            names = row
            continue

        if names is not None and len(row) != len(names):
            msg = f"row {reader.line_num} has {len(row)} fields, expected {len(names)}"
            if opts.skip_records_with_error:
                warnings.warn("Skipping CSV %s", msg)
                continue
            raise PathOrShapeError(msg, line=reader.line_num)

        values = []
        for idx, cell in enumerate(row):
            ctx = CastContext(lines=reader.line_num, records=emitted, column=names[idx] if names else idx)
            values.append(_cast_cell(cell, opts, ctx))
        record: Any = dict(zip(names, values)) if names is not None else values
        if opts.skip_records_with_empty_values and is_empty_record(record):
            continue
        if opts.flatten and isinstance(record, dict):
            record = flatten_object(record)
        emitted += 1
        if opts.root_key and emitted == 1:
            record = {opts.root_key: record}
        if opts.replacer is not None:
            record = apply_replacer(record, opts.replacer)
            if record is OMIT:
                continue
        yield encode_line(record, default=opts.default, max_size=opts.max_object_size) + "\n"

    log.debug("CSV conversion finished: rows=%d skipped=%d", emitted, warnings.count)
