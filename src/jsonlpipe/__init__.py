# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`jsonlpipe`.

Public surface
--------------
The core is :class:`JSONLParser`, a push-driven parser for line-delimited
JSON: feed it byte or text chunks in arrival order and collect the records
each chunk completes, then call :meth:`JSONLParser.finish` once. The
pull-style helpers :func:`iter_records`, :func:`iter_stream` and
:func:`parse_text` cover iterables, binary streams and in-memory text.

Options live in the immutable :class:`ParserOptions`, which can also be
loaded from JSON or TOML with :func:`load_options_from_path`.

Format converters (CSV and whole-document JSON, both directions) and the
:class:`JSONLValidator` build on the same line handling.

Examples:
    Parse a stream with header-driven columns::

        >>> from jsonlpipe import parse_text
        >>> parse_text('["name","age"]\\n["ada",36]\\n', columns=True)
        [{'name': 'ada', 'age': 36}]

    Keep going past bad lines::

        >>> parse_text('{"a":1}\\n{bad}\\n{"b":2}\\n', strict=False)
        [{'a': 1}, {'b': 2}]
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Package version
# ---------------------------------------------------------------------------
try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("jsonlpipe")
except Exception:  # PackageNotFoundError or runtime env oddities
    __version__ = "0.0.0+unknown"


from .converters.csv_jsonl import CSVToJSONLOptions, csv_to_jsonl
from .converters.json_jsonl import JSONToJSONLOptions, json_to_jsonl
from .converters.jsonl_csv import JSONLToCSVOptions, jsonl_to_csv
from .converters.jsonl_json import JSONLToJSONOptions, jsonl_to_json
from .core.config import CastMode, ColumnsMode, ParserOptions, load_options_from_path
from .core.errors import (
    BufferOverflow,
    DecodeError,
    HookError,
    JSONLError,
    LineTooLong,
    ObjectLimitExceeded,
    PathOrShapeError,
)
from .core.log import configure_logging, get_logger, temp_level
from .core.parser import JSONLParser, iter_records, iter_stream, parse_text
from .core.state import CastContext, RecordContext
from .core.validator import (
    JSONLValidator,
    Schema,
    ValidationIssue,
    ValidationResult,
    ValidatorOptions,
    validate_jsonl,
)

PRIMARY_API = [
    "__version__",
    "JSONLParser",
    "ParserOptions",
    "ColumnsMode",
    "CastMode",
    "RecordContext",
    "CastContext",
    "iter_records",
    "iter_stream",
    "parse_text",
    "load_options_from_path",
    "JSONLError",
    "LineTooLong",
    "BufferOverflow",
    "DecodeError",
    "PathOrShapeError",
    "HookError",
    "ObjectLimitExceeded",
    "csv_to_jsonl",
    "CSVToJSONLOptions",
    "jsonl_to_csv",
    "JSONLToCSVOptions",
    "json_to_jsonl",
    "JSONToJSONLOptions",
    "jsonl_to_json",
    "JSONLToJSONOptions",
    "JSONLValidator",
    "ValidatorOptions",
    "Schema",
    "ValidationIssue",
    "ValidationResult",
    "validate_jsonl",
    "configure_logging",
    "get_logger",
    "temp_level",
]

__all__ = list(PRIMARY_API)
