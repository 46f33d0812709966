# validator.py
# SPDX-License-Identifier: MIT
"""Line-by-line validation of JSONL input with optional structural checks.

The validator never stops at the first problem: it collects every issue
and reports totals once input ends. Only ``max_objects`` aborts a run.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .config import build_options
from .decode import DECODE_ERRORS, decode_document, describe_decode_error
from .errors import ObjectLimitExceeded
from .interfaces import Chunk
from .lines import LineReassembler
from .log import get_logger
from .state import RunState

__all__ = [
    "SCHEMA_TYPES",
    "Schema",
    "ValidationIssue",
    "ValidationResult",
    "ValidatorOptions",
    "JSONLValidator",
    "validate_jsonl",
    "check_value",
]

log = get_logger(__name__)

SCHEMA_TYPES = frozenset({"object", "array", "string", "number", "boolean", "null"})


@dataclass(slots=True)
class Schema:
    """A small set of structural constraints for one JSON value.

    Attributes:
        type (str | None): One of :data:`SCHEMA_TYPES`.
        required (tuple[str, ...]): Keys an object must contain.
        properties (dict[str, Schema]): Constraints for object members
            that are present.
        items (Schema | None): Constraint for every array element.
        min_length (int | None): Minimum string length.
        max_length (int | None): Maximum string length.
        pattern (str | re.Pattern | None): Regex searched in strings.
        minimum (float | None): Minimum number.
        maximum (float | None): Maximum number.
        enum (tuple | None): Allowed values.
    """

    type: str | None = None
    required: tuple[str, ...] = ()
    properties: dict[str, Schema] = field(default_factory=dict)
    items: Schema | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | re.Pattern[str] | None = None
    minimum: float | None = None
    maximum: float | None = None
    enum: tuple[Any, ...] | None = None

    def __post_init__(self) -> None:
        if self.type is not None and self.type not in SCHEMA_TYPES:
            raise ValueError(f"Unknown schema type {self.type!r}; expected one of {sorted(SCHEMA_TYPES)}.")
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern)
        self.required = tuple(self.required)
        if self.enum is not None:
            self.enum = tuple(self.enum)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        """Build a schema from a mapping; camelCase keys are accepted too."""
        aliases = {"minLength": "min_length", "maxLength": "max_length"}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name == "properties":
                value = {k: cls.from_dict(v) for k, v in value.items()}
            elif name == "items" and value is not None:
                value = cls.from_dict(value)
            kwargs[name] = value
        return cls(**kwargs)


@dataclass(slots=True)
class ValidationIssue:
    """One problem found on a line."""

    line: int
    message: str
    column: int | None = None
    path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"line": self.line, "message": self.message}
        if self.column is not None:
            out["column"] = self.column
        if self.path:
            out["path"] = self.path
        return out


@dataclass(slots=True)
class ValidationResult:
    """Outcome of validating a whole input."""

    valid: bool
    errors: list[ValidationIssue]
    total_lines: int
    valid_lines: int
    invalid_lines: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "total_lines": self.total_lines,
            "valid_lines": self.valid_lines,
            "invalid_lines": self.invalid_lines,
        }


@dataclass
class ValidatorOptions:
    """Settings for :class:`JSONLValidator`.

    Attributes:
        max_line_length (int | None): Lines longer than this are invalid.
        max_objects (int | None): Abort once more lines than this arrive.
        strict_mode (bool): Flag leading or trailing whitespace.
        allow_empty_lines (bool): When False, blank lines are invalid.
        schema (Schema | Mapping | None): Constraints checked per line.
        encoding (str): Codec for byte chunks.
    """

    max_line_length: int | None = 1024 * 1024
    max_objects: int | None = None
    strict_mode: bool = False
    allow_empty_lines: bool = True
    schema: Schema | Mapping[str, Any] | None = None
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if isinstance(self.schema, Mapping):
            self.schema = Schema.from_dict(self.schema)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def check_value(value: Any, schema: Schema, path: str = "") -> list[tuple[str, str]]:
    """Check ``value`` against ``schema``.

    Returns:
        list[tuple[str, str]]: ``(path, message)`` pairs; empty when valid.
    """
    problems: list[tuple[str, str]] = []
    actual = _json_type(value)
    if schema.type and actual != schema.type:
        problems.append((path, f"Expected type {schema.type}, got {actual}"))
        return problems

    if schema.enum is not None and value not in schema.enum:
        allowed = ", ".join(json.dumps(v) for v in schema.enum)
        problems.append((path, f"Value must be one of: {allowed}"))

    if actual == "string":
        if schema.min_length is not None and len(value) < schema.min_length:
            problems.append((path, f"String length {len(value)} is less than minimum {schema.min_length}"))
        if schema.max_length is not None and len(value) > schema.max_length:
            problems.append((path, f"String length {len(value)} exceeds maximum {schema.max_length}"))
        if schema.pattern is not None and not schema.pattern.search(value):  # type: ignore[union-attr]
            problems.append((path, f"String does not match pattern {schema.pattern.pattern}"))  # type: ignore[union-attr]
    elif actual == "number":
        if schema.minimum is not None and value < schema.minimum:
            problems.append((path, f"Number {value} is less than minimum {schema.minimum}"))
        if schema.maximum is not None and value > schema.maximum:
            problems.append((path, f"Number {value} exceeds maximum {schema.maximum}"))
    elif actual == "object":
        for name in schema.required:
            if name not in value:
                problems.append((path, f"Missing required field: {name}"))
        for name, sub in schema.properties.items():
            if name in value:
                problems.extend(check_value(value[name], sub, f"{path}.{name}" if path else name))
    elif actual == "array" and schema.items is not None:
        for idx, item in enumerate(value):
            problems.extend(check_value(item, schema.items, f"{path}[{idx}]"))
    return problems


class JSONLValidator:
    """Incremental validator: feed chunks, then call :meth:`finish`."""

    def __init__(self, options: ValidatorOptions | Any = None, **overrides: Any) -> None:
        self.options: ValidatorOptions = build_options(ValidatorOptions, options, overrides)
        self._state = RunState()
        self._lines = LineReassembler(self._state, encoding=self.options.encoding)
        self.errors: list[ValidationIssue] = []
        self.valid_lines = 0
        self.invalid_lines = 0

    def feed(self, chunk: Chunk) -> None:
        """Validate every line completed by ``chunk``.

        Raises:
            ObjectLimitExceeded: If more than ``max_objects`` lines arrive.
        """
        for line in self._lines.push(chunk):
            self._check_line(line)

    def finish(self) -> ValidationResult:
        """Validate the final unterminated line and return the result."""
        last = self._lines.flush()
        if last is not None and last.strip():
            self._check_line(last)
        result = ValidationResult(
            valid=not self.errors,
            errors=list(self.errors),
            total_lines=self._state.lines,
            valid_lines=self.valid_lines,
            invalid_lines=self.invalid_lines,
        )
        log.debug(
            "Validation finished: lines=%d valid=%d invalid=%d",
            result.total_lines,
            result.valid_lines,
            result.invalid_lines,
        )
        return result

    def _check_line(self, line: str) -> None:
        opts = self.options
        state = self._state
        state.lines += 1
        lineno = state.lines
        if opts.max_objects is not None and lineno > opts.max_objects:
            raise ObjectLimitExceeded(f"maximum object limit {opts.max_objects} exceeded", line=lineno)

        stripped = line.strip()
        if not stripped:
            if not opts.allow_empty_lines:
                self.errors.append(ValidationIssue(line=lineno, message="Empty lines not allowed"))
                self.invalid_lines += 1
            return

        issues: list[ValidationIssue] = []
        if opts.max_line_length is not None and len(line) > opts.max_line_length:
            issues.append(
                ValidationIssue(
                    line=lineno,
                    message=f"Line length {len(line)} exceeds maximum {opts.max_line_length}",
                )
            )
        if opts.strict_mode and line != stripped:
            issues.append(ValidationIssue(line=lineno, message="Line has leading or trailing whitespace"))

        try:
            value = decode_document(stripped)
        except DECODE_ERRORS as exc:
            column = exc.colno if isinstance(exc, json.JSONDecodeError) else None
            issues.append(
                ValidationIssue(line=lineno, column=column, message=f"Invalid JSON: {describe_decode_error(exc)}")
            )
        else:
            if isinstance(opts.schema, Schema):
                for path, message in check_value(value, opts.schema):
                    issues.append(ValidationIssue(line=lineno, message=message, path=path or None))

        if issues:
            self.errors.extend(issues)
            self.invalid_lines += 1
        else:
            self.valid_lines += 1


def validate_jsonl(
    data: Chunk | Sequence[Chunk],
    options: ValidatorOptions | Any = None,
    **overrides: Any,
) -> ValidationResult:
    """Validate a complete input held in memory (or a sequence of chunks)."""
    validator = JSONLValidator(options, **overrides)
    chunks = [data] if isinstance(data, (str, bytes, bytearray, memoryview)) else data
    for chunk in chunks:
        validator.feed(chunk)
    return validator.finish()
