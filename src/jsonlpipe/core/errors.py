# errors.py
# SPDX-License-Identifier: MIT
"""Exception types raised by the parser, converters and validator."""

from __future__ import annotations

from typing import Any

__all__ = [
    "EXCERPT_CHARS",
    "excerpt",
    "JSONLError",
    "LineTooLong",
    "BufferOverflow",
    "DecodeError",
    "PathOrShapeError",
    "HookError",
    "ObjectLimitExceeded",
]

# Error messages only ever carry this much of the offending text.
EXCERPT_CHARS = 50


def excerpt(text: str | None, limit: int = EXCERPT_CHARS) -> str | None:
    """Return a bounded prefix of ``text`` suitable for error messages."""
    if text is None:
        return None
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class JSONLError(ValueError):
    """Base class for line-delimited JSON processing failures.

    Attributes:
        kind (str): Short discriminator naming the failure class, e.g.
            ``"invalid JSON"``.
        line (int | None): 1-based line number when known.
        excerpt (str | None): Bounded prefix of the offending text.
        records (list[Any]): Records produced by the failing call before
            the error was raised. Already-emitted output is never retracted,
            so drivers should forward these before propagating the error.
    """

    kind = "error"

    def __init__(self, message: str, *, line: int | None = None, text: str | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.excerpt = excerpt(text)
        self.records: list[Any] = []


class LineTooLong(JSONLError):
    """A single line exceeded ``max_line_length``."""

    kind = "line length exceeded"


class BufferOverflow(JSONLError):
    """The unterminated tail grew past the overflow bound; always fatal."""

    kind = "buffer overflow"


class DecodeError(JSONLError):
    """A line could not be decoded as JSON (or its bytes as text)."""

    kind = "invalid JSON"


class PathOrShapeError(JSONLError):
    """A converter found a document whose shape does not fit the request."""

    kind = "invalid shape"


class HookError(JSONLError):
    """A caller-supplied callback raised; treated as a fatal error."""

    kind = "hook failed"


class ObjectLimitExceeded(JSONLError):
    """A size or count limit on converted objects was exceeded."""

    kind = "object limit exceeded"
