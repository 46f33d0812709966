# interfaces.py
# SPDX-License-Identifier: MIT
"""Type aliases and callback protocols shared across the package."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:  # pragma: no cover
    from .state import CastContext, RecordContext

__all__ = [
    "Record",
    "Chunk",
    "Reviver",
    "RecordHook",
    "SkipHook",
    "CastFunction",
    "ColumnsGenerator",
]

Record: TypeAlias = Any
"""Any decoded JSON value, possibly shaped into a dict by the parser."""

Chunk: TypeAlias = "bytes | bytearray | memoryview | str"


class Reviver(Protocol):
    """Post-decode transform called bottom-up with ``(key, value)``."""

    def __call__(self, key: str | int, value: Any) -> Any: ...


class RecordHook(Protocol):
    """Receives each shaped record; returning None discards it."""

    def __call__(self, record: Record, context: RecordContext) -> Record | None: ...


class SkipHook(Protocol):
    """Notified of every line skipped because of a line-level error."""

    def __call__(self, error: Exception, line: str) -> None: ...


class CastFunction(Protocol):
    """Replaces a value during casting."""

    def __call__(self, value: Any, context: CastContext) -> Any: ...


class ColumnsGenerator(Protocol):
    """Derives column names from the first decoded value."""

    def __call__(self, first: Any) -> Sequence[str]: ...
