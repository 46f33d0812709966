# state.py
# SPDX-License-Identifier: MIT
"""Mutable run state and the read-only snapshots handed to callbacks."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

__all__ = ["RecordContext", "CastContext", "RunState"]


@dataclass(slots=True, frozen=True)
class RecordContext:
    """Immutable view of the run counters at the time of a callback.

    Attributes:
        lines (int): Physical lines seen so far, the current one included.
        records (int): Records emitted or window-skipped so far.
        invalid_field_length (int): Lines rejected by ``max_line_length``.
    """

    lines: int = 0
    records: int = 0
    invalid_field_length: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class CastContext(RecordContext):
    """Counter snapshot plus the position of the value being cast.

    ``column`` is the dict key or list index of the value, or None when the
    record itself is a scalar.
    """

    column: str | int | None = None


@dataclass(slots=True)
class RunState:
    """Everything a parser mutates over its lifetime.

    Attributes:
        tail_parts (list[str]): Pieces of the unterminated text carried
            across chunks, joined only once a terminator arrives.
        tail_length (int): Total length of ``tail_parts``.
        lines (int): Physical line counter.
        records (int): Record counter.
        invalid_field_length (int): Count of over-long lines.
        header_columns (list[str] | None): Column names learned from the
            first decoded value; stays None when that value was a
            scalar.
        header_learned (bool): Set exactly once when the header source has
            been consumed.
        stopped (bool): A ``to_line``/``to_record`` window has closed; input
            is ignored from then on.
        failed (bool): A fatal error was raised.
        finished (bool): ``finish()`` has run.
    """

    tail_parts: list[str] = field(default_factory=list)
    tail_length: int = 0
    lines: int = 0
    records: int = 0
    invalid_field_length: int = 0
    header_columns: list[str] | None = None
    header_learned: bool = False
    stopped: bool = False
    failed: bool = False
    finished: bool = False
    skipped: int = field(default=0, repr=False)

    @property
    def pending_tail(self) -> str:
        """The unterminated text as one string."""
        return "".join(self.tail_parts)

    def clear_tail(self) -> None:
        self.tail_parts = []
        self.tail_length = 0

    @property
    def closed(self) -> bool:
        return self.failed or self.finished

    def snapshot(self) -> RecordContext:
        return RecordContext(
            lines=self.lines,
            records=self.records,
            invalid_field_length=self.invalid_field_length,
        )

    def cast_context(self, column: str | int | None) -> CastContext:
        return CastContext(
            lines=self.lines,
            records=self.records,
            invalid_field_length=self.invalid_field_length,
            column=column,
        )
