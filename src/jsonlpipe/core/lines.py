# lines.py
# SPDX-License-Identifier: MIT
"""Reassemble complete lines from arbitrarily split input chunks."""

from __future__ import annotations

import codecs

from .errors import BufferOverflow, DecodeError
from .interfaces import Chunk
from .state import RunState

__all__ = ["LineReassembler", "split_lines"]


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def split_lines(text: str) -> tuple[list[str], str]:
    """Split ``text`` on ``\\n`` or ``\\r\\n``.

    Returns:
        tuple[list[str], str]: Complete lines without terminators and the
        unterminated remainder (possibly empty).
    """
    parts = text.split("\n")
    tail = parts.pop()
    return [_strip_cr(p) for p in parts], tail


class LineReassembler:
    """Turns a sequence of byte or text chunks into complete lines.

    Byte chunks go through an incremental decoder so a multibyte character
    split across two chunks decodes the same as when delivered whole. Only
    the newly arrived text is scanned for terminators, so a long tail is not
    rescanned on every chunk.

    The unterminated tail lives in ``state.tail_parts`` as a list of pieces
    that is joined once a terminator arrives, so a long line delivered in
    many small chunks is copied once. The reassembler itself only holds the
    codec state.
    """

    def __init__(
        self,
        state: RunState,
        *,
        encoding: str = "utf-8",
        errors: str = "strict",
        overflow_limit: int | None = None,
    ) -> None:
        self._state = state
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
        self._overflow_limit = overflow_limit

    def _decode(self, chunk: Chunk, *, final: bool = False) -> str:
        if isinstance(chunk, str):
            return chunk
        try:
            return self._decoder.decode(bytes(chunk), final=final)
        except UnicodeDecodeError as exc:
            err = DecodeError(
                f"invalid encoding after line {self._state.lines}: {exc.reason}",
                line=self._state.lines + 1,
            )
            err.kind = "invalid encoding"
            raise err from exc

    def push(self, chunk: Chunk) -> list[str]:
        """Append a chunk and return the lines it completed.

        Raises:
            DecodeError: If the bytes are not valid in the configured
                encoding and the error handler is ``strict``.
        """
        text = self._decode(chunk)
        if not text:
            return []
        state = self._state
        cut = text.rfind("\n")
        if cut < 0:
            state.tail_parts.append(text)
            state.tail_length += len(text)
            return []
        state.tail_parts.append(text[:cut + 1])
        lines, _ = split_lines("".join(state.tail_parts))
        rest = text[cut + 1:]
        state.tail_parts = [rest] if rest else []
        state.tail_length = len(rest)
        return lines

    def check_overflow(self) -> None:
        """Raise when the unterminated tail has grown past the bound.

        Raises:
            BufferOverflow: Always fatal; the stream is not delivering line
                terminators.
        """
        limit = self._overflow_limit
        state = self._state
        if limit is not None and state.tail_length > limit:
            tail = state.pending_tail
            raise BufferOverflow(
                f"buffer overflow: {len(tail)} characters without a line terminator "
                f"(limit {limit})",
                line=self._state.lines + 1,
                text=tail,
            )

    def flush(self) -> str | None:
        """Return the final unterminated line, or None when there is none."""
        rest = self._decode(b"", final=True)
        tail = _strip_cr(self._state.pending_tail + rest)
        self._state.clear_tail()
        return tail or None
