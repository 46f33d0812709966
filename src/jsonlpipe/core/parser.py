# parser.py
# SPDX-License-Identifier: MIT
"""Streaming parser turning line-delimited JSON chunks into records.

:class:`JSONLParser` is a push-driven state machine: the caller feeds chunks
in arrival order and receives the records each chunk completed, then calls
:meth:`JSONLParser.finish` once at end of input. Per line the work runs in a
fixed order:

1. line gate (line counter, ``from_line``/``to_line``, length check, trim)
2. JSON decode (plus optional reviver)
3. column mapping (header learning is one-shot)
4. casting
5. shaping (empty-value skip, ``on_record``, ``info``/``raw``, ``objname``)
6. record window (``from_record``/``to_record``) and emission

The pull-style helpers :func:`iter_records`, :func:`iter_stream` and
:func:`parse_text` drive a parser over iterables, binary streams and text.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, BinaryIO

from .casting import cast_record
from .columns import HEADER_CONSUMED, apply_columns
from .config import ColumnsMode, ParserOptions, build_options
from .decode import DECODE_ERRORS, decode_line, describe_decode_error, revive
from .errors import DecodeError, HookError, JSONLError, LineTooLong, excerpt
from .interfaces import Chunk, Record
from .lines import LineReassembler
from .log import WarningBudget, get_logger
from .shaping import enrich, is_empty_record, nest_by_objname
from .state import RecordContext, RunState

__all__ = ["JSONLParser", "iter_records", "iter_stream", "parse_text", "DEFAULT_CHUNK_SIZE"]

log = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
_MAX_SKIP_WARNINGS = 5

# Marker returned by the per-line pipeline when nothing is emitted.
_SKIP = object()


class _Stop(Exception):
    """Internal signal: a closing window ended the run."""


class JSONLParser:
    """Incremental line-delimited JSON parser.

    Args:
        options (ParserOptions | Mapping | None): Parser options.
        **overrides: Individual options applied on top of ``options``.

    Example::

        >>> parser = JSONLParser(cast=True)
        >>> parser.feed(b'{"n": "5"}\\n{"n"')
        [{'n': 5}]
        >>> parser.feed(b': "6"}')
        []
        >>> parser.finish()
        [{'n': 6}]
    """

    def __init__(self, options: ParserOptions | Any = None, **overrides: Any) -> None:
        self.options: ParserOptions = build_options(ParserOptions, options, overrides)
        self.state = RunState()
        self._lines = LineReassembler(
            self.state,
            encoding=self.options.encoding,
            errors=self.options.decode_errors,
            overflow_limit=self.options.overflow_limit,
        )
        self._warnings = WarningBudget(log, _MAX_SKIP_WARNINGS)

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------
    @property
    def context(self) -> RecordContext:
        """Current counters as an immutable snapshot."""
        return self.state.snapshot()

    @property
    def closed(self) -> bool:
        """True after :meth:`finish` or a fatal error."""
        return self.state.closed

    def feed(self, chunk: Chunk) -> list[Record]:
        """Consume one chunk and return the records it completed.

        Args:
            chunk (bytes | str): Next piece of input. Bytes are decoded with
                the configured encoding.

        Returns:
            list[Record]: Records in input order. Empty once the parser is
            closed or a window has stopped the run.

        Raises:
            JSONLError: On a fatal condition. ``error.records`` holds the
                records completed by this call before the failure.
        """
        state = self.state
        if state.closed or state.stopped:
            return []
        out: list[Record] = []
        try:
            for line in self._lines.push(chunk):
                self._process_line(line, out)
            self._lines.check_overflow()
        except _Stop:
            state.clear_tail()
        except JSONLError as exc:
            self._fail(exc, out)
        return out

    def finish(self) -> list[Record]:
        """Flush the final unterminated line and close the parser.

        Returns:
            list[Record]: Records produced by the final line, if any.

        Raises:
            JSONLError: On a fatal condition in the final line.
        """
        state = self.state
        if state.closed:
            return []
        out: list[Record] = []
        try:
            if not state.stopped:
                last = self._lines.flush()
                if last is not None:
                    self._process_line(last, out)
        except _Stop:
            pass
        except JSONLError as exc:
            self._fail(exc, out)
        state.finished = True
        state.clear_tail()
        log.debug(
            "Finished: lines=%d records=%d skipped=%d invalid_length=%d",
            state.lines,
            state.records,
            state.skipped,
            state.invalid_field_length,
        )
        if self._warnings.suppressed:
            log.info("%d further skipped lines were logged at DEBUG level", self._warnings.suppressed)
        return out

    # ------------------------------------------------------------------
    # Per-line pipeline
    # ------------------------------------------------------------------
    def _fail(self, exc: JSONLError, out: list[Record]) -> None:
        self.state.failed = True
        self.state.clear_tail()
        exc.records = list(out)
        out.clear()
        raise exc

    def _stop(self, reason: str) -> None:
        self.state.stopped = True
        log.debug("Stopping at line %d: %s", self.state.lines, reason)
        raise _Stop(reason)

    def _process_line(self, physical: str, out: list[Record]) -> None:
        options = self.options
        state = self.state

        state.lines += 1
        if options.from_line is not None and state.lines < options.from_line:
            return
        if options.to_line is not None and state.lines > options.to_line:
            self._stop(f"to_line={options.to_line} reached")

        max_len = options.max_line_length
        if max_len is not None and len(physical) > max_len:
            state.invalid_field_length += 1
            error = LineTooLong(
                f"line length exceeded: line {state.lines} has {len(physical)} characters "
                f"(maximum {max_len})",
                line=state.lines,
                text=physical,
            )
            self._on_line_error(error, physical)
            return

        text = self._normalize(physical)
        if text is None:
            return

        try:
            value = decode_line(text)
        except DECODE_ERRORS as exc:
            error = DecodeError(
                f"invalid JSON at line {state.lines}: {excerpt(text)} ({describe_decode_error(exc)})",
                line=state.lines,
                text=text,
            )
            self._on_line_error(error, physical)
            return
        if options.reviver is not None:
            value = self._call_hook("reviver", revive, value, options.reviver)

        record = self._build_record(value, physical)
        if record is _SKIP:
            return

        state.records += 1
        if options.from_record is not None and state.records < options.from_record:
            return
        if options.to_record is not None and state.records > options.to_record:
            self._stop(f"to_record={options.to_record} reached")
        out.append(record)

    def _normalize(self, line: str) -> str | None:
        options = self.options
        if options.skip_empty_lines:
            line = line.strip()
            return line or None
        if options.trim or (options.ltrim and options.rtrim):
            return line.strip()
        if options.ltrim:
            return line.lstrip()
        if options.rtrim:
            return line.rstrip()
        return line

    def _build_record(self, value: Any, physical: str) -> Any:
        options = self.options
        state = self.state

        if options.columns_mode == ColumnsMode.GENERATOR:
            record = self._call_hook("columns", apply_columns, value, options, state)
        else:
            record = apply_columns(value, options, state)
        if record is HEADER_CONSUMED:
            return _SKIP

        record = self._call_hook("cast", cast_record, record, options, state)

        if options.skip_records_with_empty_values and is_empty_record(record):
            return _SKIP

        if options.on_record is not None:
            result = self._call_hook("on_record", options.on_record, record, state.snapshot())
            if result is None:
                return _SKIP
            record = result

        output = record
        if options.info or options.raw:
            output = enrich(
                record,
                context=state.snapshot() if options.info else None,
                raw=physical if options.raw else None,
            )
        if options.objname:
            output = nest_by_objname(output, record, options.objname)
        return output

    def _on_line_error(self, error: JSONLError, line: str) -> None:
        """Apply the skip ladder; raises when the error is fatal."""
        options = self.options
        state = self.state
        if options.on_skip is not None:
            self._call_hook("on_skip", options.on_skip, error, line)
        elif not options.skip_records_with_error and options.strict:
            raise error
        state.skipped += 1
        self._warnings.warn("Skipping line %d (%s): %s", state.lines, error.kind, error)

    def _call_hook(self, name: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except (_Stop, JSONLError):
            raise
        except Exception as exc:
            raise HookError(
                f"{name} callback failed at line {self.state.lines}: {exc}",
                line=self.state.lines,
            ) from exc


# ----------------------------------------------------------------------
# Drivers
# ----------------------------------------------------------------------

def iter_records(
    chunks: Iterable[Chunk],
    options: ParserOptions | Any = None,
    **overrides: Any,
) -> Iterator[Record]:
    """Lazily parse an iterable of chunks.

    Records already produced are yielded before a fatal error propagates.
    Iteration stops early once a ``to_line``/``to_record`` window closes.
    """
    parser = JSONLParser(options, **overrides)
    for chunk in chunks:
        try:
            records = parser.feed(chunk)
        except JSONLError as exc:
            yield from exc.records
            raise
        yield from records
        if parser.state.stopped:
            break
    try:
        records = parser.finish()
    except JSONLError as exc:
        yield from exc.records
        raise
    yield from records


def _read_chunks(fp: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        data = fp.read(chunk_size)
        if not data:
            return
        yield data


def iter_stream(
    fp: BinaryIO,
    options: ParserOptions | Any = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    **overrides: Any,
) -> Iterator[Record]:
    """Lazily parse a binary (or text) file-like object read in chunks."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1; got {chunk_size}.")
    return iter_records(_read_chunks(fp, chunk_size), options, **overrides)


def parse_text(text: str | bytes, options: ParserOptions | Any = None, **overrides: Any) -> list[Record]:
    """Parse a complete in-memory document and return all records."""
    return list(iter_records([text], options, **overrides))
