# config.py
# SPDX-License-Identifier: MIT
"""Parser options and helpers for loading them from JSON and TOML.

:class:`ParserOptions` is immutable. Options that accept several shapes
(``columns``, ``cast``, ``cast_date``) are resolved once at construction into
a mode constant so the parser never has to inspect option types per line.
"""
from __future__ import annotations

import codecs
import json
try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    try:
        import tomli as tomllib  # type: ignore[assignment]
    except Exception:  # pragma: no cover
        tomllib = None  # type: ignore[assignment]
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union

from .interfaces import CastFunction, ColumnsGenerator, RecordHook, Reviver, SkipHook

__all__ = [
    "ColumnsMode",
    "CastMode",
    "ParserOptions",
    "load_options_from_path",
    "validate_option_keys",
    "build_options",
]

T = TypeVar("T")

# Multiplier applied to max_line_length to bound the unterminated tail.
OVERFLOW_FACTOR = 10


class ColumnsMode:
    """How decoded arrays are turned into keyed records.

    Modes:
    * ``OFF``: Values pass through unchanged.
    * ``HEADER``: The first decoded value supplies the column names and
      produces no record.
    * ``EXPLICIT``: Every array is zipped against a fixed list of names.
    * ``GENERATOR``: A callable derives the names from the first decoded
      value, which produces no record.
    """

    OFF = "off"
    HEADER = "header"
    EXPLICIT = "explicit"
    GENERATOR = "generator"

    @classmethod
    def resolve(cls, value: Any) -> str:
        if value is None or value is False:
            return cls.OFF
        if value is True:
            return cls.HEADER
        if callable(value):
            return cls.GENERATOR
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            return cls.EXPLICIT
        raise TypeError(
            f"columns must be None, True, a sequence of names or a callable; got {type(value).__name__}."
        )


class CastMode:
    """How ``cast``/``cast_date`` options apply to values."""

    OFF = "off"
    BUILTIN = "builtin"
    CUSTOM = "custom"

    @classmethod
    def resolve(cls, value: Any, *, option: str) -> str:
        if value is None or value is False:
            return cls.OFF
        if value is True:
            return cls.BUILTIN
        if callable(value):
            return cls.CUSTOM
        raise TypeError(f"{option} must be None, a bool or a callable; got {type(value).__name__}.")


ColumnsOption = Union[None, bool, Sequence[Union[str, None, bool]], ColumnsGenerator]
CastOption = Union[None, bool, CastFunction]


@dataclass(frozen=True)
class ParserOptions:
    """Options controlling how line-delimited JSON is parsed and shaped.

    Attributes:
        strict (bool): Raise on line errors when no skip hook or skip flag
            applies. When False, bad lines are skipped.
        skip_empty_lines (bool): Strip each line and drop blank ones. When
            False, blank lines reach the decoder and fail like any other
            malformed line.
        max_line_length (int | None): Maximum characters per line. The
            unterminated tail may grow to ten times this before the parser
            gives up with a fatal overflow.
        columns: None, True (first value is the header), a sequence of
            names (None/False entries drop that position) or a callable
            returning names for the first value.
        from_record (int | None): First 1-based record to emit.
        to_record (int | None): Last 1-based record to emit; the run stops
            after it.
        from_line (int | None): First 1-based physical line to consider.
        to_line (int | None): Last 1-based physical line to consider; the
            run stops after it.
        cast: None, True for built-in literal/number coercion, or a
            callable ``(value, context) -> value``.
        cast_date: None, True for ISO-8601 date coercion, or a callable.
        ltrim (bool): Strip leading whitespace (only without
            ``skip_empty_lines``).
        rtrim (bool): Strip trailing whitespace (only without
            ``skip_empty_lines``).
        trim (bool): Strip both sides; wins over ``ltrim``/``rtrim``.
        on_record: ``(record, context) -> record | None`` hook.
        on_skip: ``(error, line) -> None`` hook for skipped lines.
        info (bool): Wrap output with a counter snapshot.
        raw (bool): Wrap output with the physical line text.
        objname (str | None): Key output by this field's value.
        skip_records_with_empty_values (bool): Drop records whose values
            are all None or empty strings.
        skip_records_with_error (bool): Skip bad lines silently.
        reviver: ``(key, value) -> value`` applied bottom-up after decode.
        encoding (str): Codec for byte chunks.
        decode_errors (str): Codec error handler for byte chunks.
    """

    strict: bool = True
    skip_empty_lines: bool = True
    max_line_length: Optional[int] = None
    columns: ColumnsOption = None
    from_record: Optional[int] = None
    to_record: Optional[int] = None
    from_line: Optional[int] = None
    to_line: Optional[int] = None
    cast: CastOption = None
    cast_date: CastOption = None
    ltrim: bool = False
    rtrim: bool = False
    trim: bool = False
    on_record: Optional[RecordHook] = None
    on_skip: Optional[SkipHook] = None
    info: bool = False
    raw: bool = False
    objname: Optional[str] = None
    skip_records_with_empty_values: bool = False
    skip_records_with_error: bool = False
    reviver: Optional[Reviver] = None
    encoding: str = "utf-8"
    decode_errors: str = "strict"

    columns_mode: str = field(init=False, repr=False, compare=False, default=ColumnsMode.OFF)
    cast_mode: str = field(init=False, repr=False, compare=False, default=CastMode.OFF)
    cast_date_mode: str = field(init=False, repr=False, compare=False, default=CastMode.OFF)
    explicit_columns: Tuple[Optional[str], ...] = field(init=False, repr=False, compare=False, default=())

    def __post_init__(self) -> None:
        self.validate()
        # Derived fields on a frozen dataclass.
        columns_mode = ColumnsMode.resolve(self.columns)
        object.__setattr__(self, "columns_mode", columns_mode)
        object.__setattr__(self, "cast_mode", CastMode.resolve(self.cast, option="cast"))
        object.__setattr__(self, "cast_date_mode", CastMode.resolve(self.cast_date, option="cast_date"))
        if columns_mode == ColumnsMode.EXPLICIT:
            object.__setattr__(self, "explicit_columns", _normalize_explicit_columns(self.columns))

    def validate(self) -> None:
        """Check bounds and codec settings, raising ValueError on misuse."""
        for name in ("max_line_length", "from_record", "to_record", "from_line", "to_line"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int or None; got {type(value).__name__}.")
            if value < 1:
                raise ValueError(f"{name} must be >= 1 when set; got {value}.")
        if self.from_record and self.to_record and self.from_record > self.to_record:
            raise ValueError(
                f"from_record ({self.from_record}) must not exceed to_record ({self.to_record})."
            )
        if self.from_line and self.to_line and self.from_line > self.to_line:
            raise ValueError(f"from_line ({self.from_line}) must not exceed to_line ({self.to_line}).")
        for name in ("on_record", "on_skip", "reviver"):
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise TypeError(f"{name} must be callable when set.")
        if self.objname is not None and not isinstance(self.objname, str):
            raise TypeError(f"objname must be a string when set; got {type(self.objname).__name__}.")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding {self.encoding!r}.") from None
        try:
            codecs.lookup_error(self.decode_errors)
        except LookupError:
            raise ValueError(f"Unknown decode_errors handler {self.decode_errors!r}.") from None

    @property
    def overflow_limit(self) -> Optional[int]:
        """Tail length beyond which the stream is treated as unbounded."""
        if self.max_line_length is None:
            return None
        return self.max_line_length * OVERFLOW_FACTOR

    def with_overrides(self, **overrides: Any) -> ParserOptions:
        """Return a copy with the given options replaced."""
        if not overrides:
            return self
        validate_option_keys(ParserOptions, options=overrides)
        return replace(self, **overrides)

    # -------------------------
    # Serialization helpers
    # -------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return the declarative options as a JSON-friendly dict.

        Callables (hooks, generators, custom casts) and derived fields are
        omitted, as are options left at None.
        """
        out: Dict[str, Any] = {}
        for f in fields(self):
            if not f.init:
                continue
            value = getattr(self, f.name)
            if value is None or callable(value):
                continue
            if isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls: Type[T], data: Optional[Mapping[str, Any]]) -> T:
        """Instantiate options from a mapping.

        Args:
            data (Mapping[str, Any] | None): Option mapping as produced by
                :meth:`to_dict` or loaded from JSON/TOML.

        Returns:
            ParserOptions: Parsed options.

        Raises:
            ValueError: If the mapping holds unknown keys.
        """
        if not data:
            return cls()  # type: ignore[call-arg]
        validate_option_keys(cls, options=data)
        kwargs = dict(data)
        columns = kwargs.get("columns")
        if isinstance(columns, list):
            kwargs["columns"] = tuple(columns)
        return cls(**kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        """Load options from a JSON file holding a single object."""
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, Mapping):
            raise TypeError(f"Top-level JSON document must be an object; got {type(payload).__name__}.")
        return cls.from_dict(payload)  # type: ignore[attr-defined]

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        """Load options from a TOML file.

        Options may sit at the top level or under a ``[parser]`` table.
        """
        if tomllib is None:
            raise RuntimeError(
                "TOML support requires Python 3.11+ (tomllib) or installing the 'tomli' package."
            )
        data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        if not isinstance(data, Mapping):
            raise TypeError(f"Top-level TOML document must be a mapping; got {type(data).__name__}.")
        section = data.get("parser")
        if isinstance(section, Mapping):
            data = section
        return cls.from_dict(data)  # type: ignore[attr-defined]


def load_options_from_path(path: str | Path) -> ParserOptions:
    """Load ParserOptions from a JSON or TOML file.

    Args:
        path (Path | str): Path to a ``.toml`` or ``.json`` file.

    Returns:
        ParserOptions: Parsed options.

    Raises:
        ValueError: If the file extension is not ``.toml`` or ``.json``.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        return ParserOptions.from_toml(p)
    if suffix == ".json":
        return ParserOptions.from_json(p)
    raise ValueError(f"Unsupported options extension {p.suffix!r}; expected .toml or .json.")


def validate_option_keys(
    cfg_type: Type[Any],
    *,
    options: Mapping[str, Any] | None,
    ignore_keys: Iterable[str] = (),
    context: str | None = None,
) -> None:
    """Reject option keys that are not init fields of ``cfg_type``.

    Raises:
        ValueError: If unknown option keys are present.
    """
    if not options:
        return

    field_names = {f.name for f in fields(cfg_type) if f.init}
    allowed = field_names | set(ignore_keys)
    unknown = sorted(k for k in options.keys() if k not in allowed)

    if unknown:
        label = context or cfg_type.__name__
        raise ValueError(
            f"Unsupported options for {label}: {', '.join(unknown)}. "
            f"Allowed keys: {', '.join(sorted(allowed))}"
        )


def build_options(
    cfg_type: Callable[..., T],
    options: Any = None,
    overrides: Mapping[str, Any] | None = None,
) -> T:
    """Coerce ``options`` (instance, mapping or None) plus keyword overrides.

    Shared by the parser, converters and validator so each accepts either a
    ready-made options object or plain keyword arguments.
    """
    if options is None:
        base = cfg_type()
    elif isinstance(options, Mapping):
        validate_option_keys(cfg_type, options=options)  # type: ignore[arg-type]
        base = cfg_type(**options)
    elif isinstance(options, cfg_type):  # type: ignore[arg-type]
        base = options
    else:
        raise TypeError(f"Expected {getattr(cfg_type, '__name__', cfg_type)} or a mapping; got {type(options).__name__}.")
    if overrides:
        validate_option_keys(cfg_type, options=overrides)  # type: ignore[arg-type]
        base = replace(base, **overrides)  # type: ignore[type-var]
    return base


def _normalize_explicit_columns(columns: Any) -> Tuple[Optional[str], ...]:
    """Keep string names; None/False placeholders drop their position."""
    names: list[Optional[str]] = []
    for col in columns:
        if col is None or col is False:
            names.append(None)
        elif isinstance(col, str):
            names.append(col)
        else:
            raise TypeError(f"Column names must be strings, None or False; got {col!r}.")
    return tuple(names)
