import dataclasses
import json

import pytest

from jsonlpipe.core.config import (
    CastMode,
    ColumnsMode,
    ParserOptions,
    build_options,
    load_options_from_path,
)
from jsonlpipe.core.parser import JSONLParser


def test_defaults() -> None:
    opts = ParserOptions()

    assert opts.strict is True
    assert opts.skip_empty_lines is True
    assert opts.max_line_length is None
    assert opts.columns_mode == ColumnsMode.OFF
    assert opts.cast_mode == CastMode.OFF
    assert opts.overflow_limit is None


def test_options_are_frozen() -> None:
    opts = ParserOptions()
    with pytest.raises(dataclasses.FrozenInstanceError):
        opts.strict = False  # type: ignore[misc]


@pytest.mark.parametrize(
    ("columns", "mode"),
    [
        (None, ColumnsMode.OFF),
        (False, ColumnsMode.OFF),
        (True, ColumnsMode.HEADER),
        (["a", "b"], ColumnsMode.EXPLICIT),
        (lambda first: first, ColumnsMode.GENERATOR),
    ],
)
def test_columns_mode_resolution(columns, mode) -> None:
    assert ParserOptions(columns=columns).columns_mode == mode


def test_explicit_columns_normalize_placeholders() -> None:
    opts = ParserOptions(columns=["a", None, False, "d"])
    assert opts.explicit_columns == ("a", None, None, "d")


def test_overflow_limit_is_ten_times_line_length() -> None:
    assert ParserOptions(max_line_length=7).overflow_limit == 70


@pytest.mark.parametrize(
    ("kwargs", "exc"),
    [
        ({"max_line_length": 0}, ValueError),
        ({"max_line_length": True}, TypeError),
        ({"from_record": 3, "to_record": 2}, ValueError),
        ({"from_line": 5, "to_line": 1}, ValueError),
        ({"on_record": "not callable"}, TypeError),
        ({"objname": 5}, TypeError),
        ({"encoding": "no-such-codec"}, ValueError),
        ({"decode_errors": "no-such-handler"}, ValueError),
        ({"columns": 5}, TypeError),
        ({"columns": ["a", 1]}, TypeError),
        ({"cast_date": "iso"}, TypeError),
    ],
)
def test_validation_errors(kwargs, exc) -> None:
    with pytest.raises(exc):
        ParserOptions(**kwargs)


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError) as excinfo:
        ParserOptions.from_dict({"strict": False, "bogus": 1})
    assert "bogus" in str(excinfo.value)


def test_from_dict_converts_column_lists() -> None:
    opts = ParserOptions.from_dict({"columns": ["a", None]})
    assert opts.columns == ("a", None)
    assert opts.columns_mode == ColumnsMode.EXPLICIT


def test_to_dict_omits_callables_and_unset_options() -> None:
    opts = ParserOptions(columns=("a", "b"), on_record=lambda r, c: r, max_line_length=10)
    data = opts.to_dict()

    assert data["columns"] == ["a", "b"]
    assert data["max_line_length"] == 10
    assert "on_record" not in data
    assert "columns_mode" not in data
    assert "objname" not in data
    assert ParserOptions.from_dict(data) == ParserOptions(columns=("a", "b"), max_line_length=10)


def test_with_overrides() -> None:
    base = ParserOptions(strict=False)
    updated = base.with_overrides(cast=True)

    assert updated.strict is False
    assert updated.cast_mode == CastMode.BUILTIN
    assert base.with_overrides() is base
    with pytest.raises(ValueError):
        base.with_overrides(nope=1)


def test_load_options_from_json(tmp_path) -> None:
    path = tmp_path / "opts.json"
    path.write_text(json.dumps({"strict": False, "columns": True, "to_record": 3}), encoding="utf-8")

    opts = load_options_from_path(path)

    assert opts.strict is False
    assert opts.columns_mode == ColumnsMode.HEADER
    assert opts.to_record == 3


def test_load_options_from_toml_parser_table(tmp_path) -> None:
    path = tmp_path / "opts.toml"
    path.write_text(
        '[parser]\nstrict = false\nmax_line_length = 100\ncolumns = ["a", "b"]\n',
        encoding="utf-8",
    )

    opts = load_options_from_path(path)

    assert opts.strict is False
    assert opts.max_line_length == 100
    assert opts.explicit_columns == ("a", "b")


def test_load_options_from_toml_top_level(tmp_path) -> None:
    path = tmp_path / "opts.toml"
    path.write_text("cast = true\nobjname = \"id\"\n", encoding="utf-8")

    opts = load_options_from_path(path)

    assert opts.cast_mode == CastMode.BUILTIN
    assert opts.objname == "id"


def test_load_options_rejects_unknown_suffix(tmp_path) -> None:
    path = tmp_path / "opts.yaml"
    path.write_text("strict: false\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_options_from_path(path)


def test_json_options_must_be_an_object(tmp_path) -> None:
    path = tmp_path / "opts.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(TypeError):
        ParserOptions.from_json(path)


def test_build_options_accepts_instance_mapping_or_none() -> None:
    assert build_options(ParserOptions) == ParserOptions()
    assert build_options(ParserOptions, {"strict": False}).strict is False

    base = ParserOptions(cast=True)
    assert build_options(ParserOptions, base) is base
    assert build_options(ParserOptions, base, {"raw": True}).raw is True

    with pytest.raises(TypeError):
        build_options(ParserOptions, 42)


def test_parser_merges_keyword_overrides() -> None:
    parser = JSONLParser(ParserOptions(strict=False), cast=True)

    assert parser.options.strict is False
    assert parser.options.cast_mode == CastMode.BUILTIN
    assert parser.feed(b'{"n":"1"}\n{bad}\n') == [{"n": 1}]


def test_parser_rejects_unknown_keyword() -> None:
    with pytest.raises(ValueError):
        JSONLParser(strictness=False)
