import io
import json
from datetime import date

import pytest

from jsonlpipe.converters.common import OMIT, apply_replacer, flatten_object, get_path, unflatten_object
from jsonlpipe.converters.csv_jsonl import CSVToJSONLOptions, csv_to_jsonl
from jsonlpipe.converters.json_jsonl import json_to_jsonl
from jsonlpipe.converters.jsonl_csv import format_cell, jsonl_to_csv
from jsonlpipe.converters.jsonl_json import jsonl_to_json
from jsonlpipe.core.errors import DecodeError, HookError, ObjectLimitExceeded, PathOrShapeError


def _csv_lines(text: str):
    return io.StringIO(text, newline="")


# ---------------------------------------------------------------------------
# common helpers
# ---------------------------------------------------------------------------

def test_flatten_and_unflatten() -> None:
    nested = {"a": {"b": 1, "c": {"d": [1, 2]}}, "e": None}
    flat = flatten_object(nested)

    assert flat == {"a.b": 1, "a.c.d": [1, 2], "e": None}
    assert unflatten_object(flat) == nested


def test_get_path_walks_dicts_and_indices() -> None:
    doc = {"data": {"items": [{"id": 1}, {"id": 2}]}}

    assert get_path(doc, "data.items.1.id") == 2
    assert get_path(doc, "data.missing") is None
    assert get_path(doc, "data.items.9") is None


# ---------------------------------------------------------------------------
# CSV -> JSONL
# ---------------------------------------------------------------------------

def test_csv_to_jsonl_uses_header_row() -> None:
    out = list(csv_to_jsonl(_csv_lines("name,age\nAda,36\nBob,\n")))
    assert out == ['{"name":"Ada","age":"36"}\n', '{"name":"Bob","age":""}\n']


def test_csv_to_jsonl_cast_and_quoted_multiline_field() -> None:
    out = list(csv_to_jsonl(_csv_lines('a,b\n"x\ny",2\n"",true\n'), cast=True))
    assert [json.loads(line) for line in out] == [{"a": "x\ny", "b": 2}, {"a": "", "b": True}]


def test_csv_to_jsonl_without_headers_emits_arrays() -> None:
    out = list(csv_to_jsonl(_csv_lines("1,2\n3,4\n"), headers=False))
    assert out == ['["1","2"]\n', '["3","4"]\n']


def test_csv_to_jsonl_explicit_headers_and_tab_delimiter() -> None:
    out = list(csv_to_jsonl(_csv_lines("1\t2\n"), CSVToJSONLOptions(delimiter="\t", headers=["a", "b"])))
    assert out == ['{"a":"1","b":"2"}\n']


def test_csv_to_jsonl_width_mismatch() -> None:
    with pytest.raises(PathOrShapeError) as excinfo:
        list(csv_to_jsonl(_csv_lines("a,b\n1\n")))
    assert excinfo.value.line == 2

    out = list(csv_to_jsonl(_csv_lines("a,b\n1\n2,3\n"), skip_records_with_error=True))
    assert out == ['{"a":"2","b":"3"}\n']


def test_csv_to_jsonl_skips_rows_with_only_empty_values() -> None:
    out = list(
        csv_to_jsonl(
            _csv_lines("a,b\n,\n1,2\n"),
            skip_empty_lines=False,
            skip_records_with_empty_values=True,
        )
    )
    assert out == ['{"a":"1","b":"2"}\n']


def test_csv_to_jsonl_custom_cast_gets_column_names() -> None:
    seen = []

    def cast(value, ctx):
        seen.append(ctx.column)
        return value.upper()

    out = list(csv_to_jsonl(_csv_lines("k,v\nx,y\n"), cast=cast))

    assert out == ['{"k":"X","v":"Y"}\n']
    assert seen == ["k", "v"]


def test_csv_to_jsonl_cast_failure_is_hook_error() -> None:
    def cast(value, ctx):
        raise RuntimeError("nope")

    with pytest.raises(HookError):
        list(csv_to_jsonl(_csv_lines("k\nx\n"), cast=cast))


def test_csv_to_jsonl_root_key_wraps_first_object() -> None:
    out = list(csv_to_jsonl(_csv_lines("a\n1\n2\n"), root_key="rows"))
    assert out == ['{"rows":{"a":"1"}}\n', '{"a":"2"}\n']


def test_csv_to_jsonl_max_object_size() -> None:
    with pytest.raises(ObjectLimitExceeded):
        list(csv_to_jsonl(_csv_lines("a\n" + "x" * 50 + "\n"), max_object_size=20))


# ---------------------------------------------------------------------------
# JSONL -> CSV
# ---------------------------------------------------------------------------

def test_jsonl_to_csv_header_from_first_record() -> None:
    text = "".join(jsonl_to_csv([b'{"a":1,"b":"x,y"}\n{"a":true,"c":null}\n']))
    assert text == 'a,b\n1,"x,y"\n1,\n'


def test_jsonl_to_csv_quoted_and_explicit_columns() -> None:
    text = "".join(jsonl_to_csv(['{"a":1,"b":2}\n'], columns=["b", "a"], quoted=True))
    assert text == '"b","a"\n"2","1"\n'


def test_jsonl_to_csv_column_callable_and_no_header() -> None:
    text = "".join(jsonl_to_csv(['{"a":1,"b":2}\n'], columns=lambda first: sorted(first, reverse=True), header=False))
    assert text == "2,1\n"


def test_jsonl_to_csv_unflatten_writes_nested_json() -> None:
    text = "".join(jsonl_to_csv(['{"a.b":1,"c":2}\n'], unflatten=True))
    assert text == 'a,c\n"{""b"":1}",2\n'


def test_jsonl_to_csv_array_records() -> None:
    text = "".join(jsonl_to_csv(['[1,"a"]\n[2,"b"]\n']))
    assert text == "1,a\n2,b\n"


def test_jsonl_to_csv_is_strict() -> None:
    with pytest.raises(DecodeError):
        list(jsonl_to_csv(['{"a":1}\n{bad}\n']))


def test_format_cell_defaults_and_overrides() -> None:
    assert format_cell(None) == ""
    assert format_cell(False) == ""
    assert format_cell(1.5) == "1.5"
    assert format_cell(date(2024, 1, 2)) == "2024-01-02"
    assert format_cell({"k": [1]}) == '{"k":[1]}'
    assert format_cell(True, {"bool": lambda v: "yes"}) == "yes"
    assert format_cell(3, {"number": lambda v: f"{v:03d}"}) == "003"


# ---------------------------------------------------------------------------
# JSON -> JSONL
# ---------------------------------------------------------------------------

def test_json_to_jsonl_splits_top_level_array() -> None:
    out = list(json_to_jsonl('[{"a":1},{"b":{"c":"é"}}]'))
    assert out == ['{"a":1}\n', '{"b":{"c":"é"}}\n']


def test_json_to_jsonl_single_object_document() -> None:
    assert list(json_to_jsonl(b'{"a": 1}')) == ['{"a":1}\n']


def test_json_to_jsonl_array_path_and_chunked_bytes() -> None:
    chunks = [b'{"data":{"items":', b'[1,{"x":{"y":2}}]}}']
    out = list(json_to_jsonl(chunks, array_path="data.items", flatten=True))
    assert out == ["1\n", '{"x.y":2}\n']


def test_json_to_jsonl_path_must_point_to_array() -> None:
    with pytest.raises(PathOrShapeError) as excinfo:
        list(json_to_jsonl('{"data":{"items":5}}', array_path="data.items"))
    assert str(excinfo.value) == 'path "data.items" does not point to an array'


def test_json_to_jsonl_invalid_document() -> None:
    with pytest.raises(DecodeError):
        list(json_to_jsonl("[1,"))


def test_json_to_jsonl_root_key_and_empty_input() -> None:
    assert list(json_to_jsonl("[1,2]", root_key="first")) == ['{"first":1}\n', "2\n"]
    assert list(json_to_jsonl("  ")) == []


def test_json_to_jsonl_reads_file_objects() -> None:
    assert list(json_to_jsonl(io.BytesIO(b"[true]"))) == ["true\n"]


# ---------------------------------------------------------------------------
# JSONL -> JSON
# ---------------------------------------------------------------------------

def test_jsonl_to_json_wraps_in_array() -> None:
    assert jsonl_to_json([b'{"a":1}\n{"b":2}\n']) == '[{"a":1},{"b":2}]'


def test_jsonl_to_json_array_name_and_pretty() -> None:
    text = jsonl_to_json(['{"a":1}\n'], array_name="items", pretty=True)
    assert text == json.dumps({"items": [{"a": 1}]}, indent=2)


def test_jsonl_to_json_single_record_without_wrapper() -> None:
    assert jsonl_to_json(['{"a":"é"}\n'], array_wrapper=False) == '{"a":"é"}'
    assert jsonl_to_json(["1\n2\n"], array_wrapper=False) == "[1,2]"


def test_jsonl_to_json_empty_input() -> None:
    assert jsonl_to_json([b""]) == "[]"


def test_jsonl_to_json_max_objects() -> None:
    assert jsonl_to_json(["1\n2\n"], max_objects=2) == "[1,2]"
    with pytest.raises(ObjectLimitExceeded):
        jsonl_to_json(["1\n2\n3\n"], max_objects=2)


# ---------------------------------------------------------------------------
# replacer and selective quoting
# ---------------------------------------------------------------------------

def test_apply_replacer_runs_top_down_on_a_copy() -> None:
    original = {"a": {"b": 1}, "c": [1, 2]}
    keys = []

    def replacer(key, value):
        keys.append(key)
        if key == 1:
            return OMIT
        return value * 10 if isinstance(value, int) else value

    assert apply_replacer(original, replacer) == {"a": {"b": 10}, "c": [10, None]}
    assert original == {"a": {"b": 1}, "c": [1, 2]}
    assert keys[0] == ""
    assert keys.index("a") < keys.index("b")


def test_apply_replacer_wraps_failures() -> None:
    def replacer(key, value):
        if key == "bad":
            raise KeyError(key)
        return value

    with pytest.raises(HookError, match="replacer"):
        apply_replacer({"ok": 1, "bad": 2}, replacer)


def test_json_to_jsonl_replacer_drops_keys_and_items() -> None:
    def replacer(key, value):
        if key == "secret":
            return OMIT
        if key == "" and value.get("id") == 2:
            return OMIT
        return value.upper() if isinstance(value, str) else value

    doc = '[{"id":1,"name":"a","secret":"s"},{"id":2},{"id":3,"name":"c"}]'
    assert list(json_to_jsonl(doc, replacer=replacer)) == [
        '{"id":1,"name":"A"}\n',
        '{"id":3,"name":"C"}\n',
    ]


def test_csv_to_jsonl_replacer() -> None:
    out = list(csv_to_jsonl(_csv_lines("a,b\n1,2\n"), replacer=lambda k, v: OMIT if k == "b" else v))
    assert out == ['{"a":"1"}\n']

    with pytest.raises(HookError):
        list(csv_to_jsonl(_csv_lines("a,b\n1,2\n"), replacer=lambda k, v: 1 / 0))


def test_json_to_jsonl_rejects_non_standard_constants() -> None:
    with pytest.raises(DecodeError):
        list(json_to_jsonl("[NaN]"))


def test_jsonl_to_csv_quoted_string_quotes_only_strings() -> None:
    text = "".join(jsonl_to_csv(['{"a":"x","b":1,"c":""}\n'], quoted_string=True))
    assert text == '"a","b","c"\n"x",1,""\n'


def test_jsonl_to_csv_quoted_empty_quotes_only_empty_cells() -> None:
    text = "".join(jsonl_to_csv(['{"a":"","b":null,"c":"y,z"}\n'], quoted_empty=True))
    assert text == 'a,b,c\n"","","y,z"\n'
