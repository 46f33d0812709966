import json

import pytest

from jsonlpipe.core.decode import decode_document, decode_line, describe_decode_error, revive


def test_decode_line_happy_path() -> None:
    assert decode_line('{"a": [1, 2.5, "x", null, true]}') == {"a": [1, 2.5, "x", None, True]}


@pytest.mark.parametrize("text", ["1", '"s"', "null", "[]"])
def test_decode_line_accepts_any_json_value(text) -> None:
    assert decode_line(text) == json.loads(text)


def test_decode_line_raises_json_error() -> None:
    with pytest.raises(json.JSONDecodeError):
        decode_line("{bad}")


def test_revive_visits_children_before_parents() -> None:
    calls = []

    def reviver(key, value):
        calls.append(key)
        return value

    revive({"a": {"b": 1}, "c": [2, 3]}, reviver)

    assert calls == ["b", "a", 0, 1, "c", ""]


def test_reviver_result_replaces_value() -> None:
    def reviver(key, value):
        if key == "drop":
            return None
        if key == "":
            return {"root": value}
        return value

    assert decode_line('{"drop": 1, "keep": 2}', reviver) == {"root": {"drop": None, "keep": 2}}


@pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", '{"x": [1, NaN]}'])
def test_decode_document_rejects_non_standard_constants(text) -> None:
    with pytest.raises(ValueError, match="is not a valid JSON value"):
        decode_document(text)


def test_describe_decode_error() -> None:
    with pytest.raises(json.JSONDecodeError) as excinfo:
        decode_document("{bad}")
    assert describe_decode_error(excinfo.value) == excinfo.value.msg
    assert describe_decode_error(RecursionError()) == "nesting too deep"
    assert describe_decode_error(ValueError("boom")) == "boom"


def test_revive_walks_deep_values_without_recursion() -> None:
    depth = 10_000
    value: list = []
    for _ in range(depth):
        value = [value]
    keys = []

    def reviver(key, val):
        keys.append(key)
        return val

    assert revive(value, reviver) is not None
    assert len(keys) == depth + 1
    assert keys[-1] == ""
