"""
Tests for JSON recovery from model output.
"""

import pytest

from utils.json_extractor import decode_json, extract_json, strip_code_fences


def test_fenced_object():
    assert extract_json('```json\n{"a":1}\n```') == '{"a":1}'


def test_prose_around_object():
    text = 'Here you go:\n{"brands": [{"name": "X"}]}\nLet me know!'
    assert extract_json(text) == '{"brands": [{"name": "X"}]}'


def test_array_used_when_no_object():
    assert extract_json('Sure! ["a b c", "d e f"] done') == '["a b c", "d e f"]'


def test_object_preferred_over_earlier_array():
    assert extract_json('[1, {"a": 2}]') == '{"a": 2}'


def test_nested_structures():
    assert extract_json('{"a": {"b": [1, 2, {"c": 3}]}} trailing words') == '{"a": {"b": [1, 2, {"c": 3}]}}'


def test_text_without_brackets_returned_stripped():
    assert extract_json("```\nno json here\n```") == "no json here"


def test_unbalanced_returns_trimmed_input():
    assert extract_json('  prefix {"a": [1, 2  ') == 'prefix {"a": [1, 2'


def test_never_raises_on_empty():
    assert extract_json("") == ""
    assert extract_json(None) == ""


@pytest.mark.parametrize("text", [
    '```json\n{"a":1}\n```',
    'noise {"a": [1, {"b": 2}]} more noise',
    '["x", "y"]',
    'plain text',
    '{"unterminated": [1, 2',
    '```\n[{"a": 1}, {"b": 2}]\n```',
])
def test_idempotent(text):
    once = extract_json(text)
    assert extract_json(once) == once


def test_strip_code_fences_without_newline():
    assert strip_code_fences("```") == ""


def test_decode_json():
    assert decode_json('```json\n{"suggestions": ["a"]}\n```') == {"suggestions": ["a"]}


def test_decode_json_failure_is_value_error():
    with pytest.raises(ValueError):
        decode_json("not json at all")
