"""Tests for core.truncation — closing JSON cut off mid-stream."""

import json

import pytest

from core.truncation import balance, ends_in_string, is_balanced


@pytest.mark.parametrize("text", [
    '{"a": 1}',
    '[1, 2, 3]',
    '{"a": "}{][", "b": [true, null]}',
])
def test_balanced_text_unchanged(text):
    assert balance(text) == text
    assert is_balanced(text)


def test_closes_open_string_and_containers():
    text = '{"files": [{"path": "a.ts", "content": "let x'
    assert json.loads(balance(text)) == {"files": [{"path": "a.ts", "content": "let x"}]}


def test_dangling_key_gets_null():
    assert json.loads(balance('{"files": [], "depen')) == {"files": [], "depen": None}


def test_key_without_value_gets_null():
    assert json.loads(balance('{"a": 1, "b":')) == {"a": 1, "b": None}
    assert json.loads(balance('{"a": 1, "b"')) == {"a": 1, "b": None}


def test_trailing_comma_dropped():
    assert json.loads(balance('{"a": [1, 2,')) == {"a": [1, 2]}
    assert json.loads(balance('{"a": 1,')) == {"a": 1}


def test_partial_literal_removed():
    assert json.loads(balance('{"a": tru')) == {"a": None}
    assert json.loads(balance('[1, fals')) == [1]


def test_complete_literal_kept():
    assert json.loads(balance('{"a": true')) == {"a": True}
    assert json.loads(balance('{"a": 12')) == {"a": 12}


def test_dangling_escape_dropped():
    assert json.loads(balance('{"a": "line\\')) == {"a": "line"}


def test_partial_unicode_escape_dropped():
    assert json.loads(balance('{"a": "x\\u00')) == {"a": "x"}


def test_escaped_backslash_before_u_kept():
    assert json.loads(balance('{"a": "x\\\\u00')) == {"a": "x\\u00"}


def test_balance_is_idempotent():
    once = balance('{"a": [{"b": "c')
    assert balance(once) == once


def test_ends_in_string():
    assert ends_in_string('{"a": "b')
    assert not ends_in_string('{"a": "b"')
    assert ends_in_string('{"a": "b\\"')
