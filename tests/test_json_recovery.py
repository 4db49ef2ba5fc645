"""Tests for core.json_recovery — strategies and the recover() dispatcher."""

import json

import pytest

from core.errors import RecoverableParseFailure
from core.json_recovery import (
    escape_control_chars,
    normalize_stray_escapes,
    recover,
    strip_trailing_commas,
    truncate_at_boundary,
)


def _manifest(*paths):
    return {
        "files": [{"path": p, "content": f"export default function C() {{ return <div>{p}</div>; }}"} for p in paths],
        "dependencies": {"next": "^15.0.0"},
    }


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

def test_strip_trailing_commas_outside_strings_only():
    text = '{"a": [1, 2,], "b": "x,]",}'
    assert strip_trailing_commas(text) == '{"a": [1, 2], "b": "x,]"}'


def test_escape_control_chars_inside_strings():
    text = '{"a": "line1\nline2\tend"}\n'
    assert escape_control_chars(text) == '{"a": "line1\\nline2\\tend"}\n'


def test_normalize_stray_escapes_outside_strings():
    text = '{\\n"a": "keep\\nthis"}'
    assert normalize_stray_escapes(text) == '{ "a": "keep\\nthis"}'


# ---------------------------------------------------------------------------
# recover()
# ---------------------------------------------------------------------------

def test_valid_json_parsed_directly():
    data = _manifest("app/page.tsx")
    result = recover(json.dumps(data))
    assert result.strategy == "direct"
    assert result.data == data


def test_fenced_output_with_trailing_prose():
    data = _manifest("app/page.tsx")
    raw = "```json\n" + json.dumps(data) + "\n```\nLet me know if you want changes."
    assert recover(raw).data == data


def test_double_encoded_output():
    data = _manifest("app/page.tsx")
    raw = json.dumps(json.dumps(data))
    result = recover(raw)
    assert result.strategy == "double-encoded"
    assert result.data == data


def test_trailing_commas():
    result = recover('{"files": [{"path": "a.ts", "content": "x"},], "dependencies": {},}')
    assert result.strategy == "trailing-commas"
    assert result.data["files"] == [{"path": "a.ts", "content": "x"}]


def test_raw_control_characters():
    raw = '{"files": [{"path": "a.ts", "content": "line one\nline two"}]}'
    result = recover(raw)
    assert result.strategy == "control-chars"
    assert result.data["files"][0]["content"] == "line one\nline two"


def test_stray_escapes_between_tokens():
    raw = '{\\n  "files": [{"path": "a.ts", "content": "x"}]\\n}'
    result = recover(raw)
    assert result.strategy == "stray-escapes"
    assert result.data["files"][0]["path"] == "a.ts"


def test_truncated_output_keeps_only_complete_files():
    data = _manifest("app/layout.tsx", "app/page.tsx", "components/Hero.tsx")
    full = json.dumps(data)
    # Cut inside the third file's content
    cut = full.index("components/Hero.tsx") + 40
    result = recover(full[:cut])
    files = result.data["files"]
    assert [f["path"] for f in files][:2] == ["app/layout.tsx", "app/page.tsx"]
    # Every surviving file is an exact, complete file from the original
    for f in files:
        if isinstance(f.get("content"), str):
            assert f in data["files"]


def test_boundary_inside_content_is_never_split():
    content = 'const items = [{a: 1}, {b: 2}];\nexport default items;'
    data = {"files": [
        {"path": "lib/items.ts", "content": content},
        {"path": "app/page.tsx", "content": "export default function P() { return null; }"},
    ]}
    full = json.dumps(data)
    cut = full.index("app/page.tsx") + 30
    parsed = truncate_at_boundary(full[:cut])
    assert parsed["files"][0] == {"path": "lib/items.ts", "content": content}
    assert "content" not in parsed["files"][1]


def test_truncated_mid_key_recovers_prefix():
    raw = '{"files": [{"path": "a.ts", "content": "x"}], "depend'
    result = recover(raw)
    assert result.data["files"] == [{"path": "a.ts", "content": "x"}]


def test_unrecoverable_output_raises_with_diagnostics():
    raw = "I'm sorry, I can't produce that project right now."
    with pytest.raises(RecoverableParseFailure) as exc_info:
        recover(raw)
    err = exc_info.value
    assert err.length == len(raw)
    assert err.head == raw[:500]
    assert err.tail == raw[-500:]


def test_non_object_json_is_not_accepted():
    with pytest.raises(RecoverableParseFailure):
        recover("[1, 2, 3]")


def test_custom_strategy_list():
    result = recover('{"a": 1}', strategies=(("only", lambda text: {"custom": True}),))
    assert result.strategy == "only"
    assert result.data == {"custom": True}
