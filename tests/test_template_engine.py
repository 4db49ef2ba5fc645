"""Tests for utils.template_engine."""

import pytest

from utils.template_engine import load_template, render_template


def test_render_substitutes_known_variables():
    css = render_template("nextjs", "globals.css.tpl", {"overflow_guard": "/* guard */"})
    assert css.rstrip().endswith("/* guard */")
    assert "var(--foreground)" in css


def test_render_keeps_braces_and_unknown_placeholders():
    css = render_template("nextjs", "globals.css.tpl")
    assert "$overflow_guard" in css
    assert ":root {" in css


def test_template_path_cannot_escape():
    with pytest.raises(ValueError):
        load_template("nextjs", "../../defaults.py")
