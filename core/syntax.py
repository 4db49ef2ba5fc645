"""Syntax checker — parses each source file standalone with tree-sitter."""

import json
import os

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from config.stacks import NEXTJS
from core.state import Issue

_TS = Language(tree_sitter_typescript.language_typescript())
_TSX = Language(tree_sitter_typescript.language_tsx())
_JS = Language(tree_sitter_javascript.language())

_GRAMMARS = {
    ".ts": _TS,
    ".mts": _TS,
    ".cts": _TS,
    ".tsx": _TSX,
    ".js": _JS,
    ".jsx": _JS,
    ".mjs": _JS,
    ".cjs": _JS,
}

_SNIPPET = 40


def _first_error(node):
    """Depth-first, document-order search for an ERROR or MISSING node."""
    if node.is_missing or node.type == "ERROR":
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


def _describe(node):
    if node.is_missing:
        return f"Missing '{node.type}'"
    text = (node.text or b"").decode("utf-8", errors="replace").strip().splitlines()
    snippet = text[0][:_SNIPPET] if text else ""
    if snippet:
        return f"Unexpected '{snippet}'"
    return "Unexpected token"


def _issue(path, line, column, message):
    return Issue(
        category="syntax",
        severity="error",
        path=path,
        line=line,
        column=column,
        message=message,
        rule="syntax/parse",
        suggestion="Rewrite the file so it parses cleanly",
    )


def check_source(path, content):
    """Return the first parse diagnostic for one file, or None."""
    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            return _issue(path, e.lineno, e.colno, e.msg)
        return None

    grammar = _GRAMMARS.get(ext)
    if grammar is None:
        return None
    tree = Parser(grammar).parse(content.encode("utf-8"))
    if not tree.root_node.has_error:
        return None
    node = _first_error(tree.root_node)
    row, col = node.start_point
    return _issue(path, row + 1, col + 1, _describe(node))


def check_syntax(files, extensions=None):
    """Syntax issues across `files`, at most one per file, in file order."""
    extensions = tuple(extensions or NEXTJS["syntax_extensions"])
    issues = []
    for f in files:
        if not f.path.lower().endswith(extensions):
            continue
        issue = check_source(f.path, f.content)
        if issue is not None:
            issues.append(issue)
    return issues
