"""Tests for core.shape — path safety, caps and required files."""

import pytest

from core.errors import ManifestRejected, StructureViolation
from core.shape import check_required, normalize_dependencies, normalize_path, validate_shape
from core.state import FileEntry, ProjectManifest


@pytest.mark.parametrize("raw,expected", [
    ("app/page.tsx", "app/page.tsx"),
    ("./app/page.tsx", "app/page.tsx"),
    ("app\\components\\Nav.tsx", "app/components/Nav.tsx"),
    ("app//lib/./utils.ts", "app/lib/utils.ts"),
    ("  package.json ", "package.json"),
])
def test_normalize_path_accepts(raw, expected):
    assert normalize_path(raw) == expected


@pytest.mark.parametrize("raw", [
    "",
    "/etc/passwd",
    "C:/Windows/system.ini",
    "../outside.ts",
    "app/../../x.ts",
    "node_modules/react/index.js",
    "app/.next/cache.js",
    ".git/config",
    "package-lock.json",
    "app/yarn.lock",
    "app/page\n.tsx",
    "app/pa\0ge.tsx",
    None,
    42,
])
def test_normalize_path_rejects(raw):
    assert normalize_path(raw) is None


def test_normalize_dependencies_filters_non_strings():
    raw = {"next": "^15.0.0", "bad": 1, "": "1.0.0", "react": " ^19 "}
    assert normalize_dependencies(raw) == {"next": "^15.0.0", "react": "^19"}
    assert normalize_dependencies(["next"]) == {}


def test_validate_shape_builds_manifest():
    parsed = {
        "files": [
            {"path": "app/page.tsx", "content": "page"},
            {"path": "../evil.ts", "content": "x"},
            {"path": "app/layout.tsx", "content": 3},
            "not an object",
        ],
        "dependencies": {"next": "^15.0.0"},
    }
    result = validate_shape(parsed)
    assert result.manifest.paths() == ["app/page.tsx"]
    assert result.manifest.dependencies == {"next": "^15.0.0"}
    assert set(result.dropped) == {"../evil.ts", "app/layout.tsx"}


def test_duplicate_paths_last_write_wins():
    parsed = {"files": [
        {"path": "app/page.tsx", "content": "first"},
        {"path": "app/layout.tsx", "content": "layout"},
        {"path": "./app/page.tsx", "content": "second"},
    ]}
    manifest = validate_shape(parsed).manifest
    assert manifest.paths() == ["app/page.tsx", "app/layout.tsx"]
    assert manifest.get("app/page.tsx").content == "second"


def test_byte_order_mark_stripped_from_content():
    parsed = {"files": [{"path": "app/page.tsx", "content": "\ufeffexport {}"}]}
    assert validate_shape(parsed).manifest.get("app/page.tsx").content == "export {}"


def test_too_many_files_rejected():
    parsed = {"files": [{"path": f"f{i}.ts", "content": ""} for i in range(4)]}
    with pytest.raises(ManifestRejected, match="too many files"):
        validate_shape(parsed, max_files=3)


def test_oversized_file_rejected():
    parsed = {"files": [{"path": "big.ts", "content": "x" * 11}]}
    with pytest.raises(ManifestRejected, match="oversized"):
        validate_shape(parsed, max_content=10)


@pytest.mark.parametrize("parsed", [
    [],
    {"files": "app/page.tsx"},
    {"files": []},
    {"files": [{"path": "/abs.ts", "content": "x"}]},
])
def test_unusable_manifest_rejected(parsed):
    with pytest.raises(ManifestRejected):
        validate_shape(parsed)


def test_manifest_rejected_is_a_structure_violation():
    assert issubclass(ManifestRejected, StructureViolation)


def test_check_required_lists_missing_files():
    manifest = ProjectManifest(files=[
        FileEntry(path="app/layout.tsx", content=""),
        FileEntry(path="app/page.tsx", content=""),
    ])
    issues = check_required(manifest)
    assert [i.path for i in issues] == ["app/loading.tsx", "app/globals.css"]
    assert all(i.category == "structure" and i.severity == "error" for i in issues)


def test_check_required_custom_list():
    manifest = ProjectManifest(files=[FileEntry(path="index.ts", content="")])
    assert check_required(manifest, required=["index.ts"]) == []
