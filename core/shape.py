"""Project shape validator — path safety, caps and the required-file contract."""

import logging
import re
from dataclasses import dataclass, field

from config.defaults import DEFAULTS
from config.stacks import EXCLUDED_DIRS, LOCKFILES, NEXTJS
from core.errors import ManifestRejected
from core.state import FileEntry, Issue, ProjectManifest

logger = logging.getLogger(__name__)

_DRIVE_RE = re.compile(r"^[A-Za-z]:/")


def normalize_path(path):
    """Return a safe relative path, or None if the path must be dropped."""
    if not isinstance(path, str):
        return None
    if "\0" in path or "\r" in path or "\n" in path:
        return None
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    if not path or path.startswith("/") or _DRIVE_RE.match(path):
        return None
    segments = [s for s in path.split("/") if s and s != "."]
    if not segments or ".." in segments:
        return None
    if any(s in EXCLUDED_DIRS for s in segments[:-1]):
        return None
    if segments[-1] in LOCKFILES:
        return None
    return "/".join(segments)


def normalize_dependencies(raw):
    if not isinstance(raw, dict):
        return {}
    deps = {}
    for name, version in raw.items():
        if isinstance(name, str) and isinstance(version, str) and name.strip() and version.strip():
            deps[name.strip()] = version.strip()
    return deps


@dataclass
class ShapeResult:
    manifest: ProjectManifest
    dropped: list[str] = field(default_factory=list)


def validate_shape(parsed, max_files=None, max_content=None):
    """Build a ProjectManifest from a parsed model response.

    Unsafe paths are dropped (non-fatally). Raises ManifestRejected when
    nothing usable survives or a cap is exceeded.
    """
    max_files = max_files or DEFAULTS["max_file_count"]
    max_content = max_content or DEFAULTS["max_file_content_length"]

    if not isinstance(parsed, dict):
        raise ManifestRejected("Model response root must be a JSON object")
    raw_files = parsed.get("files")
    if not isinstance(raw_files, list):
        raise ManifestRejected("Model response must contain a 'files' array")

    by_path = {}
    dropped = []
    for item in raw_files:
        if not isinstance(item, dict):
            continue
        raw_path = item.get("path")
        content = item.get("content")
        if not isinstance(content, str):
            dropped.append(str(raw_path))
            continue
        path = normalize_path(raw_path)
        if path is None:
            dropped.append(str(raw_path))
            continue
        if content.startswith("\ufeff"):
            content = content[1:]
        if len(content) > max_content:
            raise ManifestRejected(
                f"Model response has an oversized file: {path} exceeds {max_content} characters"
            )
        # Last write wins, first position kept.
        by_path[path] = content
        if len(by_path) > max_files:
            raise ManifestRejected(f"Model response contains too many files (>{max_files})")

    if dropped:
        logger.warning("Dropped %d unsafe or invalid file(s): %s", len(dropped), ", ".join(dropped[:10]))
    if not by_path:
        raise ManifestRejected("Model response contained no usable files")

    manifest = ProjectManifest(
        files=[FileEntry(path=p, content=c) for p, c in by_path.items()],
        dependencies=normalize_dependencies(parsed.get("dependencies")),
    )
    return ShapeResult(manifest=manifest, dropped=dropped)


def check_required(manifest, required=None):
    """Structure issues for every required path missing from the manifest."""
    required = required or NEXTJS["required_files"]
    present = set(manifest.paths())
    return [
        Issue(
            category="structure",
            severity="error",
            path=path,
            line=1,
            column=1,
            message=f"Required file {path} is missing",
            rule="structure/required-file",
            suggestion=f"Return a complete {path}",
        )
        for path in required
        if path not in present
    ]
