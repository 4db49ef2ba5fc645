"""Read and write generated projects on disk."""

import json
import os

from config.stacks import EXCLUDED_DIRS
from core.shape import normalize_dependencies, normalize_path
from core.state import FileEntry, ProjectManifest

# Binary assets and anything bigger than this are skipped when loading.
_MAX_LOAD_BYTES = 1_000_000


def write_manifest(manifest, output_dir):
    """Write every file under output_dir. Returns the list of written paths."""
    os.makedirs(output_dir, exist_ok=True)
    root = os.path.realpath(output_dir)
    written = []
    for f in manifest.files:
        full_path = os.path.join(output_dir, f.path)
        resolved = os.path.realpath(full_path)
        if not resolved.startswith(root + os.sep):
            raise ValueError(f"Path escapes output directory: {f.path}")
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w", encoding="utf-8") as fp:
            fp.write(f.content)
        written.append(f.path)
    return written


def load_manifest(project_dir):
    """Load an existing project for edit mode.

    Skips excluded directories, lockfiles, unreadable or binary files.
    Dependencies come from package.json when it parses.
    """
    if not os.path.isdir(project_dir):
        raise ValueError(f"Project directory does not exist: {project_dir}")

    files = []
    for dirpath, dirnames, filenames in os.walk(project_dir):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        for name in sorted(filenames):
            full_path = os.path.join(dirpath, name)
            rel = normalize_path(os.path.relpath(full_path, project_dir))
            if rel is None or os.path.getsize(full_path) > _MAX_LOAD_BYTES:
                continue
            try:
                with open(full_path, "r", encoding="utf-8") as fp:
                    content = fp.read()
            except UnicodeDecodeError:
                continue
            files.append(FileEntry(path=rel, content=content))

    dependencies = {}
    package = next((f for f in files if f.path == "package.json"), None)
    if package is not None:
        try:
            dependencies = normalize_dependencies(json.loads(package.content).get("dependencies"))
        except (json.JSONDecodeError, AttributeError):
            dependencies = {}
    return ProjectManifest(files=files, dependencies=dependencies)
