"""Manifest augmenter — adds missing boilerplate and patches small project-wide fixes.

Every step is idempotent: running `augment` on its own output changes
nothing. Files the model supplied are patched in place, never replaced.
"""

import json
import logging
import re

from config.stacks import NEXTJS
from core.state import FileEntry, ProjectManifest
from utils.template_engine import render_template

logger = logging.getLogger(__name__)

STACK = "nextjs"
LAYOUT = "app/layout.tsx"
STYLESHEET = "app/globals.css"

_LAYERS = ("base", "components", "utilities")
_APPLY_LINE_RE = re.compile(r"^[ \t]*@apply\b[^\n]*\n?", re.MULTILINE)
_OVERFLOW_RE = re.compile(r"overflow-x\s*:\s*hidden", re.IGNORECASE)
_SOURCE_RE = re.compile(r"\.(?:tsx|ts|jsx|js)$")
_PROVIDER_EXPORT_RE = re.compile(r"export\s+(?:default\s+)?(?:const|function)\s+([A-Za-z0-9_]+Provider)\b")
_PROVIDER_GUARD_RE = re.compile(r"must be used within\s+(?:an?\s+)?([A-Za-z0-9_]+Provider)\b", re.IGNORECASE)
_IMPORT_LINE_RE = re.compile(r"^import[^\n]*$", re.MULTILINE)


def _overflow_guard():
    return render_template(STACK, "overflow_guard.css.tpl")


# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------

def patch_stylesheet(content):
    """Pair every @layer block with its @tailwind directive, drop @apply, add the overflow guard."""
    missing = [
        layer for layer in _LAYERS
        if re.search(rf"@layer\s+{layer}\b", content)
        and not re.search(rf"@tailwind\s+{layer}\s*;", content)
    ]
    if missing:
        directives = "".join(f"@tailwind {layer};\n" for layer in missing)
        content = directives + content
    content = _APPLY_LINE_RE.sub("", content)
    if not _OVERFLOW_RE.search(content):
        content = content.rstrip("\n") + "\n\n" + _overflow_guard()
    return content


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------

def default_package_json(dependencies):
    descriptor = {
        "name": "generated-nextjs-app",
        "version": "0.1.0",
        "private": True,
        "scripts": dict(NEXTJS["scripts"]),
        "dependencies": dict(dependencies),
        "devDependencies": dict(NEXTJS["dev_dependencies"]),
    }
    return json.dumps(descriptor, indent=2) + "\n"


def patch_package_json(content, dependencies):
    """Add dependency entries package.json lacks. Unparseable files are left alone."""
    try:
        descriptor = json.loads(content)
    except json.JSONDecodeError:
        return content
    if not isinstance(descriptor, dict):
        return content
    declared = descriptor.get("dependencies")
    if not isinstance(declared, dict):
        declared = {}
    missing = {k: v for k, v in dependencies.items() if k not in declared}
    if not missing:
        return content
    declared.update(missing)
    descriptor["dependencies"] = declared
    return json.dumps(descriptor, indent=2) + "\n"


# ---------------------------------------------------------------------------
# Provider guards
# ---------------------------------------------------------------------------

def _module_path(path):
    return "@/" + _SOURCE_RE.sub("", path)


def _ensure_import(content, provider, path):
    if re.search(rf"import\s+\{{[^}}]*\b{provider}\b[^}}]*\}}\s+from", content):
        return content
    line = f'import {{ {provider} }} from "{_module_path(path)}";'
    imports = list(_IMPORT_LINE_RE.finditer(content))
    if not imports:
        return f"{line}\n{content}"
    end = imports[-1].end()
    return f"{content[:end]}\n{line}{content[end:]}"


def apply_provider_guards(files):
    """Wrap {children} in app/layout.tsx with providers that hooks require."""
    layout = next((f for f in files if f.path == LAYOUT), None)
    if layout is None or "{children}" not in layout.content:
        return files

    exported = {}
    required = []
    for f in files:
        if not _SOURCE_RE.search(f.path):
            continue
        for name in _PROVIDER_EXPORT_RE.findall(f.content):
            exported[name] = f.path
        for name in _PROVIDER_GUARD_RE.findall(f.content):
            if name not in required:
                required.append(name)

    content = layout.content
    wrap = []
    for provider in required:
        if re.search(rf"<{provider}\b", content) or provider not in exported:
            continue
        content = _ensure_import(content, provider, exported[provider])
        wrap.append(provider)
    if not wrap:
        return files

    wrapped = "{children}"
    for provider in reversed(wrap):
        wrapped = f"<{provider}>{wrapped}</{provider}>"
    content = content.replace("{children}", wrapped, 1)
    logger.info("Wrapped layout children with %s", ", ".join(wrap))
    return [FileEntry(path=f.path, content=content) if f.path == LAYOUT else f for f in files]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _has_any(paths, prefix):
    return any(p.startswith(prefix) for p in paths)


def augment(manifest):
    """Return a new manifest with boilerplate present and fixes applied."""
    files = list(manifest.files)
    deps = manifest.dependencies
    paths = set(manifest.paths())
    synthesized = []

    def replace(path, content):
        for i, f in enumerate(files):
            if f.path == path:
                if f.content != content:
                    files[i] = FileEntry(path=path, content=content)
                return

    def add(path, content):
        files.append(FileEntry(path=path, content=content))
        synthesized.append(path)

    if "package.json" in paths:
        replace("package.json", patch_package_json(manifest.get("package.json").content, deps))
    else:
        add("package.json", default_package_json(deps))

    if not _has_any(paths, "tailwind.config."):
        add("tailwind.config.ts", render_template(STACK, "tailwind.config.ts.tpl"))
    if not _has_any(paths, "postcss.config."):
        add("postcss.config.mjs", render_template(STACK, "postcss.config.mjs.tpl"))

    if STYLESHEET in paths:
        replace(STYLESHEET, patch_stylesheet(manifest.get(STYLESHEET).content))
    else:
        add(STYLESHEET, render_template(STACK, "globals.css.tpl", {"overflow_guard": _overflow_guard()}))

    if "app/loading.tsx" not in paths:
        add("app/loading.tsx", render_template(STACK, "loading.tsx.tpl"))

    files = apply_provider_guards(files)

    if synthesized:
        logger.info("Synthesized boilerplate: %s", ", ".join(synthesized))
    return ProjectManifest(files=files, dependencies=dict(deps))
