"""Dependency reconciler — infers packages from imports and merges them in."""

import logging
import re

from config.stacks import KNOWN_VERSIONS, NEXTJS, NODE_BUILTINS

logger = logging.getLogger(__name__)

_IMPORT_PATTERNS = (
    # import x from "pkg" / export { y } from "pkg" (may span lines)
    re.compile(r"""^\s*(?:import|export)\b[^;'"]*?\bfrom\s*["']([^"'\n]+)["']""", re.MULTILINE),
    # import "pkg"
    re.compile(r"""^\s*import\s*["']([^"'\n]+)["']""", re.MULTILINE),
    re.compile(r"""\brequire\(\s*["']([^"'\n]+)["']\s*\)"""),
    re.compile(r"""\bimport\(\s*["']([^"'\n]+)["']\s*\)"""),
)

_PACKAGE_NAME_RE = re.compile(r"^(?:@[a-z0-9][\w.-]*/)?[a-z0-9][\w.-]*$", re.IGNORECASE)
_ALIAS_PREFIXES = (".", "/", "@/", "~/", "#", "$")
_SCANNED_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")


def package_name(specifier):
    """Top-level package for an import specifier, or None for local/builtin imports.

    "@radix-ui/react-slot/dist" -> "@radix-ui/react-slot"
    "next/link"                 -> "next"
    "node:fs", "./x", "@/lib/x" -> None
    """
    spec = specifier.strip()
    if not spec or spec.startswith(_ALIAS_PREFIXES) or "://" in spec:
        return None
    if spec.startswith("node:"):
        return None
    parts = spec.split("/")
    if spec.startswith("@"):
        if len(parts) < 2 or not parts[1]:
            return None
        name = f"{parts[0]}/{parts[1]}"
    else:
        name = parts[0]
    if name in NODE_BUILTINS or not _PACKAGE_NAME_RE.match(name):
        return None
    return name


def find_imports(content):
    """Package names referenced by one source file."""
    found = set()
    for pattern in _IMPORT_PATTERNS:
        for match in pattern.finditer(content):
            name = package_name(match.group(1))
            if name:
                found.add(name)
    return found


def reconcile(files, existing, lookup=None):
    """Return `existing` plus every imported package it lacks.

    Never removes or rewrites an entry already present, so applying it twice
    gives the same map as once. `lookup(name) -> version | None` is consulted
    for packages the known-version table does not cover.
    """
    deps = dict(existing)
    referenced = set()
    for f in files:
        if f.path.lower().endswith(_SCANNED_EXTENSIONS):
            referenced |= find_imports(f.content)

    added = []
    for name in sorted(referenced):
        if name in deps:
            continue
        version = KNOWN_VERSIONS.get(name)
        if version is None and lookup is not None:
            version = lookup(name)
        deps[name] = version or "latest"
        added.append(name)

    for name in NEXTJS["core_packages"]:
        if name not in deps:
            deps[name] = NEXTJS["default_dependencies"][name]
            added.append(name)

    if added:
        logger.info("Added %d inferred dependencies: %s", len(added), ", ".join(added))
    return deps
