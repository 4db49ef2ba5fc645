"""Folder naming utilities: slug generation and deduplicated output dirs."""

import os
import re

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
OUTPUT_DIR = os.environ.get("SITESMITH_OUTPUT_DIR", os.path.join(BASE_DIR, "generated_sites"))

MAX_DEDUP = 1000

_FILLER = {
    "build", "me", "a", "an", "the", "create", "make", "generate", "design",
    "for", "to", "with", "using", "that", "and", "website", "site", "web",
    "page", "landing", "app", "please", "can", "you", "i", "want", "need",
    "some", "new", "my", "of", "simple", "modern",
}


def slugify(text):
    """Convert text to a filesystem-safe slug."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def extract_project_name(prompt):
    """Pull a short project name from the prompt text."""
    words = re.sub(r"[^\w\s]", "", prompt.lower()).split()
    meaningful = [w for w in words if w not in _FILLER]
    name = "-".join(meaningful[:3]) if meaningful else "site"
    return slugify(name) or "site"


def get_output_dir(prompt, base_dir=None):
    """Return a deduplicated output directory for the given prompt."""
    root = os.path.realpath(base_dir or OUTPUT_DIR)
    project_name = extract_project_name(prompt)
    base = os.path.join(root, project_name)
    if not os.path.realpath(base).startswith(root + os.sep):
        raise ValueError(f"Generated output path escapes base directory: {base}")

    if not os.path.exists(base):
        return base

    # Dedup with -2, -3, etc.
    for counter in range(2, MAX_DEDUP + 2):
        candidate = f"{base}-{counter}"
        if not os.path.exists(candidate):
            return candidate

    raise RuntimeError(f"Too many duplicate projects (>{MAX_DEDUP}) for: {project_name}")
