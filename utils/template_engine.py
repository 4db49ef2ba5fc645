"""Template engine using string.Template for safe rendering."""

import os
from string import Template


def get_templates_dir():
    """Return the absolute path to the bundled templates directory."""
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), "config", "templates")


def load_template(stack, template_name):
    """Load a template file and return its contents as a string."""
    templates_dir = get_templates_dir()
    path = os.path.join(templates_dir, stack, template_name)
    resolved = os.path.realpath(path)
    if not resolved.startswith(os.path.realpath(templates_dir) + os.sep):
        raise ValueError(f"Template path escapes templates directory: {stack}/{template_name}")
    with open(resolved, "r", encoding="utf-8") as f:
        return f.read()


def render_template(stack, template_name, variables=None):
    """Load and render a template with the given variables.

    Uses string.Template.safe_substitute, so CSS/TSX braces and unknown
    placeholders pass through untouched.
    """
    return Template(load_template(stack, template_name)).safe_substitute(variables or {})
