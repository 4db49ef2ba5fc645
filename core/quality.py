"""Heuristic quality audit — navigation and responsiveness checks.

Pattern-based only: a passing audit says the markup looks complete, not
that it renders correctly.
"""

from config import rules
from core.state import Issue

_SOURCE_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")

NAVIGATION_RULES = frozenset(rules.QUALITY_RULES)


def _issue(rule, path):
    message, suggestion = rules.QUALITY_RULES[rule]
    return Issue(
        category="quality",
        severity="warning",
        path=path,
        line=1,
        column=1,
        message=message,
        rule=rule,
        suggestion=suggestion,
    )


def _any(patterns, content):
    return any(p.search(content) for p in patterns)


def _has_overlay(content):
    if not rules.OVERLAY_TOGGLE.search(content):
        return False
    raw_overlay = rules.OVERLAY_POSITION.search(content) and rules.OVERLAY_LAYER.search(content)
    return bool(raw_overlay) or _any(rules.OVERLAY_COMPONENT, content)


def _audit_navigation(nav_files):
    issues = []
    first = nav_files[0].path
    contents = [f.content for f in nav_files]

    has_toggle = any(rules.MENU_TOGGLE.search(c) for c in contents)
    mobile_ready = (
        any(rules.RESPONSIVE_VISIBILITY.search(c) for c in contents)
        and has_toggle
        and any(rules.MENU_BUTTON.search(c) for c in contents)
    )
    if not mobile_ready:
        issues.append(_issue("ux/mobile-navbar", first))

    pinned = any(_any(rules.PINNED_HEADER, c) for c in contents)
    layered = any(_any(rules.NAV_LAYERING, c) for c in contents)
    if not (pinned and layered):
        issues.append(_issue("ux/navbar-stacking", first))

    if any(_any(rules.NESTED_MENU_SCROLL, c) for c in contents):
        issues.append(_issue("ux/navbar-nested-scroll", first))

    if has_toggle:
        if not any(_has_overlay(c) for c in contents):
            issues.append(_issue("ux/mobile-menu-overlay", first))
        if not any(_any(rules.MENU_BACKGROUND, c) for c in contents):
            issues.append(_issue("ux/mobile-menu-visibility", first))
        if not any(_any(rules.FULL_HEIGHT_MENU, c) for c in contents):
            issues.append(_issue("ux/mobile-menu-height", first))
    return issues


def audit(files, entry_path="app/page.tsx", stylesheet="app/globals.css"):
    """Return quality issues for the file set (empty list when it looks complete)."""
    sources = [f for f in files if f.path.lower().endswith(_SOURCE_EXTENSIONS)]
    issues = []

    nav_files = [f for f in sources if rules.NAV_ELEMENT.search(f.content)]
    if nav_files:
        issues.extend(_audit_navigation(nav_files))
    else:
        issues.append(_issue("ux/navigation-required", entry_path))

    if not any(rules.RESPONSIVE_PREFIX.search(f.content) for f in sources):
        issues.append(_issue("ux/responsive-breakpoints", entry_path))

    css = next((f for f in files if f.path == stylesheet), None)
    if css is not None and not rules.OVERFLOW_GUARD.search(css.content):
        issues.append(_issue("ux/mobile-overflow-guard", stylesheet))
    return issues


def needs_navigation_guidance(issues):
    return any(i.rule in NAVIGATION_RULES for i in issues)
