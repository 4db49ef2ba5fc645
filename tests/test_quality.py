"""Tests for core.quality — navigation and responsiveness heuristics."""

from core.quality import audit, needs_navigation_guidance
from core.state import FileEntry, Issue

GOOD_NAVBAR = """"use client";
import { useState } from "react";

export default function Navbar() {
  const [isMenuOpen, setIsMenuOpen] = useState(false);
  return (
    <header className="sticky top-0 z-50 bg-white">
      <nav className="flex items-center justify-between p-4">
        <div className="hidden md:flex gap-6">Links</div>
        <button
          aria-label="Open menu"
          aria-expanded={isMenuOpen}
          onClick={() => setIsMenuOpen(!isMenuOpen)}
          className="md:hidden"
        >
          Menu
        </button>
      </nav>
      {isMenuOpen && (
        <div className="mobile-menu fixed inset-0 z-50 h-screen bg-white p-6">Links</div>
      )}
    </header>
  );
}
"""

GUARDED_CSS = "html, body { max-width: 100%; overflow-x: hidden; }\n"


def _rules(issues):
    return {i.rule for i in issues}


def test_complete_project_has_no_issues():
    files = [
        FileEntry(path="components/Navbar.tsx", content=GOOD_NAVBAR),
        FileEntry(path="app/page.tsx", content='export default function P() { return <main className="p-4 lg:p-8" />; }'),
        FileEntry(path="app/globals.css", content=GUARDED_CSS),
    ]
    assert audit(files) == []


def test_missing_navigation_breakpoints_and_overflow_guard():
    files = [
        FileEntry(path="app/page.tsx", content="export default function P() { return <main>Hi</main>; }"),
        FileEntry(path="app/globals.css", content="body { margin: 0; }"),
    ]
    issues = audit(files)
    assert _rules(issues) == {
        "ux/navigation-required",
        "ux/responsive-breakpoints",
        "ux/mobile-overflow-guard",
    }
    assert all(i.category == "quality" and i.severity == "warning" for i in issues)
    guard = next(i for i in issues if i.rule == "ux/mobile-overflow-guard")
    assert guard.path == "app/globals.css"
    assert guard.suggestion


def test_static_navbar_is_not_mobile_ready():
    files = [FileEntry(path="app/page.tsx", content='<nav className="flex md:gap-4">Links</nav>')]
    rules = _rules(audit(files))
    assert "ux/mobile-navbar" in rules
    assert "ux/navbar-stacking" in rules
    # Overlay checks only apply once a menu toggle exists
    assert "ux/mobile-menu-overlay" not in rules


def test_nested_scroll_container_flagged():
    content = GOOD_NAVBAR.replace('<nav className="flex', '<nav className="overflow-y-auto flex')
    files = [FileEntry(path="components/Navbar.tsx", content=content)]
    assert "ux/navbar-nested-scroll" in _rules(audit(files))


def test_menu_without_overlay_or_height_flagged():
    content = GOOD_NAVBAR.replace(
        '<div className="mobile-menu fixed inset-0 z-50 h-screen bg-white p-6">',
        '<div className="p-6">',
    )
    rules = _rules(audit([FileEntry(path="components/Navbar.tsx", content=content)]))
    assert "ux/mobile-menu-overlay" in rules
    assert "ux/mobile-menu-height" in rules


def test_overlay_component_counts_as_layered():
    content = GOOD_NAVBAR.replace(
        '<div className="mobile-menu fixed inset-0 z-50 h-screen bg-white p-6">Links</div>',
        '<Sheet><SheetContent side="right">Links</SheetContent></Sheet>',
    )
    rules = _rules(audit([FileEntry(path="components/Navbar.tsx", content=content)]))
    assert "ux/mobile-menu-overlay" not in rules
    assert "ux/mobile-menu-visibility" not in rules
    assert "ux/mobile-menu-height" not in rules


def test_no_stylesheet_no_overflow_issue():
    files = [FileEntry(path="components/Navbar.tsx", content=GOOD_NAVBAR)]
    assert "ux/mobile-overflow-guard" not in _rules(audit(files))


def test_needs_navigation_guidance():
    nav = Issue(category="quality", severity="warning", path="a", line=1, column=1,
                message="m", rule="ux/mobile-navbar")
    lint = Issue(category="lint", severity="error", path="a", line=1, column=1,
                 message="m", rule="semi")
    assert needs_navigation_guidance([lint, nav])
    assert not needs_navigation_guidance([lint])
