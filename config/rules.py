"""Quality-audit patterns and lint rules for generated projects."""

import re

# ---------------------------------------------------------------------------
# Quality audit patterns (navigation / responsiveness heuristics)
# ---------------------------------------------------------------------------

NAV_ELEMENT = re.compile(r"<nav[\s>]", re.IGNORECASE)
RESPONSIVE_VISIBILITY = re.compile(r"\b(?:sm|md|lg|xl|2xl):(?:hidden|block|flex|grid)\b")
MENU_TOGGLE = re.compile(r"\b(?:aria-expanded|isMenuOpen|menuOpen|setIsMenuOpen|setMenuOpen|toggleMenu)\b")
MENU_BUTTON = re.compile(r"<button[\s\S]*?(?:menu|nav|open|close|aria-label)", re.IGNORECASE)

PINNED_HEADER = (
    re.compile(r"\b(?:sticky|fixed)\b[\s\S]{0,120}\btop-0\b", re.IGNORECASE),
    re.compile(r"\btop-0\b[\s\S]{0,120}\b(?:sticky|fixed)\b", re.IGNORECASE),
)
NAV_LAYERING = (
    re.compile(r"\bz-(?:[4-9]\d|[1-9]\d{2,})\b"),
    re.compile(r"\bz-\[\d+\]"),
    re.compile(r"zIndex\s*:\s*(?:[4-9]\d|[1-9]\d{2,})"),
)

NESTED_MENU_SCROLL = (
    re.compile(
        r"""className\s*=\s*["'`][^"'`]*(?:mobile-menu|menu|drawer)[^"'`]*"""
        r"""(?:overflow-y-(?:auto|scroll)|overflow-(?:auto|scroll))[^"'`]*["'`]""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""className\s*=\s*["'`][^"'`]*(?:overflow-y-(?:auto|scroll)|overflow-(?:auto|scroll))"""
        r"""[^"'`]*(?:mobile-menu|menu|drawer)[^"'`]*["'`]""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<(?:nav|header)[^>]*className\s*=\s*["'`][^"'`]*"""
        r"""(?:overflow-y-(?:auto|scroll)|overflow-(?:auto|scroll))[^"'`]*["'`]""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<(?:nav|header)[^>]*style=\{\{[^}]*overflowY\s*:\s*["'](?:auto|scroll)["']""",
        re.IGNORECASE,
    ),
)

OVERLAY_TOGGLE = re.compile(r"\b(?:aria-expanded|isMenuOpen|menuOpen|mobileMenuOpen|openMenu|toggleMenu)\b")
OVERLAY_POSITION = re.compile(r"(?:fixed|absolute)[\s\S]{0,180}(?:top-0|inset-0|inset-x-0)", re.IGNORECASE)
OVERLAY_LAYER = re.compile(
    r"(?:z-(?:[5-9]\d|[1-9]\d{2,})|z-\[\d+\]|zIndex\s*:\s*(?:[5-9]\d|[1-9]\d{2,}))",
    re.IGNORECASE,
)
# Library components that encapsulate positioning and z-index.
OVERLAY_COMPONENT = (
    re.compile(r"<(?:Sheet|SheetContent|Drawer|DrawerContent|Dialog|DialogContent|Modal|Portal)\b"),
    re.compile(r"@radix-ui/react-(?:dialog|popover|portal)"),
    re.compile(r"\bcreatePortal\s*\("),
)

MENU_BACKGROUND = (
    re.compile(
        r"(?:mobile-menu|menu|drawer|nav-panel|menu-panel)[\s\S]{0,120}"
        r"(?:bg-[\w\[\]/-]+|backdrop-blur|style=\{\{[^}]*background)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:fixed|absolute)[\s\S]{0,120}(?:bg-[\w\[\]/-]+|backdrop-blur)", re.IGNORECASE),
    re.compile(r"<(?:SheetContent|DrawerContent|DialogContent|Modal)\b"),
    re.compile(r"@radix-ui/react-(?:dialog|popover|portal)"),
)

_FULL_HEIGHT = (
    r"(?:h-screen|min-h-screen|h-dvh|min-h-dvh|h-\[100dvh\]|min-h-\[100dvh\]|inset-y-0|top-0\s+bottom-0)"
)
FULL_HEIGHT_MENU = (
    re.compile(
        r"\b(?:mobile-menu|menu|drawer|nav-panel|menu-panel)\b[\s\S]{0,160}" + _FULL_HEIGHT,
        re.IGNORECASE,
    ),
    re.compile(r"(?:fixed|absolute)[\s\S]{0,180}" + _FULL_HEIGHT, re.IGNORECASE),
    re.compile(r"""<SheetContent[^>]*\bside=["'](?:left|right)["']""", re.IGNORECASE),
)

RESPONSIVE_PREFIX = re.compile(r"\b(?:sm|md|lg|xl|2xl):")
OVERFLOW_GUARD = re.compile(r"overflow-x\s*:\s*hidden", re.IGNORECASE)

# rule id -> (message, remediation)
QUALITY_RULES = {
    "ux/navigation-required": (
        "Missing navigation section.",
        "Add a responsive navbar with desktop links and a mobile menu toggle.",
    ),
    "ux/mobile-navbar": (
        "Navbar is not fully mobile-ready.",
        "Add a hamburger button, menu open/close state, responsive visibility "
        "classes and accessibility attributes.",
    ),
    "ux/navbar-stacking": (
        "Navbar/header is not pinned at the top above page content.",
        "Use sticky or fixed with top-0 and a high z-index (z-40 or above).",
    ),
    "ux/navbar-nested-scroll": (
        "Navbar or mobile menu wrapper creates its own scroll container.",
        "Remove overflow-y-auto/overflow-scroll from header, nav and menu containers.",
    ),
    "ux/mobile-menu-overlay": (
        "Mobile menu overlay is missing robust layering.",
        "Use a fixed/absolute top-anchored panel (top-0 or inset-0) with z-50 or above.",
    ),
    "ux/mobile-menu-visibility": (
        "Mobile menu has no readable background.",
        "Give the menu panel a solid or semi-opaque background with readable contrast.",
    ),
    "ux/mobile-menu-height": (
        "Mobile menu panel does not fill the viewport height.",
        "Use h-screen, min-h-screen, 100dvh or inset-y-0 on the menu panel.",
    ),
    "ux/responsive-breakpoints": (
        "No responsive breakpoint classes detected.",
        "Add mobile-first responsive classes (sm:, md:, lg:) for key sections.",
    ),
    "ux/mobile-overflow-guard": (
        "Stylesheet has no horizontal overflow guard.",
        "Add html, body { max-width: 100%; overflow-x: hidden; } to app/globals.css.",
    ),
}

# ---------------------------------------------------------------------------
# ESLint rules applied to every lintable file
# ---------------------------------------------------------------------------

LINT_RULES = {
    "no-unused-vars": "error",
    "no-undef": "error",
    "no-console": "warn",
    "no-empty": "error",
    "eqeqeq": "error",
    "no-var": "error",
    "prefer-const": "error",
    "semi": ["error", "always"],
}
