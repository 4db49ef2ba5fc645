"""JSON recovery engine — turns near-valid model text into a parsed object.

Strategies are pure `(text) -> parsed | None` callables tried in order by
one dispatcher. A strategy only succeeds when `json.loads` accepts its
output; none of them guess.
"""

import json
import logging
import re
from dataclasses import dataclass

from config.defaults import DEFAULTS
from core.errors import RecoverableParseFailure
from core.normalizer import normalize
from core.truncation import balance, ends_in_string

logger = logging.getLogger(__name__)

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

CONTEXT_RADIUS = 120
SNIPPET_LENGTH = 500


@dataclass
class Recovery:
    data: dict
    strategy: str


# ---------------------------------------------------------------------------
# Text transforms (compose into the repair strategies below)
# ---------------------------------------------------------------------------

def strip_trailing_commas(text):
    """Drop commas directly before a closing brace/bracket, outside strings."""
    out = []
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif ch == ",":
            match = _TRAILING_COMMA_RE.match(text, i)
            if match:
                i = match.start(1)
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def escape_control_chars(text):
    """Escape raw control characters that appear inside string literals."""
    out = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
                out.append(ch)
                continue
            if ch == "\\":
                escaped = True
                out.append(ch)
            elif ch == '"':
                in_string = False
                out.append(ch)
            elif ch == "\n":
                out.append("\\n")
            elif ch == "\r":
                out.append("\\r")
            elif ch == "\t":
                out.append("\\t")
            elif ord(ch) < 0x20:
                out.append(f"\\u{ord(ch):04x}")
            else:
                out.append(ch)
            continue
        if ch == '"':
            in_string = True
        out.append(ch)
    return "".join(out)


def normalize_stray_escapes(text):
    """Fix backslash sequences that appear outside any string literal.

    `\\n`, `\\r`, `\\t` become whitespace; `\\"` becomes a plain quote
    (which then opens a string).
    """
    out = []
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt in "nrt":
                out.append(" ")
                i += 2
                continue
            if nxt == '"':
                out.append('"')
                in_string = True
                i += 2
                continue
        if ch == '"':
            in_string = True
        out.append(ch)
        i += 1
    return "".join(out)


_CLEANUPS = (strip_trailing_commas, escape_control_chars, normalize_stray_escapes)


def _cleaned(text, upto=len(_CLEANUPS)):
    for transform in _CLEANUPS[:upto]:
        text = transform(text)
    return text


def _loads(text):
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def direct_parse(text):
    return _loads(text)


def unwrap_double_encoded(text):
    stripped = text.strip()
    if len(stripped) < 2 or not (stripped.startswith('"') and stripped.endswith('"')):
        return None
    inner = _loads(stripped)
    if not isinstance(inner, str):
        return None
    return _loads(normalize(inner))


def without_trailing_commas(text):
    return _loads(_cleaned(text, 1))


def with_escaped_control_chars(text):
    return _loads(_cleaned(text, 2))


def with_normalized_escapes(text):
    return _loads(_cleaned(text, 3))


def _boundaries(text):
    """Offsets of commas outside strings, last first."""
    positions = []
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == ",":
            positions.append(i)
    positions.reverse()
    return positions


def truncate_at_boundary(text, limit=None):
    """Cut at the last value boundary that still parses once closed.

    Everything after the boundary is discarded, so a file whose content
    was cut off is dropped whole rather than kept half-written.
    """
    if limit is None:
        limit = DEFAULTS["truncation_candidates"]
    cleaned = _cleaned(text)
    candidates = _boundaries(cleaned)[:limit]
    if not ends_in_string(cleaned):
        candidates.insert(0, len(cleaned.rstrip()))
    for position in candidates:
        candidate = balance(cleaned[:position])
        parsed = _loads(candidate)
        if isinstance(parsed, dict):
            return parsed
    return None


def balance_truncated(text):
    cleaned = _cleaned(text)
    balanced = balance(cleaned)
    if balanced == cleaned:
        return None
    return _loads(balanced)


STRATEGIES = (
    ("direct", direct_parse),
    ("double-encoded", unwrap_double_encoded),
    ("trailing-commas", without_trailing_commas),
    ("control-chars", with_escaped_control_chars),
    ("stray-escapes", with_normalized_escapes),
    ("truncate-at-boundary", truncate_at_boundary),
    ("balance", balance_truncated),
)


def _error_position(text):
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        return e.pos
    except RecursionError:
        return None
    return None


def recover(raw, strategies=STRATEGIES):
    """Normalize `raw` and return the first strategy result that is a JSON object.

    Raises RecoverableParseFailure when every strategy fails.
    """
    text = normalize(raw)
    for name, strategy in strategies:
        parsed = strategy(text)
        if isinstance(parsed, dict):
            if name == "direct":
                logger.debug("Parsed model output directly (%d chars)", len(text))
            else:
                logger.info("Recovered model output with strategy '%s'", name)
            return Recovery(data=parsed, strategy=name)

    position = _error_position(text)
    head = raw[:SNIPPET_LENGTH]
    tail = raw[-SNIPPET_LENGTH:]
    if position is not None:
        start = max(0, position - CONTEXT_RADIUS)
        logger.error(
            "JSON parse failed at position %d: ...%s...",
            position, text[start:position + CONTEXT_RADIUS],
        )
    logger.error("Unparseable output (%d chars). First %d: %r", len(raw), SNIPPET_LENGTH, head)
    logger.error("Last %d: %r", SNIPPET_LENGTH, tail)
    raise RecoverableParseFailure(
        f"Failed to parse model output ({len(raw)} chars)",
        length=len(raw),
        head=head,
        tail=tail,
        position=position,
    )
