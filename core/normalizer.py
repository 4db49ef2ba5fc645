"""Text normalizer — strips fences and narrative text around model JSON."""

import re

_OPEN_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?```[ \t]*$")
_INNER_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n([\s\S]*?)\n```")


def _structural_end(text, start):
    """Index just past the brace closing the object opened at `start`, or None."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def _cut_after_closing_fence(text):
    """Drop commentary after the fence that closes a fenced response.

    Only a fence past the end of the JSON object counts. Fences inside
    string values (a README with a code block) are file content, and a
    response whose object never closes has no closing fence to cut at.
    """
    start = text.find("{")
    if start == -1:
        closing = text.rfind("```")
        return text[:closing] if closing > 0 else text
    end = _structural_end(text, start)
    if end is None:
        return text
    closing = text.find("```", end)
    return text[:closing] if closing != -1 else text


def strip_fences(text):
    """Remove a leading/trailing markdown fence, or pull out a fenced JSON block."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _OPEN_FENCE_RE.sub("", stripped, count=1)
        stripped = _CLOSE_FENCE_RE.sub("", stripped)
        return stripped.strip()
    # Prose before a fenced block ("Here is your project: ```json ...```")
    match = _INNER_FENCE_RE.search(stripped)
    if match and "{" in match.group(1) and not stripped.startswith("{"):
        return match.group(1).strip()
    return stripped


def normalize(text):
    """Return model text with fences and surrounding prose removed.

    Never raises. A JSON string literal (double-encoded output) is returned
    as-is; otherwise everything before the first "{" is dropped, and
    everything after the brace that structurally closes it. Output that
    never closes (truncated) keeps its tail.
    """
    if not text:
        return ""
    text = text.lstrip("\ufeff")
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _cut_after_closing_fence(stripped)
    stripped = strip_fences(stripped)

    if stripped.startswith('"'):
        return stripped

    start = stripped.find("{")
    if start == -1:
        return stripped
    end = _structural_end(stripped, start)
    if end is None:
        return stripped[start:]
    return stripped[start:end]
