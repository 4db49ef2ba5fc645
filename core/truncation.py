"""Truncation recoverer — closes JSON cut off by an output-length limit.

Tracks object/array nesting with string and escape awareness and appends
the minimal tokens needed to make the text balanced:

    {"files": [{"path": "a.ts", "content": "let x  ->  ... "let x"}]}

Partial trailing tokens are completed rather than guessed: a dangling key
gets a null value, a dangling comma is dropped, a half-written literal is
removed and replaced with null.
"""

import re

_LITERAL_RE = re.compile(r"[A-Za-z0-9.+\-]+$")
_COMPLETE_LITERAL_RE = re.compile(r"^(?:true|false|null|-?\d+(?:\.\d+)?(?:[eE][+\-]?\d+)?)$")
_PARTIAL_UNICODE_RE = re.compile(r"(\\+)u[0-9a-fA-F]{0,3}$")

# Container states
_KEY, _COLON, _VALUE, _COMMA = "key", "colon", "value", "comma"


def _scan(text):
    """Walk `text` and return (stack, in_string, string_is_key, escaped).

    Each stack entry is [opener, state] where state describes what the
    container expects next.
    """
    stack = []
    in_string = False
    string_is_key = False
    escaped = False

    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                if stack:
                    stack[-1][1] = _COLON if string_is_key else _COMMA
            continue

        if ch == '"':
            in_string = True
            string_is_key = bool(stack) and stack[-1][0] == "{" and stack[-1][1] == _KEY
        elif ch in "{[":
            if stack:
                stack[-1][1] = _COMMA
            stack.append([ch, _KEY if ch == "{" else _VALUE])
        elif ch in "}]":
            if stack:
                stack.pop()
        elif ch == ":":
            if stack:
                stack[-1][1] = _VALUE
        elif ch == ",":
            if stack:
                stack[-1][1] = _KEY if stack[-1][0] == "{" else _VALUE
        elif not ch.isspace():
            if stack and stack[-1][1] == _VALUE:
                stack[-1][1] = _COMMA

    return stack, in_string, string_is_key, escaped


def is_balanced(text):
    stack, in_string, _, _ = _scan(text)
    return not stack and not in_string


def balance(text):
    """Return `text` with every open string, object and array closed.

    Already-balanced text is returned unchanged.
    """
    stack, in_string, string_is_key, escaped = _scan(text)
    if not stack and not in_string:
        return text

    out = text
    if in_string:
        if escaped:
            out = out[:-1]
        else:
            partial = _PARTIAL_UNICODE_RE.search(out)
            if partial and len(partial.group(1)) % 2 == 1:
                out = out[:partial.start() + len(partial.group(1)) - 1]
        out += '"'
        if string_is_key:
            out += ": null"
        if stack:
            stack[-1][1] = _COMMA
    else:
        out = out.rstrip()
        literal = _LITERAL_RE.search(out)
        if literal and stack and stack[-1][1] == _COMMA and not _COMPLETE_LITERAL_RE.match(literal.group(0)):
            out = out[:literal.start()].rstrip()
            stack[-1][1] = _VALUE
        if out.endswith(","):
            out = out[:-1]
            if stack:
                stack[-1][1] = _COMMA

    for opener, state in reversed(stack):
        if state == _COLON:
            out += ": null"
        elif state == _VALUE and opener == "{":
            out += " null"
        out += "}" if opener == "{" else "]"
    return out


def ends_in_string(text):
    """True when `text` stops inside an unterminated string literal."""
    return _scan(text)[1]
