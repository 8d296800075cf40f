"""Formatting and syntax highlighting of response bodies."""

from __future__ import annotations

import json

from pygments import highlight as _pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

_INDENT = "    "
_WHITESPACE = " \t\r\n"


def _reject_constant(name: str) -> float:
    raise ValueError(f"invalid JSON literal: {name}")


def _reindent(text: str) -> str:
    body = text.lstrip(_WHITESPACE)
    core = body.rstrip(_WHITESPACE)
    trailing = body[len(core):]

    out: list[str] = []
    depth = 0
    in_string = escaped = need_indent = False
    for ch in core:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch in _WHITESPACE:
            continue
        if need_indent and ch not in "]}":
            out.append("\n" + _INDENT * depth)
            need_indent = False
        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch in "[{":
            out.append(ch)
            depth += 1
            need_indent = True
        elif ch in "]}":
            depth -= 1
            if need_indent:
                need_indent = False
            else:
                out.append("\n" + _INDENT * depth)
            out.append(ch)
        elif ch == ",":
            out.append(",\n" + _INDENT * depth)
        elif ch == ":":
            out.append(": ")
        else:
            out.append(ch)
    return "".join(out) + trailing


def format_json(content: str) -> str:
    """Indent JSON by four spaces; anything that is not JSON comes back unchanged."""
    try:
        json.loads(content, parse_constant=_reject_constant)
    except ValueError:
        return content
    return _reindent(content)


def highlight(content: str, lexer: str) -> str:
    """Highlight ``content`` for a 256-colour terminal, falling back to plain text."""
    try:
        chosen = get_lexer_by_name(lexer, ensurenl=False)
    except ClassNotFound:
        chosen = TextLexer(ensurenl=False)
    try:
        formatter = Terminal256Formatter(style="monokai")
        return _pygments_highlight(content, chosen, formatter)
    except ClassNotFound:
        return content


def content_lexer(content_type: str) -> str:
    """Name of the lexer suited to a Content-Type, or an empty string."""
    if "application/json" in content_type:
        return "json"
    if "text/html" in content_type:
        return "html"
    if "text/plain" in content_type:
        return "plaintext"
    if "application/xml" in content_type or "text/xml" in content_type:
        return "xml"
    return ""


def format_content_by_type(body: str, content_type: str) -> str:
    """Format a response body for display according to its Content-Type."""
    if "application/json" in content_type:
        return highlight(format_json(body), "json")
    if "image/" in content_type:
        return f"Sorry, we don't support {content_type} yet!"
    if "text/html" in content_type:
        return highlight(body, "html")
    if "text/plain" in content_type:
        return highlight(body, "plaintext")
    if "application/xml" in content_type or "text/xml" in content_type:
        return highlight(body, "xml")
    if "application/graphql" in content_type:
        return "Sorry, we don't support GraphQL yet!"
    if "multipart/form-data" in content_type:
        return "Sorry, we don't support multipart/form-data yet!"
    return f"Unhandled Content-Type: {content_type}\n"