"""Printer that renders MIDL tokens in the canonical layout.

Layout rules:
- Allman braces; the indent level follows brace tokens and never drops
  below zero
- directives always start at column 0
- attribute blocks stay inline when they hold one short attribute,
  otherwise one attribute per line
- blank lines are decided here, never carried over from the source
"""

from __future__ import annotations

import re

from .config import StyleConfig
from .keywords import MEMBER_TYPE_KEYWORDS, PROPERTY_KEYWORDS
from .scanning import (
    ALL_BRACKETS,
    close_literals,
    mask_literals,
    open_bracket_depth,
    split_top_level,
    unmask_literals,
)
from .types import Token, TokenKind

_WHITESPACE_RE = re.compile(r"\s+")
_COMMA_RE = re.compile(r",(?!\s)")
_COMMA_SPACING_RE = re.compile(r"\s*,\s*")
_SEMICOLON_RE = re.compile(r"\s*;")
_CALL_RE = re.compile(r"^(\w+)\s*\((.*)\)$")
_GUID_RE = re.compile(r"^[0-9a-fA-F-]+$")
_MEMBER_TYPE_RE = re.compile(r"^(?:" + "|".join(MEMBER_TYPE_KEYWORDS) + r")\b")
_PROPERTY_RE = re.compile(r"\b(?:" + "|".join(PROPERTY_KEYWORDS) + r")\b")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def format_tokens(tokens: list[Token], style: StyleConfig | None = None) -> str:
    """
    Render tokens as formatted MIDL text.

    Args:
        tokens: Output of tokenize()
        style: Layout settings (defaults to 4-space indentation)

    Returns:
        Formatted text ending in exactly one newline
    """
    style = style or StyleConfig()
    unit = style.indent_unit

    lines: list[str] = []
    indent_level = 0

    for idx, token in enumerate(tokens):
        indent = unit * indent_level
        next_token = tokens[idx + 1] if idx + 1 < len(tokens) else None
        prev_token = tokens[idx - 1] if idx > 0 else None
        kind = token.kind

        if kind is TokenKind.DIRECTIVE:
            lines.append(token.text)
            if next_token is not None and next_token.kind not in (
                TokenKind.DIRECTIVE,
                TokenKind.COMMENT,
            ):
                lines.append("")

        elif kind is TokenKind.COMMENT:
            if token.is_multiline_comment:
                lines.append(format_block_comment(token.raw_text or token.text, indent))
            else:
                lines.append(indent + token.text.strip())
            # Top-level comments get breathing room before the next element
            if (
                indent_level == 0
                and next_token is not None
                and next_token.kind in (TokenKind.ATTRIBUTE_BLOCK, TokenKind.DECLARATION)
            ):
                lines.append("")

        elif kind is TokenKind.ATTRIBUTE_BLOCK:
            if (
                indent_level > 0
                and prev_token is not None
                and prev_token.kind is TokenKind.STATEMENT
                and is_member_declaration(prev_token.text)
            ):
                lines.append("")
            lines.extend(format_attribute_block(token.text, indent_level, style))

        elif kind is TokenKind.DECLARATION:
            lines.append(indent + token.text)
            if (
                indent_level == 0
                and next_token is not None
                and next_token.kind is not TokenKind.BRACE_OPEN
            ):
                lines.append("")

        elif kind is TokenKind.BRACE_OPEN:
            lines.append(indent + "{")
            indent_level += 1

        elif kind is TokenKind.BRACE_CLOSE:
            indent_level = max(0, indent_level - 1)
            lines.append(unit * indent_level + format_close_brace(token.text))
            if indent_level == 0 and next_token is not None:
                lines.append("")

        else:
            lines.append(indent + token.text)

    return finalize_output("\n".join(lines))


def format_attribute_block(block: str, base_level: int, style: StyleConfig | None = None) -> list[str]:
    """
    Lay out an attribute block.

    Rules:
    - no attributes: ``[]``
    - one attribute shorter than the inline limit: ``[attr]``
    - otherwise one attribute per line, one level deeper, comma separated

    Args:
        block: Attribute block text including its brackets
        base_level: Indent level of the opening bracket
        style: Layout settings

    Returns:
        Rendered lines, already indented
    """
    style = style or StyleConfig()
    base = style.indent_unit * base_level
    inner = style.indent_unit * (base_level + 1)

    # An unclosed block gets its missing inner brackets back
    depth = open_bracket_depth(block)
    if depth:
        content = close_literals(block[1:]) + "]" * (depth - 1)
    else:
        content = block[1:-1]

    attrs = [p.strip() for p in split_top_level(content, ",", ALL_BRACKETS) if p.strip()]
    if not attrs:
        return [base + "[]"]

    formatted = [format_attribute(a) for a in attrs]
    if len(formatted) == 1 and len(formatted[0]) < style.attribute_inline_limit:
        return [f"{base}[{formatted[0]}]"]

    lines = [base + "["]
    last = len(formatted) - 1
    for idx, attr in enumerate(formatted):
        lines.append(inner + attr + ("," if idx < last else ""))
    lines.append(base + "]")
    return lines


def format_attribute(attr: str) -> str:
    """Normalize spacing of a single attribute such as ``uuid(...)``."""
    result, saved = mask_literals(attr)
    result = _WHITESPACE_RE.sub(" ", result).strip()
    result = _COMMA_RE.sub(", ", result)

    match = _CALL_RE.match(result)
    if match:
        name, args = match.group(1), match.group(2).strip()
        result = f"{name}({_format_arguments(args)})"

    return unmask_literals(result, saved)


def _format_arguments(args: str) -> str:
    # GUIDs are kept compact
    compact = _WHITESPACE_RE.sub("", args)
    if _GUID_RE.match(compact):
        return compact

    # Nested array bounds are left loose
    if "[" in args:
        return _WHITESPACE_RE.sub(" ", args).strip()

    return _COMMA_SPACING_RE.sub(", ", _WHITESPACE_RE.sub(" ", args)).strip()


def format_block_comment(raw: str, indent: str) -> str:
    """Re-indent a multi-line block comment.

    Star-prefixed continuation lines are aligned one column right of the
    opening slash. Other continuation lines keep their indentation relative
    to the least-indented of them.
    """
    lines = raw.split("\n")
    if len(lines) == 1:
        return indent + raw.strip()

    rest = lines[1:]
    plain = [ln for ln in rest if ln.strip() and not ln.strip().startswith("*")]
    margin = min((len(ln) - len(ln.lstrip()) for ln in plain), default=0)

    out = [indent + lines[0].strip()]
    for line in rest:
        stripped = line.strip()
        if not stripped:
            out.append("")
        elif stripped.startswith("*"):
            out.append(indent + " " + stripped)
        else:
            out.append(indent + line.rstrip()[margin:])
    return "\n".join(out)


def format_close_brace(text: str) -> str:
    """Render a closing brace, normalizing a fused typedef alias list."""
    if " " not in text:
        return text

    brace, _, aliases = text.partition(" ")
    aliases = _COMMA_SPACING_RE.sub(", ", aliases.strip())
    aliases = _WHITESPACE_RE.sub(" ", aliases)
    aliases = _SEMICOLON_RE.sub(";", aliases)
    return f"{brace} {aliases}"


def is_member_declaration(stmt: str) -> bool:
    """Check if a statement looks like a method, property or field declaration."""
    return bool(_MEMBER_TYPE_RE.match(stmt) or _PROPERTY_RE.search(stmt))


def finalize_output(text: str) -> str:
    """Apply whole-document cleanup passes."""
    result = _TRAILING_SPACE_RE.sub("", text)
    result = _BLANK_RUN_RE.sub("\n\n", result)
    result = result.lstrip("\n")
    return result.rstrip() + "\n"
