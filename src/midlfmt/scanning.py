"""Depth-tracked scanning primitives shared by the tokenizer and printer.

Nothing here parses MIDL. These helpers only segment text while keeping
track of bracket nesting and quoted string or character literals.
"""

from __future__ import annotations

import re

BRACKET_PAIRS = {"(": ")", "<": ">", "[": "]"}

# Bracket sets accepted by split_top_level.
PARENS_AND_ANGLES = "(<"
ALL_BRACKETS = "(<["

QUOTES = "\"'"

_LITERAL_RE = re.compile(
    r'"(?:[^"\\\n]|\\[^\n])*"'
    r"|'(?:[^'\\\n]|\\[^\n])*'"
    r"|/\*.*?(?:\*/|\Z)|//[^\n]*",
    re.DOTALL,
)
_PLACEHOLDER_RE = re.compile("\x00(\\d+)\x00")


def _scan_literal(text: str, start: int) -> tuple[int, bool]:
    quote = text[start]
    n = len(text)
    i = start + 1
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n and text[i + 1] != "\n":
            i += 2
            continue
        if ch == quote:
            return i + 1, True
        if ch == "\n":
            return i, False
        i += 1
    return n, False


def skip_string(text: str, start: int) -> int:
    """Return the index just past the literal opening at ``start``.

    Double and single quotes are both accepted; the literal ends at the
    matching quote. An unterminated literal stops at the end of its line so
    it can never swallow the rest of the document.
    """
    return _scan_literal(text, start)[0]


def close_literals(text: str) -> str:
    """Terminate every literal that skip_string would end at a line break.

    The matching quote is inserted where the literal stops, so the repaired
    text scans the same way even once its lines are joined. A literal ending
    in a lone backslash gets a second one so the new quote is not escaped.
    Quotes inside comments are left alone.
    """
    pieces: list[str] = []
    last = 0
    i = 0
    n = len(text)
    while i < n:
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        ch = text[i]
        if ch in QUOTES:
            end, closed = _scan_literal(text, i)
            if not closed:
                body = text[i + 1 : end]
                pieces.append(text[last:end])
                if (len(body) - len(body.rstrip("\\"))) % 2:
                    pieces.append("\\")
                pieces.append(ch)
                last = end
            i = end
            continue
        i += 1

    if not pieces:
        return text
    pieces.append(text[last:])
    return "".join(pieces)


def find_closing_bracket(text: str, start: int) -> int:
    """Return the index just past the ``]`` matching the ``[`` at ``start``.

    Nested square brackets are depth-tracked. Returns ``len(text)`` when the
    block is never closed.
    """
    n = len(text)
    depth = 0
    i = start
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return n


def open_bracket_depth(text: str) -> int:
    """Count the ``[`` left unclosed at the end of ``text``.

    Literals are skipped the same way find_closing_bracket skips them. Stray
    closing brackets never push the count below zero.
    """
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(0, depth - 1)
        i += 1
    return depth


def split_top_level(
    text: str,
    separator: str = ",",
    brackets: str = ALL_BRACKETS,
) -> list[str]:
    """
    Split text on separators that are not nested inside brackets.

    Args:
        text: Text to split
        separator: Single separator character
        brackets: Opening brackets whose nesting suppresses splitting

    Returns:
        Untrimmed pieces, including empty ones. ``"a,b,"`` gives
        ``["a", "b", ""]``.
    """
    closers = {BRACKET_PAIRS[b]: b for b in brackets}
    depth = dict.fromkeys(brackets, 0)

    pieces: list[str] = []
    start = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch in depth:
            depth[ch] += 1
        elif ch in closers:
            depth[closers[ch]] -= 1
        elif ch == separator and not any(depth.values()):
            pieces.append(text[start:i])
            start = i + 1
        i += 1
    pieces.append(text[start:])
    return pieces


def mask_literals(text: str) -> tuple[str, list[str]]:
    """Replace literals and comments with opaque placeholders.

    Literals left open at a line break are closed first. Line comments are
    stored in block form, since the masked text is later collapsed onto a
    single line.
    """
    saved: list[str] = []

    def _store(match: re.Match[str]) -> str:
        literal = match.group(0)
        if literal.startswith("//"):
            body = literal[2:].strip().replace("*/", "* /")
            literal = f"/* {body} */" if body else "/* */"
        saved.append(literal)
        return f"\x00{len(saved) - 1}\x00"

    return _LITERAL_RE.sub(_store, close_literals(text)), saved


def unmask_literals(text: str, saved: list[str]) -> str:
    """Inverse of mask_literals."""
    if not saved:
        return text

    def _restore(match: re.Match[str]) -> str:
        idx = int(match.group(1))
        return saved[idx] if idx < len(saved) else match.group(0)

    return _PLACEHOLDER_RE.sub(_restore, text)
