"""Tokenizer that segments MIDL source into structural units.

The scan is a single left-to-right pass with local depth counters rather
than a grammar. Rules at each position, in priority order:
- whitespace is skipped (blank lines are not carried over)
- ``//`` and ``/* */`` comments
- ``#`` directive lines, following backslash continuations
- ``[...]`` attribute blocks, nested brackets included
- ``{`` and ``}``; a ``}`` absorbs a following ``;`` or typedef alias list
- anything else is a generic unit ending at a top-level ``;``, ``{`` or ``}``
"""

from __future__ import annotations

import re

from .keywords import DECLARATION_KEYWORDS, ENUM_KEYWORD, SPACING_KEYWORDS
from .scanning import (
    PARENS_AND_ANGLES,
    QUOTES,
    find_closing_bracket,
    mask_literals,
    skip_string,
    split_top_level,
    unmask_literals,
)
from .types import Token, TokenKind

_WHITESPACE_RE = re.compile(r"\s+")
_COMMA_RE = re.compile(r",(?!\s)")
_OPERATOR_RE = re.compile(r"\s*([+\-=<>!&|])\s*")
_SEMICOLON_RE = re.compile(r"\s*;")
_BRACKET_WORD_RE = re.compile(r"\](?=[A-Za-z_])")
_KEYWORD_PAREN_RE = re.compile(r"\b(" + "|".join(SPACING_KEYWORDS) + r")\(")
_DECLARATION_RE = re.compile(r"^(?:" + "|".join(DECLARATION_KEYWORDS) + r")\b")
_ENUM_RE = re.compile(r"\b" + ENUM_KEYWORD + r"\b")
_TRAILING_TERMINATOR_RE = re.compile(r"[,;]\s*$")

# Anything here between a "}" and the next ";" means there is no alias list.
_ALIAS_BLOCKER_RE = re.compile(r"//|/\*|[{}\[#'\"]")


def tokenize(text: str) -> list[Token]:
    """
    Split MIDL source into tokens.

    Args:
        text: Source text using "\\n" line endings

    Returns:
        Tokens in source order. Never raises; malformed input degrades to
        tokens that run to the end of the text.
    """
    tokens: list[Token] = []
    n = len(text)
    i = 0

    while True:
        while i < n and text[i].isspace():
            i += 1
        if i >= n:
            break

        ch = text[i]

        if text.startswith("//", i):
            end = text.find("\n", i)
            if end == -1:
                end = n
            tokens.append(Token(TokenKind.COMMENT, text[i:end]))
            i = end
            continue

        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            raw = text[i:end]
            tokens.append(Token(TokenKind.COMMENT, raw, raw_text=raw))
            i = end
            continue

        if ch == "#":
            end = _directive_end(text, i)
            tokens.append(Token(TokenKind.DIRECTIVE, text[i:end]))
            i = end
            continue

        if ch == "[":
            end = find_closing_bracket(text, i)
            tokens.append(Token(TokenKind.ATTRIBUTE_BLOCK, text[i:end]))
            i = end
            continue

        if ch == "{":
            tokens.append(Token(TokenKind.BRACE_OPEN, "{"))
            i += 1
            continue

        if ch == "}":
            token, i = _scan_close_brace(text, i)
            tokens.append(token)
            continue

        end = _unit_end(text, i)
        _emit_unit(tokens, text[i:end], _closes_body(text, end))
        i = end

    return tokens


def normalize_statement(stmt: str) -> str:
    """Re-space a statement or declaration onto a single line.

    String literals and comments are masked first so they pass through
    unchanged. The operator pass treats every listed symbol as binary, so
    ``a-1`` and a pointer-ish ``&p`` are spaced the same way.
    """
    result, saved = mask_literals(stmt)

    result = _WHITESPACE_RE.sub(" ", result).strip()
    result = _COMMA_RE.sub(", ", result)
    result = _OPERATOR_RE.sub(r" \1 ", result)
    result = _WHITESPACE_RE.sub(" ", result)
    result = _SEMICOLON_RE.sub(";", result)
    result = _BRACKET_WORD_RE.sub("] ", result)
    result = _KEYWORD_PAREN_RE.sub(r"\1 (", result)

    return unmask_literals(result.strip(), saved)


def is_declaration(stmt: str) -> bool:
    """Check whether a normalized unit starts with a declaration keyword."""
    return _DECLARATION_RE.match(stmt) is not None


def is_inside_enum(tokens: list[Token]) -> bool:
    """Check whether the next token would land directly inside an enum body.

    Walks back over already-emitted tokens to the unmatched ``{`` and looks
    at the declaration right before it.
    """
    depth = 0
    for idx in range(len(tokens) - 1, -1, -1):
        kind = tokens[idx].kind
        if kind is TokenKind.BRACE_CLOSE:
            depth += 1
        elif kind is TokenKind.BRACE_OPEN:
            depth -= 1
            if depth < 0:
                if idx == 0:
                    return False
                head = tokens[idx - 1]
                return head.kind is TokenKind.DECLARATION and bool(_ENUM_RE.search(head.text))
    return False


def split_enum_members(stmt: str, keep_semicolon: bool = False) -> list[str]:
    """Split a comma-separated member list into one entry per member.

    Every member followed by a comma keeps it; the final member loses any
    trailing comma or semicolon. With ``keep_semicolon`` a final semicolon
    stays, so a stray one inside an enum body still separates what follows.
    """
    pieces = split_top_level(stmt, ",", PARENS_AND_ANGLES)
    members: list[str] = []
    last = len(pieces) - 1
    for idx, piece in enumerate(pieces):
        member = piece.strip()
        if not member:
            continue
        if idx < last:
            members.append(member + ",")
        elif keep_semicolon and member.endswith(";"):
            members.append(member)
        else:
            member = _TRAILING_TERMINATOR_RE.sub("", member).rstrip()
            if member:
                members.append(member)
    return members


def _emit_unit(tokens: list[Token], unit: str, closes_body: bool = True) -> None:
    if not unit.strip():
        return

    normalized = normalize_statement(unit)
    declaration = is_declaration(normalized)

    if not declaration and is_inside_enum(tokens):
        members = split_enum_members(normalized, keep_semicolon=not closes_body)
        if members:
            tokens.extend(Token(TokenKind.STATEMENT, m) for m in members)
            return

    kind = TokenKind.DECLARATION if declaration else TokenKind.STATEMENT
    tokens.append(Token(kind, normalized))


def _directive_end(text: str, start: int) -> int:
    n = len(text)
    end = start
    while end < n and text[end] != "\n":
        if text[end] == "\\":
            # Blanks between the backslash and the line break still continue
            k = end + 1
            while k < n and text[k] in " \t":
                k += 1
            if k < n and text[k] == "\n":
                end = k + 1
                continue
        end += 1
    return end


def _scan_close_brace(text: str, start: int) -> tuple[Token, int]:
    n = len(text)
    j = start + 1
    while j < n and text[j] in " \t":
        j += 1

    if j < n and text[j] == ";":
        return Token(TokenKind.BRACE_CLOSE, "};"), j + 1

    # The alias list has to start on the brace line but may wrap
    if j < n and text[j] != "\n":
        semi = text.find(";", j)
        if semi != -1:
            aliases = text[j:semi]
            if aliases.strip() and not _ALIAS_BLOCKER_RE.search(aliases):
                aliases = _WHITESPACE_RE.sub(" ", aliases).strip()
                return Token(TokenKind.BRACE_CLOSE, f"}} {aliases};"), semi + 1

    return Token(TokenKind.BRACE_CLOSE, "}"), start + 1


def _unit_end(text: str, start: int) -> int:
    """Find where the generic unit starting at ``start`` ends.

    Terminators only count at paren and angle depth zero. Bracket spans,
    quoted literals and nested comments are skipped whole. A comment or a
    line-leading directive at depth zero ends the unit without being
    consumed.
    """
    n = len(text)
    paren = angle = 0
    i = start
    while i < n:
        ch = text[i]
        top = paren == 0 and angle == 0

        if ch in QUOTES:
            i = skip_string(text, i)
            continue
        if ch == "[":
            i = find_closing_bracket(text, i)
            continue
        if text.startswith("//", i) or text.startswith("/*", i):
            if top and i > start:
                return i
            i = _comment_end(text, i)
            continue
        if ch == "#" and top and i > start and _at_line_start(text, i):
            return i

        if ch == "(":
            paren += 1
        elif ch == ")":
            paren -= 1
        elif ch == "<":
            angle += 1
        elif ch == ">":
            angle -= 1
        elif top and ch == ";":
            return i + 1
        elif top and ch in "{}":
            return i
        i += 1
    return n


def _comment_end(text: str, start: int) -> int:
    if text.startswith("//", start):
        end = text.find("\n", start)
        return len(text) if end == -1 else end
    end = text.find("*/", start + 2)
    return len(text) if end == -1 else end + 2


def _at_line_start(text: str, i: int) -> bool:
    line_start = text.rfind("\n", 0, i) + 1
    return not text[line_start:i].strip()


def _closes_body(text: str, i: int) -> bool:
    """Check whether only whitespace stands between ``i`` and a ``}`` or the end."""
    n = len(text)
    while i < n and text[i].isspace():
        i += 1
    return i >= n or text[i] == "}"
