"""Editor-facing edit construction around the formatter.

Formatting always replaces the whole document, so this layer only needs to
map offsets to line/column positions for the replacement range.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import StyleConfig
from .formatter import format_document


@dataclass(frozen=True)
class Position:
    """Zero-based line and column."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass(frozen=True)
class TextEdit:
    """Replace the text in ``range`` with ``new_text``."""

    range: Range
    new_text: str


def position_at(text: str, offset: int) -> Position:
    """Convert a character offset to a position (offset clamped to the text)."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return Position(line=line, character=offset - line_start)


def offset_at(text: str, position: Position) -> int:
    """Convert a position to a character offset, clamping line and column."""
    if position.line < 0:
        return 0

    line_start = 0
    for _ in range(position.line):
        nl = text.find("\n", line_start)
        if nl == -1:
            return len(text)
        line_start = nl + 1

    line_end = text.find("\n", line_start)
    if line_end == -1:
        line_end = len(text)
    return line_start + max(0, min(position.character, line_end - line_start))


def full_range(text: str) -> Range:
    return Range(start=position_at(text, 0), end=position_at(text, len(text)))


class DocumentFormatter:
    """
    Produces text edits for whole-document and range formatting requests.

    Holds only its style settings; every call is independent.
    """

    def __init__(self, style: StyleConfig | None = None) -> None:
        self.style = style or StyleConfig()

    def format_text(self, text: str) -> str:
        return format_document(text, self.style)

    def provide_document_edits(self, text: str) -> list[TextEdit]:
        """Return a single edit replacing the entire document."""
        return [TextEdit(range=full_range(text), new_text=self.format_text(text))]

    def provide_range_edits(self, text: str, requested: Range) -> list[TextEdit]:  # noqa: ARG002
        """Range requests reformat the whole document for consistent indentation."""
        return self.provide_document_edits(text)
