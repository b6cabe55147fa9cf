"""Core data types for the MIDL formatter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Kinds of structural units produced by the tokenizer."""

    COMMENT = "comment"
    DIRECTIVE = "directive"
    ATTRIBUTE_BLOCK = "attribute-block"
    BRACE_OPEN = "brace-open"
    BRACE_CLOSE = "brace-close"
    STATEMENT = "statement"
    DECLARATION = "declaration"
    # Reserved kinds; the tokenizer never emits these and the printer
    # renders them like statements.
    SEMICOLON_TERMINATED_UNIT = "semicolon-terminated-unit"
    KEYWORD = "keyword"
    WHITESPACE = "whitespace"


@dataclass(frozen=True)
class Token:
    """A single unit of MIDL source text."""

    kind: TokenKind
    text: str
    raw_text: str | None = None  # Only kept for block comments

    @property
    def is_multiline_comment(self) -> bool:
        return (
            self.kind is TokenKind.COMMENT
            and self.raw_text is not None
            and "\n" in self.raw_text
        )

    def to_dict(self) -> dict[str, str | None]:
        return {"kind": self.kind.value, "text": self.text, "raw_text": self.raw_text}
