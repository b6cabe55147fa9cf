"""Full-document formatting entry point."""

from __future__ import annotations

from .config import StyleConfig
from .printer import format_tokens
from .tokenizer import tokenize


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def format_document(full_text: str, style: StyleConfig | None = None) -> str:
    """
    Format a complete MIDL document.

    Args:
        full_text: Source text with any line-ending convention
        style: Layout settings (defaults to 4-space indentation)

    Returns:
        Replacement text for the whole document. Never raises; the empty
        string formats to a single newline.
    """
    return format_tokens(tokenize(normalize_line_endings(full_text)), style)
