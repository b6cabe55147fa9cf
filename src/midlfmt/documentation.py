"""Keyword documentation lookup for hover help.

The table is static data shipped in data/midl_docs.yml. The formatter never
consults it.
"""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import resources
from typing import Any

import yaml
from pydantic import BaseModel, field_validator

DOCS_BASE_URL = "https://learn.microsoft.com/en-us/windows/win32/Midl"

VALID_CATEGORIES = {"keyword", "attribute", "type", "directive", "modifier"}

_WORD_CHAR_RE = re.compile(r"[A-Za-z0-9_]")
_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class DocEntry(BaseModel):
    """Documentation for one MIDL keyword, attribute, type, directive or modifier."""

    name: str
    category: str
    description: str
    syntax: str | None = None
    example: str | None = None
    doc_url: str

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        if v not in VALID_CATEGORIES:
            raise ValueError(f"Invalid category: {v}. Must be one of {VALID_CATEGORIES}")
        return v


def create_doc_url(page: str) -> str:
    return f"{DOCS_BASE_URL}/{page}"


def parse_documentation(data: dict[str, Any]) -> dict[str, DocEntry]:
    """Build entries from raw table data keyed by word."""
    entries: dict[str, DocEntry] = {}
    for key, raw in data.items():
        raw = dict(raw)
        page = raw.pop("page", key)
        raw.setdefault("name", key)
        raw.setdefault("doc_url", create_doc_url(page))
        entries[key.lower()] = DocEntry(**raw)
    return entries


@lru_cache(maxsize=1)
def load_documentation() -> dict[str, DocEntry]:
    """Load the bundled documentation table (cached; the data never changes)."""
    text = resources.files("midlfmt").joinpath("data/midl_docs.yml").read_text(encoding="utf-8")
    return parse_documentation(yaml.safe_load(text) or {})


def lookup(word: str) -> DocEntry | None:
    """Case-insensitive lookup; returns None for unknown words."""
    return load_documentation().get(word.lower())


def word_at(text: str, offset: int) -> str | None:
    """Return the identifier touching ``offset``, if any."""
    if not 0 <= offset <= len(text):
        return None

    start = offset
    while start > 0 and _WORD_CHAR_RE.match(text[start - 1]):
        start -= 1
    end = offset
    while end < len(text) and _WORD_CHAR_RE.match(text[end]):
        end += 1

    match = _WORD_RE.fullmatch(text[start:end])
    return match.group(0) if match else None


def render_hover(entry: DocEntry) -> str:
    """Render an entry as hover markdown."""
    parts = [
        f"### {entry.name}\n\n",
        f"**Category:** `{entry.category}`\n\n",
        f"{entry.description}\n\n",
    ]
    if entry.syntax:
        parts.append(f"**Syntax:**\n```midl\n{entry.syntax}\n```\n\n")
    if entry.example:
        parts.append(f"**Example:**\n```midl\n{entry.example}\n```\n\n")
    parts.append("---\n")
    parts.append(f"[View Documentation]({entry.doc_url})")
    return "".join(parts)


def hover_at(text: str, offset: int) -> str | None:
    """Hover markdown for the word at ``offset``, or None."""
    word = word_at(text, offset)
    if word is None:
        return None
    entry = lookup(word)
    return render_hover(entry) if entry else None
