"""Keyword and operator tables driving tokenizer classification and layout.

Kept as plain data so each table can be inspected and extended on its own.
"""

from __future__ import annotations

# A unit starting with one of these words is a declaration head.
DECLARATION_KEYWORDS = (
    "interface",
    "library",
    "coclass",
    "dispinterface",
    "module",
    "struct",
    "union",
    "enum",
    "typedef",
    "import",
    "importlib",
)

# Keywords that get a space before a directly following "(".
SPACING_KEYWORDS = (
    "if",
    "for",
    "while",
    "switch",
    "catch",
    "return",
    "typedef",
    "struct",
    "union",
    "enum",
)

# Symbols surrounded by single spaces inside statements. Pointer and
# reference uses are not told apart from binary operators.
SPACED_OPERATORS = frozenset("+-=<>!&|")

# Leading words that mark a statement as a member (method/field) declaration.
MEMBER_TYPE_KEYWORDS = (
    "HRESULT",
    "void",
    "long",
    "short",
    "int",
    "double",
    "float",
    "byte",
    "boolean",
    "char",
    "wchar_t",
    "error_status_t",
)

PROPERTY_KEYWORDS = ("propget", "propput", "propputref")

# Keyword marking a braced body whose members are split one per line.
ENUM_KEYWORD = "enum"
