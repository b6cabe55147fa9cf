"""midlfmt - source formatter for MIDL interface definition files."""

from .formatter import format_document
from .tokenizer import tokenize
from .types import Token, TokenKind

__version__ = "1.0.0"

__all__ = [
    "format_document",
    "tokenize",
    "Token",
    "TokenKind",
    "__version__",
]
