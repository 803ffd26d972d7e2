"""Scanner for a parenthesized, Lisp-like language."""

from __future__ import annotations

from parenlex.errors import LexError
from parenlex.lexer import Scanner, ScanState, iter_tokens, tokenize
from parenlex.tokens import Position, Token, TokenKind

__version__ = "0.1.0"

__all__ = [
    "LexError",
    "Position",
    "ScanState",
    "Scanner",
    "Token",
    "TokenKind",
    "iter_tokens",
    "tokenize",
]
