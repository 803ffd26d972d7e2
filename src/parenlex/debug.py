"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from parenlex.tokens import Token, TokenKind


def dump_tokens(tokens: list[Token], *, file: TextIO = sys.stderr) -> None:
    """Print a column-aligned token table to *file*."""
    if not tokens:
        file.write("(no tokens)\n")
        return
    width = max(len(t.kind.label) for t in tokens)
    for tok in tokens:
        pos = tok.position
        loc = f"{pos.line}:{pos.column}"
        file.write(f"{loc:>8} @{pos.offset:<6} {tok.kind.label:<{width}} {_show(tok)}\n")


def _show(tok: Token) -> str:
    if tok.kind is TokenKind.ERROR:
        return tok.text
    return repr(tok.text)
