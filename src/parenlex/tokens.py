"""Token kinds, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    EOF = auto()
    IDENTIFIER = auto()  # ident_char+ (letters, digits, _!/+=*-<>)
    ERROR = auto()  # text is the error message
    NUMBER = auto()  # reserved, digit runs currently lex as IDENTIFIER
    OPEN_PAREN = auto()  # (
    CLOSE_PAREN = auto()  # )
    SPACE = auto()  # run of tabs, spaces, CR and LF

    @property
    def label(self) -> str:
        """CamelCase name used when rendering tokens, e.g. ``OpenParen``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 0-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanner token with its source slice and start position."""

    kind: TokenKind
    text: str
    position: Position

    def __str__(self) -> str:
        if self.kind is TokenKind.EOF:
            return "EOF"
        if self.kind is TokenKind.ERROR:
            return self.text
        return f'{self.kind.label} "{self.text}": line {self.position}'


# End-of-input sentinel returned by the scanner's cursor primitives
EOF = ""

COMMENT = ";"
OPEN_PAREN = "("
CLOSE_PAREN = ")"

# Identifier special characters: _ ! / + = * - < >
_IDENT_SPECIAL = frozenset("_!/+=*-<>")


def is_end_of_line(ch: str) -> bool:
    """Return True if ch is a carriage return or line feed."""
    return ch == "\r" or ch == "\n"


def is_space(ch: str) -> bool:
    """Return True if ch is a tab, space, or line terminator."""
    return ch == "\t" or ch == " " or is_end_of_line(ch)


def is_ident_char(ch: str) -> bool:
    """Return True if ch is a valid identifier character."""
    return (ch.isascii() and ch.isalnum()) or ch in _IDENT_SPECIAL


def compute_position(source: str, offset: int) -> Position:
    """Return the line/column of *offset* by scanning the prefix before it.

    Lines are counted by ``\\n`` so a ``\\r\\n`` pair is a single break.
    """
    prefix = source[:offset]
    line = prefix.count("\n")
    column = offset - (prefix.rfind("\n") + 1)
    return Position(line, column, offset)
