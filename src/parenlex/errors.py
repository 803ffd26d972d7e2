"""Error types with formatted source context."""

from __future__ import annotations

from parenlex.tokens import Position, Token, TokenKind


class LexError(Exception):
    """A terminal lexing error, with position and source context.

    The scanner itself never raises this; it records the error as an
    ``ERROR`` token. Callers that prefer an exception build one with
    :meth:`from_token`.
    """

    def __init__(
        self, message: str, position: Position, source: str, filename: str = "<input>"
    ) -> None:
        self.message = message
        self.position = position
        self.source = source
        self.filename = filename
        super().__init__(self.format())

    @classmethod
    def from_token(cls, token: Token, source: str, filename: str = "<input>") -> LexError:
        if token.kind is not TokenKind.ERROR:
            raise ValueError(f"expected an ERROR token, got {token.kind.name}")
        return cls(token.text, token.position, source, filename)

    def format(self, filename: str | None = None) -> str:
        if filename is None:
            filename = self.filename
        lines = self.source.split("\n")
        line_idx = self.position.line
        col = self.position.column

        # Lines break on LF only, matching compute_position
        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\r")
        else:
            source_line = ""

        pad = " " * col
        line_num = str(line_idx + 1)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{line_idx + 1}:{col + 1}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )
