"""parenlex scanner — converts source text into a flat token stream."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from enum import Enum, auto

from parenlex.errors import LexError
from parenlex.tokens import (
    CLOSE_PAREN,
    COMMENT,
    EOF,
    OPEN_PAREN,
    Position,
    Token,
    TokenKind,
    is_end_of_line,
    is_ident_char,
    is_space,
)

logger = logging.getLogger(__name__)


class ScanState(Enum):
    TEXT = auto()  # top level, outside any parens
    COMMENT = auto()
    OPEN_PAREN_FOLLOWUP = auto()
    INSIDE_PARENS = auto()
    SPACE = auto()
    IDENTIFIER = auto()
    HALTED = auto()


class Scanner:
    """Finite-state scanner over one input buffer.

    Each non-halted state maps to a transition method that consumes input,
    emits zero or more tokens, and returns the next state. Lexical errors
    are appended as a single ``ERROR`` token and halt the machine; nothing
    is raised and nothing after the error is scanned.

    Scanner instances are single-use. Create one per source string.
    """

    def __init__(self, source: str | bytes, filename: str = "<input>") -> None:
        if isinstance(source, bytes):
            # One character per byte, so offsets are byte offsets
            source = source.decode("latin-1")
        self._source = source
        self._filename = filename
        self._pos = 0  # cursor
        self._start = 0  # start of the pending token
        self._can_backup = False
        self._tokens: list[Token] = []
        self._state = ScanState.TEXT
        self._paren_depth = 0
        # (offset, line, line_start) of the last computed position
        self._line_cache = (0, 0, 0)
        self._transitions: dict[ScanState, Callable[[], ScanState]] = {
            ScanState.TEXT: self._lex_text,
            ScanState.COMMENT: self._lex_comment,
            ScanState.OPEN_PAREN_FOLLOWUP: self._lex_open_paren_followup,
            ScanState.INSIDE_PARENS: self._lex_inside_parens,
            ScanState.SPACE: self._lex_space,
            ScanState.IDENTIFIER: self._lex_identifier,
        }

    @property
    def source(self) -> str:
        return self._source

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def halted(self) -> bool:
        return self._state is ScanState.HALTED

    @property
    def paren_depth(self) -> int:
        return self._paren_depth

    @property
    def tokens(self) -> list[Token]:
        """Tokens emitted so far."""
        return self._tokens

    @property
    def error(self) -> Token | None:
        """The terminal ERROR token, or None if the run did not fail."""
        if self._tokens and self._tokens[-1].kind is TokenKind.ERROR:
            return self._tokens[-1]
        return None

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def step(self) -> ScanState:
        """Run a single transition and return the new state."""
        if self._state is ScanState.HALTED:
            return self._state
        self._state = self._transitions[self._state]()
        if self._state is ScanState.HALTED:
            logger.debug(
                "%s: halted at offset %d after %d tokens (depth %d)",
                self._filename,
                self._pos,
                len(self._tokens),
                self._paren_depth,
            )
        return self._state

    def run(self) -> list[Token]:
        """Drive the state machine to HALTED and return the emitted tokens.

        Unlike iteration, no EOF token is appended: a failed run ends with
        its ERROR token, a clean run simply ends with its last scanned
        token. Check :attr:`error` rather than the last token's kind.
        """
        while self._state is not ScanState.HALTED:
            self.step()
        return self._tokens

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens as transitions emit them.

        A clean run finishes with an EOF token holding any trailing
        top-level text; a failed run finishes with its ERROR token.
        """
        yielded = 0
        while True:
            while yielded < len(self._tokens):
                yield self._tokens[yielded]
                yielded += 1
            if self._state is ScanState.HALTED:
                break
            self.step()
        if self.error is None:
            yield Token(TokenKind.EOF, self._source[self._start :], self._position())

    def raise_for_error(self) -> None:
        """Raise LexError if the run ended on an ERROR token."""
        err = self.error
        if err is not None:
            raise LexError.from_token(err, self._source, self._filename)

    # ------------------------------------------------------------------
    # Cursor primitives
    # ------------------------------------------------------------------

    def _next(self) -> str:
        if self._pos >= len(self._source):
            self._can_backup = False
            return EOF
        ch = self._source[self._pos]
        self._pos += 1
        self._can_backup = True
        return ch

    def _peek(self) -> str:
        ch = self._next()
        if ch != EOF:
            self._backup()
        return ch

    def _backup(self) -> None:
        assert self._can_backup, "backup() must directly follow a consuming next()"
        self._pos -= 1
        self._can_backup = False

    def _emit(self, kind: TokenKind) -> Token:
        tok = Token(kind, self._source[self._start : self._pos], self._position())
        self._tokens.append(tok)
        self._start = self._pos
        return tok

    def _ignore(self) -> None:
        self._start = self._pos

    def _error(self, message: str) -> ScanState:
        self._tokens.append(Token(TokenKind.ERROR, message, self._position()))
        self._start = self._pos
        return ScanState.HALTED

    def _position(self) -> Position:
        """Position of the pending token start.

        Token starts never move backwards, so counting resumes from the
        previous call instead of rescanning the whole prefix.
        """
        offset, line, line_start = self._line_cache
        target = self._start
        newlines = self._source.count("\n", offset, target)
        if newlines:
            line += newlines
            line_start = self._source.rfind("\n", offset, target) + 1
        self._line_cache = (target, line, line_start)
        return Position(line, target - line_start, target)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _open_paren(self) -> ScanState:
        self._emit(TokenKind.OPEN_PAREN)
        self._paren_depth += 1
        return ScanState.OPEN_PAREN_FOLLOWUP

    def _close_paren(self) -> ScanState:
        self._emit(TokenKind.CLOSE_PAREN)
        self._paren_depth -= 1
        if self._paren_depth == 0:
            return ScanState.TEXT
        return ScanState.INSIDE_PARENS

    def _end_of_input(self) -> ScanState:
        if self._paren_depth > 0:
            return self._error("unclosed open paren")
        return ScanState.HALTED

    def _lex_text(self) -> ScanState:
        # Anything other than a comment or open paren is skipped, but stays
        # in the pending span and prefixes the next OPEN_PAREN's text.
        while True:
            ch = self._next()
            if ch == COMMENT:
                return ScanState.COMMENT
            if ch == OPEN_PAREN:
                return self._open_paren()
            if ch == EOF:
                return ScanState.HALTED

    def _skip_eol(self) -> None:
        ch = self._next()
        while is_end_of_line(ch):
            ch = self._next()
        if ch != EOF:
            self._backup()
        self._ignore()

    def _lex_comment(self) -> ScanState:
        while True:
            ch = self._next()
            if ch == EOF:
                self._ignore()
                return self._end_of_input()
            if is_end_of_line(ch):
                self._skip_eol()
                break

        if self._paren_depth > 0:
            return ScanState.INSIDE_PARENS
        return ScanState.TEXT

    def _lex_open_paren_followup(self) -> ScanState:
        # A comment may directly follow the open paren
        if self._peek() == COMMENT:
            return ScanState.COMMENT
        return ScanState.INSIDE_PARENS

    def _lex_inside_parens(self) -> ScanState:
        ch = self._next()
        if ch == COMMENT:
            return ScanState.COMMENT
        if is_space(ch):
            return ScanState.SPACE
        if ch == OPEN_PAREN:
            return self._open_paren()
        if ch == CLOSE_PAREN:
            return self._close_paren()
        if is_ident_char(ch):
            return ScanState.IDENTIFIER
        if ch == EOF:
            return self._error("unclosed open paren")
        return self._error(f'unrecognized character "{ch}"')

    def _lex_space(self) -> ScanState:
        while True:
            ch = self._next()
            if is_space(ch):
                continue
            if ch == EOF:
                # A run cut short by end of input is dropped
                self._ignore()
                return self._end_of_input()
            self._backup()
            self._emit(TokenKind.SPACE)
            return ScanState.INSIDE_PARENS

    def _lex_identifier(self) -> ScanState:
        ch = self._next()
        while is_ident_char(ch):
            ch = self._next()
        if ch != EOF:
            self._backup()
        self._emit(TokenKind.IDENTIFIER)
        return ScanState.INSIDE_PARENS


def tokenize(source: str | bytes, filename: str = "<input>") -> list[Token]:
    """Convenience function: scan source text and return the token list."""
    return Scanner(source, filename).run()


def iter_tokens(source: str | bytes, filename: str = "<input>") -> Iterator[Token]:
    """Pull interface: yield tokens as they are scanned, ending in EOF or ERROR."""
    return iter(Scanner(source, filename))
