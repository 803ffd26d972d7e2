"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from parenlex.lexer import tokenize
from parenlex.tokens import Token, TokenKind


@pytest.fixture
def lex():
    """Return a helper that scans source and returns the emitted tokens."""

    def _lex(source: str | bytes) -> list[Token]:
        return tokenize(source, "test.lisp")

    return _lex


def assert_kinds(tokens: list[Token], expected: list[TokenKind]) -> None:
    """Assert that the token kinds match the expected list."""
    actual = [t.kind for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], kind: TokenKind) -> list[Token]:
    """Return all tokens of the given kind."""
    return [t for t in tokens if t.kind == kind]
