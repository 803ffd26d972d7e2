"""Tests for the LSP server — diagnostic generation."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from parenlex.lsp import _validate


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = "file:///test.lisp") -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="lisp", version=0, text=source)
        )

    return ls, published, put


class TestLexErrors:
    def test_unrecognized_character(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("(a % b)")
        _validate(ls, "file:///test.lisp")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "%" in d.message
        assert d.source == "parenlex"
        assert d.range.start.line == 0
        assert d.range.start.character == 3
        assert d.range.end.character == 4

    def test_unclosed_paren_on_second_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("(a\n  b")
        _validate(ls, "file:///test.lisp")

        d = published[0].diagnostics[0]
        assert d.message == "unclosed open paren"
        assert d.range.start.line == 1
        assert d.range.start.character == 3


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put(";; square\n(define (sq x) (* x x))\n")
        _validate(ls, "file:///test.lisp")

        assert len(published) == 1
        assert published[0].uri == "file:///test.lisp"
        assert published[0].diagnostics == []


class TestUtf16Columns:
    def test_astral_character_before_error(self, lsp_env) -> None:
        ls, published, put = lsp_env
        # U+1D538 takes two UTF-16 code units
        put("\U0001d538(a %)")
        _validate(ls, "file:///test.lisp")

        d = published[0].diagnostics[0]
        assert "%" in d.message
        assert d.range.start.character == 5
        assert d.range.end.character == 6

    def test_later_line_unaffected(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("\U0001d538(a\n %)")
        _validate(ls, "file:///test.lisp")

        d = published[0].diagnostics[0]
        assert d.range.start.line == 1
        assert d.range.start.character == 1
