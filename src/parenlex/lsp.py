"""Minimal LSP server for parenlex — lexical diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from parenlex import __version__
from parenlex.lexer import Scanner
from parenlex.tokens import Position as TokenPosition

server = LanguageServer(
    "parenlex-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _utf16_column(source: str, position: TokenPosition) -> int:
    line_start = position.offset - position.column
    prefix = source[line_start : position.offset]
    return len(prefix.encode("utf-16-le")) // 2


def _validate(ls: LanguageServer, uri: str) -> None:
    """Scan the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    scanner = Scanner(doc.source, filename)
    scanner.run()
    err = scanner.error
    if err is not None:
        # Scanner positions are 0-based code points; LSP wants UTF-16 units
        line = err.position.line
        col = _utf16_column(doc.source, err.position)
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=err.text,
                severity=DiagnosticSeverity.Error,
                source="parenlex",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
