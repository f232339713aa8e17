"""Minimal LSP server for state-function grammars (diagnostics only)."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

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

from runelex import __version__
from runelex.cli import load_grammar
from runelex.engine import iter_tokens
from runelex.errors import ContractError, line_col

if TYPE_CHECKING:
    from runelex.scanner import StateFn


class ScanLanguageServer(LanguageServer):
    """Language server that reports the scan error of each open document."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.grammar: StateFn | None = None


server = ScanLanguageServer(
    "runelex-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _utf16_len(data: bytes) -> int:
    return len(data.decode("utf-8", errors="replace").encode("utf-16-le")) // 2


def _diagnostic(source: bytes, offset: int, message: str) -> Diagnostic:
    """Build an Error diagnostic covering the character at a byte offset.

    LSP positions count UTF-16 code units, not code points.
    """
    offset = max(0, min(offset, len(source)))
    line, _ = line_col(source, offset)
    line_start = source.rfind(b"\n", 0, offset) + 1
    character = _utf16_len(source[line_start:offset])
    following = source[offset : offset + 4].decode("utf-8", errors="ignore")[:1]
    width = max(1, len(following.encode("utf-16-le")) // 2)
    return Diagnostic(
        range=Range(
            start=Position(line=line - 1, character=character),
            end=Position(line=line - 1, character=character + width),
        ),
        message=message,
        severity=DiagnosticSeverity.Error,
        source="runelex",
    )


def _validate(ls: ScanLanguageServer, uri: str) -> None:
    """Scan the document with the configured grammar and publish diagnostics."""
    if ls.grammar is None:
        return
    doc = ls.workspace.get_text_document(uri)
    source = doc.source.encode("utf-8")
    diagnostics: list[Diagnostic] = []

    try:
        for token in iter_tokens(source, ls.grammar):
            if token.is_error:
                diagnostics.append(_diagnostic(source, token.position, token.text))
    except ContractError as exc:
        diagnostics.append(_diagnostic(source, 0, f"grammar broke a scanner contract: {exc}"))

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: ScanLanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: ScanLanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="runelex-lsp", description="runelex diagnostics server")
    p.add_argument("-g", "--grammar", required=True, metavar="MODULE:ATTR")
    args = p.parse_args(argv)
    server.grammar = load_grammar(args.grammar)
    server.start_io()
