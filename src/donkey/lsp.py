"""Donkey Language Server: pygls-based LSP for .dk files.

Provides parse diagnostics, hover, keyword and binding completion,
go-to-definition for ``let`` bindings and document symbols via stdio
transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from donkey import __version__
from donkey.ast_nodes import FunctionLiteral, LetStatement, Program
from donkey.errors import Diagnostic, Severity
from donkey.lexer import Lexer
from donkey.parser import Parser
from donkey.source import Span
from donkey.tokens import KEYWORDS

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())

_KEYWORD_DOCS = {
    "let": "`let <name> = <expression>;` binds a name.",
    "return": "`return <expression>;` returns a value.",
    "fn": "`fn(<params>) { ... }` is a function literal.",
    "if": "`if (<condition>) { ... } else { ... }` is a conditional expression.",
    "else": "Alternative branch of an `if` expression.",
    "true": "Boolean literal.",
    "false": "Boolean literal.",
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Donkey Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def to_lsp_diagnostic(d: Diagnostic) -> lsp.Diagnostic:
    """Convert a donkey Diagnostic to an LSP Diagnostic."""
    origin = lsp.Position(line=0, character=0)
    span_range = lsp.Range(start=origin, end=origin)
    if d.span is not None:
        span_range = span_to_range(d.span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="donkey",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    program: Program | None = None
    bindings: dict[str, LetStatement] = field(default_factory=dict)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


server = LanguageServer(
    "donkey-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Run Lexer → Parser, cache results, return state."""
    parser = Parser(Lexer(source, uri))
    program = parser.parse_program()
    ds = DocumentState(
        source=source,
        program=program,
        diagnostics=[to_lsp_diagnostic(d) for d in parser.diagnostics],
    )
    for stmt in program.statements:
        if isinstance(stmt, LetStatement):
            ds.bindings.setdefault(stmt.name.value, stmt)
    _state[uri] = ds
    return ds


def _get_word_at(source: str, line: int, character: int) -> str:
    """Extract the word at the given 0-indexed position."""
    lines = source.splitlines()
    if line < 0 or line >= len(lines):
        return ""
    text = lines[line]
    if character < 0 or character >= len(text):
        # Try character-1 in case cursor is right after the word
        if 0 < character <= len(text):
            character -= 1
        else:
            return ""

    start = character
    while start > 0 and (text[start - 1].isalpha() or text[start - 1] == "_"):
        start -= 1

    end = character
    while end < len(text) and (text[end].isalpha() or text[end] == "_"):
        end += 1

    return text[start:end]


def _binding_span(stmt: LetStatement) -> Span:
    """Span from the ``let`` keyword through the bound name."""
    start, end = stmt.span, stmt.name.span
    return Span(start.file, start.start_line, start.start_col, end.end_line, end.end_col)


def _binding_kind(stmt: LetStatement) -> lsp.SymbolKind:
    if isinstance(stmt.value, FunctionLiteral):
        return lsp.SymbolKind.Function
    return lsp.SymbolKind.Variable


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: take last content change
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None

    word = _get_word_at(ds.source, params.position.line, params.position.character)
    if not word:
        return None

    if word in _KEYWORD_DOCS:
        content = f"**keyword** `{word}`: {_KEYWORD_DOCS[word]}"
    elif word in ds.bindings:
        content = f"```donkey\n{ds.bindings[word]}\n```"
    else:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=content,
    ))


@server.feature(lsp.TEXT_DOCUMENT_COMPLETION)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    ds = _state.get(params.text_document.uri)
    items = [
        lsp.CompletionItem(label=kw, kind=lsp.CompletionItemKind.Keyword)
        for kw in _KEYWORD_COMPLETIONS
    ]
    if ds is not None:
        for name, stmt in ds.bindings.items():
            kind = (lsp.CompletionItemKind.Function
                    if isinstance(stmt.value, FunctionLiteral)
                    else lsp.CompletionItemKind.Variable)
            items.append(lsp.CompletionItem(
                label=name, kind=kind, detail=str(stmt),
            ))
    return lsp.CompletionList(is_incomplete=False, items=items)


@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def definition(params: lsp.DefinitionParams) -> lsp.Location | None:
    uri = params.text_document.uri
    ds = _state.get(uri)
    if ds is None:
        return None

    word = _get_word_at(ds.source, params.position.line, params.position.character)
    stmt = ds.bindings.get(word)
    if stmt is None:
        return None
    return lsp.Location(uri=uri, range=span_to_range(stmt.name.span))


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return []

    return [
        lsp.DocumentSymbol(
            name=name,
            kind=_binding_kind(stmt),
            range=span_to_range(_binding_span(stmt)),
            selection_range=span_to_range(stmt.name.span),
            detail=str(stmt),
        )
        for name, stmt in ds.bindings.items()
    ]


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the Donkey language server on stdio."""
    server.start_io()
