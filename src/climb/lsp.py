"""climb Language Server, a pygls-based LSP for .clb files.

Provides diagnostics, hover, completion, go-to-definition and
formatting via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from climb import __version__
from climb.ast_nodes import Program
from climb.checker import Checker
from climb.errors import ClimbError, Diagnostic, Severity
from climb.formatter import ClimbFormatter
from climb.lexer import Lexer
from climb.parser import Parser
from climb.source import SourceText, Span
from climb.tokens import KEYWORDS, Token

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}

_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())

_KEYWORD_DOCS = {
    "if": "`if (cond) { ... }` runs the block when `cond` is greater than zero.",
    "while": "`while (cond) { ... }` repeats the block while `cond` is greater than zero.",
    "for": "`for (init; cond; update) { ... }`; without `cond` the body never runs.",
}


def span_to_range(source: SourceText, span: Span) -> lsp.Range:
    """Convert a byte-offset Span to a 0-indexed LSP Range."""
    sl, sc = source.position(span.start)
    el, ec = source.position(span.end)
    return lsp.Range(
        start=lsp.Position(line=sl - 1, character=sc - 1),
        end=lsp.Position(line=el - 1, character=ec - 1),
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: SourceText = field(default_factory=lambda: SourceText(""))
    tokens: list[Token] = field(default_factory=list)
    program: Program | None = None
    variables: dict[str, Span] = field(default_factory=dict)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "climb-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _compile_diag(source: SourceText, d: Diagnostic) -> lsp.Diagnostic:
    """Convert a climb Diagnostic to an LSP Diagnostic."""
    span = d.labels[0].span if d.labels else source.end_span()
    return lsp.Diagnostic(
        range=span_to_range(source, span),
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="climb",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


def _analyze(uri: str, text: str, *, max_depth: int = 200) -> DocumentState:
    """Run Lexer → Parser → Checker, cache results, return state."""
    source = SourceText(text, uri)
    ds = DocumentState(source=source)

    try:
        ds.tokens = Lexer(text).lex()
        ds.program = Parser(ds.tokens, max_depth=max_depth).parse()
    except ClimbError as e:
        ds.diagnostics = [_compile_diag(source, e.to_diagnostic())]
        _state[uri] = ds
        return ds

    checker = Checker()
    ds.variables = checker.check(ds.program)
    ds.diagnostics = [_compile_diag(source, d) for d in checker.diagnostics]
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
    while start > 0 and text[start - 1].isalnum():
        start -= 1
    end = character
    while end < len(text) and text[end].isalnum():
        end += 1
    return text[start:end]


def _hover_text(ds: DocumentState, word: str) -> str | None:
    if word in _KEYWORD_DOCS:
        return f"**keyword** {_KEYWORD_DOCS[word]}"
    span = ds.variables.get(word)
    if span is not None:
        line, col = ds.source.position(span.start)
        return f"**variable** `{word}`, first assigned at line {line}, column {col}"
    return None


def _completion_items(ds: DocumentState | None) -> list[lsp.CompletionItem]:
    items = [
        lsp.CompletionItem(label=kw, kind=lsp.CompletionItemKind.Keyword)
        for kw in _KEYWORD_COMPLETIONS
    ]
    if ds is not None:
        items.extend(
            lsp.CompletionItem(label=name, kind=lsp.CompletionItemKind.Variable)
            for name in sorted(ds.variables)
        )
    return items


def _formatting_edits(ds: DocumentState) -> list[lsp.TextEdit] | None:
    if ds.program is None:
        return None
    formatted = ClimbFormatter().format(ds.program)
    if formatted == ds.source.text:
        return None
    # Replace entire document
    lines = ds.source.text.splitlines()
    end_line = len(lines)
    end_char = len(lines[-1]) if lines else 0
    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(line=0, character=0),
            end=lsp.Position(line=end_line, character=end_char),
        ),
        new_text=formatted,
    )]


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
    # Full sync, take last content change
    text = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, text)
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
    word = _get_word_at(ds.source.text, params.position.line, params.position.character)
    content = _hover_text(ds, word) if word else None
    if content is None:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=content,
    ))


@server.feature(lsp.TEXT_DOCUMENT_COMPLETION)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    ds = _state.get(params.text_document.uri)
    return lsp.CompletionList(is_incomplete=False, items=_completion_items(ds))


@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def definition(params: lsp.DefinitionParams) -> lsp.Location | None:
    uri = params.text_document.uri
    ds = _state.get(uri)
    if ds is None:
        return None
    word = _get_word_at(ds.source.text, params.position.line, params.position.character)
    span = ds.variables.get(word)
    if span is None:
        return None
    return lsp.Location(uri=uri, range=span_to_range(ds.source, span))


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return _formatting_edits(ds)


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the climb language server on stdio."""
    server.start_io()
