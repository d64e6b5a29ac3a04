"""Conversion of analyzer models to lsprotocol types.

The analyzer works in tree-sitter byte columns. Clients count columns in the
position encoding negotiated at initialize (UTF-16 unless agreed otherwise), so
every position crossing the boundary goes through the pygls ``PositionCodec``
against the lines of the document it belongs to.
"""

from collections.abc import Sequence

from lsprotocol import types as lsp
from pygls.workspace import PositionCodec

from bashls.models import (
    CompletionItem,
    CompletionKind,
    Declaration,
    DeclarationKind,
    Diagnostic,
    DiagnosticSeverity,
    Location,
    Position,
    Range,
)

Lines = Sequence[str]

_SEVERITIES = {
    DiagnosticSeverity.ERROR: lsp.DiagnosticSeverity.Error,
    DiagnosticSeverity.WARNING: lsp.DiagnosticSeverity.Warning,
}

_SYMBOL_KINDS = {
    DeclarationKind.FUNCTION: lsp.SymbolKind.Function,
    DeclarationKind.VARIABLE: lsp.SymbolKind.Variable,
    DeclarationKind.ENVIRONMENT_VARIABLE: lsp.SymbolKind.Variable,
}

_COMPLETION_KINDS = {
    CompletionKind.FUNCTION: lsp.CompletionItemKind.Function,
    CompletionKind.VARIABLE: lsp.CompletionItemKind.Variable,
    CompletionKind.METHOD: lsp.CompletionItemKind.Method,
}


def utf16_codec() -> PositionCodec:
    return PositionCodec(lsp.PositionEncodingKind.Utf16)


def _line(lines: Lines, line: int) -> str:
    return lines[line] if 0 <= line < len(lines) else ""


def char_to_byte_column(text: str, column: int) -> int:
    return len(text[:column].encode("utf-8"))


def byte_to_char_column(text: str, column: int) -> int:
    # a column inside a multibyte sequence counts the partial character as absent
    return len(text.encode("utf-8")[:column].decode("utf-8", errors="ignore"))


def from_lsp_position(position: lsp.Position, lines: Lines, codec: PositionCodec) -> tuple[int, int]:
    """Client position to the analyzer's (row, byte column)."""
    if not lines:
        return position.line, position.character
    server = codec.position_from_client_units(list(lines), position)
    return server.line, char_to_byte_column(_line(lines, server.line), server.character)


def to_lsp_position(position: Position, lines: Lines, codec: PositionCodec) -> lsp.Position:
    if not lines:
        return lsp.Position(line=position.line, character=position.character)
    character = byte_to_char_column(_line(lines, position.line), position.character)
    return codec.position_to_client_units(list(lines), lsp.Position(line=position.line, character=character))


def to_lsp_range(rng: Range, lines: Lines, codec: PositionCodec) -> lsp.Range:
    return lsp.Range(
        start=to_lsp_position(rng.start, lines, codec),
        end=to_lsp_position(rng.end, lines, codec),
    )


def to_lsp_location(location: Location, lines: Lines, codec: PositionCodec) -> lsp.Location:
    return lsp.Location(uri=location.uri, range=to_lsp_range(location.range, lines, codec))


def to_lsp_diagnostic(diagnostic: Diagnostic, lines: Lines, codec: PositionCodec) -> lsp.Diagnostic:
    return lsp.Diagnostic(
        range=to_lsp_range(diagnostic.range, lines, codec),
        message=diagnostic.message,
        severity=_SEVERITIES[diagnostic.severity],
        source=diagnostic.source,
    )


def to_lsp_symbol(declaration: Declaration, lines: Lines, codec: PositionCodec) -> lsp.SymbolInformation:
    return lsp.SymbolInformation(
        name=declaration.name,
        kind=_SYMBOL_KINDS[declaration.kind],
        location=to_lsp_location(declaration.location, lines, codec),
        container_name=declaration.container_name,
    )


def to_lsp_completion(item: CompletionItem) -> lsp.CompletionItem:
    return lsp.CompletionItem(
        label=item.label,
        kind=_COMPLETION_KINDS[item.kind],
        data=item.data.model_dump(mode="json"),
        documentation=item.documentation,
    )
