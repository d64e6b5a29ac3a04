from __future__ import annotations

from dataclasses import dataclass, field

from bashls.core.parser import parse_source
from bashls.core.tree import SyntaxTree
from bashls.models import Declaration

FileDeclarations = dict[str, list[Declaration]]


def _line_offsets(source: bytes) -> tuple[int, ...]:
    offsets = [0]
    start = source.find(b"\n")
    while start != -1:
        offsets.append(start + 1)
        start = source.find(b"\n", start + 1)
    return tuple(offsets)


@dataclass(frozen=True)
class Document:
    uri: str
    text: str
    source: bytes
    tree: SyntaxTree
    line_offsets: tuple[int, ...] = field(repr=False)
    lines: tuple[str, ...] = field(repr=False)

    @classmethod
    def parse(cls, uri: str, text: str) -> Document:
        source = text.encode("utf-8")
        return cls(
            uri=uri,
            text=text,
            source=source,
            tree=parse_source(source),
            line_offsets=_line_offsets(source),
            lines=tuple(text.split("\n")),
        )

    def offset_at(self, line: int, column: int) -> int:
        """Byte offset of a zero-based (line, column), clamped to the document."""
        if line < 0:
            return 0
        if line >= len(self.line_offsets):
            return len(self.source)
        line_start = self.line_offsets[line]
        if line + 1 < len(self.line_offsets):
            line_end = self.line_offsets[line + 1] - 1
        else:
            line_end = len(self.source)
        return min(line_start + max(column, 0), line_end)


class SourceRegistry:
    """Current Document and declaration table for every known file.

    Both mappings are only ever updated by assigning a complete new value for a
    uri, so readers observe either the previous or the next state of a file.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._declarations: dict[str, FileDeclarations] = {}

    def set_document(self, uri: str, text: str) -> SyntaxTree:
        document = Document.parse(uri, text)
        self._documents[uri] = document
        return document.tree

    def get(self, uri: str) -> Document | None:
        return self._documents.get(uri)

    def uris(self) -> list[str]:
        return list(self._documents)

    def documents(self) -> list[Document]:
        return list(self._documents.values())

    def declarations(self, uri: str) -> FileDeclarations:
        return self._declarations.get(uri, {})

    def all_declarations(self) -> list[FileDeclarations]:
        return list(self._declarations.values())

    def replace_declarations(self, uri: str, table: FileDeclarations) -> None:
        self._declarations[uri] = table

    def remove(self, uri: str) -> None:
        self._documents.pop(uri, None)
        self._declarations.pop(uri, None)
