"""The Analyzer owns every parsed file and answers editor queries over them."""

from __future__ import annotations

import logging
from pathlib import Path

from bashls.core.analysis import analyze_tree
from bashls.core.completion import symbol_completions
from bashls.core.languages import path_to_uri
from bashls.core.occurrences import find_occurrences
from bashls.core.position import word_for_point
from bashls.core.registry import Document, SourceRegistry
from bashls.models import CompletionItem, Declaration, Diagnostic, Location

logger = logging.getLogger(__name__)


class Analyzer:
    def __init__(self, registry: SourceRegistry | None = None) -> None:
        self.registry = registry if registry is not None else SourceRegistry()

    def analyze(self, uri: str, text: str) -> list[Diagnostic]:
        """Parse ``text`` as the new content of ``uri`` and rebuild its declarations.

        Returns the syntax errors and missing-token warnings of the new tree.
        """
        tree = self.registry.set_document(uri, text)
        diagnostics, declarations = analyze_tree(uri, tree)
        self.registry.replace_declarations(uri, declarations)
        return diagnostics

    def analyze_root(self, root: str | Path, glob_pattern: str = "**/*.sh") -> int:
        root_path = Path(root)
        count = 0
        for file_path in sorted(root_path.glob(glob_pattern)):
            if not file_path.is_file():
                continue
            uri = path_to_uri(file_path)
            try:
                text = file_path.read_bytes().decode("utf-8", errors="replace")
            except OSError as exc:
                logger.warning("Skipping %s: %s", file_path, exc)
                continue
            logger.info("Analyzing %s", uri)
            self.analyze(uri, text)
            count += 1
        return count

    def remove(self, uri: str) -> None:
        self.registry.remove(uri)

    def get_document(self, uri: str) -> Document | None:
        return self.registry.get(uri)

    def word_at_point(self, uri: str, line: int, column: int) -> str | None:
        document = self.registry.get(uri)
        if document is None:
            return None
        return word_for_point(document.tree, (line, column))

    def find_definition(self, name: str) -> list[Location]:
        locations: list[Location] = []
        for table in self.registry.all_declarations():
            locations.extend(d.location for d in table.get(name, []))
        return locations

    def find_occurrences(self, uri: str, name: str) -> list[Location]:
        document = self.registry.get(uri)
        if document is None:
            return []
        return find_occurrences(document, name)

    def find_references(self, name: str) -> list[Location]:
        locations: list[Location] = []
        for document in self.registry.documents():
            locations.extend(find_occurrences(document, name))
        return locations

    def find_symbols(self, uri: str) -> list[Declaration]:
        return [d for declarations in self.registry.declarations(uri).values() for d in declarations]

    def find_symbol_completions(self, uri: str) -> list[CompletionItem]:
        return symbol_completions(self.find_symbols(uri))
