"""pygls language server wiring the Analyzer to editor requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from lsprotocol import types as lsp
from pydantic import ValidationError
from pygls.lsp.server import LanguageServer
from pygls.workspace import PositionCodec

from bashls import __version__
from bashls.catalog.builtins import Builtins
from bashls.catalog.executables import Executables
from bashls.catalog.shell import ShellCommandError
from bashls.config import ServerConfig
from bashls.core.analyzer import Analyzer
from bashls.core.completion import (
    builtin_completions,
    executable_completions,
    merge_completions,
    resolve_completion,
)
from bashls.core.hover import HoverEnricher
from bashls.core.languages import matches_glob, path_to_uri
from bashls.core.ports.catalog import CommandCatalog
from bashls.core.ports.watcher import FileWatcherPort
from bashls.lsp.convert import (
    Lines,
    from_lsp_position,
    to_lsp_completion,
    to_lsp_diagnostic,
    to_lsp_location,
    to_lsp_range,
    to_lsp_symbol,
    utf16_codec,
)
from bashls.lsp.markup import html_to_markdown
from bashls.models import CompletionData, CompletionItem, CompletionKind, Location, SourceKind

logger = logging.getLogger(__name__)

_SOURCE_COMPLETION_KINDS = {
    SourceKind.SYMBOL: CompletionKind.VARIABLE,
    SourceKind.EXECUTABLE: CompletionKind.FUNCTION,
    SourceKind.BUILTIN: CompletionKind.METHOD,
}


def _plaintext_hover(doc: str) -> lsp.Hover:
    return lsp.Hover(contents=lsp.MarkupContent(kind=lsp.MarkupKind.PlainText, value=doc))


class BashServer:
    """Glue between LSP requests and the Analyzer and its collaborators."""

    def __init__(
        self,
        analyzer: Analyzer,
        config: ServerConfig,
        builtins: CommandCatalog | None = None,
        executables: CommandCatalog | None = None,
        hover_enricher: HoverEnricher | None = None,
    ) -> None:
        self.analyzer = analyzer
        self.config = config
        self.builtins: CommandCatalog = builtins if builtins is not None else Builtins()
        self.executables: CommandCatalog = executables if executables is not None else Executables()
        self.hover_enricher = hover_enricher
        self.watcher: FileWatcherPort | None = None
        self.position_codec: PositionCodec = utf16_codec()

    def configure(self, options: dict[str, object]) -> None:
        """Apply client ``initializationOptions`` on top of the environment config."""
        self.config = self.config.merged_with(options)
        if self.hover_enricher is None:
            self.hover_enricher = make_hover_enricher(self.config)

    # -- workspace ---------------------------------------------------------

    def analyze_workspace(self, root_path: str | None) -> int:
        # a single script opened without a workspace folder
        if not root_path:
            return 0
        count = self.analyzer.analyze_root(root_path, self.config.glob_pattern)
        logger.info("Analyzed %d file(s) under %s", count, root_path)
        return count

    def workspace_filter(self, root_path: str | Path) -> Callable[[Path], bool]:
        """Select the same files on disk that ``analyze_workspace`` picks up."""
        root = Path(root_path).resolve()
        pattern = self.config.glob_pattern

        def accept(path: Path) -> bool:
            try:
                relative = path.resolve().relative_to(root)
            except ValueError:
                return False
            return matches_glob(relative, pattern)

        return accept

    async def load_executables(self) -> None:
        self.executables = await asyncio.to_thread(Executables.from_path)
        logger.info("Finished loading executables")

    async def reanalyze_paths(self, paths: set[Path], open_uris: set[str]) -> None:
        """Refresh scripts changed on disk; open documents belong to the editor."""
        for path in sorted(paths):
            uri = path_to_uri(path)
            if uri in open_uris:
                continue
            if not path.is_file():
                self.analyzer.remove(uri)
                logger.info("Removed %s", uri)
                continue
            text = path.read_bytes().decode("utf-8", errors="replace")
            self.analyzer.analyze(uri, text)
            logger.info("Re-analyzed %s", uri)

    # -- documents ---------------------------------------------------------

    def document_changed(self, uri: str, text: str) -> list[lsp.Diagnostic] | None:
        """Re-analyze a document; returns the diagnostics to publish, if enabled."""
        diagnostics = self.analyzer.analyze(uri, text)
        if not self.config.highlight_parsing_errors:
            return None
        lines = self._lines(uri)
        return [to_lsp_diagnostic(d, lines, self.position_codec) for d in diagnostics]

    def _lines(self, uri: str) -> Lines:
        document = self.analyzer.get_document(uri)
        return document.lines if document is not None else ()

    def _point(self, params: lsp.TextDocumentPositionParams) -> tuple[int, int]:
        lines = self._lines(params.text_document.uri)
        return from_lsp_position(params.position, lines, self.position_codec)

    def _word(self, params: lsp.TextDocumentPositionParams) -> str | None:
        line, column = self._point(params)
        return self.analyzer.word_at_point(params.text_document.uri, line, column)

    def _location(self, location: Location) -> lsp.Location:
        return to_lsp_location(location, self._lines(location.uri), self.position_codec)

    # -- queries -----------------------------------------------------------

    async def on_hover(self, params: lsp.HoverParams) -> lsp.Hover | None:
        line, column = self._point(params)
        logger.debug("Hovering over %d:%d", line, column)
        word = self.analyzer.word_at_point(params.text_document.uri, line, column)

        document = self.analyzer.get_document(params.text_document.uri)
        if self.hover_enricher is not None and document is not None:
            result = await self.hover_enricher.explain(document, line, column)
            if result.is_error or not result.help_html:
                logger.debug("explainshell returned: %s", result.model_dump_json())
            else:
                return lsp.Hover(
                    contents=lsp.MarkupContent(
                        kind=lsp.MarkupKind.Markdown,
                        value=html_to_markdown(result.help_html),
                    )
                )

        if not word:
            return None
        for catalog in (self.builtins, self.executables):
            if catalog.contains(word):
                try:
                    return _plaintext_hover(await catalog.documentation(word))
                except ShellCommandError:
                    logger.exception("Failed to fetch documentation for %r", word)
                    return None
        return None

    def on_definition(self, params: lsp.DefinitionParams) -> list[lsp.Location]:
        logger.debug("Asked for definition at %d:%d", params.position.line, params.position.character)
        word = self._word(params)
        if not word:
            return []
        return [self._location(loc) for loc in self.analyzer.find_definition(word)]

    def on_document_symbol(self, params: lsp.DocumentSymbolParams) -> list[lsp.SymbolInformation]:
        uri = params.text_document.uri
        lines = self._lines(uri)
        return [to_lsp_symbol(d, lines, self.position_codec) for d in self.analyzer.find_symbols(uri)]

    def on_document_highlight(self, params: lsp.DocumentHighlightParams) -> list[lsp.DocumentHighlight]:
        word = self._word(params)
        if not word:
            return []
        uri = params.text_document.uri
        lines = self._lines(uri)
        return [
            lsp.DocumentHighlight(range=to_lsp_range(loc.range, lines, self.position_codec))
            for loc in self.analyzer.find_occurrences(uri, word)
        ]

    def on_references(self, params: lsp.ReferenceParams) -> list[lsp.Location]:
        word = self._word(params)
        if not word:
            return []
        return [self._location(loc) for loc in self.analyzer.find_references(word)]

    def on_completion(self, params: lsp.CompletionParams) -> list[lsp.CompletionItem]:
        logger.debug("Asked for completions at %d:%d", params.position.line, params.position.character)
        items = merge_completions(
            self.analyzer.find_symbol_completions(params.text_document.uri),
            executable_completions(self.executables.list()),
            builtin_completions(self.builtins.list()),
            current_word=self._word(params),
        )
        return [to_lsp_completion(item) for item in items]

    async def on_completion_resolve(self, item: lsp.CompletionItem) -> lsp.CompletionItem:
        try:
            data = CompletionData.model_validate(item.data)
        except ValidationError:
            logger.warning("Completion item %r carries no resolve data", item.label)
            return item
        resolved = await resolve_completion(
            CompletionItem(label=item.label, kind=_SOURCE_COMPLETION_KINDS[data.source_kind], data=data),
            self.builtins,
            self.executables,
        )
        if resolved.documentation is not None:
            item.documentation = resolved.documentation
        return item

    async def shutdown(self) -> None:
        if self.watcher is not None:
            await self.watcher.stop()
            self.watcher = None
        if self.hover_enricher is not None:
            await self.hover_enricher.aclose()


def create_language_server(bash_server: BashServer) -> LanguageServer:
    """Create a pygls server with every supported feature registered."""

    server = LanguageServer("bashls", __version__, text_document_sync_kind=lsp.TextDocumentSyncKind.Full)
    background: set[asyncio.Task[None]] = set()

    def _publish(uri: str) -> None:
        document = server.workspace.get_text_document(uri)
        diagnostics = bash_server.document_changed(uri, document.source)
        if diagnostics is not None:
            server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics))

    @server.feature(lsp.INITIALIZE)
    def on_initialize(params: lsp.InitializeParams) -> None:
        options = params.initialization_options
        if isinstance(options, dict):
            bash_server.configure(options)
        bash_server.position_codec = server.workspace.position_codec
        logger.info("Initialized server v. %s for %s", __version__, params.root_uri)

    @server.feature(lsp.INITIALIZED)
    async def on_initialized(params: lsp.InitializedParams) -> None:
        task = asyncio.create_task(bash_server.load_executables())
        background.add(task)
        task.add_done_callback(background.discard)

        root_path = server.workspace.root_path
        bash_server.analyze_workspace(root_path)

        if root_path and bash_server.config.watch_workspace:
            from bashls.watcher.watchfiles_adapter import WatchfilesWatcher

            async def _on_change(paths: set[Path]) -> None:
                await bash_server.reanalyze_paths(paths, set(server.workspace.text_documents))

            bash_server.watcher = WatchfilesWatcher(root_path, _on_change, bash_server.workspace_filter(root_path))
            await bash_server.watcher.start()

    @server.feature(lsp.SHUTDOWN)
    async def on_shutdown(params: None) -> None:
        await bash_server.shutdown()

    @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
    def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
        _publish(params.text_document.uri)

    @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
    def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
        _publish(params.text_document.uri)

    @server.feature(lsp.TEXT_DOCUMENT_HOVER)
    async def hover(params: lsp.HoverParams) -> lsp.Hover | None:
        return await bash_server.on_hover(params)

    @server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
    def definition(params: lsp.DefinitionParams) -> list[lsp.Location]:
        return bash_server.on_definition(params)

    @server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
    def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.SymbolInformation]:
        return bash_server.on_document_symbol(params)

    @server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_HIGHLIGHT)
    def document_highlight(params: lsp.DocumentHighlightParams) -> list[lsp.DocumentHighlight]:
        return bash_server.on_document_highlight(params)

    @server.feature(lsp.TEXT_DOCUMENT_REFERENCES)
    def references(params: lsp.ReferenceParams) -> list[lsp.Location]:
        return bash_server.on_references(params)

    @server.feature(lsp.TEXT_DOCUMENT_COMPLETION, lsp.CompletionOptions(resolve_provider=True))
    def completion(params: lsp.CompletionParams) -> list[lsp.CompletionItem]:
        return bash_server.on_completion(params)

    @server.feature(lsp.COMPLETION_ITEM_RESOLVE)
    async def completion_resolve(item: lsp.CompletionItem) -> lsp.CompletionItem:
        return await bash_server.on_completion_resolve(item)

    return server


def make_hover_enricher(config: ServerConfig) -> HoverEnricher | None:
    if not config.explainshell_endpoint:
        return None
    from bashls.explainshell.client import ExplainshellClient

    client = ExplainshellClient(config.explainshell_endpoint, timeout=config.explainshell_timeout)
    return HoverEnricher(client)


def build_bash_server(config: ServerConfig | None = None) -> BashServer:
    config = config if config is not None else ServerConfig.from_env()
    return BashServer(Analyzer(), config, hover_enricher=make_hover_enricher(config))
