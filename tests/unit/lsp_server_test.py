"""Tests for the LSP request handlers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from lsprotocol import types as lsp
from pygls.workspace import PositionCodec

from bashls.catalog.shell import ShellCommandError
from bashls.config import ServerConfig
from bashls.core.analyzer import Analyzer
from bashls.core.hover import HoverEnricher
from bashls.core.languages import path_to_uri
from bashls.lsp.server import BashServer, build_bash_server, create_language_server, make_hover_enricher
from bashls.models import ExplainMatch, ExplainResponse

URI = "file:///tmp/main.sh"


def _catalog(names: list[str], documentation: str = "docs") -> MagicMock:
    catalog = MagicMock()
    catalog.list.return_value = sorted(names)
    catalog.contains.side_effect = lambda name: name in names
    catalog.documentation = AsyncMock(return_value=documentation)
    return catalog


def _server(
    config: ServerConfig | None = None,
    builtins: MagicMock | None = None,
    executables: MagicMock | None = None,
    hover_enricher: HoverEnricher | None = None,
) -> BashServer:
    return BashServer(
        Analyzer(),
        config or ServerConfig(),
        builtins=builtins or _catalog(["cd", "echo"]),
        executables=executables or _catalog(["echo", "ls"]),
        hover_enricher=hover_enricher,
    )


def _doc(uri: str = URI) -> lsp.TextDocumentIdentifier:
    return lsp.TextDocumentIdentifier(uri=uri)


def _pos(line: int, character: int) -> lsp.Position:
    return lsp.Position(line=line, character=character)


class TestDocuments:
    def test_document_changed_publishes_diagnostics(self) -> None:
        server = _server()

        diagnostics = server.document_changed(URI, "if true; then echo")

        assert diagnostics
        assert all(isinstance(d, lsp.Diagnostic) for d in diagnostics)
        assert any(d.severity == lsp.DiagnosticSeverity.Warning and "fi" in d.message for d in diagnostics)
        assert diagnostics[0].source == "bashls"

    def test_clean_document_publishes_empty_list(self) -> None:
        assert _server().document_changed(URI, "echo hi\n") == []

    def test_highlighting_disabled_still_analyzes(self) -> None:
        server = _server(ServerConfig(highlight_parsing_errors=False))

        assert server.document_changed(URI, "x=1\nif [ ]\n  then") is None
        assert len(server.analyzer.find_definition("x")) == 1


class TestNavigation:
    @pytest.fixture
    def server(self) -> BashServer:
        server = _server()
        server.document_changed(URI, "foo() { x=1; }\necho $x\nfoo\n")
        return server

    def test_definition(self, server: BashServer) -> None:
        locations = server.on_definition(lsp.DefinitionParams(text_document=_doc(), position=_pos(2, 1)))

        assert len(locations) == 1
        assert locations[0].uri == URI
        assert locations[0].range.start == _pos(0, 0)
        assert locations[0].range.end == _pos(0, 14)

    def test_definition_on_whitespace(self, server: BashServer) -> None:
        params = lsp.DefinitionParams(text_document=_doc("file:///tmp/other.sh"), position=_pos(0, 0))

        assert server.on_definition(params) == []

    def test_document_symbols(self, server: BashServer) -> None:
        symbols = server.on_document_symbol(lsp.DocumentSymbolParams(text_document=_doc()))

        by_name = {s.name: s for s in symbols}
        assert by_name["foo"].kind == lsp.SymbolKind.Function
        assert by_name["x"].kind == lsp.SymbolKind.Variable
        assert by_name["x"].container_name == "foo"

    def test_highlights(self, server: BashServer) -> None:
        highlights = server.on_document_highlight(
            lsp.DocumentHighlightParams(text_document=_doc(), position=_pos(1, 6))
        )

        assert [h.range.start for h in highlights] == [_pos(0, 8), _pos(1, 6)]

    def test_references(self, server: BashServer) -> None:
        params = lsp.ReferenceParams(
            text_document=_doc(),
            position=_pos(0, 1),
            context=lsp.ReferenceContext(include_declaration=True),
        )

        locations = server.on_references(params)

        assert [loc.range.start.line for loc in locations] == [0, 2]


class TestMultibyteColumns:
    SOURCE = 'x="é😀"; foo=1\necho $foo\n'

    @pytest.fixture
    def server(self) -> BashServer:
        server = _server()
        server.document_changed(URI, self.SOURCE)
        return server

    def test_definition_counts_utf16_code_units(self, server: BashServer) -> None:
        locations = server.on_definition(lsp.DefinitionParams(text_document=_doc(), position=_pos(0, 10)))

        assert [(loc.range.start, loc.range.end) for loc in locations] == [(_pos(0, 9), _pos(0, 14))]

    def test_references_count_utf16_code_units(self, server: BashServer) -> None:
        params = lsp.ReferenceParams(
            text_document=_doc(),
            position=_pos(0, 10),
            context=lsp.ReferenceContext(include_declaration=True),
        )

        locations = server.on_references(params)

        assert [(loc.range.start, loc.range.end) for loc in locations] == [
            (_pos(0, 9), _pos(0, 14)),
            (_pos(1, 6), _pos(1, 9)),
        ]

    def test_highlights_count_utf16_code_units(self, server: BashServer) -> None:
        highlights = server.on_document_highlight(
            lsp.DocumentHighlightParams(text_document=_doc(), position=_pos(1, 7))
        )

        assert [(h.range.start, h.range.end) for h in highlights] == [
            (_pos(0, 9), _pos(0, 14)),
            (_pos(1, 6), _pos(1, 9)),
        ]

    def test_negotiated_utf32_counts_code_points(self, server: BashServer) -> None:
        server.position_codec = PositionCodec(lsp.PositionEncodingKind.Utf32)

        locations = server.on_definition(lsp.DefinitionParams(text_document=_doc(), position=_pos(0, 9)))

        assert [(loc.range.start, loc.range.end) for loc in locations] == [(_pos(0, 8), _pos(0, 13))]


class TestCompletion:
    def test_merges_symbols_executables_and_builtins(self) -> None:
        server = _server()
        server.document_changed(URI, "ls_alias=1\nl\n")

        items = server.on_completion(lsp.CompletionParams(text_document=_doc(), position=_pos(1, 1)))

        assert [i.label for i in items] == ["ls", "ls_alias"]
        assert items[0].kind == lsp.CompletionItemKind.Function
        assert items[0].data == {"name": "ls", "source_kind": "executable"}
        assert items[1].kind == lsp.CompletionItemKind.Variable

    def test_builtin_and_executable_names_appear_once(self) -> None:
        server = _server()
        server.document_changed(URI, "ec\n")

        items = server.on_completion(lsp.CompletionParams(text_document=_doc(), position=_pos(0, 2)))

        assert [i.label for i in items] == ["echo"]

    @pytest.mark.asyncio
    async def test_resolve_attaches_documentation(self) -> None:
        builtins = _catalog(["cd"], documentation="cd: cd [dir]")
        server = _server(builtins=builtins)
        item = lsp.CompletionItem(label="cd", data={"name": "cd", "source_kind": "builtin"})

        resolved = await server.on_completion_resolve(item)

        assert resolved.documentation == "cd: cd [dir]"
        builtins.documentation.assert_awaited_once_with("cd")

    @pytest.mark.asyncio
    async def test_resolve_failure_returns_item(self) -> None:
        executables = _catalog(["ls"])
        executables.documentation.side_effect = ShellCommandError("man ls | col -b", 16, "", "")
        server = _server(executables=executables)
        item = lsp.CompletionItem(label="ls", data={"name": "ls", "source_kind": "executable"})

        resolved = await server.on_completion_resolve(item)

        assert resolved.label == "ls"
        assert resolved.documentation is None

    @pytest.mark.asyncio
    async def test_resolve_without_data(self) -> None:
        item = lsp.CompletionItem(label="foreign")

        assert await _server().on_completion_resolve(item) is item


class TestHover:
    @pytest.mark.asyncio
    async def test_explainshell_html_is_rendered_as_markdown(self) -> None:
        client = AsyncMock()
        client.explain.return_value = ExplainResponse(
            status="ok",
            matches=[ExplainMatch(start=0, end=2, help_html="<b>ls</b> - list directory contents")],
        )
        server = _server(hover_enricher=HoverEnricher(client))
        server.document_changed(URI, "ls -la\n")

        hover = await server.on_hover(lsp.HoverParams(text_document=_doc(), position=_pos(0, 1)))

        assert hover is not None
        assert isinstance(hover.contents, lsp.MarkupContent)
        assert hover.contents.kind == lsp.MarkupKind.Markdown
        assert hover.contents.value == "**ls** - list directory contents"

    @pytest.mark.asyncio
    async def test_falls_back_to_builtin_help(self) -> None:
        client = AsyncMock()
        client.explain.return_value = ExplainResponse(status="error")
        builtins = _catalog(["cd"], documentation="cd: cd [dir]")
        server = _server(builtins=builtins, hover_enricher=HoverEnricher(client))
        server.document_changed(URI, "cd /tmp\n")

        hover = await server.on_hover(lsp.HoverParams(text_document=_doc(), position=_pos(0, 0)))

        assert hover is not None
        assert isinstance(hover.contents, lsp.MarkupContent)
        assert hover.contents.kind == lsp.MarkupKind.PlainText
        assert hover.contents.value == "cd: cd [dir]"

    @pytest.mark.asyncio
    async def test_executable_man_page_without_explainshell(self) -> None:
        executables = _catalog(["ls"], documentation="LS(1)")
        server = _server(executables=executables)
        server.document_changed(URI, "ls\n")

        hover = await server.on_hover(lsp.HoverParams(text_document=_doc(), position=_pos(0, 1)))

        assert hover is not None
        assert hover.contents.value == "LS(1)"

    @pytest.mark.asyncio
    async def test_unknown_word_has_no_hover(self) -> None:
        server = _server()
        server.document_changed(URI, "my_tool --flag\n")

        hover = await server.on_hover(lsp.HoverParams(text_document=_doc(), position=_pos(0, 2)))

        assert hover is None

    @pytest.mark.asyncio
    async def test_documentation_failure_has_no_hover(self) -> None:
        executables = _catalog(["ls"])
        executables.documentation.side_effect = ShellCommandError("man ls | col -b", 16, "", "")
        server = _server(executables=executables)
        server.document_changed(URI, "ls\n")

        assert await server.on_hover(lsp.HoverParams(text_document=_doc(), position=_pos(0, 0))) is None


class TestWorkspace:
    def test_analyze_workspace_uses_configured_glob(self, tmp_path: Path) -> None:
        (tmp_path / "a.sh").write_text("a=1\n")
        (tmp_path / "b.bash").write_text("b=1\n")
        server = _server(ServerConfig(glob_pattern="**/*.bash"))

        assert server.analyze_workspace(str(tmp_path)) == 1
        assert server.analyzer.find_definition("a") == []

    def test_workspace_filter_uses_configured_glob(self, tmp_path: Path) -> None:
        accept = _server(ServerConfig(glob_pattern="**/*.bats")).workspace_filter(tmp_path)

        assert accept(tmp_path / "t" / "a.bats")
        assert not accept(tmp_path / "lib.sh")

    def test_workspace_filter_rejects_paths_outside_root(self, tmp_path: Path) -> None:
        accept = _server().workspace_filter(tmp_path / "project")

        assert accept(tmp_path / "project" / "sub" / "a.sh")
        assert not accept(tmp_path / "elsewhere" / "a.sh")

    def test_workspace_filter_agrees_with_bulk_analysis(self, tmp_path: Path) -> None:
        for name in ("a.sh", "sub/b.sh", "sub/c.bash", "run", "notes.txt"):
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("true\n")
        server = _server(ServerConfig(glob_pattern="sub/*"))

        accept = server.workspace_filter(tmp_path)

        accepted = sorted(str(p.relative_to(tmp_path)) for p in tmp_path.rglob("*") if p.is_file() and accept(p))
        assert accepted == ["sub/b.sh", "sub/c.bash"]
        assert server.analyze_workspace(str(tmp_path)) == len(accepted)

    def test_analyze_workspace_without_root(self) -> None:
        assert _server().analyze_workspace(None) == 0

    @pytest.mark.asyncio
    async def test_reanalyze_paths_skips_open_documents(self, tmp_path: Path) -> None:
        changed = tmp_path / "changed.sh"
        changed.write_text("fresh=1\n")
        opened = tmp_path / "open.sh"
        opened.write_text("from_disk=1\n")
        deleted = tmp_path / "deleted.sh"
        server = _server()
        server.analyzer.analyze(path_to_uri(deleted), "stale=1\n")
        server.analyzer.analyze(path_to_uri(opened), "from_editor=1\n")

        await server.reanalyze_paths({changed, opened, deleted}, {path_to_uri(opened)})

        assert len(server.analyzer.find_definition("fresh")) == 1
        assert server.analyzer.find_definition("stale") == []
        assert server.analyzer.find_definition("from_disk") == []
        assert len(server.analyzer.find_definition("from_editor")) == 1

    @pytest.mark.asyncio
    async def test_shutdown_stops_watcher_and_closes_enricher(self) -> None:
        enricher = AsyncMock(spec=HoverEnricher)
        watcher = AsyncMock()
        server = _server(hover_enricher=enricher)
        server.watcher = watcher

        await server.shutdown()

        watcher.stop.assert_awaited_once()
        enricher.aclose.assert_awaited_once()
        assert server.watcher is None


class TestConfiguration:
    def test_make_hover_enricher_requires_endpoint(self) -> None:
        assert make_hover_enricher(ServerConfig()) is None
        assert isinstance(make_hover_enricher(ServerConfig(explainshell_endpoint="http://x.test")), HoverEnricher)

    def test_configure_applies_initialization_options(self) -> None:
        server = _server()

        server.configure({"explainshellEndpoint": "http://x.test", "highlightParsingErrors": False})

        assert server.config.highlight_parsing_errors is False
        assert isinstance(server.hover_enricher, HoverEnricher)

    def test_build_bash_server_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HIGHLIGHT_PARSING_ERRORS", "0")
        monkeypatch.delenv("EXPLAINSHELL_ENDPOINT", raising=False)

        server = build_bash_server()

        assert server.config.highlight_parsing_errors is False
        assert server.hover_enricher is None

    def test_create_language_server(self) -> None:
        language_server = create_language_server(_server())

        assert language_server.name == "bashls"
