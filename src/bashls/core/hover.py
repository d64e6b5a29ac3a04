from __future__ import annotations

import logging

from bashls.core.ports.documentation import DocumentationClient, DocumentationLookupError
from bashls.core.position import descendant_for_point
from bashls.core.registry import Document
from bashls.core.tree import SyntaxNode
from bashls.models import ExplainResult

logger = logging.getLogger(__name__)


def command_node_for_point(document: Document, line: int, column: int) -> SyntaxNode:
    tree = document.tree
    leaf = descendant_for_point(tree, (line, column))
    # explainshell needs the whole command rather than the hovered word. Going
    # one level up works for simple commands; going further pulls in newlines,
    # which explainshell rejects.
    if leaf.type == "word":
        parent = tree.parent_of(leaf)
        if parent is not None:
            return parent
    return leaf


class HoverEnricher:
    """Look up explainshell documentation for the command under the cursor."""

    def __init__(self, client: DocumentationClient) -> None:
        self._client = client

    async def explain(self, document: Document, line: int, column: int) -> ExplainResult:
        node = command_node_for_point(document, line, column)
        cmd = document.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
        result = ExplainResult(cmd=cmd, cmd_type=node.type)

        try:
            response = await self._client.explain(cmd)
        except DocumentationLookupError as exc:
            logger.warning("Documentation lookup failed for %r: %s", cmd, exc)
            return result.model_copy(update={"status": "error", "reason": str(exc)})

        if response.status == "error":
            return result.model_copy(update={"status": "error", "reason": "service reported an error"})
        if not response.matches:
            return result.model_copy(update={"status": "error", "reason": "no matches"})

        offset = document.offset_at(line, column) - node.start_byte
        match = next((m for m in response.matches if m.start <= offset < m.end), None)
        if match is None or not match.help_html:
            return result.model_copy(update={"status": "error", "reason": "no match at cursor"})
        return result.model_copy(update={"help_html": match.help_html})

    async def aclose(self) -> None:
        await self._client.aclose()
