"""Single-pass extraction of diagnostics and declarations from a syntax tree."""

from __future__ import annotations

from bashls.core.nodes import (
    DEFINITION_KINDS,
    definition_name,
    enclosing_function,
    is_definition,
    node_location,
    node_range,
)
from bashls.core.registry import FileDeclarations
from bashls.core.tree import SyntaxTree
from bashls.models import Declaration, Diagnostic, DiagnosticSeverity

PARSE_ERROR_MESSAGE = "Failed to parse expression"


def missing_token_message(node_type: str) -> str:
    return f'Syntax error: expected "{node_type}" somewhere in the file'


def analyze_tree(uri: str, tree: SyntaxTree) -> tuple[list[Diagnostic], FileDeclarations]:
    """Walk ``tree`` once in document order.

    Returns the diagnostics for error and missing nodes together with a fresh
    declaration table for the file.
    """
    diagnostics: list[Diagnostic] = []
    declarations: FileDeclarations = {}

    for node in tree.walk():
        if node.is_error:
            diagnostics.append(
                Diagnostic(
                    range=node_range(node),
                    message=PARSE_ERROR_MESSAGE,
                    severity=DiagnosticSeverity.ERROR,
                )
            )
        elif node.is_missing:
            diagnostics.append(
                Diagnostic(
                    range=node_range(node),
                    message=missing_token_message(node.type),
                    severity=DiagnosticSeverity.WARNING,
                )
            )
        elif is_definition(node):
            name = definition_name(tree, node)
            if not name:
                continue
            container = enclosing_function(tree, node)
            container_name = definition_name(tree, container) if container is not None else None
            declarations.setdefault(name, []).append(
                Declaration(
                    name=name,
                    kind=DEFINITION_KINDS[node.type],
                    location=node_location(uri, node),
                    container_name=container_name,
                )
            )

    return diagnostics, declarations
