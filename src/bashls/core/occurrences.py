from __future__ import annotations

from bashls.core.nodes import is_definition, is_reference, node_location
from bashls.core.registry import Document
from bashls.core.tree import SyntaxNode, SyntaxTree
from bashls.models import Location


def _is_definition_name(tree: SyntaxTree, node: SyntaxNode) -> bool:
    parent = tree.parent_of(node)
    if parent is None or not is_definition(parent):
        return False
    return tree.first_named_child(parent) == node


def find_occurrences(document: Document, name: str) -> list[Location]:
    """Every reference or definition of ``name`` in one document.

    Always a linear scan of the current tree; the declaration table is not
    consulted. Not scope-aware.
    """
    tree = document.tree
    locations: list[Location] = []
    for node in tree.walk():
        if is_reference(node):
            if _is_definition_name(tree, node):
                continue
            target = tree.first_named_child(node) or node
            if tree.text(target) == name:
                locations.append(node_location(document.uri, target))
        elif is_definition(node):
            named = tree.first_named_child(node)
            if named is not None and tree.text(named) == name:
                locations.append(node_location(document.uri, node))
    return locations
