"""Mapping editor positions to syntax nodes.

Editors report cursors that can sit exactly between two tokens, e.g. right
after ``echo`` in ``echo 42``. The smallest named node containing that point
is the whole command, so the lookup falls back to searching the node's named
children for one that starts or ends exactly at the point.
"""

from __future__ import annotations

from bashls.core.tree import Point, SyntaxNode, SyntaxTree


def _child_containing(tree: SyntaxTree, node: SyntaxNode, point: Point) -> SyntaxNode | None:
    for index in node.children:
        child = tree.nodes[index]
        if child.end_point <= point:
            continue
        if point < child.start_point:
            break
        return child
    return None


def descendant_for_point(tree: SyntaxTree, point: Point) -> SyntaxNode:
    """Smallest node (named or anonymous) containing ``point``."""
    node = tree.root
    child = _child_containing(tree, node, point)
    while child is not None:
        node = child
        child = _child_containing(tree, node, point)
    return node


def named_descendant_for_point(tree: SyntaxTree, point: Point) -> SyntaxNode:
    """Smallest named node containing ``point``."""
    node = tree.root
    result = node
    child = _child_containing(tree, node, point)
    while child is not None:
        node = child
        if node.is_named:
            result = node
        child = _child_containing(tree, node, point)
    return result


def named_leaf_for_point(tree: SyntaxTree, point: Point) -> SyntaxNode | None:
    node = named_descendant_for_point(tree, point)
    # a childless root is a blank document, not a word
    if node.parent is None and not node.children:
        return None
    while node.children:
        child = tree.first_named_child(node)
        while child is not None:
            if child.start_point == point or child.end_point == point:
                break
            child = tree.next_named_sibling(child)
        if child is None:
            return None
        node = child
    return node


def word_for_point(tree: SyntaxTree, point: Point) -> str | None:
    node = named_leaf_for_point(tree, point)
    if node is None:
        return None
    word = tree.text(node)
    # the grammar tokenizes `name=value` so that the name can keep the `=`
    if word.endswith("="):
        word = word[:-1]
    return word
