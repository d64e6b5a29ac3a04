"""Arena representation of a parsed shell script.

Nodes are stored in pre-order in a single tuple and refer to each other by
index, so iterating ``SyntaxTree.nodes`` is a document-order walk and dropping
the tree drops every node at once.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node, Tree

Point = tuple[int, int]


@dataclass(frozen=True)
class SyntaxNode:
    index: int
    type: str
    is_named: bool
    is_error: bool
    is_missing: bool
    start_byte: int
    end_byte: int
    start_point: Point
    end_point: Point
    parent: int | None
    children: tuple[int, ...]
    named_children: tuple[int, ...]


@dataclass(frozen=True)
class SyntaxTree:
    source: bytes
    nodes: tuple[SyntaxNode, ...]

    @property
    def root(self) -> SyntaxNode:
        return self.nodes[0]

    def walk(self) -> Iterator[SyntaxNode]:
        return iter(self.nodes)

    def text(self, node: SyntaxNode) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def parent_of(self, node: SyntaxNode) -> SyntaxNode | None:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def first_named_child(self, node: SyntaxNode) -> SyntaxNode | None:
        if not node.named_children:
            return None
        return self.nodes[node.named_children[0]]

    def next_named_sibling(self, node: SyntaxNode) -> SyntaxNode | None:
        parent = self.parent_of(node)
        if parent is None:
            return None
        siblings = parent.named_children
        for i in siblings:
            if i > node.index:
                return self.nodes[i]
        return None

    def ancestors(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        current = self.parent_of(node)
        while current is not None:
            yield current
            current = self.parent_of(current)


def build_syntax_tree(tree: Tree, source: bytes) -> SyntaxTree:
    """Flatten a tree-sitter tree into a ``SyntaxTree`` arena."""
    pending: list[tuple[Node, int | None]] = []
    child_lists: list[list[int]] = []
    named_lists: list[list[int]] = []

    stack: list[tuple[Node, int | None]] = [(tree.root_node, None)]
    while stack:
        ts_node, parent = stack.pop()
        index = len(pending)
        pending.append((ts_node, parent))
        child_lists.append([])
        named_lists.append([])
        if parent is not None:
            child_lists[parent].append(index)
            if ts_node.is_named:
                named_lists[parent].append(index)
        stack.extend((child, index) for child in reversed(ts_node.children))

    nodes = tuple(
        SyntaxNode(
            index=index,
            type=ts_node.type,
            is_named=ts_node.is_named,
            is_error=ts_node.is_error,
            is_missing=ts_node.is_missing,
            start_byte=ts_node.start_byte,
            end_byte=ts_node.end_byte,
            start_point=(ts_node.start_point[0], ts_node.start_point[1]),
            end_point=(ts_node.end_point[0], ts_node.end_point[1]),
            parent=parent,
            children=tuple(child_lists[index]),
            named_children=tuple(named_lists[index]),
        )
        for index, (ts_node, parent) in enumerate(pending)
    )
    return SyntaxTree(source=source, nodes=nodes)
