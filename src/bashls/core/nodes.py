"""Classification of bash grammar nodes."""

from bashls.core.tree import SyntaxNode, SyntaxTree
from bashls.models import DeclarationKind, Location, Position, Range

DEFINITION_KINDS: dict[str, DeclarationKind] = {
    "environment_variable_assignment": DeclarationKind.ENVIRONMENT_VARIABLE,
    "function_definition": DeclarationKind.FUNCTION,
    "variable_assignment": DeclarationKind.VARIABLE,
}

REFERENCE_TYPES = frozenset({"variable_name", "command_name"})


def is_definition(node: SyntaxNode) -> bool:
    return node.type in DEFINITION_KINDS


def is_reference(node: SyntaxNode) -> bool:
    return node.type in REFERENCE_TYPES


def node_range(node: SyntaxNode) -> Range:
    return Range(
        start=Position(line=node.start_point[0], character=node.start_point[1]),
        end=Position(line=node.end_point[0], character=node.end_point[1]),
    )


def node_location(uri: str, node: SyntaxNode) -> Location:
    return Location(uri=uri, range=node_range(node))


def definition_name(tree: SyntaxTree, node: SyntaxNode) -> str | None:
    named = tree.first_named_child(node)
    if named is None:
        return None
    return tree.text(named)


def enclosing_function(tree: SyntaxTree, node: SyntaxNode) -> SyntaxNode | None:
    for ancestor in tree.ancestors(node):
        if ancestor.type == "function_definition":
            return ancestor
    return None
