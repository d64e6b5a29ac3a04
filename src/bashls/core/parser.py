from functools import cache
from typing import cast

from tree_sitter import Parser
from tree_sitter_language_pack import SupportedLanguage, get_parser

from bashls.core.tree import SyntaxTree, build_syntax_tree

LANGUAGE = "bash"


@cache
def _parser() -> Parser:
    return get_parser(cast(SupportedLanguage, LANGUAGE))


def parse_source(source_bytes: bytes) -> SyntaxTree:
    tree = _parser().parse(source_bytes)
    return build_syntax_tree(tree, source_bytes)


def parse_text(text: str) -> SyntaxTree:
    return parse_source(text.encode("utf-8"))
