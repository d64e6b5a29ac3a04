"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from bashls.core.analyzer import Analyzer
from bashls.core.tree import SyntaxNode, SyntaxTree

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag every test under tests/unit as "unit"
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Hand-built trees, for node shapes the bash grammar rarely produces
# ---------------------------------------------------------------------------


def make_node(
    index: int,
    type: str,
    start: int,
    end: int,
    parent: int | None = None,
    children: tuple[int, ...] = (),
    named_children: tuple[int, ...] | None = None,
    is_named: bool = True,
    is_error: bool = False,
    is_missing: bool = False,
) -> SyntaxNode:
    """Build a node on line 0, where byte offsets equal columns."""
    return SyntaxNode(
        index=index,
        type=type,
        is_named=is_named,
        is_error=is_error,
        is_missing=is_missing,
        start_byte=start,
        end_byte=end,
        start_point=(0, start),
        end_point=(0, end),
        parent=parent,
        children=children,
        named_children=children if named_children is None else named_children,
    )


def make_tree(source: str, nodes: list[SyntaxNode]) -> SyntaxTree:
    return SyntaxTree(source=source.encode("utf-8"), nodes=tuple(nodes))


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def analyzer() -> Analyzer:
    return Analyzer()


@pytest.fixture
def example_source() -> str:
    return "foo() { x=1; }\necho $x"


@pytest.fixture
def node_factory() -> type:
    class _Factory:
        node = staticmethod(make_node)
        tree = staticmethod(make_tree)

    return _Factory
