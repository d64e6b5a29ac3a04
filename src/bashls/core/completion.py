from __future__ import annotations

import logging
from collections.abc import Iterable

from bashls.core.ports.catalog import CommandCatalog
from bashls.models import (
    CompletionData,
    CompletionItem,
    CompletionKind,
    Declaration,
    DeclarationKind,
    SourceKind,
)

logger = logging.getLogger(__name__)

_DECLARATION_COMPLETION_KINDS = {
    DeclarationKind.FUNCTION: CompletionKind.FUNCTION,
    DeclarationKind.VARIABLE: CompletionKind.VARIABLE,
    DeclarationKind.ENVIRONMENT_VARIABLE: CompletionKind.VARIABLE,
}


def symbol_completions(declarations: Iterable[Declaration]) -> list[CompletionItem]:
    """One completion per distinct (name, kind), in first-seen order."""
    seen: set[tuple[str, DeclarationKind]] = set()
    items: list[CompletionItem] = []
    for declaration in declarations:
        key = (declaration.name, declaration.kind)
        if key in seen:
            continue
        seen.add(key)
        items.append(
            CompletionItem(
                label=declaration.name,
                kind=_DECLARATION_COMPLETION_KINDS[declaration.kind],
                data=CompletionData(name=declaration.name, source_kind=SourceKind.SYMBOL),
            )
        )
    return items


def executable_completions(names: Iterable[str]) -> list[CompletionItem]:
    return [
        CompletionItem(
            label=name,
            kind=CompletionKind.FUNCTION,
            data=CompletionData(name=name, source_kind=SourceKind.EXECUTABLE),
        )
        for name in names
    ]


def builtin_completions(names: Iterable[str]) -> list[CompletionItem]:
    return [
        CompletionItem(
            label=name,
            kind=CompletionKind.METHOD,
            data=CompletionData(name=name, source_kind=SourceKind.BUILTIN),
        )
        for name in names
    ]


def merge_completions(
    symbols: Iterable[CompletionItem],
    executables: Iterable[CompletionItem],
    builtins: Iterable[CompletionItem],
    current_word: str | None = None,
) -> list[CompletionItem]:
    """Concatenate, prefix-filter, sort by label and drop repeated labels.

    Names such as ``echo`` are both a builtin and an executable; only the first
    item of a run of equal labels survives.
    """
    items = [*symbols, *executables, *builtins]
    if current_word:
        items = [item for item in items if item.label.startswith(current_word)]
    items.sort(key=lambda item: item.label)

    deduped: list[CompletionItem] = []
    for item in items:
        if deduped and deduped[-1].label == item.label:
            continue
        deduped.append(item)
    return deduped


async def resolve_completion(
    item: CompletionItem,
    builtins: CommandCatalog,
    executables: CommandCatalog,
) -> CompletionItem:
    """Attach documentation to a selected item, leaving it unresolved on failure."""
    source_kind = item.data.source_kind
    if source_kind == SourceKind.BUILTIN:
        catalog = builtins
    elif source_kind == SourceKind.EXECUTABLE:
        catalog = executables
    else:
        return item

    try:
        documentation = await catalog.documentation(item.data.name)
    except Exception:
        logger.exception("Error resolving completion item %r", item.data.name)
        return item
    return item.model_copy(update={"documentation": documentation})
