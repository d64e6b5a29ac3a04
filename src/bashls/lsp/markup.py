"""Rendering of explainshell help HTML as hover markdown."""

import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

_INLINE_MARKS = {
    "b": "**",
    "strong": "**",
    "i": "*",
    "em": "*",
    "u": "*",
    "code": "`",
}

_BLOCK_TAGS = frozenset({"p", "div", "pre"})

_BLANK_LINES = re.compile(r"\n{3,}")


def _render(element: Tag | NavigableString) -> str:
    if isinstance(element, Comment):
        return ""
    if isinstance(element, NavigableString):
        return str(element)

    inner = "".join(_render(child) for child in element.children)
    name = element.name
    if name in _INLINE_MARKS:
        text = inner.strip()
        if not text:
            return inner
        mark = _INLINE_MARKS[name]
        return f"{mark}{text}{mark}"
    if name == "br":
        return "\n"
    if name == "a" and element.get("href"):
        return f"[{inner}]({element['href']})"
    if name in _BLOCK_TAGS:
        return f"\n\n{inner.strip()}\n\n"
    return inner


def html_to_markdown(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()
    text = "".join(_render(child) for child in soup.children)
    return _BLANK_LINES.sub("\n\n", text).strip()
