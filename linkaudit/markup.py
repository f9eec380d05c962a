"""Markup parsing capability used by the link extractor.

Extraction only talks to :class:`MarkupParser`, so the HTML parser can be
swapped without touching the extraction logic. The default implementation
wraps BeautifulSoup with the permissive ``lxml`` tree builder.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag

DEFAULT_FEATURES = "lxml"


class MarkupElement(Protocol):
    """Minimal element surface needed for link extraction."""

    def get_attribute(self, name: str) -> Optional[str]: ...

    def text(self) -> str: ...


class MarkupParser(Protocol):
    """``parse(markup) -> tree`` and ``select(tree, selector) -> elements``."""

    def parse(self, markup: str) -> Any: ...

    def select(self, tree: Any, selector: str) -> Iterable[MarkupElement]: ...


class SoupElement:
    """Adapter exposing a BeautifulSoup tag through :class:`MarkupElement`."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if value is None:
            return None
        # Multi-valued attributes (rel, class) come back as lists.
        if isinstance(value, (list, tuple)):
            return " ".join(value)
        return str(value)

    def text(self) -> str:
        return self._tag.get_text(" ", strip=True)


class SoupParser:
    """BeautifulSoup-backed :class:`MarkupParser`."""

    def __init__(self, features: str = DEFAULT_FEATURES) -> None:
        self.features = features

    def parse(self, markup: str) -> BeautifulSoup:
        return BeautifulSoup(markup or "", self.features)

    def select(self, tree: BeautifulSoup, selector: str) -> Iterable[SoupElement]:
        for tag in tree.select(selector):
            yield SoupElement(tag)


def default_parser() -> MarkupParser:
    """Return the parser used when callers do not supply one."""
    return SoupParser()
