"""Narrow read-only view over a parsed markup tree.

The extractor only ever needs four things from a node: its tag name, its
children, an attribute lookup, and its text.  :class:`MarkupNode` captures
that; :class:`SoupNode` implements it on top of BeautifulSoup so the rest of
the pipeline never touches ``bs4`` directly (and tests can hand-build trees).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Protocol

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

TEXT_NODE = "#text"

# Removed before extraction; never part of readable content.
_NON_CONTENT_TAGS = [
    "script", "style", "noscript", "template", "nav", "aside",
    "form", "iframe", "svg", "button", "title",
]
# Removed only when they frame the page rather than an article.
_PAGE_CHROME_TAGS = ["header", "footer"]


class ExtractionError(Exception):
    """Raised when markup cannot be turned into a tree at all."""


class MarkupNode(Protocol):
    @property
    def name(self) -> str:
        """Lower-case tag name, or ``"#text"`` for a text node."""

    def children(self) -> Iterator["MarkupNode"]:
        """Child elements and text nodes, in document order."""

    def attr(self, key: str) -> Optional[str]:
        """Attribute value, or ``None`` when absent."""

    def text(self) -> str:
        """Concatenated raw text of the node and its descendants."""


@dataclass(frozen=True)
class ParsedMarkup:
    """Result of a tree parse: the content root plus the page ``<title>``."""

    root: MarkupNode
    title: str = ""


class SoupNode:
    """:class:`MarkupNode` backed by a BeautifulSoup ``Tag`` or string."""

    __slots__ = ("_node",)

    def __init__(self, node: Tag | NavigableString) -> None:
        self._node = node

    @property
    def name(self) -> str:
        if isinstance(self._node, NavigableString):
            return TEXT_NODE
        return (self._node.name or "").lower()

    def children(self) -> Iterator[SoupNode]:
        if not isinstance(self._node, Tag):
            return
        for child in self._node.children:
            # Comments, doctypes, CDATA and processing instructions carry no prose.
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, (Tag, NavigableString)):
                yield SoupNode(child)

    def attr(self, key: str) -> Optional[str]:
        if not isinstance(self._node, Tag):
            return None
        value = self._node.get(key)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def text(self) -> str:
        if isinstance(self._node, Tag):
            return self._node.get_text()
        return str(self._node)

    def __repr__(self) -> str:
        return f"SoupNode({self.name!r})"


def parse_markup(markup: str) -> ParsedMarkup:
    """Parse *markup* and return its main content root.

    Non-content tags are dropped first.  The root is the first ``<article>``,
    else ``<main>``, else an element with ``role="main"``, else ``<body>``,
    else the whole document.

    Raises:
        ExtractionError: If the parser itself fails on *markup*.
    """
    try:
        soup = BeautifulSoup(markup, "html.parser")
    except Exception as exc:
        raise ExtractionError(f"could not parse markup: {exc}") from exc

    title = ""
    if soup.title is not None and soup.title.string:
        title = " ".join(soup.title.string.split())

    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    for tag in soup(_PAGE_CHROME_TAGS):
        if tag.find_parent(["article", "main"]) is None:
            tag.decompose()
    if soup.head is not None:
        soup.head.decompose()

    root = (
        soup.find("article")
        or soup.find("main")
        or soup.find(attrs={"role": "main"})
        or soup.body
        or soup
    )
    return ParsedMarkup(root=SoupNode(root), title=title)
