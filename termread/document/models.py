"""Dataclass models for an extracted page.

A :class:`Document` is produced once by the extractor and is read-only from
then on.  Its body is a sequence of content blocks, each block being one of
the variant dataclasses below; a block only carries the fields of its own kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Heading:
    level: int
    text: str

    def __post_init__(self) -> None:
        if not 1 <= self.level <= 6:
            raise ValueError(f"heading level must be 1-6, got {self.level}")


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class Code:
    """Preformatted code; ``text`` keeps its original line breaks and spacing."""

    text: str
    language: str = ""


@dataclass(frozen=True)
class ListBlock:
    items: tuple[str, ...]
    ordered: bool = False


@dataclass(frozen=True)
class Quote:
    text: str


@dataclass(frozen=True)
class Image:
    alt: str
    url: str = ""


@dataclass(frozen=True)
class Table:
    """A table; rows may have different lengths."""

    rows: tuple[tuple[str, ...], ...]
    header: bool = False

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


@dataclass(frozen=True)
class HorizontalRule:
    pass


ContentBlock = Union[Heading, Paragraph, Code, ListBlock, Quote, Image, Table, HorizontalRule]


@dataclass(frozen=True)
class Link:
    """A footnote link; ``index`` is 1-based and follows document order."""

    index: int
    text: str
    url: str


@dataclass(frozen=True)
class PageMetadata:
    """Title/author/site name read from the full page, before content extraction."""

    title: str = ""
    author: str = ""
    site_name: str = ""


@dataclass(frozen=True)
class Document:
    title: str
    url: str = ""
    author: str = ""
    site_name: str = ""
    blocks: tuple[ContentBlock, ...] = field(default_factory=tuple)
    links: tuple[Link, ...] = field(default_factory=tuple)

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    def headings(self) -> list[Heading]:
        return [b for b in self.blocks if isinstance(b, Heading)]

    def link_by_index(self, index: int) -> Link | None:
        """Return the link numbered *index*, or ``None``."""
        for link in self.links:
            if link.index == index:
                return link
        return None
