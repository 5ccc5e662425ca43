"""Content extraction: turns page markup into a :class:`Document`.

The walk is a pre-order traversal of the content root driven by an explicit
stack, so nesting depth is bounded only by memory.  Block-level tags map onto
content blocks; generic containers are transparent; anything else is
flattened into a paragraph.  Anchors met while flattening text become
numbered footnotes (``"text [N]"``) collected in document order.

Extraction never raises: if the tree parse fails the markup is stripped down
to a single best-effort paragraph instead.
"""

from __future__ import annotations

import html
import logging
import re
from itertools import chain
from typing import Callable, Iterable, Iterator, List, Optional, Union
from urllib.parse import urljoin

import trafilatura

from termread.document.models import (
    Code,
    ContentBlock,
    Document,
    Heading,
    HorizontalRule,
    Image,
    Link,
    ListBlock,
    PageMetadata,
    Paragraph,
    Quote,
    Table,
)
from termread.scraper.tree import TEXT_NODE, ExtractionError, MarkupNode, ParsedMarkup, parse_markup

logger = logging.getLogger(__name__)

_HEADINGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
_CONTAINERS = {
    "div", "section", "article", "main", "body", "html", "center", "hgroup", "header", "footer",
}
_INLINE = {
    TEXT_NODE, "a", "abbr", "b", "bdi", "bdo", "cite", "code", "data", "del", "dfn",
    "em", "font", "i", "ins", "kbd", "label", "mark", "q", "s", "samp", "small",
    "span", "strong", "sub", "sup", "time", "tt", "u", "var",
}
_IGNORED = {"br", "wbr"}
_LANGUAGE_PREFIXES = ("language-", "lang-")
_TAG_RE = re.compile(r"<[^>]*(?:>|$)")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _normalize(text: str) -> str:
    """Collapse runs of whitespace to one space and trim."""
    return " ".join(text.split())


def _resolve(base_url: str, value: str) -> str:
    """Resolve *value* against *base_url*; unresolvable values pass through."""
    value = value.strip()
    if not value or not base_url:
        return value
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value


def _find(node: MarkupNode, name: str) -> Optional[MarkupNode]:
    """Depth-first search for the first descendant called *name*."""
    stack: List[Iterator[MarkupNode]] = [iter(node.children())]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
        elif child.name == name:
            return child
        else:
            stack.append(iter(child.children()))
    return None


def _language(node: Optional[MarkupNode]) -> str:
    if node is None:
        return ""
    for cls in (node.attr("class") or "").split():
        for prefix in _LANGUAGE_PREFIXES:
            if cls.startswith(prefix) and len(cls) > len(prefix):
                return cls[len(prefix):]
    return ""


def _strip_tags(markup: str) -> str:
    """Remove every tag, decode entities and normalize whitespace."""
    return _normalize(html.unescape(_TAG_RE.sub(" ", markup)))


class _Walker:
    """Accumulates blocks and links over one extraction run."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self.blocks: List[ContentBlock] = []
        self.links: List[Link] = []

    # -- inline text ------------------------------------------------------

    def inline_text(self, node: MarkupNode) -> str:
        """Flatten *node*'s children into normalized text with footnote markers."""
        return _normalize(self._inline_raw(node.children()))

    def _inline_raw(self, nodes: Iterable[MarkupNode]) -> str:
        parts: List[str] = []
        stack: List[Iterator[Union[MarkupNode, str]]] = [iter(nodes)]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
            elif isinstance(child, str):
                parts.append(child)
            elif child.name == TEXT_NODE:
                parts.append(child.text())
            elif child.name == "a":
                parts.append(self._anchor(child))
            elif child.name in _IGNORED:
                parts.append(" ")
            elif child.name in _INLINE:
                stack.append(iter(child.children()))
            else:
                # Flattened block-level elements keep a word boundary on both sides.
                parts.append(" ")
                stack.append(chain(child.children(), (" ",)))
        return "".join(parts)

    def _anchor(self, node: MarkupNode) -> str:
        text = _normalize(node.text())
        if not text:
            return ""
        href = (node.attr("href") or "").strip()
        if not href or href == "#":
            return text
        index = len(self.links) + 1
        self.links.append(Link(index=index, text=text, url=_resolve(self.base_url, href)))
        return f"{text} [{index}]"

    # -- blocks -----------------------------------------------------------

    def walk_children(self, node: MarkupNode) -> None:
        """Dispatch block children of a transparent container.

        Runs of inline children (loose text, ``<span>``, ``<a>`` ...) are
        gathered into a single paragraph.  Nested containers are descended
        into on the same stack.
        """
        stack: List[tuple[Iterator[MarkupNode], List[MarkupNode]]] = [(iter(node.children()), [])]
        while stack:
            children, run = stack[-1]
            child = next(children, None)
            if child is None:
                self._flush_run(run)
                stack.pop()
            elif child.name in _INLINE:
                run.append(child)
            else:
                self._flush_run(run)
                run.clear()
                if child.name in _CONTAINERS:
                    stack.append((iter(child.children()), []))
                elif child.name not in _IGNORED:
                    self.walk(child)

    def _flush_run(self, run: List[MarkupNode]) -> None:
        if not run:
            return
        text = _normalize(self._inline_raw(run))
        if text:
            self.blocks.append(Paragraph(text))
            return
        for node in run:
            img = _find(node, "img")
            if img is not None:
                self.blocks.append(self._image(img))

    def walk(self, node: MarkupNode) -> None:
        name = node.name

        if name in _HEADINGS:
            text = self.inline_text(node)
            if text:
                self.blocks.append(Heading(level=_HEADINGS[name], text=text))
        elif name == "p":
            self._paragraph(node)
        elif name == "blockquote":
            text = self.inline_text(node)
            if text:
                self.blocks.append(Quote(text))
        elif name in ("ul", "ol"):
            self._list(node, ordered=name == "ol")
        elif name == "pre":
            self._code(node)
        elif name == "hr":
            self.blocks.append(HorizontalRule())
        elif name == "figure":
            self._figure(node)
        elif name == "img":
            self.blocks.append(self._image(node))
        elif name == "table":
            self._table(node)
        elif name in _CONTAINERS:
            self.walk_children(node)
        else:
            self._paragraph(node)

    def _paragraph(self, node: MarkupNode) -> None:
        text = self.inline_text(node)
        if text:
            self.blocks.append(Paragraph(text))
        elif node.name != "figcaption":
            # An image wrapped in <p> or <a> carries no text of its own.
            img = _find(node, "img")
            if img is not None:
                self.blocks.append(self._image(img))

    def _list(self, node: MarkupNode, ordered: bool) -> None:
        items = []
        for child in node.children():
            if child.name != "li":
                continue
            text = self.inline_text(child)
            if text:
                items.append(text)
        if items:
            self.blocks.append(ListBlock(items=tuple(items), ordered=ordered))

    def _code(self, node: MarkupNode) -> None:
        code = _find(node, "code")
        source = code if code is not None else node
        text = source.text().rstrip()
        if not text:
            return
        language = _language(code) or _language(node)
        self.blocks.append(Code(text=text, language=language))

    def _image(self, node: MarkupNode) -> Image:
        src = node.attr("src") or node.attr("data-src") or ""
        return Image(alt=_normalize(node.attr("alt") or ""), url=_resolve(self.base_url, src))

    def _figure(self, node: MarkupNode) -> None:
        img = _find(node, "img")
        if img is not None:
            self.blocks.append(self._image(img))
        caption = _find(node, "figcaption")
        if caption is not None:
            self._paragraph(caption)

    def _table(self, node: MarkupNode) -> None:
        rows: List[tuple[str, ...]] = []
        header = False
        for row, in_head in self._table_rows(node, in_head=False):
            cells = [c for c in row.children() if c.name in ("th", "td")]
            if not cells:
                continue
            if not rows:
                header = in_head or all(c.name == "th" for c in cells)
            rows.append(tuple(self.inline_text(c) for c in cells))
        if rows:
            self.blocks.append(Table(rows=tuple(rows), header=header))

    def _table_rows(self, node: MarkupNode, in_head: bool):
        for child in node.children():
            if child.name == "tr":
                yield child, in_head
            elif child.name in ("thead", "tbody", "tfoot"):
                yield from self._table_rows(child, in_head=child.name == "thead")


def _fallback_document(markup: str, base_url: str, metadata: PageMetadata) -> Document:
    text = _strip_tags(markup)
    blocks = (Paragraph(text),) if text else ()
    return Document(
        title=metadata.title or base_url,
        url=base_url,
        author=metadata.author,
        site_name=metadata.site_name,
        blocks=blocks,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(
    markup: str,
    base_url: str,
    metadata: PageMetadata | None = None,
    *,
    parse: Callable[[str], ParsedMarkup] = parse_markup,
) -> Document:
    """Extract a :class:`Document` from *markup*.

    Args:
        markup: Page or fragment HTML.
        base_url: URL the markup was fetched from; relative ``href``/``src``
            values are resolved against it.
        metadata: Page metadata read beforehand (see :func:`read_metadata`).
        parse: Tree parser; swapped out in tests.

    Returns:
        The extracted document.  Never raises: unparseable markup degrades to
        a single paragraph of stripped text with no links.
    """
    metadata = metadata or PageMetadata()
    try:
        parsed = parse(markup)
        walker = _Walker(base_url)
        walker.walk_children(parsed.root)
    except (ExtractionError, RecursionError) as exc:
        logger.warning("Falling back to plain-text extraction for %s: %r", base_url, exc)
        return _fallback_document(markup, base_url, metadata)

    title = metadata.title or parsed.title
    if not title:
        title = next((b.text for b in walker.blocks if isinstance(b, Heading) and b.level == 1), "")

    logger.debug(
        "Extracted %d blocks and %d links from %s", len(walker.blocks), len(walker.links), base_url
    )
    return Document(
        title=title or base_url,
        url=base_url,
        author=metadata.author,
        site_name=metadata.site_name,
        blocks=tuple(walker.blocks),
        links=tuple(walker.links),
    )


def read_metadata(html_text: str, url: str) -> PageMetadata:
    """Read title, author and site name with ``trafilatura``.

    Any failure (or a page without metadata) yields empty metadata.
    """
    try:
        meta = trafilatura.extract_metadata(html_text, default_url=url)
    except Exception as exc:  # trafilatura raises a wide range of parser errors
        logger.debug("Metadata extraction failed for %s: %s", url, exc)
        return PageMetadata()
    if meta is None:
        return PageMetadata()
    return PageMetadata(
        title=_normalize(getattr(meta, "title", None) or ""),
        author=_normalize(getattr(meta, "author", None) or ""),
        site_name=_normalize(getattr(meta, "sitename", None) or ""),
    )


def isolate_content(html_text: str, url: str) -> str:
    """Return the page's main content as HTML, isolated by ``trafilatura``.

    Navigation, sidebars, comment threads and other boilerplate are dropped;
    links, images, tables and inline formatting are kept.  Returns ``""``
    when trafilatura finds no main content or fails.
    """
    try:
        content = trafilatura.extract(
            html_text,
            url=url,
            output_format="html",
            include_comments=False,
            include_links=True,
            include_images=True,
            include_tables=True,
            include_formatting=True,
        )
    except Exception as exc:  # trafilatura raises a wide range of parser errors
        logger.debug("Content isolation failed for %s: %s", url, exc)
        return ""
    return content or ""


def parse_article(html_text: str, url: str) -> Document:
    """Full-page entry point: metadata plus content extraction.

    The walk runs over the trafilatura-isolated content when there is any,
    and over the whole page (rooted at ``article``/``main``/``body``)
    otherwise.
    """
    metadata = read_metadata(html_text, url)
    content = isolate_content(html_text, url)
    if content:
        document = extract(content, url, metadata)
        if document.blocks:
            return document
        logger.debug("Isolated content for %s had no blocks; walking the full page", url)
    return extract(html_text, url, metadata)
