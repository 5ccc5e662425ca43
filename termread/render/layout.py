"""Lays a :class:`Document` out as styled, width-bounded terminal lines.

Output is built line by line into an arena so that the offset of every
heading is simply the arena's length at the moment the heading is written;
wrapped paragraphs, tables and code above it are already accounted for.

Order of the output:

1. a bordered title box (title, byline, reading time);
2. every block in document order, except images;
3. an "Images" section with all image blocks;
4. a "Links" section listing the footnote links.

The engine keeps no state between calls: the same document and width always
give the same text.
"""

from __future__ import annotations

import logging
import math
import re
import textwrap
from dataclasses import dataclass

import typer

from termread.config import MIN_WIDTH, settings
from termread.document.models import (
    Code,
    ContentBlock,
    Document,
    Heading,
    HorizontalRule,
    Image,
    Link,
    ListBlock,
    Paragraph,
    Quote,
    Table,
)
from termread.render import styles
from termread.render.highlight import CodeHighlighter, PygmentsHighlighter
from termread.render.images import (
    EnvironmentCapabilities,
    HttpImageRasterizer,
    ImageRasterizer,
    TerminalCapabilities,
)

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 238

_FOOTNOTE_RE = re.compile(r"\[[0-9]+\]")


@dataclass(frozen=True)
class Rendering:
    """Rendered text plus the line index of every heading in it."""

    text: str
    heading_lines: tuple[int, ...]

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")


class _LineArena:
    """Append-only list of output lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __len__(self) -> int:
        return len(self.lines)

    def add(self, *lines: str) -> None:
        self.lines.extend(lines)

    def extend(self, lines: list[str]) -> None:
        self.lines.extend(lines)

    def text(self) -> str:
        lines = list(self.lines)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def count_words(document: Document) -> int:
    """Whitespace-delimited words in headings, paragraphs, quotes and list items."""
    count = 0
    for block in document.blocks:
        if isinstance(block, (Heading, Paragraph, Quote)):
            count += len(block.text.split())
        elif isinstance(block, ListBlock):
            count += sum(len(item.split()) for item in block.items)
    return count


def reading_minutes(words: int) -> int:
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def _wrap(text: str, width: int) -> list[str]:
    return textwrap.wrap(text, max(1, width), break_on_hyphens=False) or [""]


def _with_footnotes(text: str, **base_style) -> str:
    """Style *text*, colouring ``[N]`` footnote markers (digits only)."""
    out: list[str] = []
    pos = 0
    for match in _FOOTNOTE_RE.finditer(text):
        if match.start() > pos:
            out.append(_styled(text[pos:match.start()], **base_style))
        out.append(typer.style(match.group(), fg=styles.LINK, bold=True))
        pos = match.end()
    if pos < len(text):
        out.append(_styled(text[pos:], **base_style))
    return "".join(out)


def _styled(text: str, **style) -> str:
    return typer.style(text, **style) if style else text


def _indent(lines: list[str], first: str, rest: str) -> list[str]:
    return [(first if i == 0 else rest) + line for i, line in enumerate(lines)]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class LayoutEngine:
    """Renders documents at a given width.

    Args:
        highlighter: Code block highlighter; failures fall back to plain text.
        rasterizer: Image rasterizer for the Images section.
        capabilities: Terminal capability check for inline raster images.
        hyperlinks: Wrap link URLs in OSC 8 hyperlink escapes.
        show_images: When off, every image renders as a text placeholder.
    """

    def __init__(
        self,
        highlighter: CodeHighlighter | None = None,
        rasterizer: ImageRasterizer | None = None,
        capabilities: TerminalCapabilities | None = None,
        *,
        hyperlinks: bool = True,
        show_images: bool = True,
    ) -> None:
        self.highlighter = highlighter or PygmentsHighlighter(settings.code_theme)
        self.rasterizer = rasterizer or HttpImageRasterizer()
        self.capabilities = capabilities or EnvironmentCapabilities()
        self.hyperlinks = hyperlinks
        self.show_images = show_images

    def render(self, document: Document, width: int) -> Rendering:
        width = max(MIN_WIDTH, width)
        arena = _LineArena()
        heading_lines: list[int] = []

        arena.extend(self._title(document, width))
        arena.add("")

        first = True
        images: list[Image] = []
        for block in document.blocks:
            if isinstance(block, Image):
                images.append(block)
                continue
            if isinstance(block, Heading):
                heading_lines.append(len(arena))
                if not first:
                    arena.add(self._divider(width))
            first = False
            arena.extend(self.render_block(block, width))
            arena.add("")

        if images:
            arena.add("", self._divider(width))
            arena.add(typer.style("  Images", fg=styles.META, bold=True), "")
            for image in images:
                arena.extend(self._image(image, width))
                arena.add("")

        if document.links:
            arena.extend(self._links(document.links, width))

        return Rendering(text=arena.text(), heading_lines=tuple(heading_lines))

    def render_block(self, block: ContentBlock, width: int) -> list[str]:
        """Lines for a single block (images render inline here)."""
        if isinstance(block, Heading):
            return self._heading(block, width)
        if isinstance(block, Paragraph):
            return self._paragraph(block, width)
        if isinstance(block, Code):
            return self._code(block, width)
        if isinstance(block, ListBlock):
            return self._list(block, width)
        if isinstance(block, Quote):
            return self._quote(block, width)
        if isinstance(block, Image):
            return self._image(block, width)
        if isinstance(block, Table):
            return self._table(block, width)
        if isinstance(block, HorizontalRule):
            return ["  " + typer.style("━" * (width - 4), fg=styles.RULE)]
        return []

    # -- title ------------------------------------------------------------

    def _title(self, document: Document, width: int) -> list[str]:
        inner = width - 2
        content_width = inner - 4

        content = [
            typer.style(line, fg=styles.HEADING, bold=True)
            for line in _wrap(document.title, content_width)
        ]
        byline = [part for part in (
            f"by {document.author}" if document.author else "",
            document.site_name,
        ) if part]
        if byline:
            content += [
                typer.style(line, fg=styles.META) for line in _wrap(" · ".join(byline), content_width)
            ]
        words = count_words(document)
        read = f"{reading_minutes(words)} min read · {words:,} words"
        content += [typer.style(line, fg=styles.META) for line in _wrap(read, content_width)]

        def border(text: str) -> str:
            return typer.style(text, fg=styles.BORDER)

        blank = border("│") + " " * inner + border("│")
        lines = [border("╭" + "─" * inner + "╮"), blank]
        for line in content:
            pad = " " * (content_width - styles.visible_len(line))
            lines.append(border("│") + "  " + line + pad + "  " + border("│"))
        lines += [blank, border("╰" + "─" * inner + "╯")]
        return lines

    def _divider(self, width: int) -> str:
        return typer.style("  " + "─" * (width - 4), fg=styles.DIVIDER)

    # -- text blocks ------------------------------------------------------

    def _heading(self, block: Heading, width: int) -> list[str]:
        if block.level == 1:
            color, prefix = styles.HEADING, "▸ "
        elif block.level == 2:
            color, prefix = styles.H2, "▸ "
        elif block.level == 3:
            color, prefix = styles.H3, "  ▹ "
        else:
            color, prefix = styles.H3, "    ▹ "
        lines = _indent(_wrap(block.text, width - len(prefix)), prefix, " " * len(prefix))
        return [""] + [typer.style(line, fg=color, bold=True) for line in lines]

    def _paragraph(self, block: Paragraph, width: int) -> list[str]:
        return [" " + _with_footnotes(line) for line in _wrap(block.text, width - 3)]

    def _list(self, block: ListBlock, width: int) -> list[str]:
        lines: list[str] = []
        bullet = typer.style("•", fg=styles.BULLET)
        for number, item in enumerate(block.items, 1):
            if block.ordered:
                prefix = plain = f"  {number}. "
            else:
                prefix, plain = f"  {bullet} ", "  • "
            wrapped = [_with_footnotes(line) for line in _wrap(item, width - len(plain) - 1)]
            lines += _indent(wrapped, prefix, " " * len(plain))
        return lines

    def _quote(self, block: Quote, width: int) -> list[str]:
        bar = "  " + typer.style("┃", fg=styles.QUOTE_LINE, bold=True) + "  "
        return [
            bar + _with_footnotes(line, fg=styles.QUOTE, italic=True)
            for line in _wrap(block.text, width - 6)
        ]

    # -- code -------------------------------------------------------------

    def _code(self, block: Code, width: int) -> list[str]:
        text = block.text.expandtabs(4)
        try:
            highlighted = self.highlighter.highlight(text, block.language).split("\n")
        except Exception as exc:
            logger.debug("Highlighting failed (%s); rendering plain code", exc)
            highlighted = [typer.style(line, fg=styles.CODE) if line else "" for line in text.split("\n")]

        def border(text: str) -> str:
            return typer.style(text, fg=styles.BORDER)

        label = f"─ {block.language} " if block.language else ""
        label = label[: width - 3]
        lines = ["  " + border("┌" + label + "─" * (width - 3 - len(label)))]
        gutter = "  " + border("│") + " "
        for line in highlighted:
            lines += [gutter + piece for piece in styles.wrap_ansi(line, width - 6)]
        lines.append("  " + border("└" + "─" * (width - 3)))
        return lines

    # -- tables -----------------------------------------------------------

    def _table(self, block: Table, width: int) -> list[str]:
        max_width = width - 6
        # A column needs one border, two padding and at least one text cell.
        columns = min(block.column_count, max(1, (max_width - 1) // 4))
        if columns == 0:
            return []

        widths = [0] * columns
        for row in block.rows:
            for j, cell in enumerate(row[:columns]):
                widths[j] = max(widths[j], len(cell))

        total_width = columns + 1 + sum(w + 2 for w in widths)
        if total_width > max_width:
            available = max(columns, max_width - (columns + 1) - 2 * columns)
            natural = sum(widths)
            if natural > 0:
                widths = [max(1, w * available // natural) for w in widths]
                while sum(widths) > available:
                    widths[widths.index(max(widths))] -= 1

        def border(text: str) -> str:
            return typer.style(text, fg=styles.BORDER)

        def hline(left: str, mid: str, right: str) -> str:
            return "  " + border(left + mid.join("─" * (w + 2) for w in widths) + right)

        lines = [hline("┌", "┬", "┐")]
        for i, row in enumerate(block.rows):
            is_header = block.header and i == 0
            cells = []
            for j in range(columns):
                cell = styles.truncate(row[j] if j < len(row) else "", widths[j])
                cell = cell.ljust(widths[j])
                if is_header:
                    cells.append(" " + typer.style(cell, fg=styles.HEADING, bold=True) + " ")
                else:
                    cells.append(" " + typer.style(cell, fg=styles.CELL) + " ")
            lines.append("  " + border("│") + border("│").join(cells) + border("│"))
            if is_header:
                lines.append(hline("├", "┼", "┤"))
        lines.append(hline("└", "┴", "┘"))
        return lines

    # -- images -----------------------------------------------------------

    def _image(self, block: Image, width: int) -> list[str]:
        caption = [
            typer.style("  " + line, fg=styles.IMAGE, italic=True)
            for line in _wrap(block.alt, width - 2)
        ] if block.alt else []

        if self.show_images and block.url:
            if self.capabilities.supports_inline_images():
                try:
                    raster = self.rasterizer.inline(block.url, width - 4)
                except Exception as exc:
                    logger.debug("Inline image failed for %s: %s", block.url, exc)
                    raster = ""
                if raster:
                    return ["  " + raster] + caption
            try:
                art = self.rasterizer.ascii(block.url, width - 4)
            except Exception as exc:
                logger.debug("ASCII image failed for %s: %s", block.url, exc)
                art = ""
            if art:
                return ["  " + line for line in art.split("\n")] + caption

        placeholder = f"[IMAGE: {block.alt or 'image'}]"
        return [
            typer.style("  " + line, fg=styles.IMAGE, italic=True)
            for line in _wrap(placeholder, width - 2)
        ]

    # -- links ------------------------------------------------------------

    def _links(self, links: tuple[Link, ...], width: int) -> list[str]:
        lines = [
            "",
            self._divider(width),
            typer.style("  Links", fg=styles.META, bold=True),
            "",
        ]
        url_width = width - 6
        for link in links:
            marker = f"[{link.index}]"
            text_lines = _wrap(link.text, width - 3 - len(marker))
            lines.append(
                "  " + typer.style(marker, fg=styles.LINK, bold=True) + " "
                + typer.style(text_lines[0], fg=styles.META)
            )
            lines += [" " * (3 + len(marker)) + typer.style(t, fg=styles.META) for t in text_lines[1:]]
            for start in range(0, max(1, len(link.url)), url_width):
                chunk = typer.style(link.url[start:start + url_width], fg=styles.LINK)
                lines.append("      " + (styles.hyperlink(link.url, chunk) if self.hyperlinks else chunk))
        return lines
