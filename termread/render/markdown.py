"""Markdown export: each block maps onto its direct markdown equivalent."""

from __future__ import annotations

from termread.document.models import (
    Code,
    Document,
    Heading,
    HorizontalRule,
    Image,
    ListBlock,
    Paragraph,
    Quote,
    Table,
)


def _table_row(row: tuple[str, ...], columns: int) -> str:
    cells = [row[j] if j < len(row) else "" for j in range(columns)]
    return "|" + "".join(f" {cell} |" for cell in cells)


def render_markdown(document: Document) -> str:
    """Return *document* as a markdown string, links listed at the end."""
    out: list[str] = [f"# {document.title}\n"]

    meta = [part for part in (
        f"by {document.author}" if document.author else "",
        document.site_name,
    ) if part]
    if meta:
        out.append(f"*{' · '.join(meta)}*\n")
    out.append("---\n")

    for block in document.blocks:
        if isinstance(block, Heading):
            out.append(f"{'#' * block.level} {block.text}\n")
        elif isinstance(block, Paragraph):
            out.append(f"{block.text}\n")
        elif isinstance(block, Code):
            out.append(f"```{block.language}\n{block.text}\n```\n")
        elif isinstance(block, ListBlock):
            items = [
                f"{i}. {item}" if block.ordered else f"- {item}"
                for i, item in enumerate(block.items, 1)
            ]
            out.append("\n".join(items) + "\n")
        elif isinstance(block, Quote):
            out.append("\n".join(f"> {line}" for line in block.text.split("\n")) + "\n")
        elif isinstance(block, Image):
            out.append(f"![{block.alt or 'image'}]({block.url})\n")
        elif isinstance(block, Table):
            columns = block.column_count
            if columns == 0:
                continue
            rows = [_table_row(block.rows[0], columns), "|" + " --- |" * columns]
            rows += [_table_row(row, columns) for row in block.rows[1:]]
            out.append("\n".join(rows) + "\n")
        elif isinstance(block, HorizontalRule):
            out.append("---\n")

    if document.links:
        out.append("---\n")
        out.append("## Links\n")
        out.append("\n".join(f"[{link.index}]: {link.url} ({link.text})" for link in document.links) + "\n")

    return "\n".join(out)
