"""Tests for markdown export."""

from __future__ import annotations

from termread.document import (
    Code,
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
from termread.render.markdown import render_markdown


class TestRenderMarkdown:
    def test_header_and_meta(self) -> None:
        out = render_markdown(Document(title="Title", author="Ada", site_name="Site"))
        assert out.startswith("# Title\n\n*by Ada · Site*\n\n---\n")

    def test_meta_line_omitted_without_author_or_site(self) -> None:
        assert render_markdown(Document(title="Title")) == "# Title\n\n---\n"

    def test_blocks(self) -> None:
        doc = Document(
            title="T",
            blocks=(
                Heading(3, "Sub"),
                Paragraph("Words [1]"),
                Code(text="x = 1", language="python"),
                ListBlock(items=("a", "b")),
                ListBlock(items=("a", "b"), ordered=True),
                Quote("line one\nline two"),
                Image(alt="", url="https://a.com/i.png"),
                HorizontalRule(),
            ),
        )
        out = render_markdown(doc)

        assert "### Sub\n" in out
        assert "Words [1]\n" in out
        assert "```python\nx = 1\n```\n" in out
        assert "- a\n- b\n" in out
        assert "1. a\n2. b\n" in out
        assert "> line one\n> line two\n" in out
        assert "![image](https://a.com/i.png)\n" in out
        assert out.count("---\n") == 2

    def test_table_pads_short_rows(self) -> None:
        out = render_markdown(Document(title="T", blocks=(Table(rows=(("a", "b"), ("c",))),)))
        assert "| a | b |\n| --- | --- |\n| c |  |\n" in out

    def test_links_listed_at_end(self) -> None:
        doc = Document(
            title="T",
            links=(Link(1, "one", "https://a.com/1"), Link(2, "two", "https://a.com/2")),
        )
        out = render_markdown(doc)

        assert out.endswith("## Links\n\n[1]: https://a.com/1 (one)\n[2]: https://a.com/2 (two)\n")
