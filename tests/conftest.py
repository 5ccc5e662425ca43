"""Shared fixtures for the rendering and navigation tests."""

from __future__ import annotations

import pytest
from fakes import make_engine

from termread.document import (
    Code,
    Document,
    Heading,
    Image,
    Link,
    ListBlock,
    Paragraph,
    Quote,
    Table,
)
from termread.render.layout import LayoutEngine


@pytest.fixture
def engine() -> LayoutEngine:
    return make_engine()


@pytest.fixture
def article() -> Document:
    """A document with one of every block kind and a few links."""
    return Document(
        title="A fairly long article title that will need wrapping at narrow widths",
        url="https://example.com/post",
        author="Ada Lovelace",
        site_name="Example",
        blocks=(
            Heading(1, "Introduction"),
            Paragraph(
                "Terminals are wonderful places to read. This sentence links somewhere [1] "
                "and keeps going long enough to wrap several times at forty columns."
            ),
            Heading(2, "Details"),
            ListBlock(items=("first item with a link [2]", "second item"), ordered=False),
            ListBlock(items=("one", "two"), ordered=True),
            Quote("A quotation that is long enough to wrap onto more than one line of output."),
            Code(text="def main():\n\treturn 'a very long line of code that certainly exceeds the width'", language="python"),
            Heading(3, "Data"),
            Table(rows=(("name", "value"), ("alpha", "1"), ("beta",)), header=True),
            Image(alt="A diagram", url="https://example.com/d.png"),
            Heading(4, "Wrap up"),
            Paragraph("Short closing words [3]."),
        ),
        links=(
            Link(1, "somewhere", "https://example.com/somewhere"),
            Link(2, "a link", "https://example.com/" + "deep/" * 20),
            Link(3, "closing", "https://example.com/closing"),
        ),
    )
