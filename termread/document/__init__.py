"""Document model package.

Public re-exports so callers can write::

    from termread.document import Document, Heading, Paragraph
"""

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

__all__ = [
    "Code",
    "ContentBlock",
    "Document",
    "Heading",
    "HorizontalRule",
    "Image",
    "Link",
    "ListBlock",
    "PageMetadata",
    "Paragraph",
    "Quote",
    "Table",
]
