"""Scraper package: web fetch and content extraction."""

from termread.scraper.extractor import extract, isolate_content, parse_article, read_metadata
from termread.scraper.fetcher import describe_fetch_error, fetch_url, fetch_url_async, normalize_url
from termread.scraper.models import RawPage
from termread.scraper.tree import ExtractionError, MarkupNode, ParsedMarkup, parse_markup

__all__ = [
    "ExtractionError",
    "MarkupNode",
    "ParsedMarkup",
    "RawPage",
    "describe_fetch_error",
    "extract",
    "fetch_url",
    "fetch_url_async",
    "isolate_content",
    "normalize_url",
    "parse_article",
    "parse_markup",
    "read_metadata",
]
