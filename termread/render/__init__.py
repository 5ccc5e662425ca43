"""Rendering package: terminal layout, code and image display, markdown export."""

from termread.render.layout import LayoutEngine, Rendering, count_words, reading_minutes
from termread.render.markdown import render_markdown

__all__ = ["LayoutEngine", "Rendering", "count_words", "reading_minutes", "render_markdown"]
