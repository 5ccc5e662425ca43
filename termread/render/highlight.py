"""Syntax highlighting for code blocks."""

from __future__ import annotations

from typing import Protocol

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound


class CodeHighlighter(Protocol):
    def highlight(self, code: str, language: str) -> str:
        """Return *code* with ANSI token colours; may raise on failure."""


class PygmentsHighlighter:
    """Highlights with Pygments' 256-colour terminal formatter.

    The lexer comes from the declared language when Pygments knows it,
    otherwise from content analysis, otherwise plain text.
    """

    def __init__(self, theme: str = "monokai") -> None:
        self.formatter = Terminal256Formatter(style=theme)

    def _lexer(self, code: str, language: str):
        if language:
            try:
                return get_lexer_by_name(language, stripnl=False)
            except ClassNotFound:
                pass
        try:
            return guess_lexer(code, stripnl=False)
        except ClassNotFound:
            return TextLexer(stripnl=False)

    def highlight(self, code: str, language: str) -> str:
        return highlight(code, self._lexer(code, language), self.formatter).rstrip("\n")
