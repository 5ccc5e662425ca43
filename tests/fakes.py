"""Fake ports for the rendering and navigation tests."""

from __future__ import annotations

from termread.render.layout import LayoutEngine


class PlainHighlighter:
    def highlight(self, code: str, language: str) -> str:
        return code


class FailingHighlighter:
    def highlight(self, code: str, language: str) -> str:
        raise RuntimeError("lexer exploded")


class FakeRasterizer:
    """Returns fixed payloads and records every call."""

    def __init__(self, inline: str = "INLINE", ascii: str = "ART", error: Exception | None = None) -> None:
        self.inline_payload = inline
        self.ascii_payload = ascii
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def inline(self, url: str, width: int) -> str:
        self.calls.append(("inline", url))
        if self.error is not None:
            raise self.error
        return self.inline_payload

    def ascii(self, url: str, width: int) -> str:
        self.calls.append(("ascii", url))
        if self.error is not None:
            raise self.error
        return self.ascii_payload


class FakeCapabilities:
    def __init__(self, inline: bool) -> None:
        self.inline = inline

    def supports_inline_images(self) -> bool:
        return self.inline


class RecordingOpener:
    def __init__(self) -> None:
        self.opened: list[str] = []

    def open(self, url: str) -> None:
        self.opened.append(url)


def make_engine(**kwargs) -> LayoutEngine:
    kwargs.setdefault("highlighter", PlainHighlighter())
    kwargs.setdefault("rasterizer", FakeRasterizer(inline="", ascii=""))
    kwargs.setdefault("capabilities", FakeCapabilities(False))
    return LayoutEngine(**kwargs)
