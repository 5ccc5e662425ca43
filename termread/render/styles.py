"""Terminal styling helpers.

Styling goes through ``typer.style`` (click's ANSI styling, 256-colour codes
given as ints).  Everything that measures or splits rendered text has to
ignore escape sequences, hence the helpers below.
"""

from __future__ import annotations

import re

import typer

# 256-colour palette.
HEADING = 205
H2 = 212
H3 = 218
LINK = 86
CODE = 228
QUOTE = 243
QUOTE_LINE = 205
META = 243
BULLET = 205
IMAGE = 243
RULE = 240
DIVIDER = 238
BORDER = 240
CELL = 252
HIGHLIGHT_FG = 0
HIGHLIGHT_BG = 205

RESET = "\x1b[0m"

_ANSI_PATTERN = r"\x1b\[[0-9;?]*[A-Za-z]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
_ANSI_RE = re.compile(_ANSI_PATTERN)
_TOKEN_RE = re.compile(f"({_ANSI_PATTERN})|(.)", re.DOTALL)


def strip_ansi(text: str) -> str:
    """Remove CSI (colour) and OSC (hyperlink, inline image) sequences."""
    return _ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    return len(strip_ansi(text))


def wrap_ansi(line: str, width: int) -> list[str]:
    """Hard-wrap a styled *line* every *width* visible characters.

    Active SGR styling is closed at the end of each piece and re-opened at
    the start of the next, so every piece renders correctly on its own.
    """
    if width < 1 or visible_len(line) <= width:
        return [line]

    pieces: list[str] = []
    current: list[str] = []
    active: list[str] = []
    count = 0
    for match in _TOKEN_RE.finditer(line):
        escape, char = match.group(1), match.group(2)
        if escape:
            current.append(escape)
            if escape.startswith("\x1b[") and escape.endswith("m"):
                if escape[2:-1].split(";")[-1] in ("", "0", "00"):
                    active = []
                else:
                    active.append(escape)
            continue
        if count == width:
            if active:
                current.append(RESET)
            pieces.append("".join(current))
            current = list(active)
            count = 0
        current.append(char)
        count += 1
    if current:
        pieces.append("".join(current))
    return pieces


def truncate(text: str, width: int) -> str:
    """Right-truncate plain *text* to *width*, ending in ``…`` when cut."""
    if len(text) <= width:
        return text
    if width > 1:
        return text[: width - 1] + "…"
    return text[:width]


def hyperlink(url: str, label: str) -> str:
    """Wrap *label* in an OSC 8 hyperlink pointing at *url*."""
    return f"\x1b]8;;{url}\x1b\\{label}\x1b]8;;\x1b\\"


def highlight(line: str) -> str:
    """Search-match style applied to a whole rendered line."""
    return typer.style(strip_ansi(line), fg=HIGHLIGHT_FG, bg=HIGHLIGHT_BG, bold=True)
