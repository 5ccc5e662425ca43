"""Tests for the ANSI-aware styling helpers."""

from __future__ import annotations

import typer

from termread.render import styles


class TestStripAnsi:
    def test_removes_colour_codes(self) -> None:
        assert styles.strip_ansi(typer.style("hi", fg=205, bold=True)) == "hi"

    def test_removes_hyperlinks(self) -> None:
        assert styles.strip_ansi(styles.hyperlink("https://a.com", "label")) == "label"

    def test_visible_len_ignores_escapes(self) -> None:
        assert styles.visible_len(typer.style("abc", fg=86) + "de") == 5


class TestWrapAnsi:
    def test_short_lines_are_untouched(self) -> None:
        line = typer.style("short", fg=228)
        assert styles.wrap_ansi(line, 10) == [line]

    def test_splits_by_visible_width(self) -> None:
        pieces = styles.wrap_ansi(typer.style("abcdefghij", fg=228), 4)

        assert [styles.strip_ansi(p) for p in pieces] == ["abcd", "efgh", "ij"]
        assert all(styles.visible_len(p) <= 4 for p in pieces)

    def test_reopens_active_style_on_each_piece(self) -> None:
        pieces = styles.wrap_ansi("\x1b[38;5;228mabcdef\x1b[0m", 3)

        assert pieces[0].endswith(styles.RESET)
        assert pieces[1].startswith("\x1b[38;5;228m")

    def test_reset_codes_clear_active_style(self) -> None:
        # Pygments closes tokens with ``39;49;00``.
        line = "\x1b[38;5;197mab\x1b[39;49;00mcdef"
        pieces = styles.wrap_ansi(line, 3)

        assert not pieces[1].startswith("\x1b[38;5;197m")
        assert styles.strip_ansi(pieces[1]) == "def"


class TestTruncate:
    def test_fits(self) -> None:
        assert styles.truncate("abc", 3) == "abc"

    def test_cut_with_ellipsis(self) -> None:
        assert styles.truncate("abcdef", 4) == "abc…"

    def test_width_one(self) -> None:
        assert styles.truncate("abcdef", 1) == "a"


class TestHighlight:
    def test_replaces_existing_styles(self) -> None:
        line = styles.highlight(typer.style("match", fg=86))

        assert styles.strip_ansi(line) == "match"
        assert "\x1b[38;5;86m" not in line
        assert "\x1b[48;5;205m" in line
