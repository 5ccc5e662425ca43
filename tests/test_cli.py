"""Tests for the ``termread`` CLI.

``CliRunner`` output is never a terminal, so every invocation runs in pipe
mode unless the TTY check is patched.  ``fetch_url`` is patched where the CLI
imports it; metadata reading and content isolation are patched so trafilatura
never runs.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from cli.main import app
from termread import __version__
from termread.document import PageMetadata
from termread.scraper.models import RawPage

runner = CliRunner()

_HTML = """\
<html><head><title>Hello Page</title></head>
<body><article>
  <h1>Hello</h1>
  <p>Some text with a <a href="/more">link</a>.</p>
</article></body></html>
"""


@pytest.fixture(autouse=True)
def no_trafilatura():
    with patch("termread.scraper.extractor.read_metadata", return_value=PageMetadata()), patch(
        "termread.scraper.extractor.isolate_content", return_value=""
    ):
        yield


@pytest.fixture
def fetched():
    page = RawPage(url="https://example.com/post", html=_HTML, status_code=200)
    with patch("cli.main.fetch_url", return_value=page) as mock_fetch:
        yield mock_fetch


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_pipe_prints_rendering(fetched) -> None:
    result = runner.invoke(app, ["example.com/post", "--pipe", "--no-images"])

    assert result.exit_code == 0
    fetched.assert_called_once_with("https://example.com/post")
    assert "Hello" in result.stdout
    assert "Some text with a link [1]." in result.stdout
    assert "https://example.com/more" in result.stdout
    # typer.echo strips colour codes when stdout is not a terminal.
    assert "\x1b[" not in result.stdout


def test_pipe_is_forced_without_a_terminal(fetched) -> None:
    with patch("termread.ui.app.run_reader") as mock_reader:
        result = runner.invoke(app, ["example.com/post", "--no-images"])

    assert result.exit_code == 0
    mock_reader.assert_not_called()
    assert "Some text with a link [1]." in result.stdout


def test_width_option(fetched) -> None:
    result = runner.invoke(app, ["example.com/post", "--pipe", "--width", "30", "--no-images"])

    assert result.exit_code == 0
    lines = [line for line in result.stdout.splitlines() if not line.startswith("Fetching")]
    assert max(len(line) for line in lines) <= 30


def test_export_writes_markdown(fetched, tmp_path: Path) -> None:
    target = tmp_path / "page.md"
    result = runner.invoke(app, ["example.com/post", "--export", str(target), "--no-images"])

    assert result.exit_code == 0
    text = target.read_text(encoding="utf-8")
    assert text.startswith("# Hello Page\n")
    assert "[1]: https://example.com/more (link)" in text


def test_export_write_error(fetched, tmp_path: Path) -> None:
    target = tmp_path / "missing-dir" / "page.md"
    result = runner.invoke(app, ["example.com/post", "--export", str(target)])
    assert result.exit_code == 1


def test_fetch_error_exits_with_status_one() -> None:
    request = httpx.Request("GET", "https://example.com/missing")
    error = httpx.HTTPStatusError(
        "404", request=request, response=httpx.Response(404, request=request)
    )
    with patch("cli.main.fetch_url", side_effect=error):
        result = runner.invoke(app, ["example.com/missing", "--pipe"])

    assert result.exit_code == 1


def test_interactive_mode_starts_reader(fetched) -> None:
    with patch("cli.main._stdout_is_terminal", return_value=True), \
            patch("termread.ui.app.run_reader") as mock_reader:
        result = runner.invoke(app, ["example.com", "--width", "200"])

    assert result.exit_code == 0
    fetched.assert_not_called()
    url, config = mock_reader.call_args.args
    assert url == "https://example.com"
    assert config.width == 90
