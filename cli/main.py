"""termread CLI: read a web page in the terminal.

Usage:
    termread URL                      interactive reader
    termread URL --pipe               print the rendering to stdout
    termread URL --export page.md     write the article as markdown

When stdout is not a terminal (``termread URL | less``) pipe mode is forced.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

# Ensure the project root is on sys.path so that `from termread.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import httpx
import typer

from termread import __version__
from termread.config import clamp_width, settings
from termread.logging_config import configure_logging
from termread.render import LayoutEngine, render_markdown
from termread.render.images import EnvironmentCapabilities, NoInlineImages
from termread.scraper import describe_fetch_error, fetch_url, normalize_url, parse_article

app = typer.Typer(
    name="termread",
    help="Read web pages as styled, distraction-free text in the terminal.",
    add_completion=False,
)


def _stdout_is_terminal() -> bool:
    return sys.stdout.isatty()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"termread {__version__}")
        raise typer.Exit()


@app.command()
def read(
    url: str = typer.Argument(..., help="Page to read; https:// is assumed when no scheme is given."),
    pipe: bool = typer.Option(False, "--pipe", "-p", help="Print the rendering instead of opening the reader."),
    width: Optional[int] = typer.Option(
        None, "--width", "-w", help="Render width in columns (capped at 90); the reader treats it as a maximum."
    ),
    export: Optional[Path] = typer.Option(
        None, "--export", "-e", help="Write the article as markdown to this file."
    ),
    images: bool = typer.Option(
        settings.show_images, "--images/--no-images", help="Draw images or show text placeholders."
    ),
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    """Fetch URL and show it as a readable article."""
    url = normalize_url(url)
    terminal = _stdout_is_terminal()
    pipe = pipe or not terminal
    render_width = clamp_width(width if width is not None else settings.default_width)

    if not (pipe or export is not None):
        from termread.ui.app import run_reader

        configure_logging(settings.log_level, settings.log_file, to_stderr=False)
        run_reader(url, replace(settings, show_images=images, default_width=render_width))
        return

    configure_logging(settings.log_level, settings.log_file)

    typer.echo(f"Fetching {url}...", err=True)
    try:
        page = fetch_url(url)
    except httpx.HTTPError as exc:
        typer.echo(f"Error: {describe_fetch_error(exc)}", err=True)
        raise typer.Exit(1)

    document = parse_article(page.html, page.url)

    if export is not None:
        try:
            export.write_text(render_markdown(document), encoding="utf-8")
        except OSError as exc:
            typer.echo(f"Error writing {export}: {exc}", err=True)
            raise typer.Exit(1)
        typer.echo(f"Exported to {export}", err=True)
        if not pipe:
            return

    engine = LayoutEngine(
        capabilities=EnvironmentCapabilities() if terminal else NoInlineImages(),
        hyperlinks=terminal,
        show_images=images,
    )
    typer.echo(engine.render(document, render_width).text)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
