"""Interactive navigation state machine.

The controller owns all reader state: the loaded document, its rendering at
the current width, the viewport offset, the search query and matches, and the
text typed into the search / link prompts.  It is driven entirely through
:meth:`NavigationController.dispatch`, one event at a time, and knows nothing
about the terminal toolkit that feeds it.

States::

    LOADING ──► READY ◄──► SEARCHING
       │          ▲
       │          └──────► LINK_PROMPT
       └──► ERROR

    (any state) ──► TERMINATED
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Union

import typer

from termread.config import MAX_WIDTH, clamp_width
from termread.document.models import Document
from termread.render import styles
from termread.render.layout import LayoutEngine
from termread.ui.browser import BrowserOpener

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 100
LINK_LIMIT = 10
SPINNER_FRAMES = "⣾⣽⣻⢿⡿⣟⣯⣷"

_QUIT_KEYS = {"q", "ctrl+c"}
_HELP = (
    ("↑/k", "up"),
    ("↓/j", "down"),
    ("/", "search"),
    ("n/N", "next/prev"),
    ("]/[", "sections"),
    ("o", "open link"),
    ("q", "quit"),
)


class State(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    SEARCHING = "searching"
    LINK_PROMPT = "link_prompt"
    ERROR = "error"
    TERMINATED = "terminated"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DocumentLoaded:
    document: Document


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPressed:
    """A key press; printable keys are the character itself, others are
    names such as ``"enter"``, ``"esc"``, ``"backspace"``, ``"up"``."""

    key: str


@dataclass(frozen=True)
class Tick:
    """Advances the loading spinner."""


Event = Union[DocumentLoaded, LoadFailed, Resized, KeyPressed, Tick]


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class NavigationController:
    def __init__(
        self,
        engine: LayoutEngine,
        opener: BrowserOpener,
        url: str = "",
        width: int = 90,
        height: int = 24,
        max_width: int = MAX_WIDTH,
    ) -> None:
        self.engine = engine
        self.opener = opener
        self.url = url
        self.width = width
        self.height = height
        self.max_width = max_width

        self.state = State.LOADING
        self.document: Document | None = None
        self.error = ""
        self.spinner_frame = 0

        self.lines: list[str] = []
        self.heading_lines: tuple[int, ...] = ()
        self.top = 0

        self.query = ""
        self.matches: list[int] = []
        self.match_index = 0
        self.input = ""

    # ------------------------------------------------------------------
    # Event entry point
    # ------------------------------------------------------------------
    def dispatch(self, event: Event) -> None:
        if self.state is State.TERMINATED:
            return
        if isinstance(event, DocumentLoaded):
            self._on_loaded(event.document)
        elif isinstance(event, LoadFailed):
            self._on_failed(event.message)
        elif isinstance(event, Resized):
            self._on_resized(event.width, event.height)
        elif isinstance(event, KeyPressed):
            self._on_key(event.key)
        elif isinstance(event, Tick):
            if self.state is State.LOADING:
                self.spinner_frame = (self.spinner_frame + 1) % len(SPINNER_FRAMES)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def render_width(self) -> int:
        return clamp_width(min(self.width, self.max_width))

    @property
    def viewport_height(self) -> int:
        # One terminal row is reserved for the footer.
        return max(1, self.height - 1)

    @property
    def max_top(self) -> int:
        return max(0, len(self.lines) - self.viewport_height)

    @property
    def search_active(self) -> bool:
        return bool(self.query)

    def scroll_percent(self) -> float:
        if self.max_top == 0:
            return 100.0
        return self.top / self.max_top * 100

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _on_loaded(self, document: Document) -> None:
        if self.state is not State.LOADING:
            return
        self.document = document
        self.state = State.READY
        logger.info("Loaded %r (%d blocks, %d links)", document.title, len(document.blocks), len(document.links))
        self._render()

    def _on_failed(self, message: str) -> None:
        if self.state is not State.LOADING:
            return
        self.error = message
        self.state = State.ERROR
        logger.warning("Load failed for %s: %s", self.url, message)

    def _on_resized(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        if self.document is not None:
            self._render()
        self._scroll_to(self.top)

    def _on_key(self, key: str) -> None:
        if key == "ctrl+c":
            self.state = State.TERMINATED
        elif self.state is State.SEARCHING:
            self._search_key(key)
        elif self.state is State.LINK_PROMPT:
            self._link_key(key)
        elif self.state is State.READY:
            self._ready_key(key)
        elif key in _QUIT_KEYS or key == "esc":
            # LOADING and ERROR only react to quitting.
            self.state = State.TERMINATED

    def _ready_key(self, key: str) -> None:
        if key in _QUIT_KEYS:
            self.state = State.TERMINATED
        elif key == "esc":
            if self.search_active:
                self._clear_search()
            else:
                self.state = State.TERMINATED
        elif key in ("up", "k"):
            self._scroll_to(self.top - 1)
        elif key in ("down", "j"):
            self._scroll_to(self.top + 1)
        elif key in ("pageup", "b"):
            self._scroll_to(self.top - self.viewport_height)
        elif key in ("pagedown", " ", "f"):
            self._scroll_to(self.top + self.viewport_height)
        elif key in ("g", "home"):
            self._scroll_to(0)
        elif key in ("G", "end"):
            self._scroll_to(self.max_top)
        elif key == "/":
            self.state = State.SEARCHING
            self.input = ""
        elif key == "n":
            self.next_match()
        elif key == "N":
            self.previous_match()
        elif key == "]":
            self.next_section()
        elif key == "[":
            self.previous_section()
        elif key == "o":
            if self.document is not None and self.document.links:
                self.state = State.LINK_PROMPT
                self.input = ""

    def _search_key(self, key: str) -> None:
        if key == "enter":
            query = self.input
            self.input = ""
            self.state = State.READY
            if query:
                self.query = query
                self._search()
                self.match_index = 0
                if self.matches:
                    self._scroll_to(self.matches[0])
        elif key == "esc":
            self.input = ""
            self.state = State.READY
            self._clear_search()
        else:
            self.input = self._edit(self.input, key, SEARCH_LIMIT)

    def _link_key(self, key: str) -> None:
        if key == "enter":
            text = self.input
            self.input = ""
            self.state = State.READY
            self._open_link(text)
        elif key == "esc":
            self.input = ""
            self.state = State.READY
        else:
            self.input = self._edit(self.input, key, LINK_LIMIT)

    @staticmethod
    def _edit(buffer: str, key: str, limit: int) -> str:
        if key == "backspace":
            return buffer[:-1]
        if len(key) == 1 and key.isprintable() and len(buffer) < limit:
            return buffer + key
        return buffer

    def _open_link(self, text: str) -> None:
        try:
            index = int(text.strip())
        except ValueError:
            return
        link = self.document.link_by_index(index) if self.document is not None else None
        if link is None:
            return
        logger.info("Opening link [%d] %s", link.index, link.url)
        self.opener.open(link.url)

    # ------------------------------------------------------------------
    # Rendering and search
    # ------------------------------------------------------------------
    def _render(self) -> None:
        rendering = self.engine.render(self.document, self.render_width)
        self.lines = rendering.lines
        self.heading_lines = rendering.heading_lines
        if self.search_active:
            self._search()
            if self.match_index >= len(self.matches):
                self.match_index = 0

    def _search(self) -> None:
        needle = self.query.lower()
        self.matches = [
            i for i, line in enumerate(self.lines)
            if needle in styles.strip_ansi(line).lower()
        ]

    def _clear_search(self) -> None:
        self.query = ""
        self.matches = []
        self.match_index = 0

    def content_lines(self) -> list[str]:
        """The full content as displayed: matched lines highlighted when searching."""
        if self.state in (State.LOADING, State.ERROR):
            return []
        if not self.matches:
            return list(self.lines)
        matched = set(self.matches)
        return [styles.highlight(line) if i in matched else line for i, line in enumerate(self.lines)]

    def _scroll_to(self, top: int) -> None:
        self.top = max(0, min(top, self.max_top))

    def next_match(self) -> None:
        if self.matches:
            self.match_index = (self.match_index + 1) % len(self.matches)
            self._scroll_to(self.matches[self.match_index])

    def previous_match(self) -> None:
        if self.matches:
            self.match_index = (self.match_index - 1) % len(self.matches)
            self._scroll_to(self.matches[self.match_index])

    def next_section(self) -> None:
        if not self.heading_lines:
            return
        target = next((line for line in self.heading_lines if line > self.top), self.heading_lines[0])
        self._scroll_to(target)

    def previous_section(self) -> None:
        if not self.heading_lines:
            return
        earlier = [line for line in self.heading_lines if line < self.top]
        self._scroll_to(earlier[-1] if earlier else self.heading_lines[-1])

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def visible_lines(self) -> list[str]:
        """Lines for the content area, at most ``viewport_height`` of them."""
        if self.state is State.LOADING:
            spinner = typer.style(SPINNER_FRAMES[self.spinner_frame], fg=styles.HEADING)
            message = (
                f"{spinner} {typer.style('Fetching', fg=styles.HEADING, bold=True)} "
                f"{typer.style(self.url, fg=styles.LINK)}{typer.style('...', fg=styles.HEADING, bold=True)}"
            )
            return [""] * (self.height // 3) + ["  " + message]
        if self.state is State.ERROR:
            return [typer.style(f"Error: {self.error}", fg=styles.HEADING, bold=True)]
        return self.content_lines()[self.top:self.top + self.viewport_height]

    def footer(self) -> str:
        if self.state is State.SEARCHING:
            return typer.style("/", fg=styles.HEADING, bold=True) + typer.style(self.input, fg=styles.CELL)
        if self.state is State.LINK_PROMPT:
            return typer.style("Open link #: ", fg=styles.LINK, bold=True) + typer.style(self.input, fg=styles.CELL)
        if self.state in (State.LOADING, State.ERROR):
            return typer.style("[q] quit", fg=styles.META)

        help_text = "  ".join(
            typer.style(f"[{key}]", fg=styles.HEADING, bold=True) + " " + typer.style(desc, fg=styles.META)
            for key, desc in _HELP
        )
        if self.search_active:
            if self.matches:
                info = f"  [{self.match_index + 1}/{len(self.matches)} matches]"
            else:
                info = "  [no matches]"
            help_text += typer.style(info, fg=styles.META)

        percent = f"{self.scroll_percent():3.0f}%"
        gap = max(1, self.width - styles.visible_len(help_text) - len(percent) - 2)
        return help_text + " " * gap + typer.style(percent, fg=styles.HEADING)
