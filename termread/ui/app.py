"""Full-screen interactive reader built on prompt_toolkit.

The application is a thin shell around :class:`NavigationController`: key
presses, terminal resizes, spinner ticks and the result of the background
load are translated into controller events, and the two windows (content and
footer) simply draw whatever the controller says is visible.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import FormattedTextControl, HSplit, Layout, Window

from termread.config import Settings, settings as default_settings
from termread.document.models import Image
from termread.render.images import BackgroundImages, NoInlineImages
from termread.render.layout import LayoutEngine
from termread.scraper import describe_fetch_error, fetch_url_async, parse_article
from termread.ui.browser import BrowserOpener, WebbrowserOpener
from termread.ui.controller import (
    DocumentLoaded,
    KeyPressed,
    LoadFailed,
    NavigationController,
    Resized,
    State,
    Tick,
)

logger = logging.getLogger(__name__)

# prompt_toolkit key -> controller key name
NAMED_KEYS = {
    Keys.Up: "up",
    Keys.Down: "down",
    Keys.PageUp: "pageup",
    Keys.PageDown: "pagedown",
    Keys.Home: "home",
    Keys.End: "end",
    Keys.Enter: "enter",
    Keys.Backspace: "backspace",
    Keys.Escape: "esc",
    Keys.ControlC: "ctrl+c",
}

_SPINNER_INTERVAL = 0.1


# ---------------------------------------------------------------------------
# Background load
# ---------------------------------------------------------------------------

async def load_document(
    controller: NavigationController,
    url: str,
    images: BackgroundImages | None = None,
    on_change: Callable[[], None] | None = None,
) -> None:
    """Fetch and extract *url*, then deliver exactly one load event.

    The reader becomes Ready as soon as the document is extracted.  When
    *images* is given, the document's images are then downloaded on a daemon
    thread and the controller re-lays out once they are in.

    Args:
        controller: Receives ``DocumentLoaded`` or ``LoadFailed``.
        url: Page to load.
        images: Background image loader used by the controller's engine.
        on_change: Called on the event loop after every controller change,
            typically ``Application.invalidate``.
    """
    loop = asyncio.get_running_loop()
    notify = on_change or (lambda: None)
    try:
        page = await fetch_url_async(url)
        document = await loop.run_in_executor(None, parse_article, page.html, page.url)
    except Exception as exc:
        logger.info("Loading %s failed: %s", url, exc)
        controller.dispatch(LoadFailed(describe_fetch_error(exc)))
        notify()
        return

    controller.dispatch(DocumentLoaded(document))
    notify()

    urls = [block.url for block in document.blocks if isinstance(block, Image) and block.url]
    if images is None or not urls or not controller.engine.show_images:
        return

    def relayout() -> None:
        # Same size, so this only re-renders with the downloaded images.
        controller.dispatch(Resized(controller.width, controller.height))
        notify()

    def images_done() -> None:
        try:
            loop.call_soon_threadsafe(relayout)
        except RuntimeError:
            logger.debug("Reader exited before images for %s finished downloading", url)

    images.prefetch(urls, on_done=images_done)


# ---------------------------------------------------------------------------
# prompt_toolkit wiring
# ---------------------------------------------------------------------------

def build_key_bindings(controller: NavigationController) -> KeyBindings:
    """Key bindings forwarding every key press to *controller*."""
    bindings = KeyBindings()

    def send(event: KeyPressEvent, key: str) -> None:
        controller.dispatch(KeyPressed(key))
        if controller.state is State.TERMINATED:
            event.app.exit()

    @bindings.add(Keys.Any)
    def _printable(event: KeyPressEvent) -> None:
        if event.data and event.data.isprintable():
            send(event, event.data)

    for pt_key, name in NAMED_KEYS.items():
        def handler(event: KeyPressEvent, name: str = name) -> None:
            send(event, name)

        bindings.add(pt_key, eager=pt_key is Keys.Escape)(handler)

    return bindings


def sync_frame(controller: NavigationController, columns: int, rows: int) -> None:
    """Per-frame hook: report size changes and advance the spinner."""
    if (columns, rows) != (controller.width, controller.height):
        controller.dispatch(Resized(columns, rows))
    if controller.state is State.LOADING:
        controller.dispatch(Tick())


def build_application(
    controller: NavigationController,
    load: Callable[[], Awaitable[None]],
) -> Application:
    """Wire *controller* into a prompt_toolkit application.

    Args:
        controller: The navigation state machine to drive.
        load: Coroutine function run once as a background task when the
            application starts; it must deliver exactly one load event.
    """
    content = Window(
        FormattedTextControl(lambda: ANSI("\n".join(controller.visible_lines()))),
        wrap_lines=False,
    )
    footer = Window(FormattedTextControl(lambda: ANSI(controller.footer())), height=1)

    def before_render(app: Application) -> None:
        size = app.output.get_size()
        sync_frame(controller, size.columns, size.rows)

    app: Application = Application(
        layout=Layout(HSplit([content, footer])),
        key_bindings=build_key_bindings(controller),
        full_screen=True,
        refresh_interval=_SPINNER_INTERVAL,
        before_render=before_render,
    )

    def pre_run() -> None:
        app.create_background_task(load())

    app.pre_run_callables.append(pre_run)
    return app


def run_reader(
    url: str,
    config: Settings | None = None,
    opener: BrowserOpener | None = None,
) -> None:
    """Fetch *url* and show it in the full-screen reader until the user quits.

    ``config.width`` caps the render width; the terminal width is used when
    it is narrower.
    """
    config = config or default_settings
    images = BackgroundImages()
    # Raster escapes and OSC 8 links do not survive prompt_toolkit's ANSI parser.
    engine = LayoutEngine(
        rasterizer=images,
        capabilities=NoInlineImages(),
        hyperlinks=False,
        show_images=config.show_images,
    )
    controller = NavigationController(
        engine,
        opener or WebbrowserOpener(),
        url=url,
        width=config.width,
        max_width=config.width,
    )

    app = build_application(
        controller,
        lambda: load_document(controller, url, images, on_change=app.invalidate),
    )
    app.run()
