"""Image display for the trailing "Images" section.

Two capabilities are exposed to the layout engine as small ports:

- :class:`TerminalCapabilities`: can the terminal draw inline raster images?
- :class:`ImageRasterizer`: turns an image URL into terminal output, either as
  an inline raster escape sequence or as coloured ASCII art.
"""

from __future__ import annotations

import base64
import logging
import os
import threading
from io import BytesIO
from typing import Callable, Iterable, Mapping, Protocol

import httpx
from PIL import Image as PILImage

from termread.config import settings

logger = logging.getLogger(__name__)

_INLINE_TERM_PROGRAMS = {"iTerm.app", "WezTerm", "mintty"}
_ASCII_RAMP = " .:-=+*#%@"
_MAX_ASCII_ROWS = 40


class TerminalCapabilities(Protocol):
    def supports_inline_images(self) -> bool: ...


class ImageRasterizer(Protocol):
    def inline(self, url: str, width: int) -> str:
        """Inline raster escape sequence for *url*; ``""`` or raise on failure."""

    def ascii(self, url: str, width: int) -> str:
        """ASCII-art rendering of *url*; ``""`` or raise on failure."""


class EnvironmentCapabilities:
    """Detects the iTerm2 inline image protocol from the environment."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ

    def supports_inline_images(self) -> bool:
        if self.environ.get("TERM_PROGRAM", "") in _INLINE_TERM_PROGRAMS:
            return True
        return self.environ.get("LC_TERMINAL", "") == "iTerm2"


class NoInlineImages:
    """Capability stub for outputs that cannot carry raster escapes."""

    def supports_inline_images(self) -> bool:
        return False


class HttpImageRasterizer:
    """Downloads images with ``httpx`` and rasterizes them with Pillow.

    Downloads are cached per instance, failures included, so re-rendering on
    resize never hits the network again for the same URL.
    """

    def __init__(
        self,
        timeout: float | None = None,
        max_bytes: int | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.timeout = settings.image_timeout if timeout is None else timeout
        self.max_bytes = settings.image_max_bytes if max_bytes is None else max_bytes
        self._client = client
        self._cache: dict[str, bytes] = {}
        self._failures: dict[str, Exception] = {}

    def is_cached(self, url: str) -> bool:
        """True once *url* has been downloaded or has failed to download."""
        return url in self._cache or url in self._failures

    def fetch(self, url: str) -> bytes:
        """Return the image bytes for *url*, downloading them at most once.

        Raises:
            ValueError: For an empty URL, a non-200 status, an empty body or a
                body larger than ``max_bytes``.
            httpx.HTTPError: On transport errors.
        """
        if url in self._cache:
            return self._cache[url]
        if url in self._failures:
            raise self._failures[url]
        if not url:
            raise ValueError("empty image url")

        try:
            data = self._download(url)
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Image download failed for %s: %s", url, exc)
            self._failures[url] = exc
            raise

        self._cache[url] = data
        return data

    def _download(self, url: str) -> bytes:
        client = self._client or httpx.Client(
            headers={"User-Agent": settings.user_agent},
            timeout=self.timeout,
            follow_redirects=True,
        )
        try:
            with client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise ValueError(f"HTTP {response.status_code} for {url}")
                declared = response.headers.get("Content-Length", "")
                if declared.isdigit() and int(declared) > self.max_bytes:
                    raise ValueError(f"image larger than {self.max_bytes} bytes: {url}")
                data = bytearray()
                for chunk in response.iter_bytes():
                    data.extend(chunk)
                    if len(data) > self.max_bytes:
                        raise ValueError(f"image larger than {self.max_bytes} bytes: {url}")
        finally:
            if self._client is None:
                client.close()

        if not data:
            raise ValueError(f"empty image body for {url}")
        return bytes(data)

    def inline(self, url: str, width: int) -> str:
        encoded = base64.b64encode(self.fetch(url)).decode("ascii")
        return f"\x1b]1337;File=inline=1;width={width};preserveAspectRatio=1:{encoded}\a"

    def ascii(self, url: str, width: int) -> str:
        image = PILImage.open(BytesIO(self.fetch(url))).convert("RGB")
        return image_to_ascii(image, width)


class ImagePending(LookupError):
    """The image has not finished downloading yet."""


class BackgroundImages:
    """Non-blocking rasterizer for the interactive reader.

    Rendering only uses images that :meth:`prefetch` has already downloaded;
    anything else raises :class:`ImagePending` so the layout falls back to
    the text placeholder.  Downloads run on a daemon thread, so they never
    hold up the UI or the process exit.
    """

    def __init__(self, rasterizer: HttpImageRasterizer | None = None) -> None:
        self.rasterizer = rasterizer or HttpImageRasterizer()

    def prefetch(self, urls: Iterable[str], on_done: Callable[[], None] | None = None) -> threading.Thread:
        """Download *urls* in the background, then call *on_done* (from that thread)."""
        pending = [url for url in dict.fromkeys(urls) if url and not self.rasterizer.is_cached(url)]

        def run() -> None:
            for url in pending:
                try:
                    self.rasterizer.fetch(url)
                except (httpx.HTTPError, ValueError):
                    pass  # recorded by the rasterizer; rendered as a placeholder
            if on_done is not None:
                on_done()

        thread = threading.Thread(target=run, name="termread-images", daemon=True)
        thread.start()
        return thread

    def _ready(self, url: str) -> None:
        if not self.rasterizer.is_cached(url):
            raise ImagePending(url)

    def inline(self, url: str, width: int) -> str:
        self._ready(url)
        return self.rasterizer.inline(url, width)

    def ascii(self, url: str, width: int) -> str:
        self._ready(url)
        return self.rasterizer.ascii(url, width)


def image_to_ascii(image: PILImage.Image, width: int) -> str:
    """Render *image* as coloured ASCII art *width* columns wide.

    Terminal cells are about twice as tall as wide, so the height is halved
    to keep the aspect ratio; the result is capped at 40 rows.
    """
    width = max(1, width)
    height = max(1, int(image.height / image.width * width * 0.5))
    if height > _MAX_ASCII_ROWS:
        width = max(1, int(width * _MAX_ASCII_ROWS / height))
        height = _MAX_ASCII_ROWS
    image = image.resize((width, height))
    pixels = image.load()

    lines = []
    for y in range(height):
        line = ""
        for x in range(width):
            r, g, b = pixels[x, y][:3]
            luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
            char = _ASCII_RAMP[min(len(_ASCII_RAMP) - 1, int(luminance * len(_ASCII_RAMP)))]
            line += f"\x1b[38;2;{r};{g};{b}m{char}"
        line += "\x1b[0m"
        lines.append(line)
    logger.debug("Rasterized image to %dx%d ASCII cells", width, height)
    return "\n".join(lines)
