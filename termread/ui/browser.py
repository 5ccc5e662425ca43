"""Opening links in the system browser."""

from __future__ import annotations

import logging
import webbrowser
from typing import Protocol

logger = logging.getLogger(__name__)


class BrowserOpener(Protocol):
    def open(self, url: str) -> None: ...


class WebbrowserOpener:
    """Hands URLs to the platform's default browser."""

    def open(self, url: str) -> None:
        if not webbrowser.open(url):
            logger.warning("No browser available to open %s", url)
