"""Interactive reader: navigation state machine and its terminal front end."""

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

__all__ = [
    "BrowserOpener",
    "DocumentLoaded",
    "KeyPressed",
    "LoadFailed",
    "NavigationController",
    "Resized",
    "State",
    "Tick",
    "WebbrowserOpener",
]
