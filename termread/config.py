"""Centralised settings for termread.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file found from the current
working directory (loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True), override=False)

# Rendering never goes wider than this, whatever the terminal or flags say.
MAX_WIDTH = 90
MIN_WIDTH = 20


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def clamp_width(width: int) -> int:
    """Return *width* capped at :data:`MAX_WIDTH` and floored at :data:`MIN_WIDTH`."""
    return max(MIN_WIDTH, min(width, MAX_WIDTH))


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    default_width: int = field(
        default_factory=lambda: int(os.environ.get("TERMREAD_WIDTH", str(MAX_WIDTH)))
    )
    show_images: bool = field(
        default_factory=lambda: _env_bool("TERMREAD_IMAGES", True)
    )
    code_theme: str = field(
        default_factory=lambda: os.environ.get("TERMREAD_CODE_THEME", "monokai")
    )

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("TERMREAD_TIMEOUT", "15.0"))
    )
    image_timeout: float = field(
        default_factory=lambda: float(os.environ.get("TERMREAD_IMAGE_TIMEOUT", "10.0"))
    )
    image_max_bytes: int = 5 * 1024 * 1024
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "TERMREAD_USER_AGENT", "Mozilla/5.0 (compatible; termread/0.1)"
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("TERMREAD_LOG_LEVEL", "WARNING")
    )
    log_file: Path | None = field(
        default_factory=lambda: (
            Path(os.environ["TERMREAD_LOG_FILE"]) if os.environ.get("TERMREAD_LOG_FILE") else None
        )
    )

    @property
    def width(self) -> int:
        """Configured default width, already capped."""
        return clamp_width(self.default_width)


# Module-level singleton; import this everywhere:
#   from termread.config import settings
settings = Settings()
