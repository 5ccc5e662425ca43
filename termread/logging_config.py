"""Logging setup shared by the pipe and interactive entry points."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"

# Third-party loggers that are chatty at INFO/DEBUG.
_NOISY_LOGGERS = ("httpx", "httpcore", "PIL", "trafilatura", "asyncio")


def configure_logging(
    level: str | int = "WARNING",
    log_file: Path | None = None,
    to_stderr: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Level name (``"INFO"``) or number for the root logger.
        log_file: Optional file that receives every record.
        to_stderr: Whether records are also written to stderr.  The full-screen
            reader turns this off so log lines never land on the view.
    """
    formatter = logging.Formatter(_FORMAT)

    root_logger = logging.getLogger()
    log_level = getattr(logging, level.upper(), logging.WARNING) if isinstance(level, str) else level
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if to_stderr:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
