"""Tests for settings, logging setup and the browser opener."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from termread.config import MAX_WIDTH, MIN_WIDTH, Settings, clamp_width
from termread.logging_config import configure_logging
from termread.ui.browser import WebbrowserOpener


class TestClampWidth:
    @pytest.mark.parametrize(
        "width, expected",
        [(200, MAX_WIDTH), (90, 90), (60, 60), (5, MIN_WIDTH), (-1, MIN_WIDTH)],
    )
    def test_clamps(self, width: int, expected: int) -> None:
        assert clamp_width(width) == expected


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("TERMREAD_WIDTH", "TERMREAD_IMAGES", "TERMREAD_TIMEOUT", "TERMREAD_LOG_FILE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()

        assert settings.width == 90
        assert settings.show_images is True
        assert settings.request_timeout == 15.0
        assert settings.log_file is None

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("TERMREAD_WIDTH", "120")
        monkeypatch.setenv("TERMREAD_IMAGES", "off")
        monkeypatch.setenv("TERMREAD_TIMEOUT", "3.5")
        monkeypatch.setenv("TERMREAD_LOG_FILE", str(tmp_path / "termread.log"))
        settings = Settings()

        assert settings.default_width == 120
        assert settings.width == MAX_WIDTH
        assert settings.show_images is False
        assert settings.request_timeout == 3.5
        assert settings.log_file == tmp_path / "termread.log"


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_only(self, tmp_path: Path) -> None:
        log_file = tmp_path / "out.log"
        configure_logging("INFO", log_file=log_file, to_stderr=False)

        logging.getLogger("termread.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "INFO - [termread.test:" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_no_destination_installs_null_handler(self) -> None:
        configure_logging("DEBUG", to_stderr=False)
        handlers = logging.getLogger().handlers

        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.NullHandler)


class TestWebbrowserOpener:
    def test_delegates_to_webbrowser(self) -> None:
        with patch("termread.ui.browser.webbrowser.open", return_value=True) as mock_open:
            WebbrowserOpener().open("https://a.com")
        mock_open.assert_called_once_with("https://a.com")
