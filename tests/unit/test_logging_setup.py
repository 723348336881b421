"""Tests for setup_logging handler configuration."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

import pytest

from annotext import setup_logging
from annotext.config import LoggingConfig, Settings

if TYPE_CHECKING:
    from pathlib import Path


def _added_handlers(
    root: logging.Logger, before: list[logging.Handler]
) -> list[logging.Handler]:
    return [h for h in root.handlers if h not in before]


class TestSetupLogging:
    """setup_logging attaches console and optional file handlers."""

    def test_console_only_by_default(
        self, restore_root_logger: logging.Logger
    ) -> None:
        before = list(restore_root_logger.handlers)
        setup_logging(Settings(_env_file=None))  # type: ignore[call-arg]
        added = _added_handlers(restore_root_logger, before)
        assert len(added) == 1
        assert type(added[0]) is logging.StreamHandler
        assert restore_root_logger.level == logging.INFO

    def test_rotating_file_handler(
        self, restore_root_logger: logging.Logger, tmp_path: Path
    ) -> None:
        log_dir = tmp_path / "logs"
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            logging=LoggingConfig(level="DEBUG", log_dir=log_dir, file_logging=True),
        )
        before = list(restore_root_logger.handlers)
        setup_logging(settings)

        file_handlers = [
            h
            for h in _added_handlers(restore_root_logger, before)
            if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5
        assert (log_dir / f"annotext.{os.getpid()}.log").is_file()
        assert restore_root_logger.level == logging.DEBUG

    def test_uses_cached_settings(
        self, restore_root_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LOGGING__LEVEL", "warning")
        setup_logging()
        assert restore_root_logger.level == logging.WARNING
