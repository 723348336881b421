"""Tests for annotext.config -- Settings and its sub-models.

Every test constructs Settings(_env_file=None, ...) to avoid reading real .env files.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from annotext.config import (
    HighlightConfig,
    LoggingConfig,
    Settings,
    get_settings,
)


class TestDefaults:
    """Defaults apply when nothing is configured."""

    def test_highlight_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.highlight == HighlightConfig()
        assert s.highlight.palette == "vibrant"
        assert s.highlight.mode == "highlights"
        assert s.highlight.density == "auto"
        assert s.highlight.palette_file is None

    def test_logging_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.logging.level == "INFO"
        assert s.logging.log_dir == Path("logs")
        assert s.logging.file_logging is False


class TestEnvironmentOverrides:
    """Nested env vars use the double-underscore delimiter."""

    def test_highlight_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HIGHLIGHT__PALETTE", "natural")
        monkeypatch.setenv("HIGHLIGHT__MODE", "underline")
        monkeypatch.setenv("HIGHLIGHT__DENSITY", "explicit")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.highlight.palette == "natural"
        assert s.highlight.mode == "underline"
        assert s.highlight.density == "explicit"

    def test_palette_file_is_path(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("HIGHLIGHT__PALETTE_FILE", str(tmp_path / "p.json"))
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.highlight.palette_file == tmp_path / "p.json"

    def test_logging_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOGGING__LEVEL", "debug")
        monkeypatch.setenv("LOGGING__FILE_LOGGING", "true")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.logging.level == "DEBUG"
        assert s.logging.file_logging is True

    def test_env_file_values(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("HIGHLIGHT__PALETTE=natural\n", encoding="utf-8")
        s = Settings(_env_file=env_file)  # type: ignore[call-arg]
        assert s.highlight.palette == "natural"


class TestValidation:
    """Invalid values fail at construction."""

    def test_unknown_density_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HighlightConfig(density="sometimes")  # type: ignore[arg-type]

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown log level"):
            LoggingConfig(level="CHATTY")

    def test_invalid_level_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOGGING__LEVEL", "loud")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]


class TestGetSettings:
    """get_settings caches one instance until cleared."""

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("HIGHLIGHT__PALETTE", "natural")
        assert get_settings().highlight.palette == "vibrant"
        get_settings.cache_clear()
        second = get_settings()
        assert second is not first
        assert second.highlight.palette == "natural"
