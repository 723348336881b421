"""Shared pytest fixtures for annotext tests."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import pytest

from annotext.config import Settings, get_settings
from annotext.engine.palettes import PaletteRegistry, get_palette_registry

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep developer .env files and env vars out of every test.

    Clears the cached settings and palette registry before and after.
    """
    for key in list(os.environ):
        if key.startswith(("HIGHLIGHT__", "LOGGING__")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    get_settings.cache_clear()
    get_palette_registry.cache_clear()
    yield
    get_settings.cache_clear()
    get_palette_registry.cache_clear()


@pytest.fixture
def registry() -> PaletteRegistry:
    """Registry holding only the built-in palettes."""
    return PaletteRegistry.builtin()


@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger]:
    """Remove handlers a test adds to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
