"""Named colour palettes and the process-wide palette registry.

A palette pairs a background table (highlight mode) with an underline table
(underline mode), both keyed by annotation code. The registry is built once,
exposed read-only, and never fails a lookup: unknown names resolve to the
default palette.

Palettes beyond the built-ins can be supplied as a JSON file named by
``HIGHLIGHT__PALETTE_FILE``::

    {"ocean": {"background": {"Y": "#E0F7FA", ...}, "underline": {...}}}

Underline entries omitted from a file are derived by darkening the matching
background colour.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import TYPE_CHECKING

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from annotext.engine.codes import AnnotationCode
from annotext.engine.palette_tables import (
    BUILTIN_PALETTES,
    DEFAULT_PALETTE_NAME,
    FALLBACK_BACKGROUND,
    FALLBACK_UNDERLINE,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_HEX_COLOUR = re.compile(r"#[0-9A-Fa-f]{6}")


class PaletteFileError(ValueError):
    """A palette file could not be read or failed validation."""


def darken_color(hex_colour: str, amount: int = 40) -> str:
    """Darken a ``#RRGGBB`` colour by subtracting *amount* from each channel.

    Channels are floored at zero. The result is lowercase hex.
    """
    r = int(hex_colour[1:3], 16)
    g = int(hex_colour[3:5], 16)
    b = int(hex_colour[5:7], 16)
    return "#{:02x}{:02x}{:02x}".format(
        max(0, r - amount),
        max(0, g - amount),
        max(0, b - amount),
    )


def _check_colours(table: Mapping[AnnotationCode, str]) -> None:
    for code, colour in table.items():
        if not _HEX_COLOUR.fullmatch(colour):
            msg = f"{code.value}: {colour!r} is not a #RRGGBB colour"
            raise ValueError(msg)


class Palette(BaseModel):
    """A named pair of colour tables indexed by annotation code.

    Both tables are read-only once validated; the registry hands the same
    instance to every caller.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    background: Mapping[AnnotationCode, str]
    underline: Mapping[AnnotationCode, str] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("background")
    @classmethod
    def _freeze_background(
        cls, table: Mapping[AnnotationCode, str]
    ) -> Mapping[AnnotationCode, str]:
        _check_colours(table)
        return MappingProxyType(dict(table))

    @field_validator("underline")
    @classmethod
    def _freeze_underline(
        cls, table: Mapping[AnnotationCode, str], info: ValidationInfo
    ) -> Mapping[AnnotationCode, str]:
        """Validate underlines and derive missing ones from the background."""
        _check_colours(table)
        underline = dict(table)
        for code, colour in info.data.get("background", {}).items():
            underline.setdefault(code, darken_color(colour))
        return MappingProxyType(underline)

    def background_color(self, code: AnnotationCode) -> str:
        """Colour for *code*, else this palette's Y colour, else the global one."""
        return self.background.get(
            code, self.background.get(AnnotationCode.Y, FALLBACK_BACKGROUND)
        )

    def underline_color(self, code: AnnotationCode) -> str:
        """Colour for *code*, else this palette's O colour, else the global one."""
        return self.underline.get(
            code, self.underline.get(AnnotationCode.O, FALLBACK_UNDERLINE)
        )


class PaletteRegistry:
    """Immutable name -> palette mapping with a deterministic default."""

    def __init__(
        self,
        palettes: Mapping[str, Palette],
        default: str = DEFAULT_PALETTE_NAME,
    ) -> None:
        if default not in palettes:
            msg = f"default palette {default!r} is not registered"
            raise ValueError(msg)
        self._palettes = MappingProxyType(dict(palettes))
        self._default = default

    @classmethod
    def builtin(cls) -> PaletteRegistry:
        """Registry holding only the shipped palettes."""
        return cls(builtin_palettes())

    @property
    def default(self) -> Palette:
        return self._palettes[self._default]

    def lookup(self, name: str | None) -> Palette:
        """Return the palette called *name*, or the default palette."""
        if name is not None and name in self._palettes:
            return self._palettes[name]
        logger.debug("Unknown palette %r, using %s", name, self._default)
        return self.default

    def names(self) -> tuple[str, ...]:
        return tuple(self._palettes)

    def __contains__(self, name: object) -> bool:
        return name in self._palettes

    def __len__(self) -> int:
        return len(self._palettes)


def builtin_palettes() -> dict[str, Palette]:
    return {
        name: Palette.model_validate({"name": name, **tables})
        for name, tables in BUILTIN_PALETTES.items()
    }


def load_palette_file(path: Path) -> dict[str, Palette]:
    """Load extra palettes from a JSON file.

    Args:
        path: JSON file mapping palette name to ``background``/``underline``
            tables.

    Returns:
        Validated palettes keyed by name.

    Raises:
        PaletteFileError: The file is missing, is not JSON, or an entry fails
            validation.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Cannot read palette file %s: %s", path, exc)
        msg = f"cannot read palette file {path}"
        raise PaletteFileError(msg) from exc

    if not isinstance(raw, dict):
        msg = f"palette file {path} must contain a JSON object"
        logger.error(msg)
        raise PaletteFileError(msg)

    palettes: dict[str, Palette] = {}
    for name, body in raw.items():
        if not isinstance(body, dict):
            msg = f"palette {name!r} in {path} must be an object"
            logger.error(msg)
            raise PaletteFileError(msg)
        try:
            palettes[name] = Palette.model_validate({**body, "name": name})
        except ValidationError as exc:
            logger.error("Invalid palette %r in %s: %s", name, path, exc)
            msg = f"invalid palette {name!r} in {path}"
            raise PaletteFileError(msg) from exc

    logger.info("Loaded %d palette(s) from %s", len(palettes), path)
    return palettes


@lru_cache(maxsize=1)
def get_palette_registry() -> PaletteRegistry:
    """Return the cached process-wide registry.

    Built-ins are merged with the file named in settings; a file palette may
    replace a built-in of the same name. Call
    ``get_palette_registry.cache_clear()`` in tests to reset.
    """
    from annotext.config import get_settings

    palettes = builtin_palettes()
    palette_file = get_settings().highlight.palette_file
    if palette_file is not None:
        palettes.update(load_palette_file(palette_file))
    return PaletteRegistry(palettes)


def highlight_background(
    palette_name: str | None,
    code: AnnotationCode,
    registry: PaletteRegistry | None = None,
) -> str:
    """Background colour for *code* in the named palette."""
    if registry is None:
        registry = get_palette_registry()
    return registry.lookup(palette_name).background_color(code)


def highlight_underline(
    palette_name: str | None,
    code: AnnotationCode,
    registry: PaletteRegistry | None = None,
) -> str:
    """Underline colour for *code* in the named palette."""
    if registry is None:
        registry = get_palette_registry()
    return registry.lookup(palette_name).underline_color(code)
