"""End-to-end processing of annotated model responses.

Pipeline:
1. Shield fenced code blocks
2. Sanitize markers (code-like examples join the shield)
3. Resolve markers into a fragment tree
4. Render fragments with the active palette and mode
5. Restore shielded code

Every step is a pure function of its input, so re-running the whole pipeline
over a growing buffer is safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from annotext.config import get_settings
from annotext.engine.codes import OPEN_MARKER_PATTERN, Density, RenderMode
from annotext.engine.palettes import PaletteRegistry, get_palette_registry
from annotext.engine.renderer import render_fragments, strip_annotation_markers
from annotext.engine.resolver import resolve_annotations
from annotext.engine.sanitizer import sanitize_response
from annotext.engine.shield import CodeBlockShield

logger = logging.getLogger(__name__)

_MODE_CODES: dict[RenderMode, str] = {
    RenderMode.UNDERLINE: "U",
    RenderMode.HIGHLIGHTS: "HL",
    RenderMode.BOTH: "HU",
}


def mode_code(mode: RenderMode | str) -> str:
    """Short code naming the mode in prompt instructions (default ``HL``).

    ``both`` and ``highlights-underline`` parse to the same BOTH member, which
    always sends ``HU``. ``B`` is the concept annotation code and is never
    used as a mode selector.
    """
    return _MODE_CODES.get(RenderMode.parse(mode), "HL")


@dataclass(frozen=True, slots=True)
class HighlightRequest:
    """What the prompt builder needs to know about one user message."""

    prompt: str
    needs_highlights: bool
    mode: RenderMode
    density: Density
    mode_code: str | None


def build_highlight_request(
    message: str,
    mode: RenderMode | str | None = None,
    density: Density | str | None = None,
) -> HighlightRequest:
    """Describe how a user message should be sent to the model.

    Density is passed through for the prompt builder; the engine never uses it.
    """
    settings = get_settings().highlight
    mode = RenderMode.parse(mode if mode is not None else settings.mode)
    density = Density.parse(density if density is not None else settings.density)

    if mode == RenderMode.NONE:
        return HighlightRequest(message, False, mode, density, None)
    return HighlightRequest(message, True, mode, density, mode_code(mode))


def has_annotation_markers(text: str) -> bool:
    return OPEN_MARKER_PATTERN.search(text) is not None


def process_response(
    text: str,
    palette_name: str | None = None,
    mode: RenderMode | str | None = None,
    density: Density | str | None = None,  # noqa: ARG001
    *,
    registry: PaletteRegistry | None = None,
) -> str:
    """Turn raw model output into styled text.

    Args:
        text: Complete model response.
        palette_name: Palette to colour spans with; unknown names fall back
            to the default palette.
        mode: Render mode; unknown names fall back to highlights.
        density: Accepted for interface symmetry with prompt building.
        registry: Palette registry; the process-wide one when omitted.

    Returns:
        The sanitized text unchanged when no annotation marker survives,
        marker-free text in NONE mode, otherwise text with styled spans.
    """
    if not text:
        return text

    settings = get_settings().highlight
    mode = RenderMode.parse(mode if mode is not None else settings.mode)
    if palette_name is None:
        palette_name = settings.palette

    shield = CodeBlockShield()
    sanitized = sanitize_response(shield.extract(text), shield)

    if not has_annotation_markers(sanitized):
        return shield.restore(sanitized)

    if mode == RenderMode.NONE:
        return shield.restore(strip_annotation_markers(sanitized))

    if registry is None:
        registry = get_palette_registry()
    palette = registry.lookup(palette_name)

    fragments = resolve_annotations(sanitized)
    logger.debug(
        "Rendering %d top-level fragment(s) with %s/%s",
        len(fragments),
        palette.name,
        mode.value,
    )
    return shield.restore(render_fragments(fragments, mode, palette))


class HighlightEngine:
    """A palette and mode bound together for repeated rendering.

    Both are fixed for the lifetime of the instance.
    """

    def __init__(
        self,
        palette_name: str | None = None,
        mode: RenderMode | str | None = None,
        *,
        registry: PaletteRegistry | None = None,
    ) -> None:
        settings = get_settings().highlight
        self._registry = registry if registry is not None else get_palette_registry()
        self._palette = self._registry.lookup(
            palette_name if palette_name is not None else settings.palette
        )
        self._mode = RenderMode.parse(mode if mode is not None else settings.mode)

    @property
    def palette_name(self) -> str:
        return self._palette.name

    @property
    def mode(self) -> RenderMode:
        return self._mode

    def render(self, text: str) -> str:
        return process_response(
            text, self._palette.name, self._mode, registry=self._registry
        )
