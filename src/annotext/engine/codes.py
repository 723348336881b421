"""Annotation codes, render modes and marker patterns.

The closed set of annotation codes is the only marker vocabulary that reaches
the tag resolver. Legacy and experimental markers are listed here so that the
sanitizer and the tests share one definition.

Shared between:
- engine/sanitizer.py (legacy cleanup, orphan removal)
- engine/resolver.py (lexer grammar)
- engine/renderer.py (marker stripping)
"""

from __future__ import annotations

import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)


class AnnotationCode(Enum):
    """Semantic category attached to a span of model output."""

    Y = "Y"
    B = "B"
    O = "O"  # noqa: E741
    G = "G"
    R = "R"
    P = "P"
    L = "L"
    GR = "GR"
    H = "H"
    BR = "BR"

    @property
    def label(self) -> str:
        return _CODE_LABELS[self]

    @property
    def open_marker(self) -> str:
        return f"[{self.value}]"

    @property
    def close_marker(self) -> str:
        return f"[/{self.value}]"


_CODE_LABELS: dict[AnnotationCode, str] = {
    AnnotationCode.Y: "key-info",
    AnnotationCode.B: "concept",
    AnnotationCode.O: "step",
    AnnotationCode.G: "success",
    AnnotationCode.R: "warning",
    AnnotationCode.P: "example",
    AnnotationCode.L: "data",
    AnnotationCode.GR: "code",
    AnnotationCode.H: "emphasis",
    AnnotationCode.BR: "context",
}


class RenderMode(Enum):
    """Visual treatment applied to resolved annotations."""

    NONE = "none"
    UNDERLINE = "underline"
    HIGHLIGHTS = "highlights"
    BOTH = "both"

    @classmethod
    def parse(cls, value: str | RenderMode | None) -> RenderMode:
        """Resolve a mode name, accepting the historical ``highlights-underline``.

        Unknown or missing names fall back to HIGHLIGHTS.
        """
        if isinstance(value, RenderMode):
            return value
        if value is None:
            return cls.HIGHLIGHTS
        name = value.strip().lower()
        if name in _MODE_ALIASES:
            return _MODE_ALIASES[name]
        try:
            return cls(name)
        except ValueError:
            logger.debug("Unknown render mode %r, using highlights", value)
            return cls.HIGHLIGHTS


_MODE_ALIASES: dict[str, RenderMode] = {
    "highlights-underline": RenderMode.BOTH,
}


class Density(Enum):
    """How explicitly the prompt asks the model to annotate."""

    AUTO = "auto"
    EXPLICIT = "explicit"

    @classmethod
    def parse(cls, value: str | Density | None) -> Density:
        if isinstance(value, Density):
            return value
        if value is not None and value.strip().lower() == "explicit":
            return cls.EXPLICIT
        return cls.AUTO


# Longest codes first so alternations never stop at a one-letter prefix.
CODE_ALTERNATION = "|".join(
    re.escape(code.value)
    for code in sorted(AnnotationCode, key=lambda c: len(c.value), reverse=True)
)

# Any opening or closing marker of the closed set.
ANNOTATION_MARKER_PATTERN = re.compile(rf"\[/?(?:{CODE_ALTERNATION})\]")
OPEN_MARKER_PATTERN = re.compile(rf"\[(?:{CODE_ALTERNATION})\]")

# Reasoning/response wrappers that must never surface in output.
META_MARKERS: tuple[str, ...] = ("thinking", "response")

# Full-word colour markers from an older prompt format.
LEGACY_COLOR_MARKERS: tuple[str, ...] = (
    "GREEN",
    "RED",
    "BLUE",
    "YELLOW",
    "ORANGE",
    "PURPLE",
)

# Codes models invented or that earlier prompt versions used.
EXPERIMENTAL_MARKERS: tuple[str, ...] = (
    "E",
    "I",
    "N",
    "T",
    "S",
    "M",
    "D",
    "C",
    "A",
    "X",
    "U",
    "B1",
    "B2",
    "B3",
)

# Mode selectors the model sometimes echoes at the start of a reply.
MODE_SELECTOR_MARKERS: tuple[str, ...] = ("HU", "HL")
