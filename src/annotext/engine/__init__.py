"""Annotation engine: marker sanitizing, shielding, resolution and rendering."""

from annotext.engine.codes import AnnotationCode, Density, RenderMode
from annotext.engine.cost import TokenCostEstimate, estimate_token_cost
from annotext.engine.palettes import (
    Palette,
    PaletteFileError,
    PaletteRegistry,
    get_palette_registry,
    highlight_background,
    highlight_underline,
    load_palette_file,
)
from annotext.engine.pipeline import (
    HighlightEngine,
    HighlightRequest,
    build_highlight_request,
    mode_code,
    process_response,
)
from annotext.engine.renderer import render_fragments, strip_annotation_markers
from annotext.engine.resolver import (
    Annotated,
    Plain,
    resolve_annotations,
    tokenize_tags,
)
from annotext.engine.sanitizer import sanitize_response
from annotext.engine.shield import CodeBlockShield

__all__ = [
    "Annotated",
    "AnnotationCode",
    "CodeBlockShield",
    "Density",
    "HighlightEngine",
    "HighlightRequest",
    "Palette",
    "PaletteFileError",
    "PaletteRegistry",
    "Plain",
    "RenderMode",
    "TokenCostEstimate",
    "build_highlight_request",
    "estimate_token_cost",
    "get_palette_registry",
    "highlight_background",
    "highlight_underline",
    "load_palette_file",
    "mode_code",
    "process_response",
    "render_fragments",
    "resolve_annotations",
    "sanitize_response",
    "strip_annotation_markers",
    "tokenize_tags",
]
