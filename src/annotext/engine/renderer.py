"""Style materialisation for resolved fragments.

Annotated fragments become inline-styled ``<span>`` elements whose colours
come from the active palette. Plain fragments are emitted verbatim.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from annotext.engine.codes import ANNOTATION_MARKER_PATTERN, RenderMode
from annotext.engine.resolver import Annotated, Plain

if TYPE_CHECKING:
    from collections.abc import Iterable

    from annotext.engine.codes import AnnotationCode
    from annotext.engine.palettes import Palette
    from annotext.engine.resolver import ResolvedFragment

_UNDERLINE_STYLE = (
    "text-decoration:underline {underline};"
    "text-decoration-thickness:2px;"
    "text-underline-offset:2px;"
    "text-decoration-skip-ink:none"
)
_HIGHLIGHT_STYLE = (
    "background-color:{background};"
    "padding:1px 3px 0 3px;"
    "border-radius:3px;"
    "display:inline"
)
_BOTH_STYLE = (
    "background-color:{background};"
    "text-decoration:underline {underline};"
    "text-decoration-thickness:2px;"
    "text-underline-offset:2px;"
    "text-decoration-skip-ink:none;"
    "padding:1px 3px 0 3px;"
    "border-radius:3px"
)


def span_style(code: AnnotationCode, mode: RenderMode, palette: Palette) -> str:
    """CSS declarations for one annotated span.

    NONE has no visual treatment of its own here and renders like HIGHLIGHTS;
    callers that want plain text use ``strip_annotation_markers`` instead.
    """
    if mode == RenderMode.UNDERLINE:
        return _UNDERLINE_STYLE.format(underline=palette.underline_color(code))
    if mode == RenderMode.BOTH:
        return _BOTH_STYLE.format(
            background=palette.background_color(code),
            underline=palette.underline_color(code),
        )
    return _HIGHLIGHT_STYLE.format(background=palette.background_color(code))


def render_fragment(
    fragment: ResolvedFragment, mode: RenderMode, palette: Palette
) -> str:
    if isinstance(fragment, Plain):
        return fragment.text
    content = render_fragments(fragment.children, mode, palette)
    return f'<span style="{span_style(fragment.code, mode, palette)}">{content}</span>'


def render_fragments(
    fragments: Iterable[ResolvedFragment], mode: RenderMode, palette: Palette
) -> str:
    """Render a fragment sequence, children before their wrapper."""
    return "".join(render_fragment(f, mode, palette) for f in fragments)


def strip_annotation_markers(text: str) -> str:
    """Delete every closed-set marker delimiter, keeping the inner text.

    Used for NONE mode. Independent of palette and idempotent: deleting one
    marker can join the halves of another (``[[Y]Y]``), so deletion repeats
    until nothing matches.
    """
    removed = 1
    while removed:
        text, removed = ANNOTATION_MARKER_PATTERN.subn("", text)
    return text


def fragment_text(fragments: Iterable[ResolvedFragment]) -> str:
    """Concatenated text of a fragment tree with all styling dropped."""
    parts: list[str] = []
    for fragment in fragments:
        if isinstance(fragment, Annotated):
            parts.append(fragment_text(fragment.children))
        else:
            parts.append(fragment.text)
    return "".join(parts)
