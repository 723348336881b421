"""Repair of malformed and legacy markers in model output.

Runs on shielded text (fenced code already replaced by placeholders) and
leaves only candidate markers from the closed annotation set behind. Every
closed-set marker that survives has a partner: lone opens and closes are
deleted here so the resolver never sees them.

Steps, in order:
1. Mis-encoded em dash -> comma-space
2. Multi-line code-like ``[P]`` examples -> shielded fenced blocks
3. Reasoning/response wrapper markers deleted
4. Legacy colour words and experimental codes unwrapped (content kept)
5. Leading mode selectors deleted
6. A lone close directly after a lone open of another code retargeted
7. Orphaned closed-set markers deleted, code by code
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from annotext.engine.codes import (
    CODE_ALTERNATION,
    EXPERIMENTAL_MARKERS,
    LEGACY_COLOR_MARKERS,
    META_MARKERS,
    MODE_SELECTOR_MARKERS,
    AnnotationCode,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from annotext.engine.shield import CodeBlockShield

logger = logging.getLogger(__name__)

# UTF-8 em dash read back as cp1252.
MOJIBAKE_EM_DASH = "â€”"

_META_MARKER_PATTERN = re.compile(
    r"\[/?(?:" + "|".join(META_MARKERS) + r")\]", re.IGNORECASE
)


def _legacy_pair_pattern(name: str) -> re.Pattern[str]:
    """Match a legacy pair whose content holds no delimiter of the same name."""
    delimiter = rf"\[/?{name}\]"
    return re.compile(
        rf"\[{name}\]((?:(?!{delimiter}).)*?)\[/{name}\]",
        re.IGNORECASE | re.DOTALL,
    )


_LEGACY_PAIR_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    _legacy_pair_pattern(name)
    for name in (*LEGACY_COLOR_MARKERS, *EXPERIMENTAL_MARKERS)
)

# Lone colour words go in any case. For experimental codes only upper-case
# closers go: openers such as ``[X]`` in a task list or ``arr[i]`` are text.
_LEGACY_LONE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"\[/?(?:" + "|".join(LEGACY_COLOR_MARKERS) + r")\]", re.IGNORECASE
    ),
    re.compile(r"\[/(?:" + "|".join(EXPERIMENTAL_MARKERS) + r")\]"),
)

_LEADING_MODE_PATTERN = re.compile(
    r"^(?:\s*\[(?:" + "|".join(MODE_SELECTOR_MARKERS) + r")\]\s*)+", re.IGNORECASE
)
_MODE_CLOSE_PATTERN = re.compile(
    r"\[/(?:" + "|".join(MODE_SELECTOR_MARKERS) + r")\]", re.IGNORECASE
)

# Format: __VALIDPAIR_{code}_{index}__
_PAIR_PLACEHOLDER_TEMPLATE = "__VALIDPAIR_{}_{}__"
_PAIR_PLACEHOLDER_PATTERN = re.compile(r"__VALIDPAIR_([A-Z]+)_(\d+)__")


def _pair_pattern(code: AnnotationCode) -> re.Pattern[str]:
    """Match ``[C]...[/C]`` holding no other delimiter of the same code."""
    open_marker = re.escape(code.open_marker)
    close_marker = re.escape(code.close_marker)
    return re.compile(
        rf"{open_marker}(?:(?!{open_marker}|{close_marker}).)*?{close_marker}",
        re.DOTALL,
    )


def _delimiter_pattern(code: AnnotationCode) -> re.Pattern[str]:
    return re.compile(rf"\[/?{re.escape(code.value)}\]")


_PAIR_PATTERNS: dict[AnnotationCode, re.Pattern[str]] = {
    code: _pair_pattern(code) for code in AnnotationCode
}
_DELIMITER_PATTERNS: dict[AnnotationCode, re.Pattern[str]] = {
    code: _delimiter_pattern(code) for code in AnnotationCode
}

# Group 1 is "/" for a close, group 2 the code.
_MARKER_PARTS_PATTERN = re.compile(rf"\[(/?)({CODE_ALTERNATION})\]")


def fix_mojibake_dashes(text: str) -> str:
    return text.replace(MOJIBAKE_EM_DASH, ", ")


def strip_meta_markers(text: str) -> str:
    """Delete ``[thinking]``/``[response]`` wrappers, keeping what they wrap."""
    return _META_MARKER_PATTERN.sub("", text)


def unwrap_legacy_markers(text: str) -> str:
    """Unwrap full-word colour and experimental code pairs, then drop lone ones.

    A pair may enclose closed-set markers: ``[RED]note [Y]a[/Y][/RED]`` keeps
    ``note [Y]a[/Y]``.
    """
    for pattern in _LEGACY_PAIR_PATTERNS:
        text = pattern.sub(r"\1", text)
    for pattern in _LEGACY_LONE_PATTERNS:
        text = pattern.sub("", text)
    return text


def strip_mode_selectors(text: str) -> str:
    """Delete mode selectors at the very start of the text and stray closers."""
    text = _LEADING_MODE_PATTERN.sub("", text, count=1)
    return _MODE_CLOSE_PATTERN.sub("", text)


def _paired_offsets(text: str) -> set[int]:
    """Start offsets of every delimiter that belongs to a well-formed pair."""
    offsets: set[int] = set()
    for code, pattern in _PAIR_PATTERNS.items():
        for match in pattern.finditer(text):
            offsets.add(match.start())
            offsets.add(match.end() - len(code.close_marker))
    return offsets


def repair_mismatched_closes(text: str) -> str:
    """Retarget a lone close that directly follows a lone open of another code.

    ``[Y]a[/B]`` becomes ``[Y]a[/Y]``: neither delimiter has a partner and no
    marker sits between them, so the close is read as a mistyped close of the
    open. Delimiters belonging to a well-formed pair are never touched, so
    ``[Y]a[/B][/Y]`` is left for orphan removal.
    """
    paired = _paired_offsets(text)
    repairs: list[tuple[int, int, str]] = []
    previous: re.Match[str] | None = None

    for match in _MARKER_PARTS_PATTERN.finditer(text):
        if match.start() in paired:
            previous = None
            continue
        if (
            previous is not None
            and not previous.group(1)
            and match.group(1)
            and previous.group(2) != match.group(2)
        ):
            close_marker = AnnotationCode(previous.group(2)).close_marker
            repairs.append((match.start(), match.end(), close_marker))
            previous = None
            continue
        previous = match

    if not repairs:
        return text

    logger.debug("Retargeted %d mismatched close marker(s)", len(repairs))
    parts: list[str] = []
    last = 0
    for start, end, replacement in repairs:
        parts.append(text[last:start])
        parts.append(replacement)
        last = end
    parts.append(text[last:])
    return "".join(parts)


def remove_orphaned_markers(text: str) -> str:
    """Delete every closed-set marker that has no partner.

    For each code, well-formed pairs are parked behind placeholders, every
    remaining delimiter of that code is deleted, then the pairs come back
    verbatim. A pair of one code may enclose markers of other codes.

    Same-code self-nesting (``[Y]a[Y]b[/Y]c[/Y]``) keeps only the innermost
    pair; the outer delimiters are treated as orphans.
    """
    for code in AnnotationCode:
        parked: list[str] = []

        def _park(match: re.Match[str], code: AnnotationCode = code) -> str:
            parked.append(match.group(0))
            return _PAIR_PLACEHOLDER_TEMPLATE.format(code.name, len(parked) - 1)

        protected = _PAIR_PATTERNS[code].sub(_park, text)
        cleaned, removed = _DELIMITER_PATTERNS[code].subn("", protected)
        if removed:
            logger.debug("Removed %d orphaned %s marker(s)", removed, code.value)
            text = _restore_pairs(cleaned, code, parked)
    return text


def _restore_pairs(text: str, code: AnnotationCode, parked: list[str]) -> str:
    def _unpark(match: re.Match[str]) -> str:
        if match.group(1) != code.name:
            return match.group(0)
        return parked[int(match.group(2))]

    return _PAIR_PLACEHOLDER_PATTERN.sub(_unpark, text)


def sanitize_response(text: str, shield: CodeBlockShield) -> str:
    """Run every repair step over shielded model output.

    Args:
        text: Model output with fenced code already shielded.
        shield: The shield for this run; code-like examples are added to it.

    Returns:
        Text whose closed-set markers all come in pairs.
    """
    steps: tuple[tuple[str, Callable[[str], str]], ...] = (
        ("mojibake dashes", fix_mojibake_dashes),
        ("code-like examples", shield.promote_code_like),
        ("meta markers", strip_meta_markers),
        ("legacy markers", unwrap_legacy_markers),
        ("mode selectors", strip_mode_selectors),
        ("mismatched closes", repair_mismatched_closes),
        ("orphaned markers", remove_orphaned_markers),
    )
    for name, step in steps:
        repaired = step(text)
        if repaired != text:
            logger.debug("Sanitizer step %r changed the response", name)
        text = repaired
    return text
