"""Tag resolution: marker tokens to a tree of annotated fragments.

Pipeline:
1. Inline markdown normalisation (bold, italic, inline code -> HTML)
2. Lexing with Lark into OPEN / CLOSE / TEXT tokens
3. Stack resolution into ``Plain`` and ``Annotated`` fragments

The resolver keeps an append-only output list and a stack of open frames.
Frames hold an index into the output list, not references into it, so
truncating the output on a match never leaves a frame pointing at a removed
object.

Crossing markers (``[Y]a[B]b[/Y]c[/B]``) are resolved best-effort: when a
frame closes, every frame still open above it is clamped to start after the
span that just closed. The example renders as Y around ``ab`` and B around
``c``. Crossing input never raises.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from lark import Lark

from annotext.engine.codes import CODE_ALTERNATION, AnnotationCode

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Inline markdown
# ---------------------------------------------------------------------------

_INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")
_BOLD_PATTERN = re.compile(r"\*\*([^*]+?)\*\*")
_ITALIC_PATTERN = re.compile(r"\*([^*\n]+?)\*")
# Unpaired ``**`` opening a line is a stray list/emphasis marker.
_ORPHAN_BOLD_PATTERN = re.compile(r"^[ \t]*\*\*(?!\*)", re.MULTILINE)

# Format: __INLINECODE_{index}__
_INLINE_CODE_TEMPLATE = "__INLINECODE_{}__"
_INLINE_CODE_PLACEHOLDER = re.compile(r"__INLINECODE_(\d+)__")


def normalize_inline_markdown(text: str) -> str:
    """Convert inline code, bold and italic markdown to simple HTML.

    Inline code spans are parked behind placeholders while bold and italic
    run, so their content is emitted literally (``2**10`` stays as is). Each
    conversion is a single non-nesting substitution over closed pairs. A
    ``**`` left at the start of a line afterwards has no partner and is
    deleted; one elsewhere is literal text.
    """
    code_spans: list[str] = []

    def _park(match: re.Match[str]) -> str:
        code_spans.append(match.group(1))
        return _INLINE_CODE_TEMPLATE.format(len(code_spans) - 1)

    def _unpark(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(code_spans):
            return match.group(0)
        return f'<code class="inline-code">{code_spans[index]}</code>'

    text = _INLINE_CODE_PATTERN.sub(_park, text)
    text = _BOLD_PATTERN.sub(r"<strong>\1</strong>", text)
    text = _ORPHAN_BOLD_PATTERN.sub("", text)
    text = _ITALIC_PATTERN.sub(r"<em>\1</em>", text)
    if not code_spans:
        return text
    return _INLINE_CODE_PLACEHOLDER.sub(_unpark, text)


# ---------------------------------------------------------------------------
# Lexer
# ---------------------------------------------------------------------------


class TagTokenType(Enum):
    """Token types for the tag lexer."""

    TEXT = "TEXT"
    OPEN = "OPEN"
    CLOSE = "CLOSE"


@dataclass(frozen=True, slots=True)
class TagToken:
    """A token from the tag lexer.

    Attributes:
        type: The token type (TEXT, OPEN, CLOSE)
        value: The raw string matched
        code: Annotation code for OPEN/CLOSE tokens, None for TEXT.
        start_pos: Start position in input
        end_pos: End position in input
    """

    type: TagTokenType
    value: str
    code: AnnotationCode | None
    start_pos: int
    end_pos: int


# TEXT catches everything else with negative lookahead, so every character
# of the input belongs to exactly one token.
_TAG_GRAMMAR = (
    rf"OPEN: /\[(?:{CODE_ALTERNATION})\]/" + "\n"
    rf"CLOSE: /\[\/(?:{CODE_ALTERNATION})\]/" + "\n"
    rf"TEXT: /(?:(?!\[\/?(?:{CODE_ALTERNATION})\]).)+/s"
)

# Compile once at module load
_tag_lexer = Lark(_TAG_GRAMMAR, parser=None, lexer="basic")

_CODE_EXTRACT_PATTERN = re.compile(r"\[/?([A-Z]+)\]")


def tokenize_tags(text: str) -> list[TagToken]:
    """Split text into OPEN, CLOSE and TEXT tokens.

    Only markers of the closed annotation set are recognised; anything else
    is text.

    Example:
        >>> [(t.type.value, t.value) for t in tokenize_tags("a [Y]b[/Y]")]
        [('TEXT', 'a '), ('OPEN', '[Y]'), ('TEXT', 'b'), ('CLOSE', '[/Y]')]
    """
    if not text:
        return []

    tokens: list[TagToken] = []

    for lark_token in _tag_lexer.lex(text):
        token_type = TagTokenType[lark_token.type]

        code: AnnotationCode | None = None
        if token_type != TagTokenType.TEXT:
            match = _CODE_EXTRACT_PATTERN.fullmatch(lark_token.value)
            if match:
                code = AnnotationCode(match.group(1))

        # Lark lexer always provides start_pos and end_pos for tokens
        start_pos = lark_token.start_pos if lark_token.start_pos is not None else 0
        end_pos = lark_token.end_pos if lark_token.end_pos is not None else 0

        tokens.append(
            TagToken(
                type=token_type,
                value=lark_token.value,
                code=code,
                start_pos=start_pos,
                end_pos=end_pos,
            )
        )

    return tokens


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Plain:
    """Unstyled text."""

    text: str


@dataclass(frozen=True, slots=True)
class Annotated:
    """A span styled with one annotation code around nested fragments."""

    code: AnnotationCode
    children: tuple[Plain | Annotated, ...]


ResolvedFragment: TypeAlias = Plain | Annotated


@dataclass(slots=True)
class StackFrame:
    """An open marker and where its content starts in the output list."""

    code: AnnotationCode
    output_start: int


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_tokens(tokens: list[TagToken]) -> list[ResolvedFragment]:
    """Resolve a token stream into fragments with explicit nesting.

    - OPEN pushes a frame recording the current output length.
    - TEXT appends a ``Plain`` fragment.
    - CLOSE finds the nearest open frame with the same code, wraps all output
      produced since that frame opened in an ``Annotated`` fragment and drops
      the frame. A CLOSE with no such frame is ignored.
    - Frames still open at the end are discarded; their content stays plain.

    Example:
        ``[Y]a[/Y]b`` resolves to ``[Annotated(Y, (Plain("a"),)), Plain("b")]``.
    """
    output: list[ResolvedFragment] = []
    stack: list[StackFrame] = []

    for token in tokens:
        if token.type == TagTokenType.TEXT:
            output.append(Plain(token.value))

        elif token.type == TagTokenType.OPEN and token.code is not None:
            stack.append(StackFrame(token.code, len(output)))

        elif token.type == TagTokenType.CLOSE and token.code is not None:
            match_index = _find_open_frame(stack, token.code)
            if match_index is None:
                logger.debug("Dropping unmatched close marker %s", token.value)
                continue
            _close_frame(output, stack, match_index)

    if stack:
        logger.debug(
            "Discarding %d unclosed marker(s): %s",
            len(stack),
            ", ".join(frame.code.value for frame in stack),
        )

    return output


def _find_open_frame(stack: list[StackFrame], code: AnnotationCode) -> int | None:
    """Index of the most recently opened frame with *code*, if any."""
    for j in range(len(stack) - 1, -1, -1):
        if stack[j].code == code:
            return j
    return None


def _close_frame(
    output: list[ResolvedFragment],
    stack: list[StackFrame],
    match_index: int,
) -> None:
    frame = stack.pop(match_index)
    children = tuple(output[frame.output_start :])
    del output[frame.output_start :]
    if children:
        output.append(Annotated(frame.code, children))

    # Frames opened after this one cross it: their content inside the closed
    # span stays there, and they resume after it.
    crossing = stack[match_index:]
    if crossing:
        logger.debug(
            "Crossing markers: %s closed while %s still open",
            frame.code.value,
            ", ".join(f.code.value for f in crossing),
        )
    for open_frame in crossing:
        open_frame.output_start = len(output)


def resolve_annotations(text: str) -> list[ResolvedFragment]:
    """Normalise inline markdown, tokenize and resolve sanitized text."""
    return resolve_tokens(tokenize_tags(normalize_inline_markdown(text)))
