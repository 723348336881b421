"""Code block shielding.

Literal code must pass through the engine byte-for-byte, so it is swapped
for opaque placeholders before any marker processing and swapped back at the
very end. Placeholders are numbered in discovery order and each is restored
exactly once by index lookup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Format: __CODEBLOCK_{index}__
PLACEHOLDER_TEMPLATE = "__CODEBLOCK_{}__"
PLACEHOLDER_PATTERN = re.compile(r"__CODEBLOCK_(\d+)__")

FENCED_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")

# Inline example markers that wrap what is really a code listing.
EXAMPLE_BLOCK_PATTERN = re.compile(r"\[P\]([\s\S]+?)\[/P\]")

# Tunable: words that make multi-line example content count as code.
CODE_KEYWORDS: tuple[str, ...] = (
    "function",
    "def",
    "class",
    "procedure",
    "algorithm",
    "if",
    "while",
    "for",
    "return",
    "const",
    "let",
    "var",
    "import",
    "export",
    "distances",
    "graph",
    "node",
)
_CODE_KEYWORD_PATTERN = re.compile(
    r"\b(?:" + "|".join(CODE_KEYWORDS) + r")\b", re.IGNORECASE
)


def looks_like_code(content: str) -> bool:
    """Multi-line content mentioning a programming keyword counts as code."""
    return "\n" in content and _CODE_KEYWORD_PATTERN.search(content) is not None


def as_fenced_block(content: str) -> str:
    return "```\n" + content.strip() + "\n```"


@dataclass(frozen=True, slots=True)
class CodeBlockPlaceholder:
    """A shielded piece of literal text.

    Attributes:
        index: Discovery-order number, unique within one shield.
        literal_text: Exact text restored in place of the placeholder.
    """

    index: int
    literal_text: str

    @property
    def token(self) -> str:
        return PLACEHOLDER_TEMPLATE.format(self.index)


class CodeBlockShield:
    """Swap literal code for placeholders and restore it afterwards.

    One shield serves a single pipeline run.
    """

    def __init__(self) -> None:
        self._placeholders: list[CodeBlockPlaceholder] = []

    @property
    def placeholders(self) -> tuple[CodeBlockPlaceholder, ...]:
        return tuple(self._placeholders)

    def protect(self, literal: str) -> str:
        """Register *literal* and return the placeholder that stands for it."""
        placeholder = CodeBlockPlaceholder(len(self._placeholders), literal)
        self._placeholders.append(placeholder)
        return placeholder.token

    def extract(self, text: str) -> str:
        """Replace every fenced code block with a placeholder."""
        shielded = FENCED_BLOCK_PATTERN.sub(lambda m: self.protect(m.group(0)), text)
        if self._placeholders:
            logger.debug("Shielded %d fenced block(s)", len(self._placeholders))
        return shielded

    def promote_code_like(self, text: str) -> str:
        """Shield ``[P]`` example content that is really a code listing.

        The content is re-emitted as a fenced block. Examples that do not look
        like code keep their markers.
        """

        def _promote(match: re.Match[str]) -> str:
            content = match.group(1)
            if not looks_like_code(content):
                return match.group(0)
            logger.debug("Promoting multi-line example to code block")
            return self.protect(as_fenced_block(content))

        return EXAMPLE_BLOCK_PATTERN.sub(_promote, text)

    def restore(self, text: str) -> str:
        """Put every shielded literal back in place of its placeholder."""
        if not self._placeholders:
            return text

        restored: set[int] = set()

        def _restore(match: re.Match[str]) -> str:
            index = int(match.group(1))
            if index >= len(self._placeholders) or index in restored:
                return match.group(0)
            restored.add(index)
            # A promoted example may itself enclose an earlier fenced block.
            literal = self._placeholders[index].literal_text
            return PLACEHOLDER_PATTERN.sub(_restore, literal)

        return PLACEHOLDER_PATTERN.sub(_restore, text)
