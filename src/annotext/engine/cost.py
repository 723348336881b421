"""Prompting overhead estimates per render mode."""

from __future__ import annotations

from dataclasses import dataclass

from annotext.engine.codes import Density, RenderMode

# Messages in the conversation the per-conversation estimate models.
CONVERSATION_LENGTH = 20

SYSTEM_PROMPT_TOKENS = 170

_INSTRUCTION_TOKENS: dict[RenderMode, int] = {
    RenderMode.NONE: 0,
    RenderMode.UNDERLINE: 3,
    RenderMode.HIGHLIGHTS: 4,
    RenderMode.BOTH: 4,
}

_DENSITY_TOKENS: dict[Density, int] = {
    Density.AUTO: 0,
    Density.EXPLICIT: 8,
}


@dataclass(frozen=True, slots=True)
class TokenCostEstimate:
    system_prompt_tokens: int
    per_message_tokens: int
    estimated_per_conversation_tokens: int


def estimate_token_cost(
    mode: RenderMode | str, density: Density | str = Density.AUTO
) -> TokenCostEstimate:
    """Estimate the extra prompt tokens highlighting costs.

    NONE sends no system prompt; the density surcharge is still counted per
    message.

    Example:
        HIGHLIGHTS with AUTO density costs 170 + 20 * 4 = 250 tokens.
    """
    mode = RenderMode.parse(mode)
    density = Density.parse(density)

    system_prompt = 0 if mode == RenderMode.NONE else SYSTEM_PROMPT_TOKENS
    per_message = _INSTRUCTION_TOKENS[mode] + _DENSITY_TOKENS[density]
    return TokenCostEstimate(
        system_prompt_tokens=system_prompt,
        per_message_tokens=per_message,
        estimated_per_conversation_tokens=(
            system_prompt + CONVERSATION_LENGTH * per_message
        ),
    )
