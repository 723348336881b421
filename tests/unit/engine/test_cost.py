"""Tests for token cost estimation."""

from __future__ import annotations

from annotext.engine.codes import Density, RenderMode
from annotext.engine.cost import TokenCostEstimate, estimate_token_cost


class TestEstimateTokenCost:
    """Tests for estimate_token_cost."""

    def test_highlights_auto(self) -> None:
        assert estimate_token_cost(RenderMode.HIGHLIGHTS) == TokenCostEstimate(
            system_prompt_tokens=170,
            per_message_tokens=4,
            estimated_per_conversation_tokens=250,
        )

    def test_underline_explicit(self) -> None:
        estimate = estimate_token_cost(RenderMode.UNDERLINE, Density.EXPLICIT)
        assert estimate.per_message_tokens == 11
        assert estimate.estimated_per_conversation_tokens == 390

    def test_both_costs_same_as_highlights(self) -> None:
        assert estimate_token_cost(RenderMode.BOTH) == estimate_token_cost(
            RenderMode.HIGHLIGHTS
        )

    def test_none_auto_costs_nothing(self) -> None:
        assert estimate_token_cost(RenderMode.NONE) == TokenCostEstimate(0, 0, 0)

    def test_none_explicit_pays_density_surcharge(self) -> None:
        """No system prompt, but the per-message density surcharge remains."""
        assert estimate_token_cost("none", "explicit") == TokenCostEstimate(
            system_prompt_tokens=0,
            per_message_tokens=8,
            estimated_per_conversation_tokens=160,
        )

    def test_accepts_names(self) -> None:
        estimate = estimate_token_cost("highlights-underline", "explicit")
        assert estimate.per_message_tokens == 12
        assert estimate.estimated_per_conversation_tokens == 410

    def test_unknown_mode_costs_like_highlights(self) -> None:
        assert estimate_token_cost("sparkles").per_message_tokens == 4
