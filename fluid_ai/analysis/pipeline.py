"""Fluidity analysis pipeline: one request from user text to ranked layers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from fluid_ai.analysis.adjustments import sanitize
from fluid_ai.analysis.normalizer import is_fallback, normalize
from fluid_ai.analysis.oracle import OracleAdapter, build_request
from fluid_ai.analysis.ranking import apply_adjustments_and_rank
from fluid_ai.core.config import Settings
from fluid_ai.core.models import AnalysisOutcome
from fluid_ai.utils.ai_client import AIClient, get_ai_client

logger = structlog.get_logger(__name__)


class FluidityPipeline:
    """
    Runs the analysis of a single input.

    Steps:
    - sanitize the user's adjustments
    - build the prompt and invoke the oracle
    - normalize the oracle's output (falling back on malformed output)
    - apply adjustments with clipping and rank the layers
    """

    def __init__(self, client: AIClient, settings: Settings | None = None) -> None:
        self.settings = settings
        self._oracle = OracleAdapter(client)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FluidityPipeline":
        """Build a pipeline around the configured AI client."""
        return cls(get_ai_client(settings), settings)

    async def analyze(
        self,
        user_input: str,
        adjustments: Mapping[Any, Any] | None = None,
    ) -> AnalysisOutcome:
        """
        Analyze ``user_input`` across the four layers.

        Args:
            user_input: Text to analyze
            adjustments: Raw per-layer fluidity deltas

        Returns:
            The completed analysis

        Raises:
            OracleUnavailableError: The oracle could not be reached
        """
        adjustment = sanitize(adjustments)

        model = max_tokens = None
        if self.settings is not None:
            model = self.settings.ai.anthropic_model
            max_tokens = self.settings.ai.anthropic_max_tokens

        request = build_request(user_input, adjustment, model=model, max_tokens=max_tokens)
        raw_text = await self._oracle.invoke(request)

        layer_map = normalize(raw_text, user_input)
        fallback = is_fallback(layer_map, user_input)
        layer_map, ranked = apply_adjustments_and_rank(layer_map, adjustment)

        outcome = AnalysisOutcome(input=user_input, layer_maps=layer_map, ranked=ranked)

        logger.info(
            "Analysis completed",
            top_layer=outcome.top_layer.value,
            adjusted_layers=[layer.value for layer in adjustment],
            fallback=fallback,
        )
        return outcome
