"""Oracle client adapter.

Builds the layer-analysis prompt and turns one oracle completion into raw
text. The prompt wording is a soft contract with the model; the normalizer
never relies on the oracle having followed it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

import structlog

from fluid_ai.core.exceptions import (
    ConfigurationError,
    FluidAIError,
    OracleUnavailableError,
)
from fluid_ai.core.models import LAYER_KEYS, AdjustmentSet
from fluid_ai.utils.ai_client import AIClient

logger = structlog.get_logger(__name__)


PROMPT_TEMPLATE = """You are a fluid self-optimizing AI. Analyze the input below \
across four layers ({layers}) and respond with a fluidity score (0.0-1.0) for \
each layer.{adjustment_text}

Input: "{user_input}"

Respond ONLY with a single JSON object in exactly this format (no other text):
{{
  "meaning": {{"content": "analysis from the meaning layer", "fluidity": 0.75}},
  "emotion": {{"content": "analysis from the emotion layer", "fluidity": 0.65}},
  "logic": {{"content": "analysis from the logic layer", "fluidity": 0.80}},
  "context": {{"content": "analysis from the context layer", "fluidity": 0.70}}
}}

Important:
- "content" is the analysis of the input from that layer's point of view
- "fluidity" is a number from 0.0 to 1.0 expressing the confidence or \
importance of that layer's analysis
- Return the JSON object only, with no explanation before or after it"""

ADJUSTMENT_TEMPLATE = """
User adjustment parameters: {adjustments}
Add these adjustment values to each layer's fluidity (clip to a minimum of \
0.0 and a maximum of 1.0)."""


@dataclass(frozen=True)
class OracleRequest:
    """A single analysis request to the oracle."""

    prompt: str
    model: str | None = None
    max_tokens: int | None = None


def build_request(
    user_input: str,
    adjustment: AdjustmentSet,
    model: str | None = None,
    max_tokens: int | None = None,
) -> OracleRequest:
    """Build the analysis prompt for ``user_input``.

    A non-empty ``adjustment`` is described to the oracle, which is asked to
    apply it. Callers still apply and clip the adjustment themselves.
    """
    adjustment_text = ""
    if adjustment:
        adjustment_text = ADJUSTMENT_TEMPLATE.format(
            adjustments=json.dumps(
                {layer.value: delta for layer, delta in adjustment.items()}
            )
        )

    prompt = PROMPT_TEMPLATE.format(
        layers=", ".join(layer.value for layer in LAYER_KEYS),
        adjustment_text=adjustment_text,
        user_input=user_input,
    )
    return OracleRequest(prompt=prompt, model=model, max_tokens=max_tokens)


class OracleAdapter:
    """Invokes the oracle through an :class:`AIClient`."""

    def __init__(self, client: AIClient) -> None:
        self._client = client

    @property
    def provider_name(self) -> str:
        return self._client.provider_name

    async def invoke(self, request: OracleRequest) -> str:
        """Call the oracle and join its text segments with newlines.

        Raises:
            OracleUnavailableError: The call failed for any reason.
        """
        try:
            segments = await self._client.generate(
                request.prompt,
                model=request.model,
                max_tokens=request.max_tokens,
            )
        except (OracleUnavailableError, ConfigurationError):
            raise
        except (FluidAIError, OSError, TimeoutError) as e:
            raise OracleUnavailableError(
                f"Oracle call failed: {e}",
                provider=self.provider_name,
                cause=e,
            ) from e

        raw_text = "\n".join(segments)
        logger.debug(
            "Oracle responded",
            provider=self.provider_name,
            segments=len(segments),
            chars=len(raw_text),
        )
        return raw_text
