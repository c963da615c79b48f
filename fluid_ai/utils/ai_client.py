"""AI client abstraction for the oracle transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Union

import anthropic
import structlog

from fluid_ai.core.config import Settings
from fluid_ai.core.exceptions import (
    ConfigurationError,
    OracleUnavailableError,
    RateLimitError,
)

logger = structlog.get_logger(__name__)


class AIClient(ABC):
    """Abstract base class for AI clients.

    ``generate`` returns the text-bearing segments of one completion, in the
    order the provider produced them.
    """

    provider_name: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> list[str]:
        """Generate a response from the AI model."""
        pass


class AnthropicClient(AIClient):
    """Anthropic Claude API client."""

    provider_name = "anthropic"

    def __init__(self, settings: Settings) -> None:
        """Initialize the Anthropic client."""
        if not settings.anthropic_api_key:
            raise ConfigurationError(
                "API key not configured",
                details={"env": "ANTHROPIC_API_KEY"},
            )
        self.settings = settings
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        """Get the Anthropic client (lazy init)."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.ai.request_timeout,
                # Retrying is left to callers
                max_retries=0,
            )
        return self._client

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> list[str]:
        """Generate a response using Claude."""
        model = model or self.settings.ai.anthropic_model
        max_tokens = max_tokens or self.settings.ai.anthropic_max_tokens

        try:
            message = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except anthropic.RateLimitError as e:
            retry_after = self._parse_rate_limit_retry(e)
            logger.warning("Anthropic rate limit hit", retry_after=retry_after)
            raise RateLimitError(
                "Claude rate limit exceeded",
                provider=self.provider_name,
                retry_after=retry_after,
                cause=e,
            ) from e
        except anthropic.APIError as e:
            logger.error("Anthropic API error", error=str(e))
            raise OracleUnavailableError(
                f"Claude completion failed: {e}",
                provider=self.provider_name,
                cause=e,
            ) from e

        return [
            block.text
            for block in message.content
            if getattr(block, "type", None) == "text"
        ]

    @staticmethod
    def _parse_rate_limit_retry(error: anthropic.RateLimitError) -> float | None:
        """Parse retry-after from rate limit error."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        value = response.headers.get("retry-after")
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None


MockResponse = Union[str, Sequence[str], Exception]


class MockAIClient(AIClient):
    """Mock AI client for testing.

    Each canned response is either one text segment, a sequence of segments,
    or an exception to raise.
    """

    provider_name = "mock"

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the mock client."""
        self.settings = settings
        self._responses: list[MockResponse] = []
        self._response_index = 0
        self.prompts: list[str] = []

    def set_responses(self, responses: list[MockResponse]) -> None:
        """Set predefined responses for testing."""
        self._responses = responses
        self._response_index = 0

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> list[str]:
        """Generate a mock response."""
        self.prompts.append(prompt)

        if not self._responses:
            return [
                '{"meaning": {"content": "mock meaning", "fluidity": 0.75}, '
                '"emotion": {"content": "mock emotion", "fluidity": 0.65}, '
                '"logic": {"content": "mock logic", "fluidity": 0.80}, '
                '"context": {"content": "mock context", "fluidity": 0.70}}'
            ]

        response = self._responses[self._response_index % len(self._responses)]
        self._response_index += 1

        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return [response]
        return list(response)


_client_cache: dict[tuple[str, str, float], AIClient] = {}


def clear_ai_client_cache() -> None:
    """Clear the cached AI clients to pick up new credentials."""
    _client_cache.clear()


def get_ai_client(settings: Settings | None = None) -> AIClient:
    """Get the AI client for ``settings``, reusing one per provider and key."""
    if settings is None:
        from fluid_ai.core.config import get_settings
        settings = get_settings()

    provider = settings.ai.primary_provider.lower()
    cache_key = (provider, settings.anthropic_api_key, settings.ai.request_timeout)
    cached = _client_cache.get(cache_key)
    if cached is not None:
        return cached

    client: AIClient
    if provider in ("anthropic", "claude"):
        client = AnthropicClient(settings)
    elif provider == "mock":
        client = MockAIClient(settings)
    else:
        raise ConfigurationError(
            f"Unknown AI provider: {provider}",
            details={"provider": provider},
        )

    _client_cache[cache_key] = client
    return client
