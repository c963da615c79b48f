"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Generator

import pytest

from fluid_ai.analysis.pipeline import FluidityPipeline
from fluid_ai.core.config import AIConfig, Settings
from fluid_ai.utils.ai_client import MockAIClient, clear_ai_client_cache

from tests.helpers import layer_json


@pytest.fixture(autouse=True)
def _clear_ai_client_cache() -> Generator[None, None, None]:
    """Keep the module-level AI client cache from leaking between tests."""
    clear_ai_client_cache()
    yield
    clear_ai_client_cache()


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        environment="test",
        debug=True,
        anthropic_api_key="test-key",
        ai=AIConfig(primary_provider="mock"),
    )


@pytest.fixture
def mock_ai_client(settings: Settings) -> MockAIClient:
    """Create a mock AI client answering with the "hello" layer map."""
    client = MockAIClient(settings)
    client.set_responses([layer_json()])
    return client


@pytest.fixture
def pipeline(mock_ai_client: MockAIClient, settings: Settings) -> FluidityPipeline:
    """Create a pipeline backed by the mock client."""
    return FluidityPipeline(mock_ai_client, settings)
