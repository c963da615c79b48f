"""Tests for core components."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import TypeAdapter, ValidationError

from fluid_ai.core.config import AIConfig, AnalysisConfig, Settings, get_settings
from fluid_ai.core.exceptions import (
    ConfigurationError,
    FluidAIError,
    InvalidInputError,
    OracleUnavailableError,
    RateLimitError,
)
from fluid_ai.core.models import (
    LAYER_KEYS,
    AiResult,
    AnalysisOutcome,
    ConversationEntry,
    ErrorMessage,
    LayerKey,
    LayerResult,
    LoadingMarker,
    UserMessage,
)


def _outcome() -> AnalysisOutcome:
    layer_map = {
        LayerKey.MEANING: LayerResult(content="m", fluidity=0.75),
        LayerKey.EMOTION: LayerResult(content="e", fluidity=0.65),
        LayerKey.LOGIC: LayerResult(content="l", fluidity=0.8),
        LayerKey.CONTEXT: LayerResult(content="c", fluidity=0.7),
    }
    ranked = tuple(sorted(layer_map.items(), key=lambda i: i[1].fluidity, reverse=True))
    return AnalysisOutcome(input="hello", layer_maps=layer_map, ranked=ranked)


class TestModels:
    """Test data models."""

    def test_layer_keys_order(self) -> None:
        """Layer keys keep their declaration order."""
        assert [layer.value for layer in LAYER_KEYS] == [
            "meaning",
            "emotion",
            "logic",
            "context",
        ]

    def test_layer_key_parse(self) -> None:
        """Test parsing layer names."""
        assert LayerKey.parse("logic") is LayerKey.LOGIC
        assert LayerKey.parse(LayerKey.EMOTION) is LayerKey.EMOTION
        assert LayerKey.parse("tone") is None
        assert LayerKey.parse(["meaning"]) is None

    def test_layer_result_bounds(self) -> None:
        """Fluidity outside [0, 1] is rejected."""
        with pytest.raises(ValidationError):
            LayerResult(content="x", fluidity=1.2)
        with pytest.raises(ValidationError):
            LayerResult(content="x", fluidity=-0.1)

    def test_outcome_is_frozen(self) -> None:
        """AnalysisOutcome cannot be reassigned after construction."""
        outcome = _outcome()

        with pytest.raises(ValidationError):
            outcome.input = "changed"

    def test_outcome_wire_format(self) -> None:
        """Outcome serializes with layerMaps and ranked pairs."""
        data = _outcome().model_dump(mode="json", by_alias=True)

        assert data["input"] == "hello"
        assert set(data["layerMaps"]) == {"meaning", "emotion", "logic", "context"}
        assert data["ranked"][0] == ["logic", {"content": "l", "fluidity": 0.8}]
        assert [pair[0] for pair in data["ranked"]] == [
            "logic",
            "meaning",
            "context",
            "emotion",
        ]

    def test_outcome_from_wire_format(self) -> None:
        """Outcome can be rebuilt from its wire format."""
        original = _outcome()
        data = original.model_dump(mode="json", by_alias=True)

        rebuilt = AnalysisOutcome.model_validate({"success": True, **data})

        assert rebuilt == original
        assert rebuilt.top_layer is LayerKey.LOGIC

    def test_conversation_entry_discriminator(self) -> None:
        """Conversation entries are decoded by their kind tag."""
        adapter = TypeAdapter(ConversationEntry)

        assert isinstance(adapter.validate_python({"kind": "user", "text": "hi"}), UserMessage)
        assert isinstance(adapter.validate_python({"kind": "loading"}), LoadingMarker)
        assert isinstance(adapter.validate_python({"kind": "error", "text": "x"}), ErrorMessage)

        outcome = _outcome().model_dump(by_alias=True)
        entry = adapter.validate_python({"kind": "ai", "outcome": outcome})
        assert isinstance(entry, AiResult)


class TestSettings:
    """Test settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings creation."""
        settings = Settings(anthropic_api_key="")

        assert settings.ai.primary_provider == "anthropic"
        assert settings.ai.anthropic_max_tokens == 2000
        assert settings.analysis.adjustment_limit == 0.3

    def test_settings_override(self) -> None:
        """Test nested settings can be configured."""
        ai_config = AIConfig(primary_provider="mock", anthropic_model="claude-test")
        assert ai_config.primary_provider == "mock"
        assert ai_config.anthropic_model == "claude-test"

        analysis = AnalysisConfig(adjustment_limit=0.5)
        assert analysis.adjustment_limit == 0.5

    def test_from_yaml(self, tmp_path: Path) -> None:
        """Test loading nested sections from YAML."""
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "ai:\n"
            "  primary_provider: mock\n"
            "  anthropic:\n"
            "    model: claude-yaml\n"
            "    max_tokens: 512\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  format: console\n"
        )

        settings = Settings.from_yaml(config_file)

        assert settings.ai.primary_provider == "mock"
        assert settings.ai.anthropic_model == "claude-yaml"
        assert settings.ai.anthropic_max_tokens == 512
        assert settings.logging.level == "DEBUG"
        assert settings.logging.format == "console"

    def test_from_missing_yaml(self, tmp_path: Path) -> None:
        """A missing YAML file yields defaults."""
        settings = Settings.from_yaml(tmp_path / "absent.yaml")

        assert settings.ai.anthropic_model == "claude-sonnet-4-20250514"


    def test_partial_yaml_keeps_defaults(self, tmp_path: Path) -> None:
        """Keys absent from the YAML keep their defaults."""
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("api:\n  port: 9000\n  cors:\n    enabled: false\n")

        settings = Settings.from_yaml(config_file)

        assert settings.api.port == 9000
        assert settings.api.cors_enabled is False
        assert settings.api.host == "0.0.0.0"
        assert settings.ai.anthropic_max_tokens == 2000

    def test_get_settings_honours_env_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """FLUID_AI_CONFIG points get_settings() at another file."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("ai:\n  primary_provider: mock\n")
        monkeypatch.setenv("FLUID_AI_CONFIG", str(config_file))
        get_settings.cache_clear()

        try:
            assert get_settings().ai.primary_provider == "mock"
        finally:
            get_settings.cache_clear()


class TestExceptions:
    """Test exception hierarchy."""

    def test_to_dict(self) -> None:
        """Test error serialization."""
        error = OracleUnavailableError("boom", provider="anthropic")
        data = error.to_dict()

        assert data["type"] == "OracleUnavailableError"
        assert data["message"] == "boom"
        assert data["details"]["provider"] == "anthropic"

    def test_rate_limit_is_oracle_unavailable(self) -> None:
        """Rate limiting is one kind of oracle unavailability."""
        error = RateLimitError("slow down", provider="anthropic", retry_after=5.0)

        assert isinstance(error, OracleUnavailableError)
        assert isinstance(error, FluidAIError)
        assert error.details["retry_after"] == 5.0

    def test_str_is_user_message(self) -> None:
        """str() gives the message alone; the cause is kept for logs."""
        cause = TimeoutError("read timed out")
        error = OracleUnavailableError("Claude is down", provider="anthropic", cause=cause)

        assert str(error) == "Claude is down"
        assert "TimeoutError" in error.to_dict()["cause"]

    def test_http_status(self) -> None:
        """Invalid input maps to 400, everything else to 500."""
        assert InvalidInputError("Invalid input").http_status == 400
        assert ConfigurationError("API key not configured").http_status == 500
        assert RateLimitError("slow", provider="anthropic").http_status == 500
