"""Configuration management for FluidAI."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIConfig(BaseModel):
    """Oracle (LLM provider) configuration."""

    primary_provider: str = "anthropic"
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 2000
    request_timeout: float = 60.0


class AnalysisConfig(BaseModel):
    """Fluidity analysis configuration."""

    # Sliders move in [-adjustment_limit, +adjustment_limit]
    adjustment_limit: float = 0.3
    adjustment_step: float = 0.01


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    file_enabled: bool = False
    file_path: str = "./logs/fluid_ai.log"


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    cors_enabled: bool = True
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )


class APIClientConfig(BaseModel):
    """Configuration for talking to a remote processing endpoint."""

    base_url: str = "http://localhost:8000"
    timeout: float = 120.0


_SECTIONS: dict[str, type[BaseModel]] = {
    "ai": AIConfig,
    "analysis": AnalysisConfig,
    "logging": LoggingConfig,
    "api": APIConfig,
    "api_client": APIClientConfig,
}


class Settings(BaseSettings):
    """Main settings class combining all configurations."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment variables
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Nested configurations
    ai: AIConfig = Field(default_factory=AIConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    api_client: APIClientConfig = Field(default_factory=APIClientConfig)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Settings":
        """Load settings from YAML file and environment variables."""
        yaml_path = Path(yaml_path)

        if yaml_path.exists():
            with open(yaml_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        else:
            yaml_config = {}

        settings_dict = cls._transform_yaml_config(yaml_config)

        return cls(**settings_dict)

    @staticmethod
    def _transform_yaml_config(yaml_config: dict[str, Any]) -> dict[str, Any]:
        """Flatten the nested YAML layout into the section models.

        ``ai.anthropic.model`` becomes ``AIConfig.anthropic_model`` and so on.
        Unknown keys are ignored; missing ones keep the model defaults.
        """
        result: dict[str, Any] = {}

        for section, model in _SECTIONS.items():
            raw = yaml_config.get(section)
            if not isinstance(raw, dict):
                continue

            values: dict[str, Any] = {}
            for key, value in raw.items():
                if isinstance(value, dict):
                    for sub_key, sub_value in value.items():
                        values[f"{key}_{sub_key}"] = sub_value
                else:
                    values[key] = value

            result[section] = model(**{
                key: value for key, value in values.items() if key in model.model_fields
            })

        return result


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "settings.yaml"


@lru_cache()
def get_settings() -> Settings:
    """Settings from $FLUID_AI_CONFIG or config/settings.yaml, cached."""
    config_path = Path(os.environ.get("FLUID_AI_CONFIG", DEFAULT_CONFIG_PATH))

    if config_path.exists():
        return Settings.from_yaml(config_path)

    return Settings()
