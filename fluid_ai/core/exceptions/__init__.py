"""Custom exceptions for the FluidAI system."""

from fluid_ai.core.exceptions.base import (
    FluidAIError,
    ConfigurationError,
    InvalidInputError,
    LLMProviderError,
    OracleUnavailableError,
    RateLimitError,
    ProcessingError,
)

__all__ = [
    "FluidAIError",
    "ConfigurationError",
    "InvalidInputError",
    "LLMProviderError",
    "OracleUnavailableError",
    "RateLimitError",
    "ProcessingError",
]
