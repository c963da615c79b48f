"""Core module containing configuration, data models and exceptions."""

from fluid_ai.core.config import Settings, get_settings
from fluid_ai.core.exceptions import (
    FluidAIError,
    ConfigurationError,
    InvalidInputError,
    OracleUnavailableError,
    ProcessingError,
)

__all__ = [
    "Settings",
    "get_settings",
    "FluidAIError",
    "ConfigurationError",
    "InvalidInputError",
    "OracleUnavailableError",
    "ProcessingError",
]
