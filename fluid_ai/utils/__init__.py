"""Utility components."""

from fluid_ai.utils.ai_client import AIClient, get_ai_client
from fluid_ai.utils.logging import setup_logging

__all__ = ["AIClient", "get_ai_client", "setup_logging"]
