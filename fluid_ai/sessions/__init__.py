"""Chat session management."""

from fluid_ai.sessions.orchestrator import Analyzer, SessionOrchestrator

__all__ = ["Analyzer", "SessionOrchestrator"]
