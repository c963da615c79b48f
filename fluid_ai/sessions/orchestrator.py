"""Session orchestrator: one chat session with at most one request in flight."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Protocol

import structlog

from fluid_ai.analysis.adjustments import FluiditySettings
from fluid_ai.core.exceptions import FluidAIError
from fluid_ai.core.models import (
    AiResult,
    AnalysisOutcome,
    ConversationEntry,
    ErrorMessage,
    LoadingMarker,
    RequestOutcome,
    SessionStatus,
    UserMessage,
)

logger = structlog.get_logger(__name__)


class Analyzer(Protocol):
    """Anything that can analyze one input (local pipeline or remote API)."""

    async def analyze(
        self,
        user_input: str,
        adjustments: Mapping[Any, Any] | None = None,
    ) -> AnalysisOutcome: ...


def describe_error(error: Exception) -> str:
    """Human-readable text for an error entry."""
    return str(error) or type(error).__name__


class SessionOrchestrator:
    """
    Sequences analysis requests for one session.

    The session moves Idle -> Sending -> Idle. While Sending, further sends
    are ignored. Every request appends a user message and a loading marker to
    the conversation; the marker is then replaced by either the analysis or
    an error message. Completed analyses are also appended to the history.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        settings: FluiditySettings | None = None,
    ) -> None:
        self._analyzer = analyzer
        self.settings = settings or FluiditySettings()

        self._status = SessionStatus.IDLE
        self._last_outcome: RequestOutcome | None = None
        self._conversation: list[ConversationEntry] = []
        self._history: list[AnalysisOutcome] = []

        # Callbacks
        self._on_entry: list[Callable[[ConversationEntry], Any]] = []

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_processing(self) -> bool:
        return self._status is SessionStatus.SENDING

    @property
    def last_outcome(self) -> RequestOutcome | None:
        """Outcome of the most recent finished request."""
        return self._last_outcome

    @property
    def conversation(self) -> tuple[ConversationEntry, ...]:
        return tuple(self._conversation)

    @property
    def history(self) -> tuple[AnalysisOutcome, ...]:
        return tuple(self._history)

    def on_entry(self, callback: Callable[[ConversationEntry], Any]) -> None:
        """Register a callback fired for every appended conversation entry."""
        self._on_entry.append(callback)

    async def send(
        self,
        text: str,
        adjustments: Mapping[Any, Any] | None = None,
    ) -> bool:
        """
        Run one request for ``text``.

        Args:
            text: The user's message
            adjustments: Per-layer deltas; the session's sliders if omitted

        Returns:
            True if a request was started, False if the send was ignored
        """
        user_input = text.strip()
        if not user_input:
            return False
        if self._status is not SessionStatus.IDLE:
            logger.debug("Send ignored, request already in flight")
            return False

        # Set before the first await so a concurrent send sees it
        self._status = SessionStatus.SENDING
        try:
            if adjustments is None:
                adjustments = self.settings.as_adjustments()

            self._append(UserMessage(text=user_input))
            self._append(LoadingMarker())

            try:
                outcome = await self._analyzer.analyze(user_input, adjustments)
            except Exception as e:
                if isinstance(e, FluidAIError):
                    logger.warning("Request failed", error=e.to_dict())
                else:
                    logger.exception("Request failed unexpectedly")
                self._remove_loading()
                self._append(ErrorMessage(text=f"An error occurred: {describe_error(e)}"))
                self._last_outcome = RequestOutcome.FAILED
            else:
                self._remove_loading()
                self._append(AiResult(outcome=outcome))
                self._history.append(outcome)
                self._last_outcome = RequestOutcome.SUCCEEDED
                logger.info(
                    "Request succeeded",
                    top_layer=outcome.top_layer.value,
                    history_size=len(self._history),
                )
        finally:
            self._status = SessionStatus.IDLE

        return True

    def reset(self) -> None:
        """Clear the conversation. History is kept."""
        if self.is_processing:
            logger.warning("Reset ignored, request in flight")
            return
        self._conversation.clear()

    def _append(self, entry: ConversationEntry) -> None:
        self._conversation.append(entry)
        for callback in self._on_entry:
            callback(entry)

    def _remove_loading(self) -> None:
        self._conversation = [
            entry for entry in self._conversation if not isinstance(entry, LoadingMarker)
        ]
