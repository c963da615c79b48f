"""Exception hierarchy for FluidAI.

Every error carries a short ``message`` safe to show to a user, a ``details``
mapping for logs, and the HTTP status the API answers with.
"""

from typing import Any, Optional
from datetime import datetime, timezone


class FluidAIError(Exception):
    """Root of all FluidAI errors."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        self.cause = cause
        self.raised_at = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Structured form for log events."""
        data: dict[str, Any] = {
            "type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "raised_at": self.raised_at.isoformat(),
        }
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data


class ConfigurationError(FluidAIError):
    """Settings are unusable, e.g. the API key is missing."""


class InvalidInputError(FluidAIError):
    """The request body has no usable ``userInput``."""

    http_status = 400


class LLMProviderError(FluidAIError):
    """Failure attributed to an LLM provider."""

    def __init__(self, message: str, *, provider: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.provider = provider
        self.details.setdefault("provider", provider)


class OracleUnavailableError(LLMProviderError):
    """The oracle could not produce a completion (network, auth, timeout)."""


class RateLimitError(OracleUnavailableError):
    """The provider refused the call for rate reasons."""

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        retry_after: Optional[float] = None,
        **kwargs: Any,
    ):
        super().__init__(message, provider=provider, **kwargs)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after


class ProcessingError(FluidAIError):
    """A remote processing endpoint failed or answered with an error."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code
