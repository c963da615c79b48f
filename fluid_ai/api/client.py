"""HTTP client for a remote FluidAI processing endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from fluid_ai.analysis.adjustments import sanitize
from fluid_ai.core.config import Settings
from fluid_ai.core.exceptions import ProcessingError
from fluid_ai.core.models import AnalysisOutcome

logger = structlog.get_logger(__name__)

PROCESS_PATH = "/api/process"


class FluidAPIClient:
    """Calls ``POST /api/process`` and returns the decoded analysis."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http_client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, base_url: str | None = None
    ) -> "FluidAPIClient":
        """Client for ``base_url``, or the configured ``api_client.base_url``."""
        return cls(
            base_url=base_url or settings.api_client.base_url,
            timeout=settings.api_client.timeout,
        )

    async def __aenter__(self) -> "FluidAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http_client.aclose()

    async def analyze(
        self,
        user_input: str,
        adjustments: Mapping[Any, Any] | None = None,
    ) -> AnalysisOutcome:
        """
        Analyze ``user_input`` on the remote endpoint.

        Raises:
            ProcessingError: The request failed or the endpoint reported an error
        """
        payload = {
            "userInput": user_input,
            "userAdjust": {
                layer.value: delta for layer, delta in sanitize(adjustments).items()
            },
        }

        try:
            response = await self._http_client.post(PROCESS_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.error("Processing endpoint unreachable", error=str(e))
            raise ProcessingError(f"Request failed: {e}", cause=e) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise ProcessingError(
                message or "API request failed",
                status_code=response.status_code,
            )

        try:
            return AnalysisOutcome.model_validate(data)
        except ValidationError as e:
            raise ProcessingError(
                "Malformed response from processing endpoint",
                status_code=response.status_code,
                cause=e,
            ) from e
