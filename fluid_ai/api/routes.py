"""API routes for FluidAI."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictStr, ValidationError

from fluid_ai.core.exceptions import (
    ConfigurationError,
    InvalidInputError,
    OracleUnavailableError,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["fluid-ai"])


class ProcessRequest(BaseModel):
    """Request to analyze one input."""

    user_input: StrictStr = Field(..., alias="userInput", min_length=1)
    user_adjust: dict[str, Any] | None = Field(default=None, alias="userAdjust")


async def parse_process_request(request: Request) -> ProcessRequest:
    """Decode and validate the request body.

    Raises:
        InvalidInputError: The body is not JSON or ``userInput`` is missing,
            empty or not a string.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise InvalidInputError("Invalid input", cause=e) from e

    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid input")

    try:
        return ProcessRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(
            "Invalid input",
            details={"errors": e.errors(include_url=False, include_context=False)},
            cause=e,
        ) from e


@router.post("/process")
async def process(request: Request) -> JSONResponse:
    """Analyze the user's input across the four layers."""
    body = await parse_process_request(request)

    # Resolved per request so a missing API key surfaces after input checks
    pipeline = request.app.state.pipeline_provider()

    try:
        outcome = await pipeline.analyze(body.user_input, body.user_adjust or {})
    except (OracleUnavailableError, ConfigurationError):
        raise
    except Exception as e:
        logger.exception("Processing failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process request", "message": str(e)},
        )

    return JSONResponse(
        status_code=200,
        content={"success": True, **outcome.model_dump(mode="json", by_alias=True)},
    )
