"""FastAPI server for FluidAI."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fluid_ai.analysis.pipeline import FluidityPipeline
from fluid_ai.api.routes import router
from fluid_ai.core.config import Settings, get_settings
from fluid_ai.core.exceptions import (
    ConfigurationError,
    FluidAIError,
    InvalidInputError,
)
from fluid_ai.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

PipelineProvider = Callable[[], FluidityPipeline]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan."""
    setup_logging(app.state.settings)

    logger.info("Starting FluidAI API server")

    yield

    logger.info("FluidAI API server stopped")


def create_app(
    settings: Settings | None = None,
    pipeline_provider: PipelineProvider | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Optional settings override
        pipeline_provider: Optional factory for the analysis pipeline

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="FluidAI API",
        description="Four-layer fluidity analysis backed by an LLM",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pipeline_provider = pipeline_provider or (
        lambda: FluidityPipeline.from_settings(settings)
    )

    if settings.api.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router, prefix="/api")

    # Error handlers
    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        logger.info("Rejected invalid input", path=request.url.path)
        return JSONResponse(status_code=exc.http_status, content={"error": "Invalid input"})

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=exc.http_status, content={"error": exc.message})

    @app.exception_handler(FluidAIError)
    async def fluid_ai_handler(request: Request, exc: FluidAIError) -> JSONResponse:
        logger.error("Request failed", path=request.url.path, error=exc.to_dict())
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": "Failed to process request", "message": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 405:
            content: dict[str, Any] = {"error": "Method not allowed"}
        else:
            content = {"error": str(exc.detail)}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process request", "message": str(exc)},
        )

    # Health check
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


async def run_server(
    settings: Settings | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """
    Run the API server.

    Args:
        settings: Optional settings override
        host: Optional host override
        port: Optional port override
    """
    if settings is None:
        settings = get_settings()

    host = host or settings.api.host
    port = port or settings.api.port

    app = create_app(settings)

    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        log_level=settings.logging.level.lower(),
    )

    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(run_server())
