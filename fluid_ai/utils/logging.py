"""structlog setup shared by the CLI and the API server."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

from fluid_ai.core.config import Settings

# Chatty third-party loggers that only matter when debugging transport issues
_QUIET_LOGGERS = ("httpx", "httpcore", "anthropic")


def setup_logging(settings: Settings | None = None) -> None:
    """
    Route structlog through stdlib logging with the configured renderer.

    Args:
        settings: Application settings (``get_settings()`` if omitted)
    """
    if settings is None:
        from fluid_ai.core.config import get_settings
        settings = get_settings()

    config = settings.logging
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.file_enabled:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(environment=settings.environment)
