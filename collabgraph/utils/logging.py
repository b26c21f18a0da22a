"""Structured logging for collabGraph.

One processor chain feeds two renderers: a console renderer while
developing and JSON lines in production (``APP_ENV=production`` or
``json_output=True``).  The chain starts with ``merge_contextvars`` so the
``subject=...`` binding the orchestrator sets for a synthesis run shows up
on every event of that run, whichever module emits it.

Standard-library records (uvicorn, httpx, musicbrainzngs) go through the
same chain.  The HTTP and metadata clients log every request at INFO,
which would bury the synthesis events, so they are held at WARNING unless
the app itself runs at DEBUG.
"""

import logging
import os
import sys
from typing import TextIO

import structlog

# Third-party loggers that are chatty at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "musicbrainzngs", "openai", "anthropic")


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON lines even outside production.
        stream: Where both structlog and stdlib output go.  Defaults to
            stdout; the CLI passes stderr so stdout carries only results.

    Returns:
        A configured structlog BoundLogger.
    """
    level_name = log_level.upper()
    level = logging.getLevelName(level_name)
    out = stream or sys.stdout
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level_name)

    noisy_level = logging.DEBUG if level_name == "DEBUG" else max(level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with ``logger_name=name``.

    Configures defaults first if nothing has configured structlog yet.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
