"""Structured logging configuration using structlog.

Call `config_configure_logging()` once at startup. Modules then use
`structlog.get_logger(__name__)`; records from stdlib loggers (uvicorn and
friends) are rendered through the same processor chain.
"""

from __future__ import annotations

import logging
import sys

import structlog


def config_configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog on top of stdlib logging.

    DEBUG renders human-readable console output, every other level renders
    newline-delimited JSON. Values bound with `structlog.contextvars`
    (for example `job_id`) are merged into every record.

    Args:
        log_level: Logging level name, case-insensitive.

    Returns:
        None: Configuration is applied to global logging state.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    is_development = level_upper == "DEBUG"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_development:
        final_renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Repeated calls (tests, reloads) must not stack handlers.
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    if not is_development:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
