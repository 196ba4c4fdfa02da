"""
Logging configuration.

Provides a single entry point for configuring structured logging.
Library modules only call ``structlog.get_logger()``; applications (the CLI,
or an embedding program) decide where events go by calling
``configure_logging()`` once at startup.

Configuration is read from arguments, then environment variables:
- LOCALSTORE_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: WARNING)
- LOCALSTORE_LOG_FORMAT: json | console (default: console)
"""

import logging
import os
import sys
from typing import Literal

import structlog
from structlog.types import Processor

_configured = False


def configure_library_defaults() -> None:
    """
    Keep debug events quiet until the application configures logging.

    Runs on import of the package. If structlog was already configured by
    the embedding program this does nothing; a later configure_logging()
    (or any structlog.configure call) replaces it.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
    )


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Subsequent calls are no-ops unless force=True.

    Args:
        level: Log level (overrides LOCALSTORE_LOG_LEVEL)
        format: Output format (overrides LOCALSTORE_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("LOCALSTORE_LOG_LEVEL", "WARNING")).upper()
    log_format = (format or os.environ.get("LOCALSTORE_LOG_FORMAT", "console")).lower()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
        force=True,
    )

    _configured = True
