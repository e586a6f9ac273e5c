"""
Structured logging for the indexer, built on structlog.

Every line goes to stderr; stdout is reserved for transfer output so that
`-o json` can be piped straight into another tool. sys.stderr is looked up
when a line is written, not when a module grabs its logger, so redirected
streams see indexer logs too.

Level and renderer are set by configure_logging(). The CLI calls it with the
LOG_LEVEL / LOG_FORMAT values resolved in IndexerSettings; library users get
INFO + JSON until they call it themselves.

This module imports nothing from usdc_indexer (config imports it).
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.typing import FilteringBoundLogger

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("json", "console")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"

ROOT_LOGGER_NAME = "usdc_indexer"


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(
    level: str = DEFAULT_LOG_LEVEL,
    fmt: str = DEFAULT_LOG_FORMAT,
) -> None:
    """
    (Re)configure structlog for the indexer.

    json: one object per line, structlog's "event" key renamed to event_type.
    console: structlog's dev renderer, colored when stderr is a terminal.
    Raises ValueError for an unknown level or format.
    """
    level = level.strip().upper()
    fmt = fmt.strip().lower()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {LOG_LEVELS}")
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unknown log format {fmt!r}; expected one of {LOG_FORMATS}")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.EventRenamer("event_type"))
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=_stderr_logger,
        # Loggers stay lazy: a later configure_logging() reaches module-level loggers
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Return a structured logger tagged with the module name.

        logger = get_logger(__name__)
        logger.info("indexer_signatures_fetched", count=42)
    """
    return structlog.get_logger(logger=name)


def bind_wallet(wallet_id: str) -> FilteringBoundLogger:
    """Return a logger with wallet_id bound to all subsequent log calls."""
    return structlog.get_logger(logger=ROOT_LOGGER_NAME, wallet_id=wallet_id)
