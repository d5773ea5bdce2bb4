"""structlog configuration shared by the CLI and library callers."""

from __future__ import annotations

import logging
import sys

import structlog

from prodready.config import debug_enabled

_configured = False


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # looked up per call so a swapped sys.stderr is honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(debug: bool | None = None) -> None:
    """Configure structlog once; later calls are no-ops.

    Logs go to stderr so report paths printed on stdout stay parseable by
    wrapping callers.
    """
    global _configured
    if _configured:
        return

    if debug is None:
        debug = debug_enabled()
    level = logging.DEBUG if debug else logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
    _configured = True
