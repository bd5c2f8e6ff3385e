"""structlog configuration and logger factory."""

from __future__ import annotations

import logging
import sys

import structlog


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def use_stderr_default() -> None:
    """Send warnings to stderr until the application configures structlog.

    structlog's own default prints every level to stdout, which would mix log
    records into rendered output when cperlib is used as a library. An
    existing structlog configuration is left untouched.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=_stderr_logger,
    )


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog for console or JSON output.

    Log records go to stderr so rendered CPER lines on stdout stay clean.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger bound to *name*."""
    use_stderr_default()
    return structlog.get_logger(name)
