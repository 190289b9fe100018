"""
Logging setup for gradleforge.

Events are structured with structlog and written to stderr through the
standard library, keeping stdout for resolved configurations and rendered
scripts. A terminal gets rich, coloured lines; anything else (a CI log, a
pipe) gets one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .config import Config

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _stderr_handler(interactive: bool, debug: bool) -> logging.Handler:
    if not interactive:
        return logging.StreamHandler(sys.stderr)
    return RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        show_level=False,
        rich_tracebacks=True,
        tracebacks_show_locals=debug,
    )


def setup_logging(config: Config | None = None) -> None:
    """Configure structlog and the stderr handler behind it.

    Args:
        config: Application configuration; only ``log_level`` is read.
            Defaults to INFO.
    """
    log_level = config.log_level if config else "INFO"
    level = getattr(logging, log_level, logging.INFO)
    interactive = sys.stderr.isatty()

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[_stderr_handler(interactive, log_level == "DEBUG")],
    )

    if interactive:
        renderers: list[structlog.types.Processor] = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=_SHARED_PROCESSORS + renderers,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_defaults() -> None:
    """Route events through stdlib logging until setup_logging is called.

    Library callers that never configure logging get the stdlib behaviour:
    nothing below WARNING is emitted and nothing reaches stdout. An
    application that configured structlog itself is left alone.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.processors.JSONRenderer()],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Attach key/values (e.g. the declaration being resolved) to later events."""
    structlog.contextvars.bind_contextvars(**kwargs)


configure_defaults()
