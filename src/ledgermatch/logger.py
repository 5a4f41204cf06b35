"""Structured logging configuration.

Logs go through structlog on top of the standard logging module, so
library code only ever calls ``get_logger(__name__)`` and the CLI decides
level and rendering once at startup.
"""

import logging
import os
import sys

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import Processor

DEFAULT_LOG_LEVEL = "WARNING"


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_output: bool) -> Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def resolve_log_level(level: str | None = None) -> int:
    """Resolve a level name to a logging constant.

    Falls back to LEDGERMATCH_LOG_LEVEL, then to WARNING.

    Raises:
        ValueError: If the level name is unknown
    """
    name = (level or os.environ.get("LEDGERMATCH_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{name}'")
    return value


def configure_logging(level: str | None = None, json_output: bool = False) -> None:
    """Configure structlog and the root logger.

    Handlers are replaced on every call so repeated CLI invocations in the
    same process write to the current stderr.
    """
    processors = _build_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_select_renderer(json_output),
        foreign_pre_chain=processors,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logging.basicConfig(
        handlers=[handler],
        level=resolve_log_level(level),
        force=True,
    )


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structured logger."""
    return structlog.get_logger(name)
