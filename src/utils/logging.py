# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging configuration using structlog.

Service modules log through the standard library
``logging.getLogger(__name__)``. setup_logging() installs one stdout handler
whose structlog ProcessorFormatter renders those records as JSON in
staging/production and as console output in development, merged with any
context bound for the current unit of work.

Example:
    >>> import logging
    >>> from src.utils.logging import setup_logging, bind_context, reset_context
    >>> from src.core.config import get_settings
    >>> setup_logging(get_settings())
    >>> tokens = bind_context(unit_of_work="3f2a9c")
    >>> logging.getLogger("src.domains.student").info("Student created")
    >>> reset_context(tokens)
"""

import logging
import sys
from contextvars import Token
from typing import TYPE_CHECKING, Any, Mapping

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from src.core.config.settings import Settings

_NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "asyncpg",
    "aiosqlite",
    "asyncio",
)

_handler: logging.Handler | None = None


def setup_logging(settings: "Settings") -> None:
    """Configure structured logging for the application.

    Calling it again replaces the handler installed by the previous call.

    Args:
        settings: Application settings containing log_level and debug flag.
    """
    global _handler

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.is_development or settings.debug:
        renderers: list[Processor] = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(formatter)
    root.addHandler(_handler)
    root.setLevel(log_level)

    # SQL echo is controlled by DB_ECHO, not by the application log level
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def bind_context(**kwargs: Any) -> Mapping[str, Token[Any]]:
    """Bind values to every log record emitted in the current context.

    Args:
        **kwargs: Key-value pairs to bind, such as the unit of work id.

    Returns:
        Tokens for reset_context().
    """
    return structlog.contextvars.bind_contextvars(**kwargs)


def reset_context(tokens: Mapping[str, Token[Any]]) -> None:
    """Restore the context that was in effect before bind_context()."""
    structlog.contextvars.reset_contextvars(**tokens)
