"""Structured logging for Clashboard.

Every log line is a structlog event. Player operations bind ``user_id`` and
``player_tag`` once through :func:`player_log_context`, so engine and
repository logs emitted during a sync carry them without passing them down.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List

import structlog
from structlog import contextvars as structlog_contextvars


def build_processors(json_logs: bool = True) -> List[Any]:
    """
    Processor chain shared by every logger.

    :param json_logs: Render JSON lines (production) or colored console output
    :returns: structlog processors, renderer last
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog_contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    :param log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :param json_logs: Render JSON lines instead of console output
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=build_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def player_log_context(user_id: str, player_tag: str, **extra: Any) -> Iterator[None]:
    """
    Bind the player being processed to every log event inside the block.

    Previously bound values are restored on exit, so nested operations (a
    sync calling ingest) keep the outer context.

    :param user_id: Owning user
    :param player_tag: Normalized player tag
    :param extra: Additional fields such as ``operation``
    """
    with structlog_contextvars.bound_contextvars(
        user_id=user_id, player_tag=player_tag, **extra
    ):
        yield
