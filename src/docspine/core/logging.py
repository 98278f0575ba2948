"""
Structured logging for docspine.

Thin configuration layer over structlog. Library code calls
``get_logger(__name__)`` and emits event-style messages with key/value
fields; applications call ``configure_logging()`` once at startup.

Manifesto:
    Index selection and identity derivation are invisible until a query
    fans out to 1,800 indices or a document lands under the wrong key.
    Event names (``index_selector_wildcard_fallback``, ``identity_resolved``)
    plus structured fields make those moments searchable in the same store
    the repository writes to.

Features:
    - JSON lines with ECS field names (``@timestamp``, ``log.level``,
      ``service.name``) so logs can be indexed next to application data
    - Console rendering for terminals
    - Request-scoped fields via contextvars (``bind_context`` / ``LogContext``)

Examples:
    >>> configure_logging(level="INFO", json_format=True, service="orders-api")
    >>> log = get_logger(__name__)
    >>> with LogContext(repository="orders"):
    ...     log.info("index_selected", prefix="orders_", tokens=3)

Tags:
    logging, structlog, observability, ecs, json-logging, docspine
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_service_name = "docspine"

_ECS_RENAMES = {"timestamp": "@timestamp", "level": "log.level"}


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service.name", _service_name)
    return event_dict


def _ecs_compatible(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Move structlog's ``timestamp``/``level`` keys to their ECS names."""
    for key, ecs_key in _ECS_RENAMES.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def build_processors(*, json_format: bool, add_timestamp: bool = True) -> list[Processor]:
    """Processor chain shared by every docspine logger, renderer last."""
    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]
    if json_format:
        processors += [_ecs_compatible, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "docspine",
    add_timestamp: bool = True,
    stream: TextIO | None = None,
    cache_loggers: bool = True,
) -> None:
    """Configure structlog (and the stdlib root logger) for the process.

    Args:
        level: Minimum level, e.g. ``"DEBUG"`` to see per-request store logs
        json_format: JSON lines when True, console when False; ``None`` picks
            JSON unless stdout is a terminal
        service: Value of ``service.name`` on every event
        add_timestamp: Add an ISO-8601 ``@timestamp``
        stream: Output stream (default stdout); CLIs pass stderr to keep stdout clean
        cache_loggers: Freeze each logger on first use; disable when the
            configuration is replaced at runtime
    """
    global _service_name
    _service_name = service

    if json_format is None:
        json_format = not sys.stdout.isatty()
    numeric_level = getattr(logging, level.upper())

    structlog.configure(
        processors=build_processors(json_format=json_format, add_timestamp=add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=cache_loggers,
    )
    logging.basicConfig(format="%(message)s", stream=stream or sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Structlog logger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every event logged from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind fields for the duration of a ``with`` block.

    Fields bound before the block keep their previous values afterwards.

    Example:
        with LogContext(repository="orders", index="orders_2019.*"):
            logger.info("search_started")
    """

    def __init__(self, **kwargs: Any):
        self._fields = kwargs
        self._scope: Any = None

    def __enter__(self) -> LogContext:
        self._scope = structlog.contextvars.bound_contextvars(**self._fields)
        self._scope.__enter__()
        return self

    def __exit__(self, *args: Any) -> None:
        self._scope.__exit__(*args)
        self._scope = None


__all__ = [
    "LogContext",
    "bind_context",
    "build_processors",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
