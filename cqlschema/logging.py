"""Structured Logging for cqlschema

- Colored, human-readable console output or JSON output
- Stdlib-backed loggers, silent until the host application configures logging
- Domain loggers for builders, schemas and validation runs
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from cqlschema.config import get_settings


def _add_library_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that tags events with the emitting library."""
    event_dict.setdefault("library", "cqlschema")
    return event_dict


def _drop_transform_callables(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that replaces serialize/deserialize callables with their names."""
    for key, value in list(event_dict.items()):
        if callable(value) and not isinstance(value, type):
            event_dict[key] = getattr(value, "__qualname__", repr(value))
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors used by both console and JSON configurations."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_library_info,
        _drop_transform_callables,
    ]


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure the logging system.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults to settings.LOG_LEVEL
        json_logs: If True, output JSON format. If False, colored console output.
            Defaults to settings.LOG_JSON.
    """
    settings = get_settings()
    level = settings.LOG_LEVEL if level is None else level
    json_logs = settings.LOG_JSON if json_logs is None else json_logs
    log_level = getattr(logging, level.upper(), logging.WARNING)

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=get_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    library_logger = logging.getLogger("cqlschema")
    library_logger.handlers = [handler]
    library_logger.setLevel(log_level)
    library_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Events are filtered by the stdlib level before any processing, so an
    unconfigured host sees nothing below WARNING.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        Bound logger writing through the stdlib logger of the same name
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            *get_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    ).bind()


class LoggerRegistry:
    """Registry of pre-configured loggers for the package's domains."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.stdlib.BoundLogger:
        """Get or create a logger for the given domain."""
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"cqlschema.{name}")
        return cls._loggers[name]


def builders_logger() -> structlog.stdlib.BoundLogger:
    """Logger for type construction events."""
    return LoggerRegistry.get("builders")


def schema_logger() -> structlog.stdlib.BoundLogger:
    """Logger for schema-level metadata events."""
    return LoggerRegistry.get("schema")


def validation_logger() -> structlog.stdlib.BoundLogger:
    """Logger for validation runs."""
    return LoggerRegistry.get("validation")
