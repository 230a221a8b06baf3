"""
Logging for the booking core.

Every module logs through ``get_logger(__name__)``. The adapter merges the
current request's id and principal into ``extra``, so service log lines
stay greppable by request id whichever output format is configured.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, MutableMapping, Optional, Tuple

import structlog
from pythonjsonlogger import jsonlogger

from homestay.config.settings import Settings, get_settings

# Set by the request middleware, read by processors and formatters.
request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "cookie")

_LIBRARY_LEVELS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "httpx": logging.WARNING,
}


def _request_context() -> Dict[str, str]:
    context = {}
    if request_id.get():
        context["request_id"] = request_id.get()
    if user_id.get():
        context["user_id"] = user_id.get()
    return context


def redact(values: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Mask sensitive keys in place, descending into nested mappings."""
    for key, value in values.items():
        if any(word in key.lower() for word in SENSITIVE_KEYS):
            values[key] = REDACTED
        elif isinstance(value, MutableMapping):
            redact(value)
    return values


def add_request_context(logger, method_name, event_dict):
    """structlog processor: stamp request id, principal and deployment."""
    event_dict.update(_request_context())
    event_dict.setdefault("service", "homestay-booking")
    event_dict.setdefault("environment", get_settings().ENVIRONMENT)
    return event_dict


def redact_sensitive(logger, method_name, event_dict):
    return redact(event_dict)


class BookingJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, carrying the request context."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["location"] = f"{record.module}.{record.funcName}:{record.lineno}"
        for key, value in _request_context().items():
            log_record.setdefault(key, value)
        redact(log_record)


class LoggerAdapter(logging.LoggerAdapter):
    """Adds the request context to ``extra``; keys given at the call site win."""

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**_request_context(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name or "homestay"))


def _configure_structlog(settings: Settings) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_FORMAT == "json"
        else structlog.processors.KeyValueRenderer(key_order=["event", "request_id"])
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            add_request_context,
            redact_sensitive,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def _build_handler(settings: Settings) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT == "json":
        handler.setFormatter(BookingJsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    return handler


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Install the root handler and tune library loggers. Safe to call repeatedly."""
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL)

    if settings.ENABLE_STRUCTURED_LOGGING:
        _configure_structlog(settings)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_build_handler(settings))

    for name, library_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOG_SQL_QUERIES else logging.WARNING
    )

    get_logger(__name__).info(
        "Logging configured",
        extra={
            "log_level": settings.LOG_LEVEL,
            "log_format": settings.LOG_FORMAT,
            "structured_logging": settings.ENABLE_STRUCTURED_LOGGING,
        },
    )


__all__ = [
    "LoggerAdapter",
    "get_logger",
    "redact",
    "request_id",
    "setup_logging",
    "user_id",
]
