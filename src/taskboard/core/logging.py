"""JSON logging for the task board and the remote calls it makes."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .context import current_request_id

# Attributes every LogRecord carries; anything else on a record came from ``extra``.
_STANDARD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
    "request_id",
}

# Third-party loggers routed through the JSON handler, with their minimum level.
_LIBRARY_LOGGERS: dict[str, int] = {
    "uvicorn": logging.NOTSET,
    "uvicorn.error": logging.NOTSET,
    "uvicorn.access": logging.NOTSET,
    # One line per remote call is noise below WARNING.
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line: fixed fields, service defaults, then extras."""

    def __init__(self, *, defaults: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._defaults = dict(defaults or {})

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = dict(self._defaults)
        payload["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        payload["level"] = record.levelname
        payload["logger"] = record.name
        payload["message"] = record.getMessage()
        payload["request_id"] = getattr(record, "request_id", "-")
        payload.update(self.extras(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False, default=str)

    @staticmethod
    def extras(record: logging.LogRecord) -> dict[str, Any]:
        return {key: _jsonable(value) for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS}


class RequestContextFilter(logging.Filter):
    """Stamp each record with the correlation id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = current_request_id() or "-"
        return True


def configure_logging(settings: Settings) -> None:
    """Send all logging through a single JSON stdout handler."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.captureWarnings(True)

    loggers: dict[str, dict[str, Any]] = {"": {"handlers": ["json_stdout"], "level": level}}
    for name, minimum in _LIBRARY_LOGGERS.items():
        loggers[name] = {"handlers": ["json_stdout"], "level": max(level, minimum), "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonLogFormatter,
                    "defaults": {"service": settings.project_name, "environment": settings.environment},
                }
            },
            "filters": {"request_context": {"()": RequestContextFilter}},
            "handlers": {
                "json_stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "json",
                    "level": level,
                    "filters": ["request_context"],
                }
            },
            "loggers": loggers,
        }
    )


__all__ = ["JsonLogFormatter", "RequestContextFilter", "configure_logging"]
