"""
Central logging configuration.

- JSON lines on stdout (one object per record) for the API and batch scripts.
- request_id / document_id / file_name from the request context are merged
  into every record, plus anything passed via `extra={...}`.
- LOG_JSON=false switches to a plain text format for local debugging.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.config import dictConfig

from labdoc.core.config import settings
from labdoc.core.request_context import get_context

# Everything a bare LogRecord already carries; the rest came from `extra`.
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

# Chatty third-party loggers (PIL plugin probing, httpx per-request lines).
_QUIET_LOGGERS = ("PIL", "httpx", "httpcore", "multipart")


def _jsonable(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **get_context(),
        }

        extras = {
            k: _jsonable(v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_ATTRS and not k.startswith("_") and k not in payload
        }
        payload.update(extras)

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str | None = None, *, json_output: bool | None = None) -> None:
    """
    Call once at process startup. Safe to call again (e.g. from a script) to
    change the level.
    """
    level = (level or settings.LOG_LEVEL).upper()
    json_output = settings.LOG_JSON if json_output is None else json_output

    formatters = {
        "json": {"()": "labdoc.core.logging_config.JsonFormatter"},
        "text": {"format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s"},
    }
    console = {
        "class": "logging.StreamHandler",
        "formatter": "json" if json_output else "text",
        "stream": sys.stdout,
    }

    loggers = {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name in ("labdoc", "uvicorn", "uvicorn.error", "uvicorn.access")
    }
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": {"console": console},
            "root": {"level": level, "handlers": ["console"]},
            "loggers": loggers,
        }
    )
