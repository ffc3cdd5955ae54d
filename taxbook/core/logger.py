from __future__ import annotations

import json
import logging
import sys
from typing import Any

from taxbook.core.config import settings

# Per-report summaries are logged here at INFO
ENGINE_LOGGER = "taxbook.services.profit_loss"


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields are nested under "extra"."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "service": settings.APP_NAME,
            "env": settings.ENV,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_ATTRS
        }
        if extra:
            payload["extra"] = extra
        return json.dumps(payload, default=str)


_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def _level(name: str | None, fallback: int) -> int:
    if not name:
        return fallback
    return getattr(logging, name.upper(), fallback)


def init_logging(level: int | None = None) -> None:
    if logging.getLogger().handlers:
        return
    effective_level = level or _level(settings.LOG_LEVEL, logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(handler)
    if settings.PL_ENGINE_LOG_LEVEL:
        logging.getLogger(ENGINE_LOGGER).setLevel(_level(settings.PL_ENGINE_LOG_LEVEL, effective_level))
