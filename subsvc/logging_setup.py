"""Logger set up for development or production."""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Optional


class _Formatter(logging.Formatter):
    """JSON lines in production, tab separated lines otherwise.

    Structured fields are taken from ``extra={"fields": {...}}``.
    """

    def __init__(self, as_json: bool) -> None:
        super().__init__()
        self._as_json = as_json

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "fields", None) or {}
        caller = f"{record.module}:{record.lineno}"
        if self._as_json:
            entry = {"level": record.levelname.lower(), "ts": record.created,
                     "logger": record.name, "caller": caller, "msg": record.getMessage(), **fields}
            if record.exc_info:
                entry["error"] = self.formatException(record.exc_info)
            return json.dumps(entry, default=str)
        parts = [self.formatTime(record, "%Y-%m-%dT%H:%M:%S"), record.levelname, caller, record.getMessage()]
        if fields:
            parts.append(json.dumps(fields, default=str))
        line = "\t".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def make_logger(app_env: Optional[str] = None) -> logging.Logger:
    """Return the service logger: JSON at INFO in production, console at DEBUG otherwise.

    When ``app_env`` is None the ``APP_ENV`` environment variable decides.
    """
    if app_env is None:
        app_env = os.environ.get("APP_ENV")
    production = app_env == "production"

    logger = logging.getLogger("subsvc")
    for old in list(logger.handlers):
        logger.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_Formatter(as_json=production))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO if production else logging.DEBUG)
    logger.propagate = False
    return logger