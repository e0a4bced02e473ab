"""Logging configuration for the gateway settings service.

Every record is rendered as one JSON object per line. Warnings and errors go to
stderr, everything else to stdout. setup_logging() is idempotent so tests and
uvicorn reloads don't stack handlers.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging import Filter, Handler, LogRecord
from typing import Any

_DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_RESERVED = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render a record plus its structured extras as a JSON line."""

    def format(self, record: LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
        }

        msg = record.msg
        if isinstance(msg, dict):
            payload.update(msg)
        else:
            payload["message"] = record.getMessage()

        for key, value in record.__dict__.items():
            if key in _RESERVED or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # Setting values are arbitrary; fall back to repr for anything json can't encode.
        return json.dumps(payload, ensure_ascii=False, default=repr)


class _BelowWarning(Filter):
    def filter(self, record: LogRecord) -> bool:
        return record.levelno < logging.WARNING


def _make_stream_handlers(level: int) -> list[Handler]:
    out = logging.StreamHandler(stream=sys.stdout)
    out.setLevel(level)
    out.addFilter(_BelowWarning())

    err = logging.StreamHandler(stream=sys.stderr)
    err.setLevel(max(level, logging.WARNING))

    for handler in (out, err):
        handler.setFormatter(JsonFormatter())
    return [out, err]


def setup_logging(level: str | int = _DEFAULT_LEVEL) -> None:
    """Configure the root and uvicorn loggers for JSON output."""
    root = logging.getLogger()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if root.handlers:
        return

    root.setLevel(level)
    for handler in _make_stream_handlers(level):
        root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.propagate = True
        for h in list(lg.handlers):
            lg.removeHandler(h)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a named logger, e.g. get_logger("service.settings")."""
    return logging.getLogger(name if name else __name__)
