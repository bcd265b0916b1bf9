"""Logging configuration shared by the server and the request driver.

Every record is written to stdout as one JSON object per line.
setup_logging() is idempotent so tests and re-entry don't stack handlers.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging import Handler, LogRecord
from typing import Any

_DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Attributes every LogRecord carries; anything else came in via `extra=`.
_RESERVED = frozenset(vars(LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "color_message",
}

# Library loggers that would otherwise print a line per connection or request.
_QUIET_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, plus extras."""

    def format(self, record: LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (k, v) for k, v in vars(record).items() if k not in _RESERVED and k not in payload
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _make_stream_handler(level: int) -> Handler:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler


def quiet_library_loggers(level: int) -> None:
    """Hold uvicorn and httpx at WARNING or above and route them to root."""
    for name in _QUIET_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(max(level, logging.WARNING))
        lg.propagate = True
        for h in list(lg.handlers):
            lg.removeHandler(h)


def setup_logging(level: str | int = _DEFAULT_LEVEL) -> None:
    """Configure the root logger for JSON output.

    A default run prints only the harness's own startup line; library
    chatter is quieted even when a root handler already exists.
    """
    root = logging.getLogger()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    quiet_library_loggers(level)

    if any(isinstance(h.formatter, JsonFormatter) for h in root.handlers):
        return

    root.setLevel(level)
    root.addHandler(_make_stream_handler(level))


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name if name else __name__)
