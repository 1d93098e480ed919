"""Logging setup for the command line and structured event helpers."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# LogRecord attributes that are not user-supplied fields.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "event",
        "message",
    }
)


class StructuredFormatter(logging.Formatter):
    """Render records as ``key=value`` pairs, or one JSON object per line."""

    def __init__(self, json_output: bool) -> None:
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", "log"),
        }
        message = record.getMessage()
        if message and message != payload["event"]:
            payload["message"] = message

        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if self.json_output:
            return json.dumps(payload, default=str)
        return " ".join(f"{key}={value}" for key, value in payload.items())


def configure_logging(verbose: bool = False) -> None:
    """
    Install a single stderr handler on the root logger.

    The level is DEBUG with *verbose*, otherwise ``LOG_LEVEL`` (default
    WARNING). ``LOG_FORMAT=json`` switches to JSON lines. Calling this more
    than once only updates the level.
    """
    root = logging.getLogger()
    level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    if getattr(root, "_staffmaster_logging_configured", False):
        root.setLevel(level)
        return

    json_output = os.getenv("LOG_FORMAT", "text").lower() == "json"
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(json_output=json_output))

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root._staffmaster_logging_configured = True  # type: ignore[attr-defined]


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, event, extra={"event": event, **fields})
