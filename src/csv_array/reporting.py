"""Logging setup for applications built on :mod:`csv_array`.

The library itself only logs through ``logging.getLogger(__name__)``; records
carry an ``event`` name and an optional ``data`` mapping in ``extra``. This
module renders those records:

- ``text`` mode writes one readable line per record.
- ``ndjson`` mode writes one JSON object per line.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any

LOGGER_NAME = "csv_array"
LOG_FORMATS = ("text", "ndjson")


def _format_ts(created: float) -> str:
    return (
        datetime.fromtimestamp(created, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _short(value: Any, *, limit: int = 80) -> str:
    text = str(value)
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class EventEmitter:
    """Emit named events as structured log records."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter) -> None:
        self._logger = logger

    def emit(self, event: str, *, message: str | None = None, level: int = logging.INFO, **data: Any) -> None:
        extra: dict[str, Any] = {"event": str(event)}
        if data:
            extra["data"] = data
        self._logger.log(level, message or str(event), extra=extra)


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - matches logging.Formatter API
        payload: dict[str, Any] = {
            "ts": _format_ts(record.created),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": getattr(record, "event", None) or "log",
            "message": record.getMessage(),
        }

        data = getattr(record, "data", None)
        if data is not None:
            payload["data"] = data

        if record.exc_info:
            exc_type, exc, _ = record.exc_info
            payload["exc_type"] = getattr(exc_type, "__name__", None)
            payload["exc"] = str(exc)
            payload["traceback"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Readable single-line records."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - matches logging.Formatter API
        ts = _format_ts(record.created)
        level = record.levelname.upper()
        event = getattr(record, "event", None)
        head = f"[{ts}] {level} {event or record.name}: {record.getMessage()}"

        data = getattr(record, "data", None)
        if isinstance(data, dict) and data:
            items = [f"{key}={_short(data[key])}" for key in sorted(data)[:8]]
            if len(data) > 8:
                items.append("…")
            head += " (" + ", ".join(items) + ")"

        if record.exc_info:
            head += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
        return head


@dataclass
class Reporter:
    """Configured logger plus its event helper."""

    logger: logging.Logger
    event_emitter: EventEmitter
    handler: logging.Handler
    _handle: IO[str] | None = None
    _previous_level: int = logging.NOTSET

    def close(self) -> None:
        self.logger.removeHandler(self.handler)
        self.logger.setLevel(self._previous_level)
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def __enter__(self) -> "Reporter":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()


def build_reporting(
    fmt: str = "text",
    *,
    level: int = logging.WARNING,
    file_path: Path | None = None,
    logger_name: str = LOGGER_NAME,
) -> Reporter:
    """Attach one handler to the ``csv_array`` logger.

    Output goes to ``file_path`` when given, otherwise to stderr.
    """
    fmt_value = str(fmt or "text").strip().lower()
    if fmt_value not in LOG_FORMATS:
        raise ValueError("fmt must be 'text' or 'ndjson'")

    handle: IO[str] | None = None
    if file_path is not None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handle = file_path.open("a", encoding="utf-8", newline="\n")
        stream: IO[str] = handle
    else:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if fmt_value == "ndjson" else TextFormatter())

    logger = logging.getLogger(logger_name)
    previous_level = logger.level
    logger.setLevel(level)
    logger.addHandler(handler)

    return Reporter(
        logger=logger,
        event_emitter=EventEmitter(logger),
        handler=handler,
        _handle=handle,
        _previous_level=previous_level,
    )


__all__ = [
    "EventEmitter",
    "JsonFormatter",
    "LOG_FORMATS",
    "Reporter",
    "TextFormatter",
    "build_reporting",
]
