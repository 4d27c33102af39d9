"""
JSON-lines logging for the timelapse CLI.

Each record becomes one JSON object on stdout (and optionally a rotating log
file). ``stage`` is taken from the logger name, so ``timelapse.capture``
records carry ``"stage": "capture"``. Fields passed as
``extra={"extra_payload": {...}}`` are merged into the top-level object.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

LOGGER_PREFIX = "timelapse."


def _stage(logger_name: str) -> str:
    if logger_name.startswith(LOGGER_PREFIX):
        return logger_name[len(LOGGER_PREFIX):]
    return logger_name


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "stage": _stage(record.name),
            "message": record.getMessage(),
        }
        payload = getattr(record, "extra_payload", None)
        if payload:
            entry.update(payload)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        # Paths and timedeltas in payloads are logged as strings.
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    target = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging_level = getattr(logging, target, logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    path = log_file or os.getenv("LOG_FILE")
    if path:
        handlers.append(RotatingFileHandler(path, maxBytes=5_000_000, backupCount=5, encoding="utf-8"))

    formatter = JsonFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=logging_level, handlers=handlers, force=True)
