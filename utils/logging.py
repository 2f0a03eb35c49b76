"""
Logging setup for the model asset manager.

Console logs go to stderr, stdout is reserved for user-facing messages.
Records may carry structured fields under `extra_data` (model name, exit
code, duration). The JSON formatter merges them into the payload and the
text formatter appends them as `key=value` pairs.
"""

import logging
import sys
import json
import time
from typing import Optional
from contextlib import contextmanager


NOISY_LOGGERS = ("huggingface_hub", "urllib3", "filelock")
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def fields(**data) -> dict:
    """Build the `extra` argument of a log call carrying structured fields."""
    return {"extra_data": {key: value for key, value in data.items() if value is not None}}


def record_fields(record: logging.LogRecord) -> dict:
    return dict(getattr(record, "extra_data", None) or {})


class JSONFormatter(logging.Formatter):
    """One JSON object per record, structured fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage()
        }
        payload.update(record_fields(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class FieldsFormatter(logging.Formatter):
    """Text formatter appending structured fields to the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        data = record_fields(record)
        if data:
            line += " " + " ".join(f"{key}={value}" for key, value in data.items())
        return line


def setup_logging(
    level: str = "WARNING",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Configure the root logger for a command run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Emit one JSON object per record
        log_file: Also write records to this file
    """
    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = FieldsFormatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # Hub client chatter stays out of download logs
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


@contextmanager
def log_duration(logger: logging.Logger, operation: str, **data):
    """Log `operation` with its `duration_ms` and the given fields once it ends."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(f"{operation} finished", extra=fields(duration_ms=duration_ms, **data))
