"""
Central logging configuration: outputs JSON logs to stdout.
Fields: timestamp, level, logger, function, message, exception (if any).
Level: default INFO, override via LOG_LEVEL env var.
Forecast modules log through a tagged adapter so every line carries a
module prefix such as "[MATH-FORECAST]".
"""

import logging
import os
import sys
import json
from datetime import datetime, timezone
from typing import Optional, Union


class JsonFormatter(logging.Formatter):
    """Formatter that outputs log records in JSON format.

    The JSON log record includes the following fields:
    timestamp (ISO8601 UTC), level, logger, function, message,
    and exception (if any).
    """

    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


class TaggedLogger(logging.LoggerAdapter):
    """Logger adapter that prefixes each message with a module tag."""

    def process(self, msg, kwargs):
        return f"[{self.extra['tag']}] {msg}", kwargs


def configure_logging():
    """Configure the root logger to output JSON logs to stdout.

    Sets the log level based on the LOG_LEVEL environment variable (default INFO).
    Adds a StreamHandler to stdout with the JsonFormatter.

    Returns:
        None
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        root.setLevel(level)
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)


def get_logger(name: str, tag: Optional[str] = None) -> Union[logging.Logger, TaggedLogger]:
    """Get a logger configured to output JSON logs to stdout.

    Args:
        name (str): Name of the logger.
        tag (str, optional): Module tag prepended to every message, e.g. "MATH-FORECAST".

    Returns:
        logging.Logger | TaggedLogger: Configured logger, wrapped in a TaggedLogger when tag is given.
    """
    configure_logging()
    logger = logging.getLogger(name)
    if tag:
        return TaggedLogger(logger, {"tag": tag})
    return logger
