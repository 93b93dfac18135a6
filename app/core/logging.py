"""Structured logging for the Signal API.

Every line is rendered as ``key=value`` pairs. Context passed through
``log_with_context`` (operation name, token counts, a clipped raw model
reply) lands on the same line as the message.
"""

import json
import logging
import sys
from typing import Any

_LEVELS_BY_ENV = {"dev": logging.DEBUG, "test": logging.WARNING}


def _render(value: Any) -> str:
    text = str(value)
    if not text or any(c.isspace() for c in text) or "=" in text:
        # Quote so multi-word values (messages, raw replies) stay one field
        return json.dumps(text)
    return text


class StructuredFormatter(logging.Formatter):
    """key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        if hasattr(record, "operation"):
            log_data["operation"] = record.operation

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return " ".join(f"{k}={_render(v)}" for k, v in log_data.items())


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger writing structured lines to stdout
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

        try:
            from app.core.config import get_settings

            logger.setLevel(_LEVELS_BY_ENV.get(get_settings().SIGNAL_ENV, logging.INFO))
        except Exception:
            # Settings unavailable (missing env): fall back to INFO
            logger.setLevel(logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; ``operation`` is rendered right after the message
    """
    extra: dict[str, Any] = {}
    if "operation" in kwargs:
        extra["operation"] = kwargs.pop("operation")
    extra["extra_data"] = kwargs

    logger.log(level, msg, extra=extra)
