"""Structured logging configuration for the composition engine.

Provides key=value formatted logs carrying composition context
(segment ids, discriminants, seeds).
"""

import logging
import sys
from typing import Any, Optional

from composer.config import get_config

# Extra fields copied from log records when present
CONTEXT_FIELDS = ("segment_id", "discriminant", "seed", "depth", "node_count")


class StructuredFormatter(logging.Formatter):
    """Key=value structured log formatter with composition context."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as key=value pairs.

        Args:
            record: Log record to format

        Returns:
            Formatted log string
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add custom fields from extra parameter
        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        pairs = [f"{k}={v}" for k, v in log_data.items()]
        return " ".join(pairs)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level name; defaults to the configured ``log_level``
    """
    level_name = level or get_config().log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level_name))
    console_handler.setFormatter(StructuredFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
    root_logger.addHandler(console_handler)

    logging.getLogger("composer").setLevel(getattr(logging, level_name))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
