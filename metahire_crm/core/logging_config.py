"""
Logging configuration.

Called once from the application lifespan. Supports text (human-readable) and
JSON formats via the LOG_FORMAT setting; LOG_LEVEL defaults to INFO.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from metahire_crm.config import settings


class JSONFormatter(logging.Formatter):
    """Single-line JSON log formatter for log aggregators."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


# Third-party loggers that are noisy at INFO
_NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "aiosqlite",
    "httpx",
    "httpcore",
]


def configure_logging(level_name: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Set up the root logger from settings (or explicit overrides)."""
    level_name = (level_name or settings.LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    log_format = (log_format or settings.LOG_FORMAT).lower()

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers to avoid duplicates on re-init
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
