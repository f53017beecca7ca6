# =======================================================================================
# fingerprint_bridge/logging_config.py - Logging Setup
# =======================================================================================
"""
Logging configuration for the bridge.

Plain text by default; JSON Lines (one object per line) when LOG_FORMAT=json,
so the bridge output can be shipped to a log aggregator unchanged.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import Config, config as default_config

TEXT_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

# Standard LogRecord attributes; anything else on a record came from `extra=`
_RESERVED_FIELDS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "exc_info", "exc_text",
    "thread", "threadName", "message", "asctime", "taskName",
}


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_FIELDS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(cfg: Optional[Config] = None) -> None:
    """Configure the root logger from the bridge configuration."""
    cfg = cfg or default_config
    level = logging.DEBUG if cfg.API_DEBUG else getattr(logging, cfg.LOG_LEVEL, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if cfg.LOG_FORMAT == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
