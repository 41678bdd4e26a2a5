"""Logging setup for FinPlan.

All loggers live under the "finplan" namespace so embedding
applications can tune or silence the engine in one place.
"""

import json
import logging
from datetime import datetime, timezone

from finplan.core.config import EngineConfig

ROOT_LOGGER = "finplan"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    # Context fields the engine passes via logger.info(..., extra={...})
    EXTRA_FIELDS = ("plan_id", "month", "category_id")

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: getattr(record, key)
            for key in self.EXTRA_FIELDS
            if hasattr(record, key)
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


def setup_logging(config: EngineConfig) -> logging.Logger:
    """Configure the finplan logger with a single console handler.

    Args:
        config: Engine configuration (level and output format).

    Returns:
        The configured "finplan" logger.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(config.log_level.upper())
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    if config.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(handler)
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the finplan namespace.

    Args:
        name: Logger name, usually __name__.

    Returns:
        Logger instance.
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
