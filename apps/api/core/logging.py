"""
Logging configuration shared by the API and the Celery worker.

JSON lines in production (one object per record, extra fields merged in),
plain text locally. Call sites attach structured fields with log_fields():

    logger.info("Plan committed", extra=log_fields(plan_id=str(plan_id)))
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from core.config import settings

SERVICE_NAME = "plan_engine"

# Third-party loggers and the level they are held at
QUIET_LOGGERS: Dict[str, int] = {
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
    "requests": logging.WARNING,
    "celery": logging.INFO,
}


def log_fields(**fields: Any) -> Dict[str, Any]:
    """Wrap structured fields for the `extra=` argument."""
    return {"extra_fields": fields}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines; structured fields appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "extra_fields", None)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger. Safe to call more than once.

    Args:
        level: Overrides settings.LOG_LEVEL
        fmt: "json" or "text"; overrides settings.LOG_FORMAT
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    use_json = (fmt or settings.LOG_FORMAT) == "json" or settings.ENVIRONMENT == "production"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if use_json else TextFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    return root_logger
