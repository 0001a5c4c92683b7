import json
import logging
import sys
from datetime import datetime, timezone

from config import settings

# Record extras copied into the JSON line when present
_EXTRA_FIELDS = ("request_id", "client_id", "job_id", "context")


class StructuredFormatter(logging.Formatter):
    """One JSON object per line.

    Fields: severity, logger, message, timestamp, plus request_id,
    client_id, job_id and context when passed via ``extra=``, and
    traceback when exc_info is set.
    """

    SEVERITY_MAP = {
        "DEBUG": "DEBUG",
        "INFO": "INFO",
        "WARNING": "WARNING",
        "ERROR": "ERROR",
        "CRITICAL": "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "severity": self.SEVERITY_MAP.get(record.levelname, "DEFAULT"),
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info and record.exc_info[0]:
            log_entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging() -> logging.Logger:
    """Configure structured JSON logging.

    Call once at application startup (in main.py lifespan).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())

    root_logger = logging.getLogger("shrinkray")
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.ERROR))

    # Pillow logs every plugin import at DEBUG; pypdf warns on each malformed xref
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("pypdf").setLevel(logging.ERROR)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the 'shrinkray' namespace."""
    return logging.getLogger(f"shrinkray.{name}")
