"""Structured logging: JSON formatter and one-shot setup called on startup."""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "user_id",
    "invoice_id",
    "share_id",
    "template_id",
    "operation",
    "error_code",
    "path",
    "mock",
)


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


_configured = False


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure the root logger once per process."""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _configured = True
