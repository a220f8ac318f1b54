"""
Logging configuration.

Configures the root logger once at startup (called from the lifespan in
main.py). Two output formats are available, selected by LOG_FORMAT:

  - "text": human-readable lines for local development
  - "json": one JSON object per line, for log shippers in production

Modules log through the standard pattern:

    logger = logging.getLogger(__name__)

Never pass passwords, SSNs, Plaid access tokens, or session secrets to a
logger. Log identifiers (user id, bank id, Dwolla resource URL) instead.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from bankdash.config import settings


# Extra attributes callers may attach with `extra={...}`
_CONTEXT_FIELDS = ("user_id", "bank_id", "action")


class JSONFormatter(logging.Formatter):
    """Structured formatter: one JSON document per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in _CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = str(getattr(record, field))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Readable formatter that appends any context fields in brackets."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = [
            f"{field}={getattr(record, field)}"
            for field in _CONTEXT_FIELDS
            if hasattr(record, field)
        ]
        if context:
            # Tracebacks are already appended by the base formatter; keep
            # the context on the first line.
            first, sep, rest = message.partition("\n")
            message = f"{first} [{', '.join(context)}]{sep}{rest}"
        return message


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Log level name; defaults to settings.LOG_LEVEL.
        log_format: "text" or "json"; defaults to settings.LOG_FORMAT.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if (log_format or settings.LOG_FORMAT) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Vendor clients are chatty at INFO (httpx logs every request line)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s", level_name)
