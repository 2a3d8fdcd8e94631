"""
Logging for the notes service.

Records get the current request id (set by RequestIdMiddleware) and pass
through a redaction filter, so a bearer token, bcrypt hash or password
that slips into a message or an ``extra`` field never reaches a handler.
Development output is one line per record, production output is JSON.

Usage:
    from kcnotes.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("User signed in", extra={"user_id": str(user.id)})
"""

import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REDACTED = "***REDACTED***"

# extra= keys whose values are always replaced
SENSITIVE_KEYS = ("password", "token", "hash", "secret", "authorization")

SENSITIVE_PATTERNS = [
    (re.compile(r"(bearer\s+)[A-Za-z0-9_\-\.]{10,}", re.IGNORECASE), r"\1" + REDACTED),
    (re.compile(r"\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}"), REDACTED),
    (re.compile(r"((?:password|passwd|pwd)\s*[:=]\s*['\"]?)[^'\"\s,]+", re.IGNORECASE), r"\1" + REDACTED),
]

# Attributes every LogRecord has; anything else came in through extra=
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "request_id"}


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def redact(text: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


class ContextFilter(logging.Filter):
    """Attach the request id and scrub credentials from the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]

        record.msg = redact(record.getMessage())
        record.args = None

        for key in _extra_fields(record):
            if any(marker in key.lower() for marker in SENSITIVE_KEYS):
                setattr(record, key, REDACTED)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extra fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            if value is not None:
                entry[key] = value

        return json.dumps(entry, default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        log_level: Logging level name, ignored when debug is set
        environment: 'production' switches to JSON output
        debug: Force DEBUG level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s %(message)s",
            datefmt="%H:%M:%S",
        ))

    root = logging.getLogger()
    root.setLevel(level)
    # create_app may run more than once per process (tests, reload)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
