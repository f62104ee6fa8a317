"""
Structured logging for the backend.

Loggers accept keyword context:

    logger.info("Command closed", command_id=cid, total=total)

Production writes one JSON object per line; development writes colored
text. Records served inside a request also carry its request id and the
acting staff id (see shared.infrastructure.correlation).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


def _bound_ids(record: logging.LogRecord) -> dict[str, str]:
    """request_id/staff_id stamped by CorrelationIdFilter, skipping placeholders."""
    ids = {}
    for key in ("request_id", "staff_id"):
        value = getattr(record, key, None)
        if value and value != "-":
            ids[key] = value
    return ids


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_bound_ids(record),
        }
        if getattr(record, "extra_data", None):
            payload["data"] = record.extra_data
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            payload["source"] = f"{record.filename}:{record.lineno}"

        # Decimal totals and datetimes fall back to str()
        return json.dumps(payload, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored single-line output for a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        ids = _bound_ids(record)

        parts = [f"{color}{datetime.now():%H:%M:%S} {record.levelname:8}{self.RESET}"]
        if ids:
            tag = " ".join(v[:8] if k == "request_id" else v for k, v in ids.items())
            parts.append(f"{self.DIM}[{tag}]{self.RESET}")
        parts.append(f"{record.name}: {record.getMessage()}")

        line = " ".join(parts)
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            line += " (" + ", ".join(f"{k}={v}" for k, v in extra_data.items()) + ")"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """Logger whose methods take keyword context, stored as record.extra_data."""

    def _log_with_data(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        extra: dict | None = None,
        **context: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        extra = dict(extra or {})
        extra["extra_data"] = context or None
        # stacklevel=3 points source at the caller, not this wrapper
        super()._log(level, msg, args, exc_info=exc_info, extra=extra, stacklevel=3)

    def debug(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **context)

    def info(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **context)

    def warning(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **context)

    def error(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.ERROR, msg, args, **context)

    def critical(self, msg: str, *args: Any, **context: Any) -> None:
        self._log_with_data(logging.CRITICAL, msg, args, **context)


logging.setLoggerClass(StructuredLogger)


# Third-party loggers kept quieter than ours
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
}


def setup_logging() -> None:
    """Install one stdout handler on the root logger. Call once at startup."""
    # Deferred: correlation imports FastAPI, which settings-only callers don't need
    from shared.infrastructure.correlation import CorrelationIdFilter

    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        StructuredFormatter() if settings.environment == "production" else DevelopmentFormatter()
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance with the given name.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Item added", command_id=cid, product_id=pid, quantity=2)
        logger.error("Failed to persist total", command_id=cid, exc_info=True)
    """
    logger = logging.getLogger(name)
    if not isinstance(logger, StructuredLogger):
        # Logger was created before setLoggerClass ran (e.g. by a third-party import)
        logger.__class__ = StructuredLogger
    return logger  # type: ignore[return-value]


def mask_email(email: str | None) -> str:
    """Mask an email for logs: waiter@demo.com becomes wa***@demo.com."""
    if not email or "@" not in email:
        return "<no-email>"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


# Pre-configured loggers for common modules
rest_api_logger = get_logger("rest_api")
command_logger = get_logger("rest_api.command")
billing_logger = get_logger("rest_api.billing")
table_logger = get_logger("rest_api.table")
schema_logger = get_logger("rest_api.schema")

# Authorization decisions
security_audit_logger = get_logger("security.audit")


def audit_authorization_event(
    action: str,
    staff_id: str | None,
    restaurant_id: str | None,
    allowed: bool,
    reason: str | None = None,
    **extra: Any,
) -> None:
    """
    Log an authorization decision taken on a lifecycle action.

    Denials are logged at WARNING, grants at DEBUG.
    """
    level = logging.DEBUG if allowed else logging.WARNING
    security_audit_logger._log_with_data(
        level,
        f"AUTHZ_AUDIT: {action}",
        args=(),
        action=action,
        staff_id=staff_id,
        restaurant_id=restaurant_id,
        allowed=allowed,
        reason=reason,
        **extra,
    )
