"""Log formatters for JSON and console output."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from core.logging.context import get_log_context
from core.security.sanitize import sanitize_error_message


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    Redacts signatures and keys before logging.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Identity
        "device_id",
        "host",
        "key_name",
        # Renewal tracking
        "trigger",
        "expiry",
        "seconds_remaining",
        "renewal_in_seconds",
        "token_valid_time_seconds",
        "token_renewal_margin_seconds",
        # Notifications
        "event",
        "listener",
        "listener_count",
        # Errors
        "error_category",
        "error_message",
        "parameter",
        # Files / CLI
        "token_file",
        "metrics_port",
    ]

    # Fields that may carry credentials and must be redacted
    SENSITIVE_FIELDS = ["error_message"]

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if key in self.SENSITIVE_FIELDS and isinstance(value, str):
            return sanitize_error_message(value)
        return value

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with redacted secrets."""
        log_entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": sanitize_error_message(record.getMessage(), max_length=2000),
        }

        # Inject context variables
        ctx = get_log_context()
        if ctx["domain"]:
            log_entry["domain"] = ctx["domain"]
        if ctx["stage"]:
            log_entry["stage"] = ctx["stage"]
        if ctx["device_id"]:
            log_entry["device_id"] = ctx["device_id"]

        # Add source location for DEBUG/ERROR
        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = self._sanitize_value(field, value)

        if record.exc_info:
            log_entry["exception"] = sanitize_error_message(
                self.formatException(record.exc_info), max_length=8000
            )

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter.

    Includes context when available.
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()

        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname,
        ]

        if ctx["domain"]:
            parts.append(f"[{ctx['domain']}]")
        if ctx["stage"]:
            parts.append(f"[{ctx['stage']}]")

        prefix = " - ".join(parts)
        message = sanitize_error_message(record.getMessage(), max_length=2000)

        device_id = getattr(record, "device_id", None) or ctx["device_id"]
        if device_id:
            return f"{prefix} - [{device_id}] {message}"

        return f"{prefix} - {message}"
