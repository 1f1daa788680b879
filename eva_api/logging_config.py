"""Structured JSON logging configuration.

Configures Python logging to emit JSON-formatted log entries with required
fields: request_id, level, timestamp. Response fields (response_type,
status_code, user_id, endpoint, ...) are added when the response log sink
attaches them through ``extra``.

SECURITY: Never logs service keys, auth tokens or passwords.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

# Patterns that should be redacted from log output
_SENSITIVE_PATTERNS = re.compile(
    r"(service.key|api.key|secret|password|token|credential|authorization)"
    r"[\s]*[=:]\s*\S+",
    re.IGNORECASE,
)

# Outgoing response fields
_RESPONSE_FIELDS = (
    "response_type",
    "status_code",
    "user_id",
    "ip",
    "user_agent",
    "endpoint",
    "method",
)

# Broadcast event fields
_EVENT_FIELDS = ("event_type", "channels")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON with structured fields.

    Each entry contains at minimum: request_id, level, timestamp, message.
    Additional fields can be attached via the ``extra`` dict on log calls.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }

        for name in _RESPONSE_FIELDS + _EVENT_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)

        # Exception info
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(
                self.formatException(record.exc_info)
            )

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove sensitive values from log text."""
        return _SENSITIVE_PATTERNS.sub("[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
