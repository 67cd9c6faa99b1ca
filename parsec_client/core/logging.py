"""
Client Logging
==============

Logger factory with credential filtering.

Security Features:
- Application names, credentials and key material are redacted
- Long hex / base64 blobs are redacted wherever they appear
- Optional JSON output carrying opcode, provider and authenticator fields
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Final, Optional, Pattern

from parsec_client.core.config import LoggingConfig


# Patterns for sensitive data detection
_SENSITIVE_PATTERNS: Final[list[tuple[str, Pattern[str]]]] = [
    ("app_name", re.compile(r'(?i)(app[_-]?name|application)\s*[=:]\s*["\']?[^\s"\',)]+["\']?')),
    ("credential", re.compile(r'(?i)(credential|auth[_-]?body|token)\s*[=:]\s*["\']?[^\s"\',)]+["\']?')),
    ("key_material", re.compile(r'(?i)(key[_-]?data|private[_-]?key|secret)\s*[=:]\s*["\']?[^\s"\',)]+["\']?')),
    # Base64 encoded blobs
    ("base64_blob", re.compile(r'[A-Za-z0-9+/]{40,}={0,2}')),
    # Hex encoded blobs
    ("hex_blob", re.compile(r'(?i)(?:0x)?[a-f0-9]{32,}')),
]

_REDACTED_TEXT: Final[str] = "[REDACTED]"

# Set through `extra=` by the transport and dispatch loggers
_CONTEXT_FIELDS: Final[tuple[str, ...]] = ("opcode", "provider", "authenticator")


class CredentialLogFilter(logging.Filter):
    """
    Log filter that removes credentials and key material from records.

    Records are always kept; only their text is sanitised.
    """

    def __init__(self, name: str = "", additional_patterns: Optional[list[Pattern[str]]] = None) -> None:
        super().__init__(name)
        self._additional_patterns = additional_patterns or []

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = self._sanitize(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._sanitize(v) if isinstance(v, str) else v
                               for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._sanitize(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True

    def _sanitize(self, text: str) -> str:
        """Remove sensitive data from text."""
        result = text
        for name, pattern in _SENSITIVE_PATTERNS:
            result = pattern.sub(f"{name}={_REDACTED_TEXT}", result)
        for pattern in self._additional_patterns:
            result = pattern.sub(_REDACTED_TEXT, result)
        return result


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, carrying request context when the record has it."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def get_client_logger(
    name: str = "parsec_client",
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Create a logger with credential filtering.

    Child loggers ("parsec_client.negotiation", ...) propagate to the
    logger configured here.

    Args:
        name: Logger name
        config: Logging settings, loaded from the environment if None

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    config = config or LoggingConfig.from_env()
    logger.setLevel(getattr(logging, config.level.upper()))

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        if config.enable_json:
            console_handler.setFormatter(JsonLogFormatter())
        else:
            console_handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))
        console_handler.addFilter(CredentialLogFilter())
        logger.addHandler(console_handler)
    else:
        logger.addHandler(logging.NullHandler())

    return logger
