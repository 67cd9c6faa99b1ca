"""
Validation Utilities
====================

Checks applied to names before they are sent to the service.
"""

from __future__ import annotations

from typing import Any, Final


# Direct credentials travel as UTF-8 bytes in the request header body
MAX_APP_NAME_BYTES: Final[int] = 1024


class ValidationError(ValueError):
    """Raised when validation fails."""
    pass


def validate_app_name(value: Any) -> str:
    """
    Validate an application name used by the Direct authenticator.

    Args:
        value: Candidate application name

    Returns:
        The name, unchanged

    Raises:
        ValidationError: If the name is not a non-empty string, is too long
            or not encodable as UTF-8, or contains control characters
    """
    if not isinstance(value, str):
        raise ValidationError(f"application name must be a string, got {type(value).__name__}")
    if not value:
        raise ValidationError("application name cannot be empty")

    try:
        encoded_len = len(value.encode("utf-8"))
    except UnicodeEncodeError as e:
        raise ValidationError("application name is not valid UTF-8 text") from e
    if encoded_len > MAX_APP_NAME_BYTES:
        raise ValidationError(
            f"application name is {encoded_len} bytes, at most {MAX_APP_NAME_BYTES} allowed"
        )

    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value):
        raise ValidationError("application name contains control characters")

    return value
