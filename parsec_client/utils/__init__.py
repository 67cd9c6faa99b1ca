"""
Utils module - Utility functions and helpers.
"""

from parsec_client.utils.validators import ValidationError, validate_app_name

__all__ = [
    "ValidationError",
    "validate_app_name",
]
