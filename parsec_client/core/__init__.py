"""
Core module - Contains configuration, logging, errors and the client session.
"""

from parsec_client.core.errors import ParsecClientError
from parsec_client.core.config import ClientConfig, LoggingConfig, normalize_config
from parsec_client.core.logging import get_client_logger, CredentialLogFilter

__all__ = [
    "ParsecClientError",
    "ClientConfig",
    "LoggingConfig",
    "normalize_config",
    "get_client_logger",
    "CredentialLogFilter",
]
