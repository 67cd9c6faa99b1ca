"""
parsec_client - Client session for the Parsec security service
===============================================================

Opens a session with the service, negotiates a default provider and
authenticator, and routes cryptographic operations only to providers
that support them.

Security Notice:
- Credentials and key material are never logged
- Keys are remote references; no key material is cached
- No operation is retried by this package
"""

from parsec_client.core.errors import (
    AlgorithmEncodingError,
    CapabilityError,
    ConfigError,
    ConnectionClosedError,
    ParsecClientError,
    ProviderError,
    ResponseDecodingError,
    ServiceConnectionError,
    TransportError,
)
from parsec_client.core.config import (
    AppNameConfig,
    ClientConfig,
    DefaultConfig,
    ExplicitConfig,
    LoggingConfig,
    direct_auth_config,
)
from parsec_client.core.logging import get_client_logger
from parsec_client.core.providers import Capability, ProviderID, ProviderInfo
from parsec_client.core.keys import KeyInfo
from parsec_client.core.client import BasicClient, init_client
from parsec_client.auth import AuthenticatorInfo, AuthenticatorType
from parsec_client.transport.base import Transport, register_transport
from parsec_client.transport.opcodes import Opcode, ResponseStatus
from parsec_client.utils.public_keys import load_public_key

__version__ = "0.1.0"

__all__ = [
    "AlgorithmEncodingError",
    "CapabilityError",
    "ConfigError",
    "ConnectionClosedError",
    "ParsecClientError",
    "ProviderError",
    "ResponseDecodingError",
    "ServiceConnectionError",
    "TransportError",
    "AppNameConfig",
    "ClientConfig",
    "DefaultConfig",
    "ExplicitConfig",
    "LoggingConfig",
    "direct_auth_config",
    "get_client_logger",
    "Capability",
    "ProviderID",
    "ProviderInfo",
    "KeyInfo",
    "BasicClient",
    "init_client",
    "AuthenticatorInfo",
    "AuthenticatorType",
    "Transport",
    "register_transport",
    "Opcode",
    "ResponseStatus",
    "load_public_key",
    "__version__",
]
