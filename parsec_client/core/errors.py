"""
Client Errors
=============

Exception taxonomy shared by every layer of the client.

Propagation Rules:
- Configuration, capability and encoding errors are raised locally,
  before any round trip to the service
- Transport and provider errors are raised by the transport collaborator
  and propagate unchanged
- Nothing in this package retries
"""

from __future__ import annotations

from typing import Optional, Union

from parsec_client.transport.opcodes import ResponseStatus


class ParsecClientError(Exception):
    """Base exception for all client errors."""
    pass


class ConfigError(ParsecClientError):
    """Raised when the client configuration has an unrecognised shape."""
    pass


class ServiceConnectionError(ParsecClientError):
    """Raised when a connection to the service could not be established."""
    pass


class ConnectionClosedError(ServiceConnectionError):
    """Raised when an operation is attempted on a closed session."""
    pass


class CapabilityError(ParsecClientError):
    """Raised when the implicit provider lacks a required capability."""
    pass


class AlgorithmEncodingError(ParsecClientError):
    """Raised when an algorithm or key attribute cannot be put in wire form."""
    pass


class TransportError(ParsecClientError):
    """Raised by a transport when a request could not be delivered."""
    pass


class ProviderError(ParsecClientError):
    """
    Raised when the service answers with a non-success status.

    Attributes:
        status: The ResponseStatus reported by the service, or the raw
            integer code when it is not one this client knows about
    """

    def __init__(
        self,
        status: Union[ResponseStatus, int],
        message: Optional[str] = None,
    ) -> None:
        self.status = status
        if message is None:
            name = status.name if isinstance(status, ResponseStatus) else str(status)
            message = f"service returned status {name}"
        super().__init__(message)


class ResponseDecodingError(ProviderError):
    """Raised when a result payload does not have the expected shape."""

    def __init__(self, message: str) -> None:
        super().__init__(ResponseStatus.DESERIALIZING_BODY_FAILED, message)
