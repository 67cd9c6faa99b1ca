"""
Transport Collaborator
======================

Interface to the component that serialises requests and moves them to
the service. This package ships no socket implementation: transports are
plugged in per URL scheme through the registry below, or handed to the
client already open.

Contract:
    - call() performs exactly one round trip and returns the decoded result
    - call() raises TransportError / ProviderError on failure, never retries
    - close() releases the underlying connection
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

from parsec_client.auth.authenticators import AuthCredential
from parsec_client.core.errors import ConnectionClosedError, ParsecClientError, ServiceConnectionError
from parsec_client.core.providers import AnyProviderID, provider_name
from parsec_client.transport.opcodes import Opcode


@runtime_checkable
class Transport(Protocol):
    """Connection to the service able to carry one request at a time."""

    def call(
        self,
        provider: AnyProviderID,
        credential: AuthCredential,
        opcode: Opcode,
        payload: Mapping[str, Any],
    ) -> Mapping[str, Any]: ...

    def close(self) -> None: ...


TransportFactory = Callable[[str], Transport]

_registry: Dict[str, TransportFactory] = {}
_registry_lock = threading.Lock()


def register_transport(scheme: str, factory: TransportFactory) -> None:
    """
    Register a factory opening transports for a URL scheme.

    Args:
        scheme: URL scheme such as "unix" or "tcp"
        factory: Callable receiving the full target string
    """
    with _registry_lock:
        _registry[scheme.lower()] = factory


def unregister_transport(scheme: str) -> None:
    with _registry_lock:
        _registry.pop(scheme.lower(), None)


def open_transport(target: str) -> Transport:
    """
    Open a transport to the given service endpoint.

    Args:
        target: Endpoint URL, e.g. "unix:/run/parsec/parsec.sock"

    Returns:
        An open Transport

    Raises:
        ServiceConnectionError: If no factory handles the scheme or the
            factory could not connect
    """
    scheme = urlsplit(target).scheme.lower()
    if not scheme:
        raise ServiceConnectionError(f"Endpoint has no scheme: {target!r}")

    with _registry_lock:
        factory = _registry.get(scheme)
    if factory is None:
        raise ServiceConnectionError(f"No transport registered for scheme {scheme!r}")

    try:
        return factory(target)
    except ParsecClientError:
        raise
    except Exception as e:
        raise ServiceConnectionError(f"Could not connect to {target}: {e}") from e


class TransportHandle:
    """
    Exclusive owner of a client's transport.

    The transport is released exactly once. Any call or close issued after
    that raises ConnectionClosedError.
    """

    __slots__ = ("_transport", "_closed", "_log")

    def __init__(self, transport: Transport) -> None:
        self._transport: Optional[Transport] = transport
        self._closed = False
        self._log = logging.getLogger("parsec_client.transport")

    @property
    def closed(self) -> bool:
        return self._closed

    def call(
        self,
        provider: AnyProviderID,
        credential: AuthCredential,
        opcode: Opcode,
        payload: Mapping[str, Any],
    ) -> Mapping[str, Any]:
        """Forward one request to the transport."""
        if self._closed or self._transport is None:
            raise ConnectionClosedError(f"Cannot send {opcode.name}: client is closed")
        self._log.debug(
            "-> %s provider=%s auth=%s", opcode.name, provider_name(provider), credential.kind.name,
            extra={
                "opcode": opcode.name,
                "provider": provider_name(provider),
                "authenticator": credential.kind.name,
            },
        )
        return self._transport.call(provider, credential, opcode, payload)

    def close(self) -> None:
        """Release the transport."""
        if self._closed or self._transport is None:
            raise ConnectionClosedError("Client is already closed")
        transport = self._transport
        self._transport = None
        self._closed = True
        transport.close()
        self._log.debug("Transport closed")
