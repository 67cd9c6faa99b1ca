"""
Authenticators
==============

Closed set of credential producers attached to every request.

Variants:
    1. NoAuth: empty credential, accepted for discovery on most deployments
    2. Direct: credential is the application name chosen by the caller
    3. UnixPeer: identity comes from the OS peer credentials of the socket

Security Notes:
    - Credential bodies are never logged or included in repr()
    - Exactly one authenticator is active per client at any time
"""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Union

from parsec_client.core.errors import ResponseDecodingError


class AuthenticatorType(IntEnum):
    """Authenticator identifiers known to the wire protocol."""
    NO_AUTH = 0
    DIRECT = 1
    TOKENS = 2
    UNIX_PEER_CREDENTIALS = 3
    JWT_SVID = 4

    @classmethod
    def from_code(cls, code: int) -> Union["AuthenticatorType", int]:
        """Map a raw id, keeping ids this client does not know as int."""
        try:
            return cls(code)
        except ValueError:
            return code


@dataclass(frozen=True, slots=True)
class AuthCredential:
    """Wire credential: the authenticator kind and its opaque body."""

    kind: AuthenticatorType
    body: bytes

    def __repr__(self) -> str:
        """Safe representation without the credential body."""
        return f"AuthCredential(kind={self.kind.name}, body_len={len(self.body)})"


@dataclass(frozen=True, slots=True)
class NoAuthAuthenticator:
    """Authenticator that sends no credential."""

    @property
    def kind(self) -> AuthenticatorType:
        return AuthenticatorType.NO_AUTH

    def credential(self) -> AuthCredential:
        return AuthCredential(self.kind, b"")


@dataclass(frozen=True, slots=True)
class DirectAuthenticator:
    """
    Authenticator that identifies the caller by application name.

    The service trusts the name as given, so this is only suitable where
    every client sharing the socket is trusted.
    """

    app_name: str

    def __post_init__(self) -> None:
        if not isinstance(self.app_name, str) or not self.app_name:
            raise ValueError("Direct authenticator requires a non-empty application name")

    def __repr__(self) -> str:
        return "DirectAuthenticator(app_name=...)"

    @property
    def kind(self) -> AuthenticatorType:
        return AuthenticatorType.DIRECT

    def credential(self) -> AuthCredential:
        return AuthCredential(self.kind, self.app_name.encode("utf-8"))


@dataclass(frozen=True, slots=True)
class UnixPeerAuthenticator:
    """
    Authenticator backed by the OS peer credentials of the connection.

    The service reads the peer uid from the socket itself; the body carries
    the effective uid of this process so the service can cross-check it.
    """

    @property
    def kind(self) -> AuthenticatorType:
        return AuthenticatorType.UNIX_PEER_CREDENTIALS

    def credential(self) -> AuthCredential:
        return AuthCredential(self.kind, struct.pack("<I", _current_uid()))


Authenticator = Union[NoAuthAuthenticator, DirectAuthenticator, UnixPeerAuthenticator]


def _current_uid() -> int:
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        # Peer credentials do not exist on this platform; the service rejects them anyway.
        return 0
    return geteuid()


@dataclass(frozen=True, slots=True)
class AuthenticatorInfo:
    """
    Authenticator as advertised by the service.

    Attributes:
        id: Authenticator kind, or the raw id if this client does not know it
        description: Human readable description
        version_maj: Major version
        version_min: Minor version
        version_rev: Revision number
    """

    id: Union[AuthenticatorType, int]
    description: str = ""
    version_maj: int = 0
    version_min: int = 0
    version_rev: int = 0

    @property
    def is_known(self) -> bool:
        return isinstance(self.id, AuthenticatorType)

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> AuthenticatorInfo:
        """
        Build an AuthenticatorInfo from a decoded ListAuthenticators entry.

        Raises:
            ResponseDecodingError: If a field is missing or invalid
        """
        try:
            return cls(
                id=AuthenticatorType.from_code(int(data["id"])),
                description=str(data.get("description", "")),
                version_maj=int(data.get("version_maj", 0)),
                version_min=int(data.get("version_min", 0)),
                version_rev=int(data.get("version_rev", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseDecodingError(f"Invalid authenticator entry: {e}") from e
