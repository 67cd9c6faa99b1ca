"""
Authentication Module
=====================

Credential producers attached to every request sent to the service.
"""

from parsec_client.auth.authenticators import (
    AuthCredential,
    Authenticator,
    AuthenticatorInfo,
    AuthenticatorType,
    DirectAuthenticator,
    NoAuthAuthenticator,
    UnixPeerAuthenticator,
)

__all__ = [
    "AuthCredential",
    "Authenticator",
    "AuthenticatorInfo",
    "AuthenticatorType",
    "DirectAuthenticator",
    "NoAuthAuthenticator",
    "UnixPeerAuthenticator",
]
