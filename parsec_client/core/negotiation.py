"""
Negotiation
===========

Deterministic selection of the default provider and the default
authenticator, run once when a client is created.

Both functions are pure: they only look at what the service advertised
and at the client configuration. Server order is authoritative; the
advertised lists are never reordered or deduplicated.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from parsec_client.auth.authenticators import (
    Authenticator,
    AuthenticatorInfo,
    AuthenticatorType,
    DirectAuthenticator,
    NoAuthAuthenticator,
    UnixPeerAuthenticator,
)
from parsec_client.core.errors import ConfigError
from parsec_client.core.providers import AnyProviderID, ProviderID, ProviderInfo
from parsec_client.utils.validators import ValidationError, validate_app_name


_log = logging.getLogger("parsec_client.negotiation")


def select_default_provider(providers: Sequence[ProviderInfo]) -> AnyProviderID:
    """
    Pick the implicit provider from a ListProviders result.

    Returns:
        The id of the first advertised provider, or CORE if none were
    """
    if providers:
        return providers[0].id
    return ProviderID.CORE


def select_first_match(
    advertised: Sequence[AuthenticatorInfo],
    authenticator_data: Mapping[AuthenticatorType, Any],
) -> Authenticator:
    """
    Pick the authenticator to use from a ListAuthenticators result.

    Scans in server order and stops at the first authenticator this client
    can set up:
    - Direct: only when authenticator_data has a Direct entry
    - UnixPeerCredentials: always, it needs no configuration
    - anything else: skipped

    Args:
        advertised: Authenticators in the order the service listed them
        authenticator_data: Per-kind configuration payloads

    Returns:
        The selected authenticator, NoAuth if nothing matched

    Raises:
        ConfigError: If the Direct payload is not a valid application name
    """
    for info in advertised:
        if info.id == AuthenticatorType.DIRECT:
            if AuthenticatorType.DIRECT not in authenticator_data:
                _log.debug("Skipping Direct authenticator: no application name configured")
                continue
            payload = authenticator_data[AuthenticatorType.DIRECT]
            try:
                app_name = validate_app_name(payload)
            except ValidationError as e:
                raise ConfigError(f"Direct authenticator data is of wrong type: {e}") from e
            return DirectAuthenticator(app_name)
        if info.id == AuthenticatorType.UNIX_PEER_CREDENTIALS:
            return UnixPeerAuthenticator()
        _log.debug("Skipping unsupported authenticator %r", info.id)
    return NoAuthAuthenticator()
