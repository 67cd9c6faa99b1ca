"""
Provider Model
==============

Value objects describing the providers a service exposes.

Provider ids are open: the ids below are the ones this client knows by
name, and any other unsigned integer the service lists is kept as a plain
int. Provider descriptors are produced fresh by each ListProviders call and
are never cached by the client.
"""

from __future__ import annotations

import uuid as uuid_module
from dataclasses import dataclass
from enum import Flag, IntEnum, auto
from typing import Any, Final, Mapping, Union

from parsec_client.core.errors import ResponseDecodingError


class Capability(Flag):
    """Categories of operation a provider can declare support for."""
    NONE = 0
    CRYPTO = auto()


class ProviderID(IntEnum):
    """Identifiers of the providers known to the wire protocol."""
    CORE = 0
    MBED_CRYPTO = 1
    PKCS11 = 2
    TPM = 3
    TRUSTED_SERVICE = 4
    CRYPTOAUTHLIB = 5

    @property
    def capabilities(self) -> Capability:
        """Capabilities declared for this provider."""
        return capabilities_for(self)

    def has_crypto(self) -> bool:
        """Check if this provider can run cryptographic operations."""
        return has_crypto(self)


# A known ProviderID, or the raw id of a provider this client has no name for
AnyProviderID = Union[ProviderID, int]

# The core provider only serves discovery and admin operations.
_CORE_CAPABILITIES: Final[Capability] = Capability.NONE
_BACKEND_CAPABILITIES: Final[Capability] = Capability.CRYPTO


def capabilities_for(provider: AnyProviderID) -> Capability:
    """Return the capability flags for a provider id."""
    if provider == ProviderID.CORE:
        return _CORE_CAPABILITIES
    return _BACKEND_CAPABILITIES


def has_crypto(provider: AnyProviderID) -> bool:
    return Capability.CRYPTO in capabilities_for(provider)


def provider_name(provider: AnyProviderID) -> str:
    """Name of a provider for log and error messages."""
    if isinstance(provider, ProviderID):
        return provider.name
    return f"provider#{int(provider)}"


def coerce_provider_id(value: Any) -> AnyProviderID:
    """
    Convert an integer (or ProviderID) into a provider id.

    Known ids come back as ProviderID members, others as plain ints.

    Raises:
        ValueError: If value is not a non-negative integer
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Provider id must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"Provider id must not be negative: {value}")
    try:
        return ProviderID(value)
    except ValueError:
        return int(value)


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    """
    Description of a provider as reported by the service.

    Attributes:
        uuid: Provider implementation UUID
        description: Human readable description
        vendor: Provider vendor
        version_maj: Major version of the provider
        version_min: Minor version of the provider
        version_rev: Revision number of the provider
        id: Provider identifier used to address requests
    """

    uuid: uuid_module.UUID
    description: str
    vendor: str
    version_maj: int
    version_min: int
    version_rev: int
    id: AnyProviderID

    @property
    def capabilities(self) -> Capability:
        """Capabilities declared for this provider."""
        return capabilities_for(self.id)

    def has_crypto(self) -> bool:
        return has_crypto(self.id)

    @property
    def version(self) -> str:
        return f"{self.version_maj}.{self.version_min}.{self.version_rev}"

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> ProviderInfo:
        """
        Build a ProviderInfo from a decoded ListProviders entry.

        Raises:
            ResponseDecodingError: If a field is missing or invalid
        """
        try:
            return cls(
                uuid=uuid_module.UUID(str(data["uuid"])),
                description=str(data.get("description", "")),
                vendor=str(data.get("vendor", "")),
                version_maj=int(data.get("version_maj", 0)),
                version_min=int(data.get("version_min", 0)),
                version_rev=int(data.get("version_rev", 0)),
                id=coerce_provider_id(data["id"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseDecodingError(f"Invalid provider entry: {e}") from e
