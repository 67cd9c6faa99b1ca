"""
Key descriptors returned by ListKeys.

Keys are remote references: a name scoped to a provider and to the
authenticated application. No key material is ever held locally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from parsec_client.algorithm.encoding import decode_key_attributes
from parsec_client.algorithm.key_attributes import KeyAttributes
from parsec_client.core.errors import ResponseDecodingError
from parsec_client.core.providers import AnyProviderID, coerce_provider_id


@dataclass(frozen=True, slots=True)
class KeyInfo:
    """A key held by the service for the current application."""

    name: str
    provider_id: AnyProviderID
    attributes: KeyAttributes

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> KeyInfo:
        """
        Build a KeyInfo from a decoded ListKeys entry.

        Raises:
            ResponseDecodingError: If a field is missing or invalid
        """
        try:
            name = data["name"]
            provider_id = coerce_provider_id(data["provider_id"])
            attributes_wire = data["attributes"]
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseDecodingError(f"Invalid key entry: {e}") from e
        if not isinstance(name, str):
            raise ResponseDecodingError("Invalid key entry: name is not a string")
        return cls(name=name, provider_id=provider_id, attributes=decode_key_attributes(attributes_wire))
