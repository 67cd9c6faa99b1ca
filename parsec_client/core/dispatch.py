"""
Dispatch Gate
=============

Shared precondition check and forwarding for every cryptographic
operation.

Order of checks (each failure stops the call):
    1. The target provider must declare the CRYPTO capability
       -> CapabilityError, nothing is sent
    2. Algorithm and key attribute parameters must encode
       -> AlgorithmEncodingError, nothing is sent
    3. One request to the target provider, carrying the current
       credential; transport and provider errors propagate unchanged
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from parsec_client.algorithm.algorithms import Algorithm
from parsec_client.algorithm.encoding import (
    AlgorithmEncoder,
    WireForm,
    encode_algorithm,
    encode_key_attributes,
    expect_family,
)
from parsec_client.algorithm.key_attributes import KeyAttributes
from parsec_client.auth.authenticators import Authenticator
from parsec_client.core.errors import AlgorithmEncodingError, CapabilityError
from parsec_client.core.providers import AnyProviderID, Capability, capabilities_for, provider_name
from parsec_client.transport.base import TransportHandle
from parsec_client.transport.opcodes import Opcode


class CryptoGate:
    """
    Gate in front of the transport for cryptographic operations.

    The provider and authenticator are passed on every call rather than
    read from shared state, so the gate itself holds nothing that changes.
    """

    __slots__ = ("_handle", "_encoder", "_log")

    def __init__(self, handle: TransportHandle, encoder: Optional[AlgorithmEncoder] = None) -> None:
        self._handle = handle
        self._encoder = encoder or encode_algorithm
        self._log = logging.getLogger("parsec_client.dispatch")

    def check_capability(self, provider: AnyProviderID, opcode: Opcode) -> None:
        """
        Raise CapabilityError unless provider supports crypto operations.

        Raises:
            CapabilityError: If the provider lacks Capability.CRYPTO
        """
        if Capability.CRYPTO not in capabilities_for(provider):
            self._log.warning(
                "Refusing %s: provider %s does not support crypto operations",
                opcode.name, provider_name(provider),
            )
            raise CapabilityError(
                f"Provider {provider_name(provider)} does not support crypto operation {opcode.name}"
            )

    def encode(self, algorithm: Optional[Algorithm], family: str) -> WireForm:
        """
        Encode an algorithm parameter and check it has the expected family.

        Raises:
            AlgorithmEncodingError: If the algorithm is missing or cannot be encoded
        """
        if algorithm is None:
            raise AlgorithmEncodingError(f"A {family} algorithm is required")
        try:
            wire = self._encoder(algorithm)
        except AlgorithmEncodingError:
            raise
        except (TypeError, ValueError, KeyError) as e:
            raise AlgorithmEncodingError(f"Could not encode {family} algorithm: {e}") from e
        return expect_family(wire, family)

    def encode_attributes(self, attributes: Optional[KeyAttributes]) -> WireForm:
        """
        Encode key attributes, including their permitted algorithm.

        Raises:
            AlgorithmEncodingError: If the attributes are missing or cannot be encoded
        """
        if attributes is None:
            raise AlgorithmEncodingError("Key attributes are required")
        try:
            return encode_key_attributes(attributes, self._encoder)
        except AlgorithmEncodingError:
            raise
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise AlgorithmEncodingError(f"Could not encode key attributes: {e}") from e

    def dispatch(
        self,
        provider: AnyProviderID,
        authenticator: Authenticator,
        opcode: Opcode,
        payload: Mapping[str, Any],
        *,
        algorithm: Optional[Algorithm] = None,
        family: Optional[str] = None,
        attributes: Optional[KeyAttributes] = None,
        needs_attributes: bool = False,
    ) -> Mapping[str, Any]:
        """
        Check, encode and forward one cryptographic operation.

        Args:
            provider: Provider the operation is addressed to
            authenticator: Authenticator producing the request credential
            opcode: Operation code
            payload: Operation arguments other than algorithm and attributes
            algorithm: Algorithm parameter, required when family is given
            family: Algorithm family the operation takes, None if it takes none
            attributes: Key attributes for generate/import operations
            needs_attributes: True if the operation cannot run without attributes

        Returns:
            Decoded result from the transport

        Raises:
            CapabilityError: Provider lacks crypto support (nothing sent)
            AlgorithmEncodingError: Parameters could not be encoded (nothing sent)
            TransportError, ProviderError: Propagated from the transport
        """
        self.check_capability(provider, opcode)

        request: Dict[str, Any] = dict(payload)
        if family is not None:
            request["alg"] = self.encode(algorithm, family)
        if needs_attributes or attributes is not None:
            request["attributes"] = self.encode_attributes(attributes)

        self._log.debug(
            "Dispatching %s to provider %s", opcode.name, provider_name(provider),
            extra={"opcode": opcode.name, "provider": provider_name(provider)},
        )
        return self._handle.call(provider, authenticator.credential(), opcode, request)
