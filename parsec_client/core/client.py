"""
Basic Client
============

Client session for the security service.

Lifecycle:
    1. Acquire a transport (configured endpoint, default endpoint, or an
       already open Transport)
    2. Start with the core provider and the NoAuth authenticator
    3. Provider negotiation: first provider the service lists
    4. Authenticator negotiation: first advertised authenticator this
       client can configure, NoAuth otherwise
    5. Discovery and cryptographic calls, one round trip each
    6. close() releases the transport exactly once

Routing:
    - Discovery and admin operations always go to the core provider
    - Cryptographic operations go to the implicit provider, through the
      dispatch gate

Concurrency:
    A client is not synchronised. set_implicit_provider() racing with
    in-flight operations is a caller bug; use one client per thread, or
    serialise access yourself.

Usage:
    with init_client("my-app") as client:
        client.psa_generate_key("signing-key", attributes)
        signature = client.psa_sign_message("signing-key", message, alg)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from parsec_client.algorithm.algorithms import (
    AeadAlgorithm,
    AsymmetricEncryptionAlgorithm,
    AsymmetricSignatureAlgorithm,
    CipherAlgorithm,
    HashAlgorithm,
    KeyAgreementRaw,
    MacAlgorithm,
)
from parsec_client.algorithm.key_attributes import KeyAttributes
from parsec_client.auth.authenticators import (
    Authenticator,
    AuthenticatorInfo,
    AuthenticatorType,
    NoAuthAuthenticator,
)
from parsec_client.core.config import ClientConfig, default_endpoint, normalize_config
from parsec_client.core.dispatch import CryptoGate
from parsec_client.core.errors import ConfigError, ResponseDecodingError
from parsec_client.core.keys import KeyInfo
from parsec_client.core.negotiation import select_default_provider, select_first_match
from parsec_client.core.providers import (
    AnyProviderID,
    ProviderID,
    ProviderInfo,
    coerce_provider_id,
    provider_name,
)
from parsec_client.transport.base import Transport, TransportHandle, open_transport
from parsec_client.transport.opcodes import Opcode


def _field(result: Mapping[str, Any], name: str, expected: Union[type, Tuple[type, ...]]) -> Any:
    """Fetch a typed field from a decoded result."""
    try:
        value = result[name]
    except (KeyError, TypeError) as e:
        raise ResponseDecodingError(f"Result is missing field {name!r}") from e
    if not isinstance(value, expected):
        raise ResponseDecodingError(
            f"Result field {name!r} has type {type(value).__name__}"
        )
    return value


def _bytes_field(result: Mapping[str, Any], name: str) -> bytes:
    return bytes(_field(result, name, (bytes, bytearray, memoryview)))


def _provider_arg(provider: Any) -> AnyProviderID:
    try:
        return coerce_provider_id(provider)
    except ValueError as e:
        raise ConfigError(str(e)) from e


class BasicClient:
    """
    Session with the service: one transport, one active authenticator,
    one implicit provider.

    Construction negotiates the provider and the authenticator and either
    returns a ready client or raises the first error encountered.

    Raises (construction):
        ConfigError: Unrecognised or invalid configuration
        ServiceConnectionError: The transport could not be opened
        TransportError, ProviderError: A negotiation call failed
    """

    __slots__ = ("_config", "_handle", "_gate", "_auth", "_implicit_provider", "_log")

    def __init__(self, config: Any = None) -> None:
        self._log = logging.getLogger("parsec_client.client")
        self._config: ClientConfig = normalize_config(config)
        self._handle = TransportHandle(self._open_transport(self._config.connection))
        self._gate = CryptoGate(self._handle, self._config.encoder)
        self._implicit_provider = ProviderID.CORE
        self._auth: Authenticator = NoAuthAuthenticator()

        try:
            self._select_default_provider()
            self._select_default_authenticator()
        except Exception:
            self._close_after_failure()
            raise

    def _close_after_failure(self) -> None:
        # Never raises: the negotiation error must reach the caller.
        try:
            self._handle.close()
        except Exception:
            self._log.warning("Could not close transport after failed negotiation", exc_info=True)

    @classmethod
    def init(cls, config: Any = None) -> BasicClient:
        """Alternate constructor, same as init_client()."""
        return cls(config)

    @staticmethod
    def _open_transport(connection: Union[str, Transport, None]) -> Transport:
        if connection is None:
            return open_transport(default_endpoint())
        if isinstance(connection, str):
            return open_transport(connection)
        return connection

    def _select_default_provider(self) -> None:
        self._implicit_provider = ProviderID.CORE
        providers = self.list_providers()
        self._implicit_provider = select_default_provider(providers)
        self._log.info("Implicit provider: %s", provider_name(self._implicit_provider))

    def _select_default_authenticator(self) -> None:
        advertised = self.list_authenticators()
        self._auth = select_first_match(advertised, self._config.authenticator_data)
        self._log.info("Authenticator: %s", self._auth.kind.name)

    def __repr__(self) -> str:
        return (
            f"BasicClient(provider={provider_name(self._implicit_provider)}, "
            f"auth={self._auth.kind.name}, closed={self._handle.closed})"
        )

    def __enter__(self) -> BasicClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._handle.closed:
            self.close()

    # Session state

    def close(self) -> None:
        """
        Close the client and its transport.

        Raises:
            ConnectionClosedError: If the client was already closed
        """
        self._handle.close()

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def set_implicit_provider(self, provider: AnyProviderID) -> None:
        """
        Set the provider used for cryptographic operations.

        Any provider id is accepted, including ones this client has no name
        for; the service decides whether it exists.

        Raises:
            ConfigError: If provider is not a non-negative integer
        """
        self._implicit_provider = _provider_arg(provider)

    def get_implicit_provider(self) -> AnyProviderID:
        """Return the provider used for cryptographic operations."""
        return self._implicit_provider

    @property
    def implicit_provider(self) -> AnyProviderID:
        return self._implicit_provider

    def get_authenticator_type(self) -> AuthenticatorType:
        """Return the kind of the active authenticator."""
        return self._auth.kind

    # Discovery and admin operations (core provider)

    def _core_call(self, opcode: Opcode, payload: Optional[Dict[str, Any]] = None) -> Mapping[str, Any]:
        return self._handle.call(ProviderID.CORE, self._auth.credential(), opcode, payload or {})

    def ping(self) -> Tuple[int, int]:
        """Ping the service and return its wire protocol (major, minor) version."""
        result = self._core_call(Opcode.PING)
        return (
            _field(result, "wire_protocol_version_maj", int),
            _field(result, "wire_protocol_version_min", int),
        )

    def list_providers(self) -> List[ProviderInfo]:
        """List the providers of the service, in the order it reports them."""
        result = self._core_call(Opcode.LIST_PROVIDERS)
        return [ProviderInfo.from_wire(entry) for entry in _field(result, "providers", (list, tuple))]

    def list_opcodes(self, provider: AnyProviderID) -> FrozenSet[int]:
        """List the opcodes supported by a provider."""
        provider_id = _provider_arg(provider)
        result = self._core_call(Opcode.LIST_OPCODES, {"provider_id": int(provider_id)})
        opcodes = _field(result, "opcodes", (list, tuple, set, frozenset))
        try:
            return frozenset(int(opcode) for opcode in opcodes)
        except (TypeError, ValueError) as e:
            raise ResponseDecodingError(f"Invalid opcode list: {e}") from e

    def list_keys(self) -> List[KeyInfo]:
        """List the keys stored for the current application."""
        result = self._core_call(Opcode.LIST_KEYS)
        return [KeyInfo.from_wire(entry) for entry in _field(result, "keys", (list, tuple))]

    def list_authenticators(self) -> List[AuthenticatorInfo]:
        """List the authenticators supported by the service, in its order."""
        result = self._core_call(Opcode.LIST_AUTHENTICATORS)
        return [
            AuthenticatorInfo.from_wire(entry)
            for entry in _field(result, "authenticators", (list, tuple))
        ]

    def list_clients(self) -> List[str]:
        """List the applications with keys in the service. Admin only."""
        result = self._core_call(Opcode.LIST_CLIENTS)
        clients = _field(result, "clients", (list, tuple))
        if not all(isinstance(client, str) for client in clients):
            raise ResponseDecodingError("Client list contains non-string entries")
        return list(clients)

    def delete_client(self, client: str) -> None:
        """Delete an application and all its keys. Admin only."""
        self._core_call(Opcode.DELETE_CLIENT, {"client": client})

    # Cryptographic operations (implicit provider)

    def _crypto_call(self, opcode: Opcode, payload: Dict[str, Any], **kwargs: Any) -> Mapping[str, Any]:
        return self._gate.dispatch(self._implicit_provider, self._auth, opcode, payload, **kwargs)

    def psa_generate_key(self, name: str, attributes: KeyAttributes) -> None:
        """Create a key called name with the given attributes."""
        self._crypto_call(
            Opcode.PSA_GENERATE_KEY, {"key_name": name},
            attributes=attributes, needs_attributes=True,
        )

    def psa_destroy_key(self, name: str) -> None:
        """Destroy the key called name."""
        self._crypto_call(Opcode.PSA_DESTROY_KEY, {"key_name": name})

    def psa_import_key(self, name: str, attributes: KeyAttributes, data: bytes) -> None:
        """Import key material under name."""
        self._crypto_call(
            Opcode.PSA_IMPORT_KEY, {"key_name": name, "data": bytes(data)},
            attributes=attributes, needs_attributes=True,
        )

    def psa_export_key(self, name: str) -> bytes:
        """Export the key material of a key."""
        result = self._crypto_call(Opcode.PSA_EXPORT_KEY, {"key_name": name})
        return _bytes_field(result, "data")

    def psa_export_public_key(self, name: str) -> bytes:
        """Export the public part of a key pair."""
        result = self._crypto_call(Opcode.PSA_EXPORT_PUBLIC_KEY, {"key_name": name})
        return _bytes_field(result, "data")

    def psa_hash_compute(self, message: bytes, alg: HashAlgorithm) -> bytes:
        """Hash message with alg."""
        result = self._crypto_call(
            Opcode.PSA_HASH_COMPUTE, {"input": bytes(message)}, algorithm=alg, family="hash",
        )
        return _bytes_field(result, "hash")

    def psa_sign_message(
        self, key_name: str, message: bytes, alg: AsymmetricSignatureAlgorithm,
    ) -> bytes:
        """Sign message with key_name, returning the signature."""
        result = self._crypto_call(
            Opcode.PSA_SIGN_MESSAGE,
            {"key_name": key_name, "message": bytes(message)},
            algorithm=alg, family="asymmetric_signature",
        )
        return _bytes_field(result, "signature")

    def psa_sign_hash(
        self, key_name: str, hash: bytes, alg: AsymmetricSignatureAlgorithm,
    ) -> bytes:
        """Sign a precomputed hash with key_name, returning the signature."""
        result = self._crypto_call(
            Opcode.PSA_SIGN_HASH,
            {"key_name": key_name, "hash": bytes(hash)},
            algorithm=alg, family="asymmetric_signature",
        )
        return _bytes_field(result, "signature")

    def psa_verify_message(
        self, key_name: str, message: bytes, signature: bytes, alg: AsymmetricSignatureAlgorithm,
    ) -> None:
        """
        Verify a signature of message.

        Raises:
            ProviderError: With PSA_ERROR_INVALID_SIGNATURE if it does not verify
        """
        self._crypto_call(
            Opcode.PSA_VERIFY_MESSAGE,
            {"key_name": key_name, "message": bytes(message), "signature": bytes(signature)},
            algorithm=alg, family="asymmetric_signature",
        )

    def psa_verify_hash(
        self, key_name: str, hash: bytes, signature: bytes, alg: AsymmetricSignatureAlgorithm,
    ) -> None:
        """Verify a signature of a precomputed hash."""
        self._crypto_call(
            Opcode.PSA_VERIFY_HASH,
            {"key_name": key_name, "hash": bytes(hash), "signature": bytes(signature)},
            algorithm=alg, family="asymmetric_signature",
        )

    def psa_cipher_encrypt(self, key_name: str, alg: CipherAlgorithm, plaintext: bytes) -> bytes:
        """Encrypt with a symmetric cipher. The IV is generated by the service and prepended."""
        result = self._crypto_call(
            Opcode.PSA_CIPHER_ENCRYPT,
            {"key_name": key_name, "plaintext": bytes(plaintext)},
            algorithm=alg, family="cipher",
        )
        return _bytes_field(result, "ciphertext")

    def psa_cipher_decrypt(self, key_name: str, alg: CipherAlgorithm, ciphertext: bytes) -> bytes:
        """Decrypt IV-prefixed ciphertext with a symmetric cipher."""
        result = self._crypto_call(
            Opcode.PSA_CIPHER_DECRYPT,
            {"key_name": key_name, "ciphertext": bytes(ciphertext)},
            algorithm=alg, family="cipher",
        )
        return _bytes_field(result, "plaintext")

    def psa_aead_encrypt(
        self,
        key_name: str,
        alg: AeadAlgorithm,
        nonce: bytes,
        additional_data: bytes,
        plaintext: bytes,
    ) -> bytes:
        """Authenticated encryption; the tag is appended to the ciphertext."""
        result = self._crypto_call(
            Opcode.PSA_AEAD_ENCRYPT,
            {
                "key_name": key_name,
                "nonce": bytes(nonce),
                "additional_data": bytes(additional_data),
                "plaintext": bytes(plaintext),
            },
            algorithm=alg, family="aead",
        )
        return _bytes_field(result, "ciphertext")

    def psa_aead_decrypt(
        self,
        key_name: str,
        alg: AeadAlgorithm,
        nonce: bytes,
        additional_data: bytes,
        ciphertext: bytes,
    ) -> bytes:
        """Authenticated decryption of tagged ciphertext."""
        result = self._crypto_call(
            Opcode.PSA_AEAD_DECRYPT,
            {
                "key_name": key_name,
                "nonce": bytes(nonce),
                "additional_data": bytes(additional_data),
                "ciphertext": bytes(ciphertext),
            },
            algorithm=alg, family="aead",
        )
        return _bytes_field(result, "plaintext")

    def psa_generate_random(self, size: int) -> bytes:
        """Generate size random bytes on the provider."""
        result = self._crypto_call(Opcode.PSA_GENERATE_RANDOM, {"size": int(size)})
        return _bytes_field(result, "random_bytes")

    def psa_mac_compute(self, key_name: str, alg: MacAlgorithm, input: bytes) -> bytes:
        result = self._crypto_call(
            Opcode.PSA_MAC_COMPUTE,
            {"key_name": key_name, "input": bytes(input)},
            algorithm=alg, family="mac",
        )
        return _bytes_field(result, "mac")

    def psa_mac_verify(self, key_name: str, alg: MacAlgorithm, input: bytes, mac: bytes) -> None:
        self._crypto_call(
            Opcode.PSA_MAC_VERIFY,
            {"key_name": key_name, "input": bytes(input), "mac": bytes(mac)},
            algorithm=alg, family="mac",
        )

    def psa_raw_key_agreement(
        self, alg: KeyAgreementRaw, private_key_name: str, peer_key: bytes,
    ) -> bytes:
        """Run a raw key agreement and return the shared secret."""
        result = self._crypto_call(
            Opcode.PSA_RAW_KEY_AGREEMENT,
            {"private_key_name": private_key_name, "peer_key": bytes(peer_key)},
            algorithm=alg, family="key_agreement_raw",
        )
        return _bytes_field(result, "shared_secret")

    def psa_asymmetric_encrypt(
        self,
        key_name: str,
        alg: AsymmetricEncryptionAlgorithm,
        salt: Optional[bytes],
        plaintext: bytes,
    ) -> bytes:
        result = self._crypto_call(
            Opcode.PSA_ASYMMETRIC_ENCRYPT,
            {"key_name": key_name, "salt": bytes(salt or b""), "plaintext": bytes(plaintext)},
            algorithm=alg, family="asymmetric_encryption",
        )
        return _bytes_field(result, "ciphertext")

    def psa_asymmetric_decrypt(
        self,
        key_name: str,
        alg: AsymmetricEncryptionAlgorithm,
        salt: Optional[bytes],
        ciphertext: bytes,
    ) -> bytes:
        result = self._crypto_call(
            Opcode.PSA_ASYMMETRIC_DECRYPT,
            {"key_name": key_name, "salt": bytes(salt or b""), "ciphertext": bytes(ciphertext)},
            algorithm=alg, family="asymmetric_encryption",
        )
        return _bytes_field(result, "plaintext")


def init_client(config: Any = None) -> BasicClient:
    """
    Create a client and negotiate its provider and authenticator.

    Args:
        config: None for defaults, an application name for a Direct
            authenticator, or a DefaultConfig / AppNameConfig / ExplicitConfig

    Returns:
        A ready BasicClient
    """
    return BasicClient(config)
