"""
Algorithm Encoding
==================

Translation of algorithm descriptors and key attributes into the plain
mapping form handed to the transport, and back for results that carry
key attributes (ListKeys).

Every malformed descriptor raises AlgorithmEncodingError before anything
is sent to the service.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from parsec_client.algorithm.algorithms import (
    AeadAlgorithm,
    AeadBase,
    Algorithm,
    AsymmetricEncryptionAlgorithm,
    AsymmetricEncryptionKind,
    AsymmetricSignatureAlgorithm,
    CipherAlgorithm,
    HashAlgorithm,
    KeyAgreementRaw,
    MacAlgorithm,
    MacKind,
    SignatureKind,
    SignHash,
)
from parsec_client.algorithm.key_attributes import (
    DhFamily,
    EccFamily,
    KeyAttributes,
    KeyPolicy,
    KeyType,
    KeyTypeKind,
    UsageFlags,
)
from parsec_client.core.errors import AlgorithmEncodingError, ResponseDecodingError


WireForm = Dict[str, Any]
AlgorithmEncoder = Callable[[Algorithm], WireForm]

_MAX_AEAD_TAG_LENGTH = 16


def _hash_to_wire(hash_alg: Any, what: str) -> int:
    if not isinstance(hash_alg, HashAlgorithm):
        raise AlgorithmEncodingError(f"{what} requires a HashAlgorithm, got {hash_alg!r}")
    if hash_alg == HashAlgorithm.NONE:
        raise AlgorithmEncodingError(f"{what} requires a hash algorithm")
    return int(hash_alg)


def _sign_hash_to_wire(hash_alg: Any, what: str) -> Any:
    if hash_alg is SignHash.ANY:
        return SignHash.ANY.value
    return _hash_to_wire(hash_alg, what)


def _encode_signature(alg: AsymmetricSignatureAlgorithm) -> WireForm:
    wire: WireForm = {"family": "asymmetric_signature", "kind": alg.kind.value}
    if alg.kind.needs_hash:
        wire["hash"] = _sign_hash_to_wire(alg.hash_alg, alg.kind.value)
    elif alg.hash_alg is not None:
        raise AlgorithmEncodingError(f"{alg.kind.value} does not take a hash algorithm")
    return wire


def _encode_aead(alg: AeadAlgorithm) -> WireForm:
    if alg.base == AeadBase.NONE:
        raise AlgorithmEncodingError("AEAD algorithm requires a construction")
    wire: WireForm = {"family": "aead", "base": int(alg.base)}
    if alg.tag_length is not None:
        if not 0 < alg.tag_length <= _MAX_AEAD_TAG_LENGTH:
            raise AlgorithmEncodingError(f"Invalid AEAD tag length: {alg.tag_length}")
        wire["tag_length"] = alg.tag_length
    return wire


def _encode_mac(alg: MacAlgorithm) -> WireForm:
    wire: WireForm = {"family": "mac", "kind": alg.kind.value}
    if alg.kind == MacKind.HMAC:
        wire["hash"] = _hash_to_wire(alg.hash_alg, "HMAC")
    elif alg.hash_alg is not None:
        raise AlgorithmEncodingError(f"{alg.kind.value} does not take a hash algorithm")
    if alg.truncated_length is not None:
        if alg.truncated_length <= 0:
            raise AlgorithmEncodingError(f"Invalid truncated MAC length: {alg.truncated_length}")
        wire["truncated_length"] = alg.truncated_length
    return wire


def _encode_asymmetric_encryption(alg: AsymmetricEncryptionAlgorithm) -> WireForm:
    wire: WireForm = {"family": "asymmetric_encryption", "kind": alg.kind.value}
    if alg.kind == AsymmetricEncryptionKind.RSA_OAEP:
        wire["hash"] = _hash_to_wire(alg.hash_alg, "RSA-OAEP")
    elif alg.hash_alg is not None:
        raise AlgorithmEncodingError("RSA PKCS#1 v1.5 encryption does not take a hash algorithm")
    return wire


def encode_algorithm(alg: Algorithm) -> WireForm:
    """
    Translate an algorithm descriptor into wire form.

    Args:
        alg: Any algorithm descriptor

    Returns:
        Mapping understood by the transport codec

    Raises:
        AlgorithmEncodingError: If the descriptor is missing, of an unknown
            type, or internally inconsistent
    """
    if isinstance(alg, HashAlgorithm):
        return {"family": "hash", "hash": _hash_to_wire(alg, "Hash")}
    if isinstance(alg, AsymmetricSignatureAlgorithm):
        return _encode_signature(alg)
    if isinstance(alg, CipherAlgorithm):
        if alg == CipherAlgorithm.NONE:
            raise AlgorithmEncodingError("Cipher algorithm must not be NONE")
        return {"family": "cipher", "cipher": int(alg)}
    if isinstance(alg, AeadAlgorithm):
        return _encode_aead(alg)
    if isinstance(alg, MacAlgorithm):
        return _encode_mac(alg)
    if isinstance(alg, KeyAgreementRaw):
        if alg == KeyAgreementRaw.NONE:
            raise AlgorithmEncodingError("Key agreement algorithm must not be NONE")
        return {"family": "key_agreement_raw", "raw": int(alg)}
    if isinstance(alg, AsymmetricEncryptionAlgorithm):
        return _encode_asymmetric_encryption(alg)
    raise AlgorithmEncodingError(f"Cannot encode algorithm of type {type(alg).__name__}")


def expect_family(wire: WireForm, family: str) -> WireForm:
    """Check an encoded algorithm belongs to the family an operation takes."""
    if wire.get("family") != family:
        raise AlgorithmEncodingError(
            f"Expected a {family} algorithm, got {wire.get('family')!r}"
        )
    return wire


def encode_key_attributes(
    attributes: KeyAttributes,
    encoder: AlgorithmEncoder = encode_algorithm,
) -> WireForm:
    """
    Translate key attributes into wire form.

    Raises:
        AlgorithmEncodingError: If the key type is incomplete, the size is
            invalid or the permitted algorithm cannot be encoded
    """
    if not isinstance(attributes, KeyAttributes):
        raise AlgorithmEncodingError(f"Expected KeyAttributes, got {type(attributes).__name__}")

    key_type = attributes.key_type
    type_wire: WireForm = {"kind": key_type.kind.value}
    if key_type.kind.needs_curve:
        if key_type.curve_family is None or key_type.curve_family == EccFamily.NONE:
            raise AlgorithmEncodingError(f"{key_type.kind.value} requires a curve family")
        type_wire["curve_family"] = int(key_type.curve_family)
    if key_type.kind.needs_group:
        if key_type.group_family is None:
            raise AlgorithmEncodingError(f"{key_type.kind.value} requires a group family")
        type_wire["group_family"] = int(key_type.group_family)

    if attributes.bits < 0:
        raise AlgorithmEncodingError(f"Invalid key size: {attributes.bits}")

    policy = attributes.policy
    permitted: Optional[WireForm] = None
    if policy.permitted_algorithm is not None:
        permitted = encoder(policy.permitted_algorithm)

    return {
        "key_type": type_wire,
        "key_bits": attributes.bits,
        "key_policy": {
            "key_usage_flags": policy.usage_flags.to_wire(),
            "key_algorithm": permitted,
        },
    }


def decode_algorithm(wire: Mapping[str, Any]) -> Algorithm:
    """
    Rebuild an algorithm descriptor from wire form.

    Raises:
        ResponseDecodingError: If the mapping is not a valid encoded algorithm
    """
    try:
        family = wire["family"]
        if family == "hash":
            return HashAlgorithm(wire["hash"])
        if family == "asymmetric_signature":
            kind = SignatureKind(wire["kind"])
            hash_alg: Any = None
            if "hash" in wire:
                raw = wire["hash"]
                hash_alg = SignHash.ANY if raw == SignHash.ANY.value else HashAlgorithm(raw)
            return AsymmetricSignatureAlgorithm(kind, hash_alg)
        if family == "cipher":
            return CipherAlgorithm(wire["cipher"])
        if family == "aead":
            return AeadAlgorithm(AeadBase(wire["base"]), wire.get("tag_length"))
        if family == "mac":
            mac_hash = HashAlgorithm(wire["hash"]) if "hash" in wire else None
            return MacAlgorithm(MacKind(wire["kind"]), mac_hash, wire.get("truncated_length"))
        if family == "key_agreement_raw":
            return KeyAgreementRaw(wire["raw"])
        if family == "asymmetric_encryption":
            enc_hash = HashAlgorithm(wire["hash"]) if "hash" in wire else None
            return AsymmetricEncryptionAlgorithm(AsymmetricEncryptionKind(wire["kind"]), enc_hash)
    except (KeyError, TypeError, ValueError) as e:
        raise ResponseDecodingError(f"Invalid algorithm: {e}") from e
    raise ResponseDecodingError(f"Unknown algorithm family: {family!r}")


def decode_key_attributes(wire: Mapping[str, Any]) -> KeyAttributes:
    """
    Rebuild key attributes from wire form.

    Raises:
        ResponseDecodingError: If the mapping is not valid encoded attributes
    """
    try:
        type_wire = wire["key_type"]
        kind = KeyTypeKind(type_wire["kind"])
        key_type = KeyType(
            kind,
            curve_family=EccFamily(type_wire["curve_family"]) if "curve_family" in type_wire else None,
            group_family=DhFamily(type_wire["group_family"]) if "group_family" in type_wire else None,
        )
        policy_wire = wire.get("key_policy") or {}
        flags = UsageFlags(**{
            name: bool(value)
            for name, value in (policy_wire.get("key_usage_flags") or {}).items()
        })
        permitted_wire = policy_wire.get("key_algorithm")
        permitted = decode_algorithm(permitted_wire) if permitted_wire else None
        return KeyAttributes(
            key_type=key_type,
            bits=int(wire["key_bits"]),
            policy=KeyPolicy(usage_flags=flags, permitted_algorithm=permitted),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ResponseDecodingError(f"Invalid key attributes: {e}") from e
