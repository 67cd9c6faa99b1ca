"""
Algorithm Module
================

Algorithm descriptors, key attributes and their wire translation.
"""

from parsec_client.algorithm.algorithms import (
    AeadAlgorithm,
    AeadBase,
    Algorithm,
    AsymmetricEncryptionAlgorithm,
    AsymmetricSignatureAlgorithm,
    CipherAlgorithm,
    HashAlgorithm,
    KeyAgreementRaw,
    MacAlgorithm,
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
from parsec_client.algorithm.encoding import (
    decode_key_attributes,
    encode_algorithm,
    encode_key_attributes,
)

__all__ = [
    "AeadAlgorithm",
    "AeadBase",
    "Algorithm",
    "AsymmetricEncryptionAlgorithm",
    "AsymmetricSignatureAlgorithm",
    "CipherAlgorithm",
    "HashAlgorithm",
    "KeyAgreementRaw",
    "MacAlgorithm",
    "SignHash",
    "DhFamily",
    "EccFamily",
    "KeyAttributes",
    "KeyPolicy",
    "KeyType",
    "KeyTypeKind",
    "UsageFlags",
    "decode_key_attributes",
    "encode_algorithm",
    "encode_key_attributes",
]
