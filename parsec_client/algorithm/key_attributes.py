"""
Key attributes supplied when generating or importing a key.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from typing import Optional

from parsec_client.algorithm.algorithms import Algorithm


class KeyTypeKind(Enum):
    RAW_DATA = "raw_data"
    HMAC = "hmac"
    DERIVE = "derive"
    AES = "aes"
    DES = "des"
    CAMELLIA = "camellia"
    ARC4 = "arc4"
    CHACHA20 = "chacha20"
    RSA_PUBLIC_KEY = "rsa_public_key"
    RSA_KEY_PAIR = "rsa_key_pair"
    ECC_KEY_PAIR = "ecc_key_pair"
    ECC_PUBLIC_KEY = "ecc_public_key"
    DH_KEY_PAIR = "dh_key_pair"
    DH_PUBLIC_KEY = "dh_public_key"

    @property
    def needs_curve(self) -> bool:
        return self in (KeyTypeKind.ECC_KEY_PAIR, KeyTypeKind.ECC_PUBLIC_KEY)

    @property
    def needs_group(self) -> bool:
        return self in (KeyTypeKind.DH_KEY_PAIR, KeyTypeKind.DH_PUBLIC_KEY)


class EccFamily(IntEnum):
    NONE = 0
    SECP_K1 = 1
    SECP_R1 = 2
    SECP_R2 = 3
    SECT_K1 = 4
    SECT_R1 = 5
    SECT_R2 = 6
    BRAINPOOL_P_R1 = 7
    FRP = 8
    MONTGOMERY = 9


class DhFamily(IntEnum):
    RFC7919 = 0


@dataclass(frozen=True, slots=True)
class KeyType:
    """Key type, with the curve or group family for ECC and DH keys."""

    kind: KeyTypeKind
    curve_family: Optional[EccFamily] = None
    group_family: Optional[DhFamily] = None

    @classmethod
    def of(cls, kind: KeyTypeKind) -> KeyType:
        return cls(kind)

    @classmethod
    def ecc_key_pair(cls, curve_family: EccFamily) -> KeyType:
        return cls(KeyTypeKind.ECC_KEY_PAIR, curve_family=curve_family)

    @classmethod
    def ecc_public_key(cls, curve_family: EccFamily) -> KeyType:
        return cls(KeyTypeKind.ECC_PUBLIC_KEY, curve_family=curve_family)

    @classmethod
    def dh_key_pair(cls, group_family: DhFamily = DhFamily.RFC7919) -> KeyType:
        return cls(KeyTypeKind.DH_KEY_PAIR, group_family=group_family)


@dataclass(frozen=True, slots=True)
class UsageFlags:
    """What the service is allowed to do with a key."""

    export: bool = False
    copy: bool = False
    cache: bool = False
    encrypt: bool = False
    decrypt: bool = False
    sign_message: bool = False
    verify_message: bool = False
    sign_hash: bool = False
    verify_hash: bool = False
    derive: bool = False

    def to_wire(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True, slots=True)
class KeyPolicy:
    usage_flags: UsageFlags = field(default_factory=UsageFlags)
    permitted_algorithm: Optional[Algorithm] = None


@dataclass(frozen=True, slots=True)
class KeyAttributes:
    """
    Attributes of a key held by the service.

    Attributes:
        key_type: Type of key (and curve/group where relevant)
        bits: Key size in bits
        policy: Usage flags and permitted algorithm
    """

    key_type: KeyType
    bits: int
    policy: KeyPolicy = field(default_factory=KeyPolicy)
