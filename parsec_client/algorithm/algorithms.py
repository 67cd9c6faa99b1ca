"""
Algorithm Descriptors
=====================

Immutable descriptions of the cryptographic algorithms a caller can
request. They carry no behaviour of their own: the service runs the
algorithm, the encoder turns the descriptor into wire form.

Families:
    - Hash: HashAlgorithm
    - Signature: AsymmetricSignatureAlgorithm
    - Symmetric cipher: CipherAlgorithm
    - Authenticated encryption: AeadAlgorithm
    - MAC: MacAlgorithm
    - Raw key agreement: KeyAgreementRaw
    - Asymmetric encryption: AsymmetricEncryptionAlgorithm
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union


class HashAlgorithm(IntEnum):
    """Hash algorithms. NONE is never valid on the wire."""
    NONE = 0
    MD2 = 1
    MD4 = 2
    MD5 = 3
    RIPEMD160 = 4
    SHA_1 = 5
    SHA_224 = 6
    SHA_256 = 7
    SHA_384 = 8
    SHA_512 = 9
    SHA_512_224 = 10
    SHA_512_256 = 11
    SHA3_224 = 12
    SHA3_256 = 13
    SHA3_384 = 14
    SHA3_512 = 15


class SignHash(Enum):
    """Wildcard hash for signature policies that accept any hash."""
    ANY = "any"


SignHashType = Union[HashAlgorithm, SignHash]


class SignatureKind(Enum):
    RSA_PKCS1V15_SIGN = "rsa_pkcs1v15_sign"
    RSA_PKCS1V15_SIGN_RAW = "rsa_pkcs1v15_sign_raw"
    RSA_PSS = "rsa_pss"
    ECDSA = "ecdsa"
    ECDSA_ANY = "ecdsa_any"
    DETERMINISTIC_ECDSA = "deterministic_ecdsa"
    PURE_EDDSA = "pure_eddsa"
    ED25519PH = "ed25519ph"
    ED448PH = "ed448ph"

    @property
    def needs_hash(self) -> bool:
        return self in (
            SignatureKind.RSA_PKCS1V15_SIGN,
            SignatureKind.RSA_PSS,
            SignatureKind.ECDSA,
            SignatureKind.DETERMINISTIC_ECDSA,
        )


@dataclass(frozen=True, slots=True)
class AsymmetricSignatureAlgorithm:
    """
    Asymmetric signature algorithm.

    Use the constructors below rather than building instances directly.
    """

    kind: SignatureKind
    hash_alg: Optional[SignHashType] = None

    @classmethod
    def rsa_pkcs1v15_sign(cls, hash_alg: SignHashType) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.RSA_PKCS1V15_SIGN, hash_alg)

    @classmethod
    def rsa_pkcs1v15_sign_raw(cls) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.RSA_PKCS1V15_SIGN_RAW)

    @classmethod
    def rsa_pss(cls, hash_alg: SignHashType) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.RSA_PSS, hash_alg)

    @classmethod
    def ecdsa(cls, hash_alg: SignHashType) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.ECDSA, hash_alg)

    @classmethod
    def ecdsa_any(cls) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.ECDSA_ANY)

    @classmethod
    def deterministic_ecdsa(cls, hash_alg: SignHashType) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.DETERMINISTIC_ECDSA, hash_alg)

    @classmethod
    def pure_eddsa(cls) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.PURE_EDDSA)

    @classmethod
    def ed25519ph(cls) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.ED25519PH)

    @classmethod
    def ed448ph(cls) -> AsymmetricSignatureAlgorithm:
        return cls(SignatureKind.ED448PH)


class CipherAlgorithm(IntEnum):
    """Unauthenticated symmetric cipher modes."""
    NONE = 0
    STREAM_CIPHER = 1
    CTR = 2
    CFB = 3
    OFB = 4
    XTS = 5
    ECB_NO_PADDING = 6
    CBC_NO_PADDING = 7
    CBC_PKCS7 = 8


class AeadBase(IntEnum):
    """AEAD constructions."""
    NONE = 0
    CCM = 1
    GCM = 2
    CHACHA20_POLY1305 = 3


@dataclass(frozen=True, slots=True)
class AeadAlgorithm:
    """
    AEAD algorithm, with the default tag length or a shortened one.

    Attributes:
        base: The AEAD construction
        tag_length: Shortened tag length in bytes, None for the default
    """

    base: AeadBase
    tag_length: Optional[int] = None

    @classmethod
    def default_tag(cls, base: AeadBase) -> AeadAlgorithm:
        return cls(base)

    @classmethod
    def shortened_tag(cls, base: AeadBase, tag_length: int) -> AeadAlgorithm:
        return cls(base, tag_length)


class MacKind(Enum):
    HMAC = "hmac"
    CBC_MAC = "cbc_mac"
    CMAC = "cmac"


@dataclass(frozen=True, slots=True)
class MacAlgorithm:
    """
    MAC algorithm, full length or truncated.

    Attributes:
        kind: HMAC, CBC-MAC or CMAC
        hash_alg: Hash for HMAC, unused otherwise
        truncated_length: Truncated MAC length in bytes, None for full length
    """

    kind: MacKind
    hash_alg: Optional[HashAlgorithm] = None
    truncated_length: Optional[int] = None

    @classmethod
    def hmac(cls, hash_alg: HashAlgorithm) -> MacAlgorithm:
        return cls(MacKind.HMAC, hash_alg)

    @classmethod
    def cbc_mac(cls) -> MacAlgorithm:
        return cls(MacKind.CBC_MAC)

    @classmethod
    def cmac(cls) -> MacAlgorithm:
        return cls(MacKind.CMAC)

    def truncated(self, length: int) -> MacAlgorithm:
        """Return a copy of this MAC truncated to length bytes."""
        return MacAlgorithm(self.kind, self.hash_alg, length)


class KeyAgreementRaw(IntEnum):
    """Raw key agreement algorithms."""
    NONE = 0
    FFDH = 1
    ECDH = 2


class AsymmetricEncryptionKind(Enum):
    RSA_PKCS1V15_CRYPT = "rsa_pkcs1v15_crypt"
    RSA_OAEP = "rsa_oaep"


@dataclass(frozen=True, slots=True)
class AsymmetricEncryptionAlgorithm:
    """Asymmetric encryption algorithm. RSA-OAEP carries a hash."""

    kind: AsymmetricEncryptionKind
    hash_alg: Optional[HashAlgorithm] = None

    @classmethod
    def rsa_pkcs1v15_crypt(cls) -> AsymmetricEncryptionAlgorithm:
        return cls(AsymmetricEncryptionKind.RSA_PKCS1V15_CRYPT)

    @classmethod
    def rsa_oaep(cls, hash_alg: HashAlgorithm) -> AsymmetricEncryptionAlgorithm:
        return cls(AsymmetricEncryptionKind.RSA_OAEP, hash_alg)


Algorithm = Union[
    HashAlgorithm,
    AsymmetricSignatureAlgorithm,
    CipherAlgorithm,
    AeadAlgorithm,
    MacAlgorithm,
    KeyAgreementRaw,
    AsymmetricEncryptionAlgorithm,
]
