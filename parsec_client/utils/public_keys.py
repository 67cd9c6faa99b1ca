"""
Exported Public Keys
====================

Conversion of psa_export_public_key() output into `cryptography` public
key objects, so callers can verify signatures or encrypt locally.

Export formats:
    - RSA: DER encoded PKCS#1 RSAPublicKey
    - ECC (Weierstrass curves): uncompressed SEC1 point (0x04 || X || Y)
    - ECC (Montgomery curves): raw 32 / 56 byte public value
"""

from __future__ import annotations

from typing import Final, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, rsa, x448, x25519
from cryptography.hazmat.primitives.serialization import load_der_public_key

from parsec_client.algorithm.key_attributes import EccFamily, KeyAttributes, KeyTypeKind


PublicKey = Union[
    rsa.RSAPublicKey,
    ec.EllipticCurvePublicKey,
    x25519.X25519PublicKey,
    x448.X448PublicKey,
]

# (family, bits) -> curve
_WEIERSTRASS_CURVES: Final[dict[tuple[EccFamily, int], ec.EllipticCurve]] = {
    (EccFamily.SECP_R1, 256): ec.SECP256R1(),
    (EccFamily.SECP_R1, 384): ec.SECP384R1(),
    (EccFamily.SECP_R1, 521): ec.SECP521R1(),
    (EccFamily.SECP_K1, 256): ec.SECP256K1(),
    (EccFamily.BRAINPOOL_P_R1, 256): ec.BrainpoolP256R1(),
    (EccFamily.BRAINPOOL_P_R1, 384): ec.BrainpoolP384R1(),
    (EccFamily.BRAINPOOL_P_R1, 512): ec.BrainpoolP512R1(),
}


class PublicKeyFormatError(ValueError):
    """Raised when exported data cannot be turned into a public key."""
    pass


def _load_rsa(data: bytes) -> rsa.RSAPublicKey:
    key = load_der_public_key(data)
    if not isinstance(key, rsa.RSAPublicKey):
        raise PublicKeyFormatError("Exported data is not an RSA public key")
    return key


def load_public_key(data: bytes, attributes: KeyAttributes) -> PublicKey:
    """
    Load an exported public key.

    Args:
        data: Output of psa_export_public_key()
        attributes: Attributes of the key (from list_keys() or generation)

    Returns:
        A cryptography public key object

    Raises:
        PublicKeyFormatError: If the key type is unsupported or the data is malformed
    """
    kind = attributes.key_type.kind
    try:
        if kind in (KeyTypeKind.RSA_KEY_PAIR, KeyTypeKind.RSA_PUBLIC_KEY):
            return _load_rsa(bytes(data))

        if kind in (KeyTypeKind.ECC_KEY_PAIR, KeyTypeKind.ECC_PUBLIC_KEY):
            family = attributes.key_type.curve_family
            if family == EccFamily.MONTGOMERY:
                if attributes.bits == 255:
                    return x25519.X25519PublicKey.from_public_bytes(bytes(data))
                if attributes.bits == 448:
                    return x448.X448PublicKey.from_public_bytes(bytes(data))
            curve = _WEIERSTRASS_CURVES.get((family, attributes.bits))
            if curve is None:
                raise PublicKeyFormatError(
                    f"Unsupported curve: {family!r} with {attributes.bits} bits"
                )
            return ec.EllipticCurvePublicKey.from_encoded_point(curve, bytes(data))
    except PublicKeyFormatError:
        raise
    except (ValueError, UnsupportedAlgorithm) as e:
        raise PublicKeyFormatError(f"Malformed public key: {e}") from e

    raise PublicKeyFormatError(f"Key type {kind.value} has no public key")
