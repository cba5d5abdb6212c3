"""
Elliptic-curve Diffie-Hellman on P-256.

Each message gets its own ephemeral key pair; its public point goes into the
aes128gcm header as the key id and into the HKDF context, and the private half
is dropped as soon as the shared secret is computed.
"""

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from pushwire.errors import MalformedSubscriptionError


CURVE = ec.SECP256R1()

# Uncompressed SEC1 point: 0x04 || X(32) || Y(32)
PUBLIC_KEY_LENGTH = 65
UNCOMPRESSED_POINT_MARKER = 0x04
SHARED_SECRET_LENGTH = 32


def generate_ephemeral_key() -> ec.EllipticCurvePrivateKey:
    """Generate a fresh P-256 key pair for a single message."""
    return ec.generate_private_key(CURVE)


def validate_public_key_bytes(raw: bytes, label: str = "public key") -> bytes:
    """
    Check that ``raw`` is a 65-byte uncompressed P-256 point.

    Raises:
        MalformedSubscriptionError: On a wrong length or point marker
    """
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise MalformedSubscriptionError(
            f"{label} must be {PUBLIC_KEY_LENGTH} bytes, got {len(raw)}"
        )
    if raw[0] != UNCOMPRESSED_POINT_MARKER:
        raise MalformedSubscriptionError(
            f"{label} must be an uncompressed point (0x04 prefix), got 0x{raw[0]:02x}"
        )
    return raw


def load_public_key(raw: bytes, label: str = "public key") -> ec.EllipticCurvePublicKey:
    """
    Load a raw uncompressed point as a P-256 public key.

    Raises:
        MalformedSubscriptionError: If the bytes are not a point on the curve
    """
    validate_public_key_bytes(raw, label)
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, raw)
    except ValueError as e:
        raise MalformedSubscriptionError(f"{label} is not a valid P-256 point: {e}") from e


def export_public_key(key: ec.EllipticCurvePrivateKey | ec.EllipticCurvePublicKey) -> bytes:
    """Return the uncompressed point (65 bytes) for a private or public key."""
    if isinstance(key, ec.EllipticCurvePrivateKey):
        key = key.public_key()
    return key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


def derive_shared_secret(
    private_key: ec.EllipticCurvePrivateKey,
    peer_public_key: ec.EllipticCurvePublicKey,
) -> bytes:
    """Run ECDH and return the 32-byte shared secret (the X coordinate)."""
    secret = private_key.exchange(ec.ECDH(), peer_public_key)
    if len(secret) != SHARED_SECRET_LENGTH:
        raise ValueError(f"ECDH produced {len(secret)} bytes, expected {SHARED_SECRET_LENGTH}")
    return secret


__all__ = [
    "CURVE",
    "PUBLIC_KEY_LENGTH",
    "derive_shared_secret",
    "export_public_key",
    "generate_ephemeral_key",
    "load_public_key",
    "validate_public_key_bytes",
]
