"""
HKDF chain turning an ECDH secret into the content-encryption key and nonce.

The salt positions swap between the two layers:

    PRK   = HKDF(ikm=ecdh_secret, salt=auth_secret,  info="Content-Encoding: auth\\0")
    CEK   = HKDF(ikm=PRK,         salt=message_salt, info="Content-Encoding: aes128gcm\\0" || context)
    NONCE = HKDF(ikm=PRK,         salt=message_salt, info="Content-Encoding: nonce\\0"     || context)

The receiving browser runs the identical chain, so the info strings (with
their NUL terminators) and the context layout must match byte for byte.
"""

import struct
from dataclasses import dataclass

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from pushwire.crypto.agreement import PUBLIC_KEY_LENGTH, SHARED_SECRET_LENGTH, validate_public_key_bytes
from pushwire.errors import MalformedSubscriptionError


AUTH_INFO = b"Content-Encoding: auth\x00"
CEK_INFO = b"Content-Encoding: aes128gcm\x00"
NONCE_INFO = b"Content-Encoding: nonce\x00"
CURVE_LABEL = b"P-256\x00"

AUTH_SECRET_LENGTH = 16
SALT_LENGTH = 16
PRK_LENGTH = 32
CEK_LENGTH = 16
NONCE_LENGTH = 12


@dataclass(frozen=True)
class DerivedKeys:
    """Output of one run of the derivation chain. Never reused across messages."""

    prk: bytes
    cek: bytes
    nonce: bytes


def hkdf_sha256(ikm: bytes, salt: bytes, info: bytes, length: int) -> bytes:
    """Full HKDF (extract + expand) with SHA-256."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
    )
    return hkdf.derive(ikm)


def derive_prk(shared_secret: bytes, auth_secret: bytes) -> bytes:
    """First layer: mix the subscriber's auth secret into the ECDH output."""
    if len(shared_secret) != SHARED_SECRET_LENGTH:
        raise ValueError(f"shared secret must be {SHARED_SECRET_LENGTH} bytes, got {len(shared_secret)}")
    if len(auth_secret) != AUTH_SECRET_LENGTH:
        raise MalformedSubscriptionError(
            f"auth secret must be {AUTH_SECRET_LENGTH} bytes, got {len(auth_secret)}"
        )
    return hkdf_sha256(shared_secret, auth_secret, AUTH_INFO, PRK_LENGTH)


def build_context(subscriber_public_key: bytes, sender_public_key: bytes) -> bytes:
    """
    Build the key-derivation context.

    Layout: "P-256\\0" || 0x00 || 65 || subscriber key || 0x00 || 65 || sender key,
    i.e. each key is prefixed by its length as a 16-bit big-endian integer.
    """
    validate_public_key_bytes(subscriber_public_key, "subscriber public key")
    validate_public_key_bytes(sender_public_key, "sender public key")
    return b"".join(
        [
            CURVE_LABEL,
            struct.pack("!H", PUBLIC_KEY_LENGTH),
            subscriber_public_key,
            struct.pack("!H", PUBLIC_KEY_LENGTH),
            sender_public_key,
        ]
    )


def derive_cek(prk: bytes, salt: bytes, context: bytes) -> bytes:
    cek = hkdf_sha256(prk, salt, CEK_INFO + context, CEK_LENGTH)
    if len(cek) != CEK_LENGTH:
        raise ValueError(f"CEK must be {CEK_LENGTH} bytes, got {len(cek)}")
    return cek


def derive_nonce(prk: bytes, salt: bytes, context: bytes) -> bytes:
    nonce = hkdf_sha256(prk, salt, NONCE_INFO + context, NONCE_LENGTH)
    if len(nonce) != NONCE_LENGTH:
        raise ValueError(f"nonce must be {NONCE_LENGTH} bytes, got {len(nonce)}")
    return nonce


def derive_keys(
    shared_secret: bytes,
    auth_secret: bytes,
    salt: bytes,
    subscriber_public_key: bytes,
    sender_public_key: bytes,
) -> DerivedKeys:
    """
    Run the whole chain for one message.

    Args:
        shared_secret: 32-byte ECDH output
        auth_secret: Subscriber's 16-byte auth secret
        salt: 16 random bytes, also written into the record header
        subscriber_public_key: Subscriber's 65-byte p256dh point
        sender_public_key: Ephemeral 65-byte point, the header's key id

    Returns:
        DerivedKeys with prk (32), cek (16) and nonce (12)
    """
    if len(salt) != SALT_LENGTH:
        raise ValueError(f"salt must be {SALT_LENGTH} bytes, got {len(salt)}")

    prk = derive_prk(shared_secret, auth_secret)
    context = build_context(subscriber_public_key, sender_public_key)
    return DerivedKeys(
        prk=prk,
        cek=derive_cek(prk, salt, context),
        nonce=derive_nonce(prk, salt, context),
    )


__all__ = [
    "AUTH_SECRET_LENGTH",
    "CEK_LENGTH",
    "DerivedKeys",
    "NONCE_LENGTH",
    "SALT_LENGTH",
    "build_context",
    "derive_cek",
    "derive_keys",
    "derive_nonce",
    "derive_prk",
    "hkdf_sha256",
]
