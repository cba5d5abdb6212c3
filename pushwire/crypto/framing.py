"""
aes128gcm wire framing.

    +-----------+--------+-----------+---------------+----------------------+
    | salt (16) | rs (4) | idlen (1) | keyid (idlen) | ciphertext || tag    |
    +-----------+--------+-----------+---------------+----------------------+

``rs`` is a big-endian uint32 record size, ``keyid`` is the sender's ephemeral
public key. With a 65-byte key id the header is always 86 bytes.
"""

import struct
from dataclasses import dataclass

from pushwire.crypto.agreement import PUBLIC_KEY_LENGTH, validate_public_key_bytes
from pushwire.crypto.derivation import SALT_LENGTH
from pushwire.crypto.encryption import DEFAULT_RECORD_SIZE
from pushwire.errors import PushCryptoError


_HEADER_PREFIX = struct.Struct("!16sIB")
HEADER_LENGTH = _HEADER_PREFIX.size + PUBLIC_KEY_LENGTH  # 86


@dataclass(frozen=True)
class FramedBody:
    """A parsed aes128gcm body."""

    salt: bytes
    record_size: int
    key_id: bytes
    ciphertext: bytes


def build_header(
    salt: bytes,
    sender_public_key: bytes,
    record_size: int = DEFAULT_RECORD_SIZE,
) -> bytes:
    if len(salt) != SALT_LENGTH:
        raise ValueError(f"salt must be {SALT_LENGTH} bytes, got {len(salt)}")
    validate_public_key_bytes(sender_public_key, "sender public key")
    return _HEADER_PREFIX.pack(salt, record_size, PUBLIC_KEY_LENGTH) + sender_public_key


def frame_body(
    salt: bytes,
    sender_public_key: bytes,
    ciphertext: bytes,
    record_size: int = DEFAULT_RECORD_SIZE,
) -> bytes:
    """Return header || ciphertext, the exact request body for the gateway."""
    return build_header(salt, sender_public_key, record_size) + ciphertext


def parse_body(body: bytes) -> FramedBody:
    """
    Split an aes128gcm body into its header fields and ciphertext.

    Raises:
        PushCryptoError: If the body is truncated or the key id is not a
            65-byte point
    """
    if len(body) < _HEADER_PREFIX.size:
        raise PushCryptoError(f"Body of {len(body)} bytes is shorter than the fixed header")

    salt, record_size, id_length = _HEADER_PREFIX.unpack_from(body)
    if id_length != PUBLIC_KEY_LENGTH:
        raise PushCryptoError(f"Key id length must be {PUBLIC_KEY_LENGTH}, got {id_length}")
    if len(body) < HEADER_LENGTH:
        raise PushCryptoError(f"Body of {len(body)} bytes is shorter than the {HEADER_LENGTH}-byte header")

    return FramedBody(
        salt=salt,
        record_size=record_size,
        key_id=body[_HEADER_PREFIX.size:HEADER_LENGTH],
        ciphertext=body[HEADER_LENGTH:],
    )


__all__ = ["FramedBody", "HEADER_LENGTH", "build_header", "frame_body", "parse_body"]
