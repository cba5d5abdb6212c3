"""
Single-record AES-128-GCM encryption for the aes128gcm content coding.

The plaintext is followed by one delimiter byte (0x02, "last record") and no
further padding. Output is ciphertext || 16-byte tag; no associated data.
"""

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from pushwire.crypto.derivation import CEK_LENGTH, NONCE_LENGTH
from pushwire.errors import PayloadTooLargeError, PushCryptoError


LAST_RECORD_DELIMITER = 0x02
TAG_LENGTH = 16
DEFAULT_RECORD_SIZE = 4096

# One record holds plaintext + delimiter + tag
MAX_PLAINTEXT_LENGTH = DEFAULT_RECORD_SIZE - 1 - TAG_LENGTH


def pad_payload(plaintext: bytes) -> bytes:
    return plaintext + bytes([LAST_RECORD_DELIMITER])


def unpad_payload(padded: bytes) -> bytes:
    """
    Strip trailing zero padding and the delimiter from a decrypted record.

    Raises:
        PushCryptoError: If no delimiter is present or it is not the
            last-record marker
    """
    stripped = padded.rstrip(b"\x00")
    if not stripped:
        raise PushCryptoError("Record has no padding delimiter")
    if stripped[-1] != LAST_RECORD_DELIMITER:
        raise PushCryptoError(f"Unexpected padding delimiter 0x{stripped[-1]:02x}")
    return stripped[:-1]


def _check_key_and_nonce(cek: bytes, nonce: bytes) -> None:
    if len(cek) != CEK_LENGTH:
        raise ValueError(f"CEK must be {CEK_LENGTH} bytes, got {len(cek)}")
    if len(nonce) != NONCE_LENGTH:
        raise ValueError(f"nonce must be {NONCE_LENGTH} bytes, got {len(nonce)}")


def encrypt_record(
    plaintext: bytes,
    cek: bytes,
    nonce: bytes,
    record_size: int = DEFAULT_RECORD_SIZE,
) -> bytes:
    """
    Pad and encrypt a payload as a single final record.

    Returns:
        Ciphertext followed by the 16-byte GCM tag
        (``len(plaintext) + 1 + 16`` bytes)

    Raises:
        PayloadTooLargeError: If the record would exceed ``record_size``
    """
    _check_key_and_nonce(cek, nonce)

    max_plaintext = record_size - 1 - TAG_LENGTH
    if len(plaintext) > max_plaintext:
        raise PayloadTooLargeError(
            f"Payload is {len(plaintext)} bytes, a single record holds at most {max_plaintext}"
        )

    return AESGCM(cek).encrypt(nonce, pad_payload(plaintext), None)


def decrypt_record(ciphertext: bytes, cek: bytes, nonce: bytes) -> bytes:
    """
    Decrypt a single record and remove its padding.

    Raises:
        cryptography.exceptions.InvalidTag: If authentication fails
        PushCryptoError: If the padding is malformed
    """
    _check_key_and_nonce(cek, nonce)
    if len(ciphertext) < TAG_LENGTH + 1:
        raise PushCryptoError(f"Record of {len(ciphertext)} bytes is shorter than tag + delimiter")
    return unpad_payload(AESGCM(cek).decrypt(nonce, ciphertext, None))


__all__ = [
    "DEFAULT_RECORD_SIZE",
    "LAST_RECORD_DELIMITER",
    "MAX_PLAINTEXT_LENGTH",
    "TAG_LENGTH",
    "decrypt_record",
    "encrypt_record",
    "pad_payload",
    "unpad_payload",
]
