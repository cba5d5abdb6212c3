"""
Tool: Message Encryption Pipeline
Purpose: Turn a payload into an aes128gcm body for one subscription

Pipeline (all inside one call, nothing kept afterwards):
    fresh ephemeral key + salt -> ECDH -> HKDF chain -> AES-128-GCM -> framing

``decrypt_message`` is the receiving browser's half of the scheme, used for
diagnostics and to check bodies in tests.

Usage:
    from pushwire.push.message import encrypt_message

    message = encrypt_message(subscription, payload)
    await dispatch(subscription.endpoint, message.body, authorization)
"""

import json
import os
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec

from pushwire.crypto.agreement import (
    derive_shared_secret,
    export_public_key,
    generate_ephemeral_key,
    load_public_key,
)
from pushwire.crypto.derivation import SALT_LENGTH, derive_keys
from pushwire.crypto.encryption import DEFAULT_RECORD_SIZE, decrypt_record, encrypt_record
from pushwire.crypto.framing import frame_body, parse_body
from pushwire.errors import PushCryptoError
from pushwire.models import NotificationPayload, Subscription


PayloadLike = NotificationPayload | dict[str, Any] | str | bytes


@dataclass(frozen=True)
class EncryptedMessage:
    """A framed aes128gcm body ready to POST."""

    body: bytes
    salt: bytes
    sender_public_key: bytes

    @property
    def content_length(self) -> int:
        return len(self.body)


def payload_to_bytes(payload: PayloadLike) -> bytes:
    """Serialize a payload the same way regardless of the form it arrives in."""
    if isinstance(payload, NotificationPayload):
        return payload.to_bytes()
    if isinstance(payload, dict):
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


def encrypt_message(
    subscription: Subscription,
    payload: PayloadLike,
    sender_key: ec.EllipticCurvePrivateKey | None = None,
    salt: bytes | None = None,
    record_size: int = DEFAULT_RECORD_SIZE,
) -> EncryptedMessage:
    """
    Encrypt a payload so only ``subscription``'s browser can read it.

    Args:
        subscription: Target subscription (keys are validated here)
        payload: NotificationPayload, dict, str or bytes
        sender_key: Fixed ephemeral key, for known-answer tests only
        salt: Fixed 16-byte salt, for known-answer tests only
        record_size: Record size written into the header

    Returns:
        EncryptedMessage whose body is 86 + len(plaintext) + 17 bytes

    Raises:
        MalformedSubscriptionError: If the subscription keys are unusable
        PayloadTooLargeError: If the payload does not fit one record
    """
    subscriber_public_key = subscription.public_key_bytes()
    auth_secret = subscription.auth_secret_bytes()

    if sender_key is None:
        sender_key = generate_ephemeral_key()
    if salt is None:
        salt = os.urandom(SALT_LENGTH)

    sender_public_key = export_public_key(sender_key)
    shared_secret = derive_shared_secret(
        sender_key,
        load_public_key(subscriber_public_key, "p256dh"),
    )
    keys = derive_keys(
        shared_secret,
        auth_secret,
        salt,
        subscriber_public_key,
        sender_public_key,
    )

    ciphertext = encrypt_record(payload_to_bytes(payload), keys.cek, keys.nonce, record_size)
    return EncryptedMessage(
        body=frame_body(salt, sender_public_key, ciphertext, record_size),
        salt=salt,
        sender_public_key=sender_public_key,
    )


def decrypt_message(
    body: bytes,
    subscriber_key: ec.EllipticCurvePrivateKey,
    auth_secret: bytes,
) -> bytes:
    """
    Decrypt an aes128gcm body as the subscribing browser would.

    Raises:
        PushCryptoError: On malformed framing or padding
        cryptography.exceptions.InvalidTag: If the keys do not match
    """
    framed = parse_body(body)
    if len(framed.ciphertext) > framed.record_size:
        raise PushCryptoError(
            f"Ciphertext of {len(framed.ciphertext)} bytes exceeds record size {framed.record_size}"
        )

    shared_secret = derive_shared_secret(
        subscriber_key,
        load_public_key(framed.key_id, "key id"),
    )
    keys = derive_keys(
        shared_secret,
        auth_secret,
        framed.salt,
        export_public_key(subscriber_key),
        framed.key_id,
    )
    return decrypt_record(framed.ciphertext, keys.cek, keys.nonce)


__all__ = ["EncryptedMessage", "decrypt_message", "encrypt_message", "payload_to_bytes"]
