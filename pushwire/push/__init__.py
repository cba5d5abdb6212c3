"""Push notification delivery components."""

from pushwire.push.web_push import send_push
from pushwire.push.message import (
    EncryptedMessage,
    decrypt_message,
    encrypt_message,
)
from pushwire.push.vapid import (
    VapidTokenCache,
    build_authorization_header,
    create_vapid_token,
    generate_vapid_keys,
    verify_vapid_token,
)
from pushwire.push.dispatch import (
    build_headers,
    dispatch,
)

__all__ = [
    "send_push",
    "EncryptedMessage",
    "decrypt_message",
    "encrypt_message",
    "VapidTokenCache",
    "build_authorization_header",
    "create_vapid_token",
    "generate_vapid_keys",
    "verify_vapid_token",
    "build_headers",
    "dispatch",
]
