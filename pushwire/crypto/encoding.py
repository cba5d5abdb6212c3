"""
URL-safe base64 without padding, as used by every Web Push key and token.

Browsers hand out ``p256dh``/``auth`` in this form, VAPID keys are stored in
it, and each JWT segment is encoded with it.
"""

import base64


def b64url_encode(data: bytes) -> str:
    """Encode bytes as URL-safe base64 with the ``=`` padding stripped."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str | bytes) -> bytes:
    """
    Decode URL-safe base64, re-adding padding to a multiple of 4.

    Standard-alphabet input (``+`` and ``/``) is accepted as well, since some
    subscription stores round-trip keys through plain base64.

    Raises:
        binascii.Error: If the input is not base64 at all
    """
    if isinstance(text, bytes):
        text = text.decode("ascii")
    text = text.strip().rstrip("=").replace("+", "-").replace("/", "_")
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


__all__ = ["b64url_decode", "b64url_encode"]
