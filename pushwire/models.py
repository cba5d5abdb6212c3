"""
Tool: Push Delivery Models
Purpose: Data structures passed into and out of the delivery engine

Usage:
    from pushwire.models import (
        Subscription,
        NotificationPayload,
        VapidKeys,
        DeliveryResult,
        Urgency,
    )
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from cryptography.hazmat.primitives.asymmetric import ec

from pushwire.crypto.agreement import CURVE, export_public_key, load_public_key
from pushwire.crypto.derivation import AUTH_SECRET_LENGTH
from pushwire.crypto.encoding import b64url_decode, b64url_encode
from pushwire.errors import MalformedSubscriptionError, VapidConfigError


PRIVATE_KEY_LENGTH = 32


class Urgency(str, Enum):
    """RFC 8030 message urgency, sent in the ``Urgency`` header."""

    VERY_LOW = "very-low"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


def endpoint_origin(url: str) -> str | None:
    """Return scheme://host[:port] of an absolute http(s) URL, else None."""
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


@dataclass(frozen=True)
class Subscription:
    """
    Web Push subscription as handed out by the browser.

    Keys stay in their base64-url text form; they are decoded and validated
    on demand so that a bad record fails before any network call.
    """

    endpoint: str
    p256dh: str  # Subscriber public key (uncompressed P-256 point)
    auth: str  # 16-byte auth secret

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subscription":
        """
        Create from either the browser shape ``{endpoint, keys: {p256dh, auth}}``
        or a flat ``{endpoint, p256dh, auth}`` row.
        """
        keys = data.get("keys") or data
        try:
            return cls(
                endpoint=data["endpoint"],
                p256dh=keys["p256dh"],
                auth=keys["auth"],
            )
        except KeyError as e:
            raise MalformedSubscriptionError(f"Subscription is missing field {e.args[0]!r}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to the browser's PushSubscription JSON shape."""
        return {
            "endpoint": self.endpoint,
            "keys": {
                "p256dh": self.p256dh,
                "auth": self.auth,
            },
        }

    @property
    def audience(self) -> str:
        """Origin (scheme + host[:port]) of the push gateway."""
        origin = endpoint_origin(self.endpoint)
        if origin is None:
            raise MalformedSubscriptionError(f"Endpoint is not an absolute http(s) URL: {self.endpoint!r}")
        return origin

    def public_key_bytes(self) -> bytes:
        """Decode ``p256dh`` and check it is a 65-byte uncompressed point."""
        try:
            raw = b64url_decode(self.p256dh)
        except ValueError as e:
            raise MalformedSubscriptionError(f"p256dh is not base64-url: {e}") from e
        load_public_key(raw, "p256dh")
        return raw

    def auth_secret_bytes(self) -> bytes:
        """Decode ``auth`` and check it is exactly 16 bytes."""
        try:
            raw = b64url_decode(self.auth)
        except ValueError as e:
            raise MalformedSubscriptionError(f"auth is not base64-url: {e}") from e
        if len(raw) != AUTH_SECRET_LENGTH:
            raise MalformedSubscriptionError(
                f"auth secret must be {AUTH_SECRET_LENGTH} bytes, got {len(raw)}"
            )
        return raw

    def validate(self) -> None:
        """Raise MalformedSubscriptionError unless every field is usable."""
        self.audience  # raises on a bad endpoint
        self.public_key_bytes()
        self.auth_secret_bytes()


@dataclass
class NotificationPayload:
    """
    Notification content, serialized to compact UTF-8 JSON before encryption.

    Only ``title`` and ``body`` are required; unset optional fields are left
    out of the JSON so the encrypted record stays small.
    """

    title: str
    body: str
    icon: str | None = None
    badge: str | None = None
    tag: str | None = None
    url: str | None = None
    content_id: str | None = None
    type: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"title": self.title, "body": self.body}
        optional = {
            "icon": self.icon,
            "badge": self.badge,
            "tag": self.tag,
            "url": self.url,
            "contentId": self.content_id,
            "type": self.type,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        if self.data:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationPayload":
        return cls(
            title=data["title"],
            body=data["body"],
            icon=data.get("icon"),
            badge=data.get("badge"),
            tag=data.get("tag"),
            url=data.get("url"),
            content_id=data.get("contentId"),
            type=data.get("type"),
            data=data.get("data") or {},
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def to_bytes(self) -> bytes:
        return self.to_json().encode("utf-8")


@dataclass(frozen=True)
class VapidKeys:
    """
    The application server's long-lived VAPID identity.

    Loaded once from configuration and passed explicitly into every send.
    """

    public_key: bytes  # 65-byte uncompressed point
    private_key: bytes  # 32-byte scalar
    subject: str  # mailto: or https: contact

    def __post_init__(self):
        if len(self.private_key) != PRIVATE_KEY_LENGTH:
            raise VapidConfigError(
                f"VAPID private key must be {PRIVATE_KEY_LENGTH} bytes, got {len(self.private_key)}"
            )
        try:
            load_public_key(self.public_key, "VAPID public key")
        except MalformedSubscriptionError as e:
            raise VapidConfigError(str(e)) from e
        if not (self.subject.startswith("mailto:") or self.subject.startswith("https:")):
            raise VapidConfigError(f"VAPID subject must be a mailto: or https: URI, got {self.subject!r}")

    @classmethod
    def from_base64url(cls, public_key: str, private_key: str, subject: str) -> "VapidKeys":
        try:
            return cls(
                public_key=b64url_decode(public_key),
                private_key=b64url_decode(private_key),
                subject=subject,
            )
        except ValueError as e:
            raise VapidConfigError(f"VAPID keys are not base64-url: {e}") from e

    @classmethod
    def generate(cls, subject: str) -> "VapidKeys":
        """Create a throwaway identity (tests, local development)."""
        key = ec.generate_private_key(CURVE)
        return cls(
            public_key=export_public_key(key),
            private_key=key.private_numbers().private_value.to_bytes(PRIVATE_KEY_LENGTH, "big"),
            subject=subject,
        )

    @property
    def public_key_b64(self) -> str:
        """Public key as sent in the ``k=`` parameter and to browsers."""
        return b64url_encode(self.public_key)

    def signing_key(self) -> ec.EllipticCurvePrivateKey:
        """
        Reassemble an ECDSA signing key from the stored scalar and point.

        The point is split into its X/Y halves and combined with the scalar;
        ``cryptography`` checks that the scalar actually produces that point.

        Raises:
            VapidConfigError: If the private and public halves do not match
        """
        public_numbers = ec.EllipticCurvePublicNumbers(
            x=int.from_bytes(self.public_key[1:33], "big"),
            y=int.from_bytes(self.public_key[33:65], "big"),
            curve=CURVE,
        )
        private_numbers = ec.EllipticCurvePrivateNumbers(
            private_value=int.from_bytes(self.private_key, "big"),
            public_numbers=public_numbers,
        )
        try:
            return private_numbers.private_key()
        except ValueError as e:
            raise VapidConfigError(f"VAPID private key does not match public key: {e}") from e

    def __repr__(self) -> str:
        return f"VapidKeys(public_key={self.public_key_b64[:20]}…, subject={self.subject!r})"


@dataclass
class DeliveryResult:
    """Outcome of a single accepted delivery."""

    success: bool
    status_code: int
    endpoint: str
    delivery_id: str = field(default_factory=lambda: DeliveryResult.generate_id())
    location: str | None = None  # Message resource URL returned by the gateway
    sent_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def generate_id() -> str:
        """Generate a new delivery ID."""
        return f"del_{uuid.uuid4().hex[:12]}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status_code": self.status_code,
            "endpoint": self.endpoint,
            "delivery_id": self.delivery_id,
            "location": self.location,
            "sent_at": self.sent_at.isoformat(),
        }


__all__ = [
    "DeliveryResult",
    "endpoint_origin",
    "NotificationPayload",
    "Subscription",
    "Urgency",
    "VapidKeys",
]
