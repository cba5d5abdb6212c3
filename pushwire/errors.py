"""
Exception taxonomy for push delivery.

Callers only need to catch ``PushError`` to handle everything this package
raises on purpose. Transport errors from httpx and primitive failures from
``cryptography`` are not wrapped.

Usage:
    from pushwire.errors import GatewayRejectedError, SubscriptionGoneError

    try:
        await send_push(keys, subscription, payload)
    except SubscriptionGoneError:
        deactivate(subscription)
    except GatewayRejectedError as e:
        schedule_retry(after=e.retry_after)
"""

from __future__ import annotations


class PushError(Exception):
    """Base class for all push delivery failures."""


class VapidConfigError(PushError):
    """The server key pair or subject is missing or malformed."""


class MalformedSubscriptionError(PushError):
    """A subscription's endpoint or key material cannot be used."""


class PushCryptoError(PushError):
    """Framing or padding of an encrypted record is invalid."""


class PayloadTooLargeError(PushCryptoError):
    """The plaintext does not fit into a single record."""


class GatewayRejectedError(PushError):
    """
    The push gateway answered with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the gateway
        body: Response text (may be empty)
        endpoint: Subscription endpoint the request was sent to
        retry_after: Seconds from a Retry-After header, if the gateway sent one
    """

    def __init__(
        self,
        status_code: int,
        body: str = "",
        endpoint: str | None = None,
        retry_after: int | None = None,
    ):
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        self.retry_after = retry_after
        super().__init__(f"Push gateway rejected message: {status_code} - {body or 'no response body'}")

    @property
    def is_permanent(self) -> bool:
        """True when resending to this subscription can never succeed."""
        return False


class SubscriptionGoneError(GatewayRejectedError):
    """The gateway reports the subscription no longer exists (404 / 410)."""

    @property
    def is_permanent(self) -> bool:
        return True


__all__ = [
    "GatewayRejectedError",
    "MalformedSubscriptionError",
    "PayloadTooLargeError",
    "PushCryptoError",
    "PushError",
    "SubscriptionGoneError",
    "VapidConfigError",
]
