"""
Tool: Web Push Notification Sender
Purpose: Encrypt, sign and deliver one notification to one subscription

Usage:
    from pushwire.config import load_vapid_keys
    from pushwire.push.web_push import send_push

    keys = load_vapid_keys()
    try:
        result = await send_push(keys, subscription, payload)
    except SubscriptionGoneError:
        ...  # mark subscription inactive

    # Fan-out stays with the caller
    results = await asyncio.gather(
        *(send_push(keys, sub, payload) for sub in subscriptions),
        return_exceptions=True,
    )
"""

import httpx

from pushwire.errors import GatewayRejectedError, VapidConfigError
from pushwire.logging_config import get_logger
from pushwire.models import DeliveryResult, Subscription, Urgency, VapidKeys
from pushwire.push.dispatch import DEFAULT_TIMEOUT, DEFAULT_TTL, check_delivery_options, dispatch
from pushwire.push.message import PayloadLike, encrypt_message
from pushwire.push.vapid import VapidTokenCache, build_authorization_header, create_vapid_token


logger = get_logger(__name__)


async def send_push(
    keys: VapidKeys,
    subscription: Subscription,
    payload: PayloadLike,
    ttl: int = DEFAULT_TTL,
    urgency: Urgency | str = Urgency.NORMAL,
    topic: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.AsyncClient | None = None,
    token_cache: VapidTokenCache | None = None,
) -> DeliveryResult:
    """
    Send a Web Push notification.

    Args:
        keys: Server VAPID identity (see pushwire.config.load_vapid_keys)
        subscription: Target subscription
        payload: NotificationPayload, dict, str or bytes
        ttl: Time to live in seconds (default 24 hours)
        urgency: very-low | low | normal | high
        topic: Optional topic; a newer message with the same topic replaces
            an undelivered older one
        timeout: Gateway request timeout in seconds
        client: Shared httpx.AsyncClient for connection reuse
        token_cache: Optional VapidTokenCache to reuse tokens per origin

    Returns:
        DeliveryResult on a 2xx response

    Raises:
        VapidConfigError: No usable server identity, or a token cache
            signing for a different identity
        ValueError: Bad ttl, urgency or topic (checked before encryption)
        MalformedSubscriptionError: Bad endpoint or key material (no request sent)
        PayloadTooLargeError: Payload exceeds one record
        SubscriptionGoneError: Gateway answered 404 / 410
        GatewayRejectedError: Gateway answered any other non-2xx status
        httpx.HTTPError: Transport failure (timeout, connection refused, ...)
    """
    if keys is None:
        raise VapidConfigError("VAPID keys not configured")
    if token_cache is not None and token_cache.keys != keys:
        raise VapidConfigError("Token cache was built for a different VAPID key pair")

    # Reject bad arguments before any cryptographic work
    check_delivery_options(ttl, urgency, topic)
    subscription.validate()
    audience = subscription.audience

    message = encrypt_message(subscription, payload)

    if token_cache is not None:
        token = token_cache.get(audience)
    else:
        token = create_vapid_token(keys, audience)

    try:
        result = await dispatch(
            subscription.endpoint,
            message.body,
            build_authorization_header(keys, token),
            ttl=ttl,
            urgency=urgency,
            topic=topic,
            timeout=timeout,
            client=client,
        )
    except GatewayRejectedError as e:
        logger.info(
            "push_rejected",
            audience=audience,
            status=e.status_code,
            permanent=e.is_permanent,
        )
        raise
    except httpx.HTTPError as e:
        logger.warning("push_transport_error", audience=audience, error=type(e).__name__)
        raise

    logger.info(
        "push_delivered",
        audience=audience,
        status=result.status_code,
        bytes=message.content_length,
        delivery_id=result.delivery_id,
    )
    return result


__all__ = ["send_push"]
