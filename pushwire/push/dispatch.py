"""
Tool: Push Gateway Dispatch
Purpose: POST one encrypted message to a push gateway and classify the reply

Response handling:
    2xx       -> DeliveryResult(success=True)
    404 / 410 -> SubscriptionGoneError (caller should deactivate the subscription)
    other     -> GatewayRejectedError with status, body and Retry-After
    network   -> httpx.HTTPError propagates unchanged

Nothing is retried here; backoff policy belongs to the caller.
"""

import logging
import re

import httpx

from pushwire.errors import GatewayRejectedError, SubscriptionGoneError
from pushwire.models import DeliveryResult, Urgency


logger = logging.getLogger(__name__)

CONTENT_ENCODING = "aes128gcm"
DEFAULT_TTL = 86400
DEFAULT_TIMEOUT = 10.0
GONE_STATUSES = {404, 410}

_TOPIC_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,32}$")


def check_delivery_options(
    ttl: int = DEFAULT_TTL,
    urgency: Urgency | str = Urgency.NORMAL,
    topic: str | None = None,
) -> Urgency:
    """
    Validate per-message delivery options and return the parsed urgency.

    Raises:
        ValueError: On a negative or non-integer TTL, unknown urgency, or
            invalid topic
    """
    # bool is an int subclass; TTL: True is not a header value
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0:
        raise ValueError(f"TTL must be a non-negative integer, got {ttl!r}")
    parsed = Urgency(urgency)
    if topic is not None and not _TOPIC_PATTERN.match(topic):
        raise ValueError("Topic must be 1-32 URL-safe base64 characters")
    return parsed


def build_headers(
    body: bytes,
    authorization: str,
    ttl: int = DEFAULT_TTL,
    urgency: Urgency | str = Urgency.NORMAL,
    topic: str | None = None,
) -> dict[str, str]:
    """
    Build the request headers for an aes128gcm push message.

    Raises:
        ValueError: See check_delivery_options
    """
    urgency = check_delivery_options(ttl, urgency, topic)

    headers = {
        "Content-Type": "application/octet-stream",
        "Content-Encoding": CONTENT_ENCODING,
        "Content-Length": str(len(body)),
        "TTL": str(ttl),
        "Urgency": urgency.value,
        "Authorization": authorization,
    }
    if topic:
        headers["Topic"] = topic
    return headers


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return max(0, int(value.strip()))
    except ValueError:
        # HTTP-date form; callers fall back to their own backoff
        return None


def classify_response(response: httpx.Response, endpoint: str) -> DeliveryResult:
    """
    Turn a gateway response into a DeliveryResult or a typed failure.

    Raises:
        SubscriptionGoneError: On 404 / 410
        GatewayRejectedError: On any other non-2xx status
    """
    status = response.status_code
    if 200 <= status < 300:
        return DeliveryResult(
            success=True,
            status_code=status,
            endpoint=endpoint,
            location=response.headers.get("Location"),
        )

    error_cls = SubscriptionGoneError if status in GONE_STATUSES else GatewayRejectedError
    raise error_cls(
        status_code=status,
        body=response.text,
        endpoint=endpoint,
        retry_after=_parse_retry_after(response.headers.get("Retry-After")),
    )


async def dispatch(
    endpoint: str,
    body: bytes,
    authorization: str,
    ttl: int = DEFAULT_TTL,
    urgency: Urgency | str = Urgency.NORMAL,
    topic: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> DeliveryResult:
    """
    Send an encrypted body to a subscription endpoint.

    Args:
        endpoint: Subscription endpoint URL
        body: Framed aes128gcm body
        authorization: ``vapid t=..., k=...`` header value
        ttl: Seconds the gateway may store the message
        urgency: very-low | low | normal | high
        topic: Optional replacement topic
        timeout: Request timeout in seconds (ignored when ``client`` is given)
        client: Shared AsyncClient; left open for the caller

    Returns:
        DeliveryResult for a 2xx response

    Raises:
        SubscriptionGoneError, GatewayRejectedError, httpx.HTTPError
    """
    headers = build_headers(body, authorization, ttl=ttl, urgency=urgency, topic=topic)

    if client is not None:
        response = await client.post(endpoint, content=body, headers=headers)
    else:
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            response = await own_client.post(endpoint, content=body, headers=headers)

    try:
        return classify_response(response, endpoint)
    except GatewayRejectedError as e:
        logger.warning(
            "Push gateway rejected message (status=%s permanent=%s body=%s)",
            e.status_code,
            e.is_permanent,
            e.body[:200],
        )
        raise


__all__ = ["build_headers", "check_delivery_options", "classify_response", "dispatch"]
