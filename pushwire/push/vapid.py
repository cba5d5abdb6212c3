"""
Tool: VAPID Authentication
Purpose: Sign application-server identification tokens (RFC 8292)

A VAPID token is an ES256 JWT:

    base64url({"typ":"JWT","alg":"ES256"}) . base64url({"aud","exp","sub"}) . base64url(r || s)

ECDSA implementations (OpenSSL included) emit DER ``SEQUENCE {r, s}``; JWS
requires the two integers as fixed 32-byte big-endian halves, so the DER
structure is decoded and repacked rather than sliced.

Usage:
    from pushwire.push.vapid import create_vapid_token, build_authorization_header

    token = create_vapid_token(keys, subscription.audience)
    headers["Authorization"] = build_authorization_header(keys, token)

    # One-time key generation
    python -m pushwire.cli generate-keys
"""

import json
import logging
import threading
import time
from typing import Any

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from pushwire.crypto.agreement import CURVE, export_public_key, load_public_key
from pushwire.crypto.encoding import b64url_decode, b64url_encode
from pushwire.errors import MalformedSubscriptionError, VapidConfigError
from pushwire.models import PRIVATE_KEY_LENGTH, VapidKeys, endpoint_origin


logger = logging.getLogger(__name__)

JWT_HEADER = {"typ": "JWT", "alg": "ES256"}
TOKEN_LIFETIME_SECONDS = 12 * 60 * 60
MAX_TOKEN_LIFETIME_SECONDS = 24 * 60 * 60  # gateways reject anything longer
COORDINATE_LENGTH = 32
RAW_SIGNATURE_LENGTH = 2 * COORDINATE_LENGTH


def _json_segment(obj: dict[str, Any]) -> str:
    return b64url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def get_audience(endpoint: str) -> str:
    """Return the origin of a push endpoint, the token's ``aud`` claim."""
    origin = endpoint_origin(endpoint)
    if origin is None:
        raise MalformedSubscriptionError(f"Endpoint is not an absolute http(s) URL: {endpoint!r}")
    return origin


def der_to_raw_signature(der_signature: bytes) -> bytes:
    """
    Convert a DER-encoded ECDSA signature to the 64-byte JWS form.

    r and s are variable-length DER INTEGERs (a leading 0x00 when the high
    bit is set, shorter when they have leading zero bytes); each is re-encoded
    as exactly 32 big-endian bytes.
    """
    r, s = decode_dss_signature(der_signature)
    return r.to_bytes(COORDINATE_LENGTH, "big") + s.to_bytes(COORDINATE_LENGTH, "big")


def raw_to_der_signature(raw_signature: bytes) -> bytes:
    if len(raw_signature) != RAW_SIGNATURE_LENGTH:
        raise ValueError(f"Raw signature must be {RAW_SIGNATURE_LENGTH} bytes, got {len(raw_signature)}")
    r = int.from_bytes(raw_signature[:COORDINATE_LENGTH], "big")
    s = int.from_bytes(raw_signature[COORDINATE_LENGTH:], "big")
    return encode_dss_signature(r, s)


def create_vapid_token(
    keys: VapidKeys,
    audience: str,
    expiration: int | None = None,
    now: int | None = None,
) -> str:
    """
    Build and sign a VAPID JWT for one push gateway origin.

    Args:
        keys: Server identity
        audience: Gateway origin, e.g. "https://fcm.googleapis.com"
        expiration: Absolute ``exp`` (seconds since epoch); default now + 12h
        now: Current time override for deterministic tests

    Returns:
        The compact token ``header.claims.signature``

    Raises:
        VapidConfigError: If the expiry is in the past or more than 24h away
    """
    if now is None:
        now = int(time.time())
    if expiration is None:
        expiration = now + TOKEN_LIFETIME_SECONDS
    if expiration <= now or expiration - now > MAX_TOKEN_LIFETIME_SECONDS:
        raise VapidConfigError(f"VAPID expiry must be within 24 hours of now, got +{expiration - now}s")

    claims = {
        "aud": audience,
        "exp": expiration,
        "sub": keys.subject,
    }

    signing_input = f"{_json_segment(JWT_HEADER)}.{_json_segment(claims)}"
    der_signature = keys.signing_key().sign(
        signing_input.encode("ascii"),
        ec.ECDSA(hashes.SHA256()),
    )
    signature = der_to_raw_signature(der_signature)

    return f"{signing_input}.{b64url_encode(signature)}"


def build_authorization_header(keys: VapidKeys, token: str) -> str:
    """Return the ``Authorization`` value: ``vapid t=<jwt>, k=<public key>``."""
    return f"vapid t={token}, k={keys.public_key_b64}"


def verify_vapid_token(token: str, public_key: bytes | str) -> dict[str, Any]:
    """
    Decode a VAPID token and verify its signature.

    Args:
        token: Compact JWT
        public_key: Server public key, raw 65 bytes or base64-url text

    Returns:
        The claims dict

    Raises:
        ValueError: If the token is not three segments of valid JSON/base64
        cryptography.exceptions.InvalidSignature: If the signature does not verify
    """
    if isinstance(public_key, str):
        public_key = b64url_decode(public_key)

    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError(f"Token must have 3 segments, got {len(parts)}")

    header_b64, claims_b64, signature_b64 = parts
    header = json.loads(b64url_decode(header_b64))
    if header.get("alg") != "ES256":
        raise ValueError(f"Unsupported token algorithm {header.get('alg')!r}")

    signature = b64url_decode(signature_b64)
    try:
        verifier = load_public_key(public_key, "VAPID public key")
    except MalformedSubscriptionError as e:
        raise ValueError(str(e)) from e

    verifier.verify(
        raw_to_der_signature(signature),
        f"{header_b64}.{claims_b64}".encode("ascii"),
        ec.ECDSA(hashes.SHA256()),
    )
    return json.loads(b64url_decode(claims_b64))


class VapidTokenCache:
    """
    Reuse signed tokens per gateway origin until they near expiry.

    Optional; sends are correct without it. Safe to share between threads.

    Args:
        keys: Server identity the tokens are signed with
        refresh_margin: Reissue when fewer than this many seconds remain
    """

    def __init__(self, keys: VapidKeys, refresh_margin: int = 60 * 60):
        self.keys = keys
        self.refresh_margin = refresh_margin
        self._tokens: dict[str, tuple[str, int]] = {}
        self._lock = threading.Lock()

    def get(self, audience: str, now: int | None = None) -> str:
        if now is None:
            now = int(time.time())

        with self._lock:
            cached = self._tokens.get(audience)
            if cached and cached[1] - now > self.refresh_margin:
                return cached[0]

            expiration = now + TOKEN_LIFETIME_SECONDS
            token = create_vapid_token(self.keys, audience, expiration=expiration, now=now)
            self._tokens[audience] = (token, expiration)
            logger.debug("Issued VAPID token for %s (exp=%s)", audience, expiration)
            return token

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()


def generate_vapid_keys() -> dict:
    """
    Generate a new VAPID key pair for Web Push.

    Returns:
        {"public_key": str, "private_key": str, "private_key_pem": str}

    Note:
        Store the private key in the environment or a vault. The public key
        is handed to browsers as ``applicationServerKey``.
    """
    private_key = ec.generate_private_key(CURVE)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")

    private_value = private_key.private_numbers().private_value
    return {
        "public_key": b64url_encode(export_public_key(private_key)),
        "private_key": b64url_encode(private_value.to_bytes(PRIVATE_KEY_LENGTH, "big")),
        "private_key_pem": private_pem,
    }


__all__ = [
    "VapidTokenCache",
    "build_authorization_header",
    "create_vapid_token",
    "der_to_raw_signature",
    "generate_vapid_keys",
    "get_audience",
    "raw_to_der_signature",
    "verify_vapid_token",
]
