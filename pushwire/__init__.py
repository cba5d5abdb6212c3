"""pushwire: Web Push delivery built from cryptographic primitives

Philosophy:
    The only thing a push gateway tells us is "accepted" or "rejected", and
    the only thing a browser tells us is nothing at all. Every byte of the
    encrypted body and every claim in the VAPID token therefore has to be
    right by construction, validated before it leaves the process.

Components:
    crypto/: base64-url encoding, ECDH, HKDF chain, AES-128-GCM, aes128gcm framing
    push/: VAPID tokens, message pipeline, HTTP dispatch, send entry point
    config.py: VAPID key pair and delivery defaults (env + args/push.yaml)
    errors.py: Exception taxonomy surfaced to callers

Usage:
    from pushwire.config import load_vapid_keys
    from pushwire.models import NotificationPayload, Subscription
    from pushwire.push import send_push

    keys = load_vapid_keys()
    result = await send_push(keys, Subscription.from_dict(sub), NotificationPayload("Hi", "There"))
"""

from pathlib import Path


__version__ = "0.3.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = PROJECT_ROOT / "args"
