"""Shared test fixtures for pushwire tests.

This module provides common fixtures used across all test modules:
- Fixed key material (subscriber, ephemeral sender, VAPID server)
- A known-answer vector for the full encryption pipeline
- Environment isolation for configuration loading

The key pairs and salt are the example values from RFC 8291 §5; the expected
intermediate values were computed independently (Node.js ``crypto``: ECDH,
``hkdfSync``, ``aes-128-gcm``) for this package's derivation chain.

Usage:
    def test_something(subscription, vapid_keys):
        ...
"""

from pathlib import Path

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from pushwire.crypto.encoding import b64url_decode
from pushwire.models import Subscription, VapidKeys


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "pushwire"


# ─────────────────────────────────────────────────────────────────────────────
# Key Material
# ─────────────────────────────────────────────────────────────────────────────

SUBSCRIBER_PRIVATE = "q1dXpw3UpT5VOmu_cf_v6ih07Aems3njxI-JWgLcM94"
SUBSCRIBER_PUBLIC = "BCVxsr7N_eNgVRqvHtD0zTZsEc6-VV-JvLexhqUzORcxaOzi6-AYWXvTBHm4bjyPjs7Vd8pZGH6SRpkNtoIAiw4"
AUTH_SECRET = "BTBZMqHH6r4Tts7J_aSIgg"

SENDER_PRIVATE = "yfWPiYE-n46HLnH0KqZOF1fJJU3MYrct3AELtAQ-oRw"
SENDER_PUBLIC = "BP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCYLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A8"
SALT = "DGv6ra1nlYgDCS1FRnbzlw"

VAPID_PUBLIC = "BJm8n9nBrC9gNfc4bDNXR4vbI5JXuwKwZWERuNHdX-nTkdLlR4AC4cCDJN2X_lgU5YysP25FdgzKhfgQS_V6ITc"
VAPID_PRIVATE = "iSnXAcOOmldMCWlqogFMAAMoy9h8oJkz_wUnn6pPqOA"

ENDPOINT = "https://push.example.net/push/JzLQ3raZJfFBR0aqvOMsLrt54w4rJUsV"


def _private_key(b64: str) -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(int.from_bytes(b64url_decode(b64), "big"), ec.SECP256R1())


@pytest.fixture
def subscriber_key() -> ec.EllipticCurvePrivateKey:
    """The browser's private key (normally never leaves the device)."""
    return _private_key(SUBSCRIBER_PRIVATE)


@pytest.fixture
def sender_key() -> ec.EllipticCurvePrivateKey:
    """A fixed 'ephemeral' key, only for deterministic tests."""
    return _private_key(SENDER_PRIVATE)


@pytest.fixture
def auth_secret() -> bytes:
    return b64url_decode(AUTH_SECRET)


@pytest.fixture
def fixed_salt() -> bytes:
    return b64url_decode(SALT)


@pytest.fixture
def subscription() -> Subscription:
    """A well-formed subscription pointing at a fake gateway."""
    return Subscription(endpoint=ENDPOINT, p256dh=SUBSCRIBER_PUBLIC, auth=AUTH_SECRET)


@pytest.fixture
def vapid_keys() -> VapidKeys:
    """Fixed server identity."""
    return VapidKeys.from_base64url(VAPID_PUBLIC, VAPID_PRIVATE, "mailto:ops@example.com")


# ─────────────────────────────────────────────────────────────────────────────
# Known-Answer Vector
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def kat() -> dict:
    """Expected values for payload {"title":"T","body":"B"} with the fixed keys above.

    Returns:
        dict of hex strings / bytes for each pipeline stage
    """
    return {
        "payload": b'{"title":"T","body":"B"}',
        "subscriber_public": b64url_decode(SUBSCRIBER_PUBLIC),
        "sender_public": b64url_decode(SENDER_PUBLIC),
        "shared_secret": "932acbd63208387133837b0cd995911c3441eb66000998614a592727aef6912b",
        "prk": "30404f4678c70df6661cb7f07fa759fb009b18493f5a5a3e003f3a3be5c28aa3",
        "cek": "6750b708562b9052672d21dee23320aa",
        "nonce": "a7c51e8951ba111185f60e33",
        "ciphertext": (
            "57302291bf782c23c9537f8ae88014bc80e765670bd903bf2ee77281747faa9c"
            "1aef931c6921037388"
        ),
        "body": (
            "DGv6ra1nlYgDCS1FRnbzlwAAEABBBP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCY"
            "LocInmYWAmS6TlzAC8wEqKK6PBru3jl7A9XMCKRv3gsI8lTf4rogBS8gOdlZwvZA78u53KBdH-qnBrvkx"
            "xpIQNziA"
        ),
    }


# ─────────────────────────────────────────────────────────────────────────────
# Environment Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path) -> Path:
    """Remove VAPID variables and point the config file at an empty temp dir.

    Returns:
        Path where a test may write its own push.yaml
    """
    for name in ("VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY", "VAPID_SUBJECT"):
        monkeypatch.delenv(name, raising=False)
    config_file = tmp_path / "push.yaml"
    monkeypatch.setenv("PUSHWIRE_CONFIG", str(config_file))
    return config_file


@pytest.fixture
def vapid_env() -> dict[str, str]:
    """The fixed VAPID key pair as environment variable values."""
    return {
        "VAPID_PUBLIC_KEY": VAPID_PUBLIC,
        "VAPID_PRIVATE_KEY": VAPID_PRIVATE,
        "VAPID_SUBJECT": "mailto:ops@example.com",
    }


@pytest.fixture
def configured_env(clean_env, vapid_env, monkeypatch) -> Path:
    """Environment with the fixed VAPID key pair set."""
    for name, value in vapid_env.items():
        monkeypatch.setenv(name, value)
    return clean_env
