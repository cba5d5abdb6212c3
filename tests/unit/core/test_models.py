"""Tests for pushwire/models.py"""

import json

import pytest

from pushwire.crypto.encoding import b64url_encode
from pushwire.errors import MalformedSubscriptionError
from pushwire.models import DeliveryResult, NotificationPayload, Subscription, Urgency, endpoint_origin


# ─────────────────────────────────────────────────────────────────────────────
# Subscription Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSubscription:
    """Tests for parsing and validating browser subscriptions."""

    def test_from_browser_shape(self, subscription):
        data = {
            "endpoint": subscription.endpoint,
            "expirationTime": None,
            "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
        }
        assert Subscription.from_dict(data) == subscription

    def test_from_flat_row(self, subscription):
        data = {"endpoint": subscription.endpoint, "p256dh": subscription.p256dh, "auth": subscription.auth}
        assert Subscription.from_dict(data) == subscription

    def test_to_dict_round_trips(self, subscription):
        assert Subscription.from_dict(subscription.to_dict()) == subscription

    def test_missing_field(self, subscription):
        with pytest.raises(MalformedSubscriptionError, match="auth"):
            Subscription.from_dict({"endpoint": subscription.endpoint, "keys": {"p256dh": subscription.p256dh}})

    def test_audience(self, subscription):
        assert subscription.audience == "https://push.example.net"

    def test_validate_accepts_good_subscription(self, subscription):
        subscription.validate()

    def test_short_auth_secret(self, subscription):
        bad = Subscription(subscription.endpoint, subscription.p256dh, b64url_encode(b"\x01" * 12))
        with pytest.raises(MalformedSubscriptionError, match="16 bytes"):
            bad.validate()

    def test_undecodable_key(self, subscription):
        bad = Subscription(subscription.endpoint, "A", subscription.auth)
        with pytest.raises(MalformedSubscriptionError, match="base64-url"):
            bad.public_key_bytes()

    @pytest.mark.parametrize("endpoint", ["", "push.example.net/x", "ftp://push.example.net/x"])
    def test_bad_endpoint(self, subscription, endpoint):
        bad = Subscription(endpoint, subscription.p256dh, subscription.auth)
        with pytest.raises(MalformedSubscriptionError, match="Endpoint"):
            bad.validate()
        assert endpoint_origin(endpoint) is None


class TestEndpointOrigin:
    """Tests for the origin helper shared by subscriptions and VAPID audiences."""

    def test_keeps_scheme_host_and_port(self):
        assert endpoint_origin("https://updates.push.services.mozilla.com:443/wpush/v2/x") == (
            "https://updates.push.services.mozilla.com:443"
        )

    def test_drops_path_and_query(self):
        assert endpoint_origin("http://localhost/push?id=1") == "http://localhost"


# ─────────────────────────────────────────────────────────────────────────────
# Payload Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNotificationPayload:
    """Tests for payload JSON shape."""

    def test_omits_unset_fields(self):
        assert NotificationPayload(title="T", body="B").to_dict() == {"title": "T", "body": "B"}

    def test_content_id_is_camel_case(self):
        payload = NotificationPayload(title="T", body="B", content_id="ep-1", type="episode")
        data = json.loads(payload.to_json())

        assert data["contentId"] == "ep-1"
        assert data["type"] == "episode"
        assert "content_id" not in data

    def test_non_ascii_is_not_escaped(self):
        payload = NotificationPayload(title="Café", body="✓")
        assert payload.to_bytes() == '{"title":"Café","body":"✓"}'.encode("utf-8")

    def test_from_dict_round_trips(self):
        payload = NotificationPayload(title="T", body="B", url="/x", data={"k": 1})
        assert NotificationPayload.from_dict(payload.to_dict()) == payload


# ─────────────────────────────────────────────────────────────────────────────
# Result Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestDeliveryResult:
    """Tests for delivery outcome records."""

    def test_generates_unique_ids(self):
        first = DeliveryResult(success=True, status_code=201, endpoint="https://e")
        second = DeliveryResult(success=True, status_code=201, endpoint="https://e")

        assert first.delivery_id.startswith("del_")
        assert len(first.delivery_id) == 16
        assert first.delivery_id != second.delivery_id

    def test_to_dict(self):
        result = DeliveryResult(success=True, status_code=201, endpoint="https://e", location="https://e/m/1")
        data = result.to_dict()

        assert data["status_code"] == 201
        assert data["location"] == "https://e/m/1"
        assert data["sent_at"].endswith("+00:00")


class TestUrgency:
    def test_values(self):
        assert [u.value for u in Urgency] == ["very-low", "low", "normal", "high"]
