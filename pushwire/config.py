"""
Tool: Push Configuration
Purpose: Load the VAPID key pair and delivery defaults

Environment variables take precedence over ``args/push.yaml``:

    VAPID_PUBLIC_KEY    base64-url uncompressed P-256 point
    VAPID_PRIVATE_KEY   base64-url 32-byte scalar
    VAPID_SUBJECT       mailto: or https: contact for the gateway operator
    PUSHWIRE_CONFIG     alternative path to the YAML file

Usage:
    from pushwire.config import load_vapid_keys, load_delivery_defaults

    keys = load_vapid_keys()  # raises VapidConfigError when unset
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from pushwire import CONFIG_PATH
from pushwire.errors import VapidConfigError
from pushwire.models import Urgency, VapidKeys


logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "mailto:admin@localhost"

DEFAULT_DELIVERY = {
    "ttl": 86400,  # 24 hours
    "urgency": Urgency.NORMAL.value,
    "timeout": 10.0,
}


def get_config_path() -> Path:
    override = os.environ.get("PUSHWIRE_CONFIG")
    if override:
        return Path(override)
    return CONFIG_PATH / "push.yaml"


def _load_file_config() -> dict[str, Any]:
    """Read the YAML config file, or return {} when it does not exist."""
    config_file = get_config_path()
    if not config_file.exists():
        return {}

    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise VapidConfigError(f"Cannot parse {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise VapidConfigError(f"{config_file} must contain a mapping at top level")
    return data


def load_vapid_config() -> dict[str, str]:
    """
    Load raw VAPID configuration strings.

    Returns:
        {"public_key": str, "private_key": str, "subject": str}; key fields
        are empty strings when not configured anywhere
    """
    config = {
        "public_key": os.environ.get("VAPID_PUBLIC_KEY", ""),
        "private_key": os.environ.get("VAPID_PRIVATE_KEY", ""),
        "subject": os.environ.get("VAPID_SUBJECT", ""),
    }

    if not all(config.values()):
        vapid_config = _load_file_config().get("vapid") or {}
        for key in config:
            if not config[key]:
                config[key] = str(vapid_config.get(key) or "")

    if not config["subject"]:
        config["subject"] = DEFAULT_SUBJECT

    return config


def load_vapid_keys() -> VapidKeys:
    """
    Load and validate the server's VAPID identity.

    Raises:
        VapidConfigError: If either key is missing, malformed, or the two
            halves do not belong together
    """
    config = load_vapid_config()

    missing = [
        env_name
        for env_name, key in (("VAPID_PUBLIC_KEY", "public_key"), ("VAPID_PRIVATE_KEY", "private_key"))
        if not config[key]
    ]
    if missing:
        raise VapidConfigError(
            f"VAPID keys not configured. Set {' and '.join(missing)} "
            "(generate with: python -m pushwire.cli generate-keys)"
        )

    keys = VapidKeys.from_base64url(config["public_key"], config["private_key"], config["subject"])
    keys.signing_key()  # fail now if the halves do not match
    logger.info("VAPID keys loaded (public=%s…)", keys.public_key_b64[:20])
    return keys


def load_delivery_defaults() -> dict[str, Any]:
    """
    Delivery defaults (ttl, urgency, timeout) merged over the built-ins.

    Raises:
        VapidConfigError: If the ``delivery`` section is not a mapping or a
            value has the wrong type
    """
    defaults = dict(DEFAULT_DELIVERY)
    delivery = _load_file_config().get("delivery") or {}
    if not isinstance(delivery, dict):
        raise VapidConfigError(f"'delivery' in {get_config_path()} must be a mapping")
    defaults.update({k: v for k, v in delivery.items() if k in DEFAULT_DELIVERY})

    ttl = defaults["ttl"]
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0:
        raise VapidConfigError(f"delivery.ttl must be a non-negative integer, got {ttl!r}")

    valid_urgencies = [u.value for u in Urgency]
    if defaults["urgency"] not in valid_urgencies:
        raise VapidConfigError(
            f"delivery.urgency must be one of {', '.join(valid_urgencies)}, got {defaults['urgency']!r}"
        )

    timeout = defaults["timeout"]
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise VapidConfigError(f"delivery.timeout must be a positive number, got {timeout!r}")

    return defaults


def is_push_configured() -> bool:
    """Check whether a usable VAPID key pair is configured."""
    try:
        load_vapid_keys()
        return True
    except VapidConfigError as e:
        logger.debug("Push not configured: %s", e)
        return False


__all__ = [
    "get_config_path",
    "is_push_configured",
    "load_delivery_defaults",
    "load_vapid_config",
    "load_vapid_keys",
]
