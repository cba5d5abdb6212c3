#!/usr/bin/env python3
"""
pushwire Command Line Interface

Main entry point for the `pushwire` command.

Usage:
    pushwire generate-keys                 # Print a new VAPID key pair as .env lines
    pushwire public-key                    # Print the configured public key
    pushwire send --endpoint URL --p256dh KEY --auth SECRET --title T --body B
    pushwire verify-token TOKEN            # Check a token against the configured key
    pushwire --version
"""

import argparse
import asyncio
import json
import sys

import httpx

from pushwire.errors import (
    GatewayRejectedError,
    MalformedSubscriptionError,
    PayloadTooLargeError,
    VapidConfigError,
)


EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_CONFIG = 2


def cmd_version(args):
    from pushwire import __version__

    print(f"pushwire {__version__}")


def cmd_generate_keys(args):
    """Handle generate-keys subcommand."""
    from pushwire.push.vapid import generate_vapid_keys

    result = generate_vapid_keys()

    if args.json:
        print(json.dumps({k: result[k] for k in ("public_key", "private_key")}, indent=2))
        return EXIT_OK

    print("VAPID Keys Generated Successfully")
    print("-" * 40)
    print(f"Public Key:  {result['public_key']}")
    print(f"Private Key: {result['private_key']}")
    print("-" * 40)
    print("\nAdd to your .env file:")
    print(f"VAPID_PUBLIC_KEY={result['public_key']}")
    print(f"VAPID_PRIVATE_KEY={result['private_key']}")
    print("VAPID_SUBJECT=mailto:notifications@yourdomain.com")
    return EXIT_OK


def cmd_public_key(args):
    """Handle public-key subcommand."""
    from pushwire.config import load_vapid_keys

    try:
        keys = load_vapid_keys()
    except VapidConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    print(keys.public_key_b64)
    return EXIT_OK


def cmd_send(args):
    """Handle send subcommand."""
    from pushwire.config import load_delivery_defaults, load_vapid_keys
    from pushwire.models import NotificationPayload, Subscription
    from pushwire.push.web_push import send_push

    subscription = Subscription(endpoint=args.endpoint, p256dh=args.p256dh, auth=args.auth)
    payload = NotificationPayload(title=args.title, body=args.body or "", url=args.url, tag=args.tag)

    try:
        defaults = load_delivery_defaults()
        keys = load_vapid_keys()
        result = asyncio.run(
            send_push(
                keys,
                subscription,
                payload,
                ttl=args.ttl if args.ttl is not None else defaults["ttl"],
                urgency=args.urgency or defaults["urgency"],
                timeout=defaults["timeout"],
            )
        )
    except (VapidConfigError, MalformedSubscriptionError, PayloadTooLargeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except GatewayRejectedError as e:
        print(f"Failed to send: {e}", file=sys.stderr)
        if e.is_permanent:
            print("Note: Subscription should be removed (endpoint gone)", file=sys.stderr)
        return EXIT_REJECTED
    except httpx.HTTPError as e:
        print(f"Failed to send: {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_REJECTED

    print(f"Notification sent! Delivery ID: {result.delivery_id} (status {result.status_code})")
    return EXIT_OK


def cmd_verify_token(args):
    """Handle verify-token subcommand."""
    from cryptography.exceptions import InvalidSignature

    from pushwire.config import load_vapid_keys
    from pushwire.push.vapid import verify_vapid_token

    try:
        public_key = args.public_key or load_vapid_keys().public_key_b64
    except VapidConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        claims = verify_vapid_token(args.token, public_key)
    except (ValueError, InvalidSignature) as e:
        print(f"Invalid token: {str(e) or 'signature does not verify'}", file=sys.stderr)
        return EXIT_REJECTED

    print(json.dumps(claims, indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pushwire",
        description="pushwire - Web Push delivery (VAPID + aes128gcm)",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: PUSHWIRE_LOG_LEVEL or INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate-keys
    gen_parser = subparsers.add_parser("generate-keys", help="Generate VAPID key pair")
    gen_parser.add_argument("--json", action="store_true", help="Print keys as JSON")
    gen_parser.set_defaults(func=cmd_generate_keys)

    # public-key
    pub_parser = subparsers.add_parser("public-key", help="Print the configured VAPID public key")
    pub_parser.set_defaults(func=cmd_public_key)

    # send
    send_parser = subparsers.add_parser("send", help="Send a test notification")
    send_parser.add_argument("--endpoint", "-e", required=True, help="Subscription endpoint URL")
    send_parser.add_argument("--p256dh", required=True, help="Subscription public key (base64-url)")
    send_parser.add_argument("--auth", required=True, help="Subscription auth secret (base64-url)")
    send_parser.add_argument("--title", "-t", required=True, help="Notification title")
    send_parser.add_argument("--body", "-b", help="Notification body")
    send_parser.add_argument("--url", "-u", help="URL to open on click")
    send_parser.add_argument("--tag", help="Notification tag")
    send_parser.add_argument("--ttl", type=int, default=None, help="Time to live in seconds")
    send_parser.add_argument(
        "--urgency", choices=["very-low", "low", "normal", "high"], default=None, help="Message urgency"
    )
    send_parser.set_defaults(func=cmd_send)

    # verify-token
    verify_parser = subparsers.add_parser("verify-token", help="Verify a VAPID token")
    verify_parser.add_argument("token", help="Compact JWT")
    verify_parser.add_argument(
        "--public-key", default=None, help="Public key to verify with (default: configured key)"
    )
    verify_parser.set_defaults(func=cmd_verify_token)

    return parser


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    from pushwire.logging_config import setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return EXIT_OK

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return EXIT_OK

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
