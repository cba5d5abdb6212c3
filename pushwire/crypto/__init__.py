"""Cryptographic building blocks for the aes128gcm content coding."""

from pushwire.crypto.encoding import b64url_decode, b64url_encode
from pushwire.crypto.agreement import (
    derive_shared_secret,
    export_public_key,
    generate_ephemeral_key,
    load_public_key,
)
from pushwire.crypto.derivation import DerivedKeys, build_context, derive_keys
from pushwire.crypto.encryption import decrypt_record, encrypt_record
from pushwire.crypto.framing import HEADER_LENGTH, FramedBody, frame_body, parse_body

__all__ = [
    "b64url_decode",
    "b64url_encode",
    "derive_shared_secret",
    "export_public_key",
    "generate_ephemeral_key",
    "load_public_key",
    "DerivedKeys",
    "build_context",
    "derive_keys",
    "decrypt_record",
    "encrypt_record",
    "HEADER_LENGTH",
    "FramedBody",
    "frame_body",
    "parse_body",
]
