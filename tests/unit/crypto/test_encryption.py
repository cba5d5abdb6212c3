"""Tests for pushwire/crypto/encryption.py and pushwire/crypto/framing.py"""

import pytest
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from pushwire.crypto.encryption import (
    MAX_PLAINTEXT_LENGTH,
    decrypt_record,
    encrypt_record,
    pad_payload,
    unpad_payload,
)
from pushwire.crypto.framing import HEADER_LENGTH, build_header, frame_body, parse_body
from pushwire.errors import PayloadTooLargeError, PushCryptoError


# ─────────────────────────────────────────────────────────────────────────────
# Padding Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPadding:
    """Tests for the single-delimiter padding scheme."""

    def test_appends_last_record_delimiter(self):
        assert pad_payload(b"hi") == b"hi\x02"

    def test_unpad_strips_delimiter(self):
        assert unpad_payload(b"hi\x02") == b"hi"

    def test_unpad_strips_extra_zero_padding(self):
        """Other senders may pad with zeros after the delimiter."""
        assert unpad_payload(b"hi\x02\x00\x00\x00") == b"hi"

    def test_unpad_rejects_non_final_delimiter(self):
        with pytest.raises(PushCryptoError, match="0x01"):
            unpad_payload(b"hi\x01")

    def test_unpad_rejects_all_zero(self):
        with pytest.raises(PushCryptoError):
            unpad_payload(b"\x00\x00")


# ─────────────────────────────────────────────────────────────────────────────
# AES-128-GCM Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestEncryptRecord:
    """Tests for single-record encryption."""

    def test_known_answer(self, kat):
        ciphertext = encrypt_record(
            kat["payload"],
            bytes.fromhex(kat["cek"]),
            bytes.fromhex(kat["nonce"]),
        )
        assert ciphertext.hex() == kat["ciphertext"]

    def test_output_length_is_plaintext_plus_delimiter_plus_tag(self):
        ciphertext = encrypt_record(b"x" * 100, b"k" * 16, b"n" * 12)
        assert len(ciphertext) == 100 + 1 + 16

    def test_raw_decrypt_shows_delimiter(self, kat):
        """No associated data; plaintext is payload followed by 0x02."""
        cek = bytes.fromhex(kat["cek"])
        nonce = bytes.fromhex(kat["nonce"])
        ciphertext = encrypt_record(kat["payload"], cek, nonce)

        assert AESGCM(cek).decrypt(nonce, ciphertext, None) == kat["payload"] + b"\x02"

    def test_decrypt_record_round_trip(self):
        ciphertext = encrypt_record("héllo".encode(), b"k" * 16, b"n" * 12)
        assert decrypt_record(ciphertext, b"k" * 16, b"n" * 12) == "héllo".encode()

    def test_decrypt_with_wrong_key_fails(self):
        ciphertext = encrypt_record(b"secret", b"k" * 16, b"n" * 12)
        with pytest.raises(InvalidTag):
            decrypt_record(ciphertext, b"K" * 16, b"n" * 12)

    def test_rejects_wrong_key_length(self):
        with pytest.raises(ValueError, match="CEK"):
            encrypt_record(b"x", b"k" * 32, b"n" * 12)

    def test_rejects_wrong_nonce_length(self):
        with pytest.raises(ValueError, match="nonce"):
            encrypt_record(b"x", b"k" * 16, b"n" * 16)

    def test_max_payload_fits(self):
        ciphertext = encrypt_record(b"x" * MAX_PLAINTEXT_LENGTH, b"k" * 16, b"n" * 12)
        assert len(ciphertext) == 4096

    def test_oversized_payload_rejected(self):
        with pytest.raises(PayloadTooLargeError):
            encrypt_record(b"x" * (MAX_PLAINTEXT_LENGTH + 1), b"k" * 16, b"n" * 12)


# ─────────────────────────────────────────────────────────────────────────────
# Framing Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestFraming:
    """Tests for the 86-byte aes128gcm header."""

    def test_header_layout(self, fixed_salt, kat):
        header = build_header(fixed_salt, kat["sender_public"])

        assert len(header) == HEADER_LENGTH == 86
        assert header[:16] == fixed_salt
        assert header[16:20] == b"\x00\x00\x10\x00"  # 4096 big-endian
        assert header[20] == 65
        assert header[21:] == kat["sender_public"]

    def test_frame_and_parse(self, fixed_salt, kat):
        body = frame_body(fixed_salt, kat["sender_public"], b"ciphertext")
        framed = parse_body(body)

        assert framed.salt == fixed_salt
        assert framed.record_size == 4096
        assert framed.key_id == kat["sender_public"]
        assert framed.ciphertext == b"ciphertext"

    def test_rejects_short_salt(self, kat):
        with pytest.raises(ValueError, match="salt"):
            build_header(b"\x00" * 15, kat["sender_public"])

    def test_parse_rejects_truncated_body(self, fixed_salt, kat):
        body = frame_body(fixed_salt, kat["sender_public"], b"")
        with pytest.raises(PushCryptoError):
            parse_body(body[:50])

    def test_parse_rejects_wrong_key_id_length(self, fixed_salt, kat):
        body = bytearray(frame_body(fixed_salt, kat["sender_public"], b"ct"))
        body[20] = 33
        with pytest.raises(PushCryptoError, match="Key id length"):
            parse_body(bytes(body))
