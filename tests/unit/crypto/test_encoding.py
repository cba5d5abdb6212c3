"""Tests for pushwire/crypto/encoding.py"""

import binascii

import pytest

from pushwire.crypto.encoding import b64url_decode, b64url_encode


class TestB64urlEncode:
    """Tests for padding-free URL-safe encoding."""

    def test_strips_padding(self):
        assert b64url_encode(b"\x00") == "AA"
        assert b64url_encode(b"\x00\x00") == "AAA"

    def test_uses_url_safe_alphabet(self):
        """0xfb 0xff maps to '+/' in standard base64."""
        assert b64url_encode(b"\xfb\xff") == "-_8"

    def test_empty(self):
        assert b64url_encode(b"") == ""


class TestB64urlDecode:
    """Tests for decoding with padding restored."""

    def test_restores_padding(self):
        assert b64url_decode("AA") == b"\x00"
        assert b64url_decode("AAA") == b"\x00\x00"

    def test_accepts_padded_input(self):
        assert b64url_decode("AA==") == b"\x00"

    def test_accepts_standard_alphabet(self):
        """Keys round-tripped through plain base64 still decode."""
        assert b64url_decode("+/8") == b"\xfb\xff"

    def test_accepts_bytes_and_whitespace(self):
        assert b64url_decode(b" -_8\n") == b"\xfb\xff"

    def test_decodes_browser_key_to_65_bytes(self, kat):
        assert len(kat["subscriber_public"]) == 65
        assert kat["subscriber_public"][0] == 0x04

    def test_rejects_impossible_length(self):
        with pytest.raises(binascii.Error):
            b64url_decode("A")
