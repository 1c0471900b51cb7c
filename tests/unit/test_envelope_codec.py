"""Tests for EnvelopeCodec (OpenSSL / CryptoJS passphrase envelopes)."""

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from trackdesk.application.services import EnvelopeCodec
from trackdesk.core.constants import ENVELOPE_PREFIX


def _openssl_envelope(plaintext: str, passphrase: str, salt: bytes) -> str:
    """Build an envelope the way `openssl enc -aes-256-cbc -md md5` / CryptoJS do."""
    derived, block = b"", b""
    while len(derived) < 48:
        block = hashlib.md5(block + passphrase.encode() + salt).digest()
        derived += block
    padder = padding.PKCS7(128).padder()
    data = padder.update(plaintext.encode()) + padder.finalize()
    enc = Cipher(algorithms.AES(derived[:32]), modes.CBC(derived[32:48])).encryptor()
    return base64.b64encode(b"Salted__" + salt + enc.update(data) + enc.finalize()).decode()


class TestEncryptDecrypt:
    @pytest.mark.parametrize("plaintext", ["hello", "Serial #A-1234", "ünïcødé ✓", "x" * 100])
    def test_round_trip(self, codec: EnvelopeCodec, plaintext: str) -> None:
        envelope = codec.encrypt(plaintext)
        assert envelope != plaintext
        assert envelope.startswith(ENVELOPE_PREFIX)
        assert codec.decrypt(envelope) == plaintext

    def test_encrypt_uses_fresh_salt(self, codec: EnvelopeCodec) -> None:
        assert codec.encrypt("same") != codec.encrypt("same")

    @pytest.mark.parametrize("value", ["", None, 0, 42, True, [], {}])
    def test_encrypt_leaves_falsy_and_non_string(self, codec: EnvelopeCodec, value) -> None:
        assert codec.encrypt(value) == value

    @pytest.mark.parametrize("value", ["plain text", "", "U2Fsd", 7, None, ["U2FsdGVkX1"]])
    def test_decrypt_non_envelope_is_identity(self, codec: EnvelopeCodec, value) -> None:
        assert codec.decrypt(value) == value

    def test_wrong_key_returns_input(self, codec: EnvelopeCodec) -> None:
        envelope = codec.encrypt("secret value")
        assert EnvelopeCodec("another-key").decrypt(envelope) == envelope

    def test_corrupt_envelope_returns_input(self, codec: EnvelopeCodec) -> None:
        corrupt = ENVELOPE_PREFIX + "!!!not base64!!!"
        assert codec.decrypt(corrupt) == corrupt

    def test_empty_passphrase_rejected(self) -> None:
        with pytest.raises(ValueError):
            EnvelopeCodec("")


class TestInteroperability:
    def test_decrypts_openssl_format(self) -> None:
        envelope = _openssl_envelope("Dell XPS 15", "shared-key", b"\x01\x02\x03\x04\x05\x06\x07\x08")
        assert envelope.startswith(ENVELOPE_PREFIX)
        assert EnvelopeCodec("shared-key").decrypt(envelope) == "Dell XPS 15"

    def test_encrypt_output_is_openssl_format(self) -> None:
        codec = EnvelopeCodec("shared-key")
        raw = base64.b64decode(codec.encrypt("warranty"))
        assert raw[:8] == b"Salted__"
        salt = raw[8:16]
        assert _openssl_envelope("warranty", "shared-key", salt) == base64.b64encode(raw).decode()


class TestTryDecrypt:
    def test_success(self, codec: EnvelopeCodec) -> None:
        result = codec.try_decrypt(codec.encrypt("ok"))
        assert result.ok
        assert result.value == "ok"
        assert result.error is None

    def test_not_an_envelope(self, codec: EnvelopeCodec) -> None:
        result = codec.try_decrypt("plain")
        assert not result.ok
        assert result.value == "plain"

    def test_invalid_base64(self, codec: EnvelopeCodec) -> None:
        result = codec.try_decrypt(ENVELOPE_PREFIX + "***")
        assert result.error is not None
        assert "base64" in result.error.reason

    def test_header_without_ciphertext(self, codec: EnvelopeCodec) -> None:
        truncated = base64.b64encode(b"Salted__" + b"\x00" * 8).decode()
        result = codec.try_decrypt(truncated)
        assert result.error is not None
        assert result.value == truncated

    def test_empty_plaintext_is_failure(self) -> None:
        envelope = _openssl_envelope("", "k", b"saltsalt")
        result = EnvelopeCodec("k").try_decrypt(envelope)
        assert result.error is not None
        assert result.error.reason == "empty plaintext"


class TestDeep:
    def test_decrypt_deep_walks_dicts_and_lists(self, codec: EnvelopeCodec) -> None:
        payload = {
            "model": codec.encrypt("ThinkPad"),
            "tags": [codec.encrypt("a"), "plain", 3],
            "nested": {"serial": codec.encrypt("SN-1"), "count": 2, "ok": True},
        }
        assert codec.decrypt_deep(payload) == {
            "model": "ThinkPad",
            "tags": ["a", "plain", 3],
            "nested": {"serial": "SN-1", "count": 2, "ok": True},
        }

    def test_attachment_url_passes_through(self, codec: EnvelopeCodec) -> None:
        url = "https://files.example.com/invoice.pdf"
        out = codec.decrypt_deep({"url": url, "name": codec.encrypt("invoice.pdf")})
        assert out == {"url": url, "name": "invoice.pdf"}

    def test_attachment_url_not_decrypted_even_if_envelope(self, codec: EnvelopeCodec) -> None:
        url = codec.encrypt("https://x")
        out = codec.decrypt_deep({"url": url, "name": codec.encrypt("n")})
        assert out["url"] == url
        assert out["name"] == "n"

    def test_url_without_name_is_decrypted(self, codec: EnvelopeCodec) -> None:
        out = codec.decrypt_deep({"url": codec.encrypt("https://x")})
        assert out == {"url": "https://x"}

    def test_encrypt_deep_is_inverse(self, codec: EnvelopeCodec) -> None:
        payload = {
            "Serial": {"value": "SN-9", "notes": "", "attachment": {"url": "https://u", "name": "a.png"}},
            "Active": {"value": True},
            "Parts": [{"value": "fan"}],
        }
        encrypted = codec.encrypt_deep(payload)
        assert codec.is_envelope(encrypted["Serial"]["value"])
        assert encrypted["Serial"]["notes"] == ""
        assert encrypted["Serial"]["attachment"]["url"] == "https://u"
        assert codec.is_envelope(encrypted["Serial"]["attachment"]["name"])
        assert encrypted["Active"]["value"] is True
        assert codec.decrypt_deep(encrypted) == payload

    def test_encrypt_deep_does_not_double_wrap(self, codec: EnvelopeCodec) -> None:
        envelope = codec.encrypt("once")
        assert codec.encrypt_deep({"v": envelope}) == {"v": envelope}
