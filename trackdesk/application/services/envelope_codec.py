"""Field envelope encryption for values stored in the realtime store.

Envelope format is the OpenSSL / CryptoJS passphrase format, so values
written by the browser client and by this service are interchangeable:

    base64( b"Salted__" | salt[8] | AES-256-CBC(PKCS7(utf-8 plaintext)) )

Key and IV are derived from the passphrase and salt with EVP_BytesToKey
(MD5, one round). Every envelope therefore starts with "U2FsdGVkX1".

Reads are fail-open: a value that cannot be decrypted (wrong key, corrupt
data, empty plaintext) is returned unchanged and never raises.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from trackdesk.core.config import get_settings
from trackdesk.core.constants import ENVELOPE_MAGIC, ENVELOPE_PREFIX

logger = logging.getLogger(__name__)

_SALT_LEN = 8
_KEY_LEN = 32
_IV_LEN = 16
_BLOCK_BITS = 128

# Attachments are {url, name}; the url is stored in clear.
ATTACHMENT_URL_KEY = "url"
ATTACHMENT_NAME_KEY = "name"


@dataclass(frozen=True)
class DecodeError:
    """Why an envelope could not be decrypted."""

    reason: str


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of try_decrypt: value is plaintext on success, else the input."""

    value: Any
    error: DecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _evp_bytes_to_key(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and one iteration."""
    derived = b""
    block = b""
    while len(derived) < _KEY_LEN + _IV_LEN:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:_KEY_LEN], derived[_KEY_LEN : _KEY_LEN + _IV_LEN]


def _is_attachment(value: dict) -> bool:
    return ATTACHMENT_URL_KEY in value and ATTACHMENT_NAME_KEY in value


class EnvelopeCodec:
    """Encrypt and decrypt individual field values, and walk nested payloads."""

    def __init__(self, passphrase: str) -> None:
        if not passphrase:
            raise ValueError("Envelope passphrase must not be empty")
        self._passphrase = passphrase.encode()

    @classmethod
    def from_settings(cls) -> EnvelopeCodec:
        return cls(get_settings().envelope_passphrase.get_secret_value())

    @staticmethod
    def is_envelope(value: Any) -> bool:
        """Return True iff value is a string carrying the envelope prefix."""
        return isinstance(value, str) and value.startswith(ENVELOPE_PREFIX)

    def encrypt(self, value: Any) -> Any:
        """Return a fresh envelope for value (random salt on every call).

        Falsy and non-string values are returned unchanged.
        """
        if not value or not isinstance(value, str):
            return value
        salt = os.urandom(_SALT_LEN)
        key, iv = _evp_bytes_to_key(self._passphrase, salt)
        padder = padding.PKCS7(_BLOCK_BITS).padder()
        padded = padder.update(value.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(ENVELOPE_MAGIC + salt + ciphertext).decode("ascii")

    def try_decrypt(self, value: Any) -> DecryptResult:
        """Decrypt value, reporting failures instead of raising."""
        if not self.is_envelope(value):
            return DecryptResult(value, DecodeError("not an envelope"))
        try:
            raw = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            return DecryptResult(value, DecodeError("invalid base64"))
        body = raw[len(ENVELOPE_MAGIC) + _SALT_LEN :]
        if not raw.startswith(ENVELOPE_MAGIC) or not body or len(body) % 16:
            return DecryptResult(value, DecodeError("malformed envelope"))
        salt = raw[len(ENVELOPE_MAGIC) : len(ENVELOPE_MAGIC) + _SALT_LEN]
        key, iv = _evp_bytes_to_key(self._passphrase, salt)
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()
        try:
            unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            return DecryptResult(value, DecodeError("bad padding (wrong key?)"))
        try:
            text = plain.decode("utf-8")
        except UnicodeDecodeError:
            return DecryptResult(value, DecodeError("plaintext is not utf-8 (wrong key?)"))
        if not text:
            return DecryptResult(value, DecodeError("empty plaintext"))
        return DecryptResult(text)

    def decrypt(self, value: Any) -> Any:
        """Return the plaintext of an envelope, or value unchanged."""
        if not self.is_envelope(value):
            return value
        result = self.try_decrypt(value)
        if not result.ok:
            logger.debug("Envelope left encrypted: %s", result.error.reason)
        return result.value

    def decrypt_deep(self, value: Any) -> Any:
        """Decrypt every string leaf of a nested payload.

        Lists are walked element-wise. A dict with both 'url' and 'name' is an
        attachment: its url passes through unchanged and the rest is
        decrypted. Other dicts are decrypted key by key.
        """
        if isinstance(value, str):
            return self.decrypt(value)
        if isinstance(value, list):
            return [self.decrypt_deep(item) for item in value]
        if isinstance(value, dict):
            attachment = _is_attachment(value)
            return {
                key: (
                    item
                    if attachment and key == ATTACHMENT_URL_KEY
                    else self.decrypt_deep(item)
                )
                for key, item in value.items()
            }
        return value

    def encrypt_deep(self, value: Any) -> Any:
        """Encrypt every string leaf of a nested payload (inverse of decrypt_deep).

        Attachment urls stay in clear; strings already in envelope form are not
        wrapped twice; non-string scalars are left as they are.
        """
        if isinstance(value, str):
            return value if self.is_envelope(value) else self.encrypt(value)
        if isinstance(value, list):
            return [self.encrypt_deep(item) for item in value]
        if isinstance(value, dict):
            attachment = _is_attachment(value)
            return {
                key: (
                    item
                    if attachment and key == ATTACHMENT_URL_KEY
                    else self.encrypt_deep(item)
                )
                for key, item in value.items()
            }
        return value
