import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from securevault.core.config import Settings
from securevault.core.errors import DecryptionError

logger = logging.getLogger(__name__)

KEY_LENGTH = 32    # AES-256
NONCE_LENGTH = 12  # 96-bit GCM nonce
TAG_LENGTH = 16


def generate_key() -> bytes:
    return os.urandom(KEY_LENGTH)


def parse_app_key(value: str) -> bytes:
    """
    Decode an APP_KEY value. Accepts "base64:<...>" or bare base64.
    """
    raw = value.strip()
    if raw.startswith("base64:"):
        raw = raw[len("base64:"):]
    try:
        key = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("APP_KEY is not valid base64")
    if len(key) != KEY_LENGTH:
        raise ValueError(f"APP_KEY must decode to {KEY_LENGTH} bytes, got {len(key)}")
    return key


class FieldCipher:
    """
    Authenticated encryption for single vault fields.

    Every call to encrypt() draws a fresh random nonce, so the same
    plaintext never yields the same ciphertext twice. Stored form is
    Base64(nonce + ciphertext + tag).
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise ValueError(f"Field key must be {KEY_LENGTH} bytes")
        self._aesgcm = AESGCM(key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FieldCipher":
        if settings.APP_KEY:
            return cls(parse_app_key(settings.APP_KEY))
        if settings.is_production:
            raise RuntimeError("APP_KEY must be set in production")
        logger.warning(
            "APP_KEY not set; using an ephemeral key. "
            "Secrets written now will be unreadable after restart."
        )
        return cls(generate_key())

    def encrypt(self, plaintext: str) -> str:
        nonce = os.urandom(NONCE_LENGTH)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + ciphertext).decode("utf-8")

    def decrypt(self, ciphertext_b64: str) -> str:
        try:
            data = base64.b64decode(ciphertext_b64, validate=True)
        except (binascii.Error, ValueError):
            raise DecryptionError("Ciphertext is not valid base64")

        if len(data) < NONCE_LENGTH + TAG_LENGTH:
            raise DecryptionError("Ciphertext is truncated")

        nonce, ciphertext = data[:NONCE_LENGTH], data[NONCE_LENGTH:]
        try:
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag:
            raise DecryptionError("Ciphertext failed authentication")

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionError("Decrypted field is not UTF-8")
