"""Tests for FieldCipher and APP_KEY parsing."""

import base64

import pytest

from securevault.core.config import Settings
from securevault.core.crypto_utils import FieldCipher, generate_key, parse_app_key
from securevault.core.errors import DecryptionError


@pytest.fixture
def field_cipher():
    return FieldCipher(generate_key())


class TestRoundTrip:

    @pytest.mark.parametrize("plaintext", ["alice", "p@ss1", "", "über 🔐 секрет", "x" * 5000])
    def test_decrypt_returns_original(self, field_cipher, plaintext):
        assert field_cipher.decrypt(field_cipher.encrypt(plaintext)) == plaintext

    def test_ciphertext_does_not_contain_plaintext(self, field_cipher):
        token = field_cipher.encrypt("work account")
        assert "work account" not in token
        assert b"work account" not in base64.b64decode(token)


class TestNonDeterminism:

    def test_same_plaintext_encrypts_differently(self, field_cipher):
        tokens = {field_cipher.encrypt("hunter2") for _ in range(20)}
        assert len(tokens) == 20


class TestTamperDetection:

    def test_flipped_byte_is_rejected(self, field_cipher):
        raw = bytearray(base64.b64decode(field_cipher.encrypt("secret")))
        raw[-1] ^= 0x01
        with pytest.raises(DecryptionError):
            field_cipher.decrypt(base64.b64encode(bytes(raw)).decode())

    def test_wrong_key_is_rejected(self, field_cipher):
        token = field_cipher.encrypt("secret")
        with pytest.raises(DecryptionError):
            FieldCipher(generate_key()).decrypt(token)

    def test_garbage_is_rejected(self, field_cipher):
        with pytest.raises(DecryptionError):
            field_cipher.decrypt("not base64!!")

    def test_truncated_payload_is_rejected(self, field_cipher):
        with pytest.raises(DecryptionError):
            field_cipher.decrypt(base64.b64encode(b"short").decode())


class TestKeyLoading:

    def test_parse_prefixed_key(self):
        key = generate_key()
        assert parse_app_key("base64:" + base64.b64encode(key).decode()) == key

    def test_parse_bare_key(self):
        key = generate_key()
        assert parse_app_key(base64.b64encode(key).decode()) == key

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError):
            parse_app_key(base64.b64encode(b"too short").decode())

    def test_cipher_requires_32_byte_key(self):
        with pytest.raises(ValueError):
            FieldCipher(b"\x00" * 16)

    def test_from_settings_uses_configured_key(self):
        key = generate_key()
        settings = Settings(APP_KEY="base64:" + base64.b64encode(key).decode())
        token = FieldCipher.from_settings(settings).encrypt("hello")
        assert FieldCipher(key).decrypt(token) == "hello"

    def test_missing_key_in_production_fails(self):
        settings = Settings(APP_KEY="", ENVIRONMENT="production")
        with pytest.raises(RuntimeError):
            FieldCipher.from_settings(settings)

    def test_missing_key_outside_production_is_ephemeral(self):
        settings = Settings(APP_KEY="", ENVIRONMENT="development")
        first = FieldCipher.from_settings(settings)
        second = FieldCipher.from_settings(settings)
        with pytest.raises(DecryptionError):
            second.decrypt(first.encrypt("gone after restart"))
