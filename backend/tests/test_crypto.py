"""Tests for provider credential encryption."""

from unittest.mock import patch

import pytest
from cryptography.fernet import InvalidToken

from propnotify.config import Settings
from propnotify.crypto import decrypt_value, encrypt_value, reveal
from propnotify.integrations.delivery import PushConfig


class TestCrypto:
    def test_roundtrip(self):
        token = encrypt_value("vapid-private-key")

        assert token != "vapid-private-key"
        assert decrypt_value(token) == "vapid-private-key"

    def test_reveal_plaintext_passthrough(self):
        assert reveal("plain-server-key") == "plain-server-key"
        assert reveal("") == ""

    def test_reveal_decrypts_token(self):
        assert reveal(encrypt_value("secret")) == "secret"

    def test_wrong_secret_fails(self):
        token = encrypt_value("secret")
        with patch("propnotify.crypto.settings") as mock_settings:
            mock_settings.secret_key = "another-secret"
            with pytest.raises(InvalidToken):
                decrypt_value(token)


class TestPushConfigFromSettings:
    def test_reveals_encrypted_keys(self):
        s = Settings(
            vapid_private_key=encrypt_value("vapid-key"),
            fcm_server_key="fcm-key",
            bulk_batch_size=25,
        )

        config = PushConfig.from_settings(s)

        assert config.vapid_private_key == "vapid-key"
        assert config.fcm_server_key == "fcm-key"
        assert config.batch_size == 25
