"""Tests for session tokens, session providers and secret sealing."""

import asyncio
from datetime import timedelta

import pytest

from wphub.auth import (
    AesGcmSecretSealer,
    Identity,
    PlaintextSecretSealer,
    SealingPolicy,
    SecretSealingError,
    SignedTokenSessionProvider,
    create_session_token,
    validate_session_token,
)


class TestSessionTokens:
    def test_round_trip(self):
        token = create_session_token("u1", "secret", email="u1@example.com", name="User")
        payload = validate_session_token(token, "secret")

        assert payload["user_id"] == "u1"
        assert payload["email"] == "u1@example.com"

    def test_wrong_key_is_rejected(self):
        token = create_session_token("u1", "secret")
        assert validate_session_token(token, "other") is None

    def test_expired_token_is_rejected(self):
        token = create_session_token("u1", "secret", expires_in=timedelta(seconds=-1))
        assert validate_session_token(token, "secret") is None

    def test_garbage_is_rejected(self):
        assert validate_session_token("not-a-token", "secret") is None

    def test_provider_resolves_identity(self):
        provider = SignedTokenSessionProvider("secret")
        token = create_session_token("u1", "secret", name="User")

        identity = asyncio.run(provider.resolve(token))

        assert identity == Identity(user_id="u1", email=None, name="User")
        assert asyncio.run(provider.resolve(None)) is None


class TestSealing:
    def test_aes_round_trip_uses_hex_triplet(self):
        sealer = AesGcmSecretSealer("key")
        sealed = sealer.seal("abcd 1234")

        iv, ciphertext, tag = sealed.split(":")
        assert len(bytes.fromhex(iv)) == 12
        assert len(bytes.fromhex(tag)) == 16
        assert bytes.fromhex(ciphertext)
        assert sealer.unseal(sealed) == "abcd 1234"

    def test_wrong_key_fails_authentication(self):
        sealed = AesGcmSecretSealer("key").seal("secret")
        with pytest.raises(SecretSealingError):
            AesGcmSecretSealer("other-key").unseal(sealed)

    def test_legacy_plaintext_passes_through(self):
        assert AesGcmSecretSealer("key").unseal("plain password") == "plain password"

    def test_policy_allows_plaintext_outside_production(self):
        policy = SealingPolicy("key", allow_plaintext=True)
        assert isinstance(policy.sealer_for(True), PlaintextSecretSealer)
        assert isinstance(policy.sealer_for(False), AesGcmSecretSealer)

    def test_policy_ignores_disable_in_production(self):
        policy = SealingPolicy("key", allow_plaintext=False)
        assert isinstance(policy.sealer_for(True), AesGcmSecretSealer)

    def test_policy_requires_key(self):
        with pytest.raises(ValueError):
            SealingPolicy(None, allow_plaintext=False).sealer_for()

    def test_policy_from_settings(self, settings):
        settings.environment = "production"
        policy = SealingPolicy.from_settings(settings)
        assert isinstance(policy.sealer_for(True), AesGcmSecretSealer)
