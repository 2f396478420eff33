"""
Unit tests for client secret generation, hashing and token fingerprints.
"""
from m2m_auth_service.security import (
    build_secret_context,
    generate_client_secret,
    hash_secret,
    token_fingerprint,
    verify_client_secret,
)

context = build_secret_context(rounds=4)


class TestClientSecrets:
    def test_generate_client_secret_is_random_and_long(self):
        first = generate_client_secret()
        second = generate_client_secret()

        assert first != second
        # 32 random bytes encode to 43 URL-safe characters
        assert len(first) >= 43

    def test_hash_and_verify_secret(self):
        secret = generate_client_secret()
        hashed = hash_secret(secret, context)

        assert hashed != secret
        assert hashed.startswith("$2")
        assert verify_client_secret(secret, hashed, context) is True
        assert verify_client_secret("wrong-secret", hashed, context) is False

    def test_verify_with_unparseable_hash_returns_false(self):
        assert verify_client_secret("anything", "not-a-bcrypt-hash", context) is False


class TestTokenFingerprint:
    def test_fingerprint_is_sha256_hex(self):
        fingerprint = token_fingerprint("abc")

        assert fingerprint == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_fingerprint_distinguishes_tokens(self):
        assert token_fingerprint("token-a") != token_fingerprint("token-b")
        assert token_fingerprint("token-a") == token_fingerprint("token-a")
