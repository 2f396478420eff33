"""
Unit tests for access token signing and verification.
"""
import base64
import json

import pytest
from jose import jwt

from m2m_auth_service.exceptions import (
    InvalidAudience,
    InvalidIssuer,
    InvalidSignature,
    MalformedToken,
    TokenExpired,
)
from m2m_auth_service.signing_secret import SigningSecret
from m2m_auth_service.token_codec import AccessTokenClaims, TokenCodec
from tests.fixtures.fakes import TEST_SIGNING_KEY, FakeClock

ISSUER = "m2m_auth_service"
AUDIENCE = "m2m_services"
SECRET = SigningSecret(value=TEST_SIGNING_KEY, algorithm="HS256")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec(clock) -> TokenCodec:
    return TokenCodec(issuer=ISSUER, audience=AUDIENCE, lifetime_seconds=3600, clock=clock)


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


class TestSign:
    def test_build_claims_uses_clock_and_lifetime(self, codec, clock):
        claims = codec.build_claims("svc-a")

        assert claims.sub == "svc-a"
        assert claims.iss == ISSUER
        assert claims.aud == AUDIENCE
        assert claims.iat == int(clock.now)
        assert claims.exp - claims.iat == 3600

    def test_signed_token_is_a_jws_with_expected_header(self, codec):
        token = codec.sign(codec.build_claims("svc-a"), SECRET)

        assert token.count(".") == 2
        header = jwt.get_unverified_header(token)
        assert header["alg"] == "HS256"
        assert header["typ"] == "JWT"

    def test_sign_then_verify(self, codec):
        token = codec.sign(codec.build_claims("svc-a"), SECRET)

        claims = codec.verify(token, SECRET)

        assert claims.sub == "svc-a"
        assert claims.aud == AUDIENCE


class TestVerify:
    def test_wrong_key_is_invalid_signature(self, codec):
        token = codec.sign(codec.build_claims("svc-a"), SECRET)

        with pytest.raises(InvalidSignature):
            codec.verify(token, SigningSecret(value=b"another-key"))

    def test_tampered_payload_is_invalid_signature(self, codec):
        token = codec.sign(codec.build_claims("svc-a"), SECRET)
        header, _, signature = token.split(".")
        forged_claims = codec.build_claims("svc-admin").model_dump()

        with pytest.raises(InvalidSignature):
            codec.verify(f"{header}.{_b64(forged_claims)}.{signature}", SECRET)

    def test_algorithm_none_is_rejected(self, codec):
        claims = codec.build_claims("svc-a").model_dump()
        unsigned = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64(claims)}."

        with pytest.raises(InvalidSignature):
            codec.verify(unsigned, SECRET)

    def test_garbage_is_invalid_signature(self, codec):
        with pytest.raises(InvalidSignature):
            codec.verify("not-a-token", SECRET)

    def test_missing_claim_fails_closed(self, codec, clock):
        token = jwt.encode(
            {"sub": "svc-a", "iss": ISSUER, "aud": AUDIENCE, "iat": int(clock.now)},
            TEST_SIGNING_KEY,
            algorithm="HS256",
        )

        with pytest.raises(InvalidSignature):
            codec.verify(token, SECRET)

    def test_mistyped_claim_fails_closed(self, codec, clock):
        token = jwt.encode(
            {
                "sub": "svc-a",
                "iss": ISSUER,
                "aud": AUDIENCE,
                "iat": int(clock.now),
                "exp": str(int(clock.now) + 60),
            },
            TEST_SIGNING_KEY,
            algorithm="HS256",
        )

        with pytest.raises(InvalidSignature):
            codec.verify(token, SECRET)

    def test_expired_token(self, codec, clock):
        token = codec.sign(codec.build_claims("svc-a"), SECRET)
        clock.advance(3600)

        with pytest.raises(TokenExpired):
            codec.verify(token, SECRET)

    def test_token_valid_until_just_before_exp(self, codec, clock):
        token = codec.sign(codec.build_claims("svc-a"), SECRET)
        clock.advance(3599)

        assert codec.verify(token, SECRET).sub == "svc-a"

    def test_wrong_issuer(self, codec, clock):
        other = TokenCodec(issuer="someone-else", audience=AUDIENCE, clock=clock)
        token = other.sign(other.build_claims("svc-a"), SECRET)

        with pytest.raises(InvalidIssuer):
            codec.verify(token, SECRET)

    def test_wrong_audience(self, codec, clock):
        other = TokenCodec(issuer=ISSUER, audience="other-services", clock=clock)
        token = other.sign(other.build_claims("svc-a"), SECRET)

        with pytest.raises(InvalidAudience):
            codec.verify(token, SECRET)


class TestDecode:
    def test_decode_without_verification(self, codec):
        token = codec.sign(codec.build_claims("svc-a"), SigningSecret(value=b"unknown-key"))

        claims = codec.decode(token)

        assert isinstance(claims, AccessTokenClaims)
        assert claims.sub == "svc-a"

    def test_decode_garbage_is_malformed(self, codec):
        with pytest.raises(MalformedToken):
            codec.decode("definitely.not.jwt")
