import logging
import time
from typing import Callable, Optional

from jose import jws, jwt
from jose.exceptions import JOSEError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from m2m_auth_service.exceptions import (
    InvalidAudience,
    InvalidIssuer,
    InvalidSignature,
    MalformedToken,
    TokenExpired,
)
from m2m_auth_service.signing_secret import SigningSecret

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class AccessTokenClaims(BaseModel):
    """
    Fixed claim set carried by every access token. Validation is strict: a
    payload missing any field, or carrying one with the wrong type, is rejected.
    """

    sub: str = Field(..., min_length=1)
    iss: str
    aud: str
    iat: int
    exp: int

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")


class TokenCodec:
    """Signs and verifies HMAC access tokens (JWS compact serialization)."""

    def __init__(
        self,
        issuer: str,
        audience: str,
        lifetime_seconds: int = 3600,
        clock: Clock = time.time,
    ):
        self.issuer = issuer
        self.audience = audience
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock

    def build_claims(self, subject: str, now: Optional[float] = None) -> AccessTokenClaims:
        issued_at = int(self._clock() if now is None else now)
        return AccessTokenClaims(
            sub=subject,
            iss=self.issuer,
            aud=self.audience,
            iat=issued_at,
            exp=issued_at + self.lifetime_seconds,
        )

    def sign(self, claims: AccessTokenClaims, secret: SigningSecret) -> str:
        return jwt.encode(claims.model_dump(), secret.value, algorithm=secret.algorithm)

    def verify(self, token: str, secret: SigningSecret) -> AccessTokenClaims:
        """
        Return the token's claims if the signature, expiry, issuer and audience
        all check out; raise the matching TokenVerificationError otherwise.
        """
        try:
            # Only the secret's own algorithm is accepted, so "none" or a
            # downgraded header never verifies.
            payload = jws.verify(token, secret.value, algorithms=[secret.algorithm])
            claims = AccessTokenClaims.model_validate_json(payload)
        except (JOSEError, ValidationError, ValueError, TypeError) as e:
            raise InvalidSignature(f"Token rejected: {e.__class__.__name__}") from e

        if self._clock() >= claims.exp:
            raise TokenExpired("Token has expired")
        if claims.iss != self.issuer:
            raise InvalidIssuer("Unexpected token issuer")
        if claims.aud != self.audience:
            raise InvalidAudience("Unexpected token audience")
        return claims

    def decode(self, token: str) -> AccessTokenClaims:
        """
        Decode claims WITHOUT verifying the signature. For introspection and
        diagnostics only; never base an authorization decision on the result.
        """
        try:
            return AccessTokenClaims.model_validate(jwt.get_unverified_claims(token))
        except (JOSEError, ValidationError, ValueError, TypeError) as e:
            raise MalformedToken(f"Token could not be decoded: {e.__class__.__name__}") from e
