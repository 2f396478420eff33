import logging
import re
from typing import Optional

from m2m_auth_service.decision_cache import CachedDecision, DecisionCache
from m2m_auth_service.exceptions import SecretUnavailable, TokenVerificationError
from m2m_auth_service.schemas.authorizer_schemas import (
    ALLOW,
    DENY,
    PolicyDecision,
    PolicyDocument,
)
from m2m_auth_service.security import token_fingerprint
from m2m_auth_service.signing_secret import SigningSecretAccessor
from m2m_auth_service.token_codec import TokenCodec

logger = logging.getLogger(__name__)

ANONYMOUS_PRINCIPAL = "anonymous"

_BEARER_PATTERN = re.compile(r"Bearer (\S+)")

_DENIED = CachedDecision(effect=DENY, principal_id=ANONYMOUS_PRINCIPAL)


def extract_bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    """Return the token of an exact 'Bearer <token>' header, else None."""
    if not authorization_header:
        return None
    match = _BEARER_PATTERN.fullmatch(authorization_header)
    return match.group(1) if match else None


def render_policy(decision: CachedDecision, resource: str) -> PolicyDecision:
    return PolicyDecision(
        principal_id=decision.principal_id,
        policy_document=PolicyDocument(Effect=decision.effect, Resource=resource),
        context=dict(decision.context) if decision.effect == ALLOW else {},
    )


class Authorizer:
    """
    Validates bearer tokens and renders Allow/Deny policies for the request
    router. Outcomes that depend only on the token (valid, expired, forged,
    wrong issuer or audience) are memoized per token fingerprint; failures of
    the secret store are not.
    """

    def __init__(
        self,
        secret_accessor: SigningSecretAccessor,
        codec: TokenCodec,
        cache: DecisionCache,
    ):
        self._secret_accessor = secret_accessor
        self._codec = codec
        self._cache = cache

    @property
    def cache(self) -> DecisionCache:
        return self._cache

    async def authorize(self, authorization_header: Optional[str], resource: str) -> PolicyDecision:
        token = extract_bearer_token(authorization_header)
        if token is None:
            logger.info("Denied request with missing or malformed Authorization header")
            return render_policy(_DENIED, resource)

        fingerprint = token_fingerprint(token)
        try:
            decision = await self._cache.get_or_compute(
                fingerprint, lambda: self._validate(token, fingerprint)
            )
        except SecretUnavailable:
            logger.warning(
                f"Denied token {fingerprint[:12]}: signing secret unavailable",
                extra={"fingerprint": fingerprint[:12]},
            )
            return render_policy(_DENIED, resource)
        except Exception as e:
            logger.error(
                f"Unexpected error validating token {fingerprint[:12]}: {e.__class__.__name__}",
                exc_info=True,
                extra={"fingerprint": fingerprint[:12]},
            )
            return render_policy(_DENIED, resource)

        return render_policy(decision, resource)

    async def _validate(self, token: str, fingerprint: str) -> CachedDecision:
        secret = await self._secret_accessor.get_signing_secret()
        try:
            claims = self._codec.verify(token, secret)
        except TokenVerificationError as e:
            logger.info(
                f"Denied token {fingerprint[:12]}: {e.__class__.__name__}",
                extra={"fingerprint": fingerprint[:12]},
            )
            return _DENIED

        logger.debug(
            f"Allowed token {fingerprint[:12]} for principal {claims.sub}",
            extra={"fingerprint": fingerprint[:12], "client_id": claims.sub},
        )
        return CachedDecision(
            effect=ALLOW,
            principal_id=claims.sub,
            context={"sub": claims.sub, "iss": claims.iss, "aud": claims.aud},
            not_after=claims.exp,
        )
