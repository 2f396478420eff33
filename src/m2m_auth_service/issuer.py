import logging
from typing import Optional

from m2m_auth_service.crud.client_registry import ClientRegistry
from m2m_auth_service.exceptions import (
    AuthServiceError,
    InvalidClient,
    InvalidRequest,
    ServerError,
    UnsupportedGrantType,
)
from m2m_auth_service.schemas.token_schemas import AccessTokenResponse
from m2m_auth_service.signing_secret import SigningSecretAccessor
from m2m_auth_service.token_codec import TokenCodec

logger = logging.getLogger(__name__)

CLIENT_CREDENTIALS_GRANT = "client_credentials"


class TokenIssuer:
    """Exchanges client credentials for signed access tokens."""

    def __init__(
        self,
        registry: ClientRegistry,
        secret_accessor: SigningSecretAccessor,
        codec: TokenCodec,
    ):
        self._registry = registry
        self._secret_accessor = secret_accessor
        self._codec = codec

    async def issue_token(
        self,
        grant_type: Optional[str],
        client_id: Optional[str],
        client_secret: Optional[str],
    ) -> AccessTokenResponse:
        """
        Validate a client_credentials grant and mint a token.

        Raises InvalidRequest / UnsupportedGrantType (400), InvalidClient (401)
        or ServerError (500). Unknown client, wrong secret and inactive client
        all produce the same InvalidClient.
        """
        if not grant_type:
            raise InvalidRequest("grant_type is required")
        if grant_type != CLIENT_CREDENTIALS_GRANT:
            logger.warning(f"Invalid grant_type '{grant_type}' provided")
            raise UnsupportedGrantType(f"grant_type '{grant_type}' is not supported")
        if not client_id or not client_secret:
            raise InvalidRequest("client_id and client_secret are required")

        try:
            if not await self._registry.verify_credentials(client_id, client_secret):
                logger.warning(
                    f"Rejected credentials for client ID '{client_id}'",
                    extra={"client_id": client_id},
                )
                raise InvalidClient("Invalid client credentials")

            secret = await self._secret_accessor.get_signing_secret()
            claims = self._codec.build_claims(client_id)
            token = self._codec.sign(claims, secret)
        except InvalidClient:
            raise
        except AuthServiceError as e:
            logger.error(
                f"Token issuance failed for client ID '{client_id}': {e.message}",
                extra={"client_id": client_id},
            )
            raise ServerError() from e
        except Exception as e:
            logger.error(
                f"Unexpected error issuing token for client ID '{client_id}': {e.__class__.__name__}",
                exc_info=True,
                extra={"client_id": client_id},
            )
            raise ServerError() from e

        logger.info(f"Generated token for client ID '{client_id}'", extra={"client_id": client_id})
        return AccessTokenResponse(
            access_token=token,
            token_type="Bearer",
            expires_in=self._codec.lifetime_seconds,
        )
