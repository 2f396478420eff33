import logging

from fastapi import APIRouter, Depends, Request, Response, status

from m2m_auth_service.dependencies.app_deps import get_issuer
from m2m_auth_service.issuer import TokenIssuer
from m2m_auth_service.rate_limiting import TOKEN_LIMIT, limiter
from m2m_auth_service.schemas.token_schemas import (
    AccessTokenResponse,
    ClientTokenRequest,
    OAuthErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Token Acquisition"],
)


@router.post(
    "/token",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Obtain an access token using client credentials",
    responses={
        status.HTTP_200_OK: {
            "description": "Successfully generated access token",
            "content": {
                "application/json": {
                    "example": {
                        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                        "token_type": "Bearer",
                        "expires_in": 3600,
                    }
                }
            },
        },
        status.HTTP_400_BAD_REQUEST: {
            "description": "Malformed request or unsupported grant type",
            "model": OAuthErrorResponse,
        },
        status.HTTP_401_UNAUTHORIZED: {
            "description": "Client authentication failed",
            "model": OAuthErrorResponse,
        },
        status.HTTP_429_TOO_MANY_REQUESTS: {"description": "Rate limit exceeded"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "description": "Token could not be issued",
            "model": OAuthErrorResponse,
        },
    },
)
@limiter.limit(TOKEN_LIMIT)
async def get_client_token(
    request: Request,
    response: Response,
    token_request: ClientTokenRequest,
    issuer: TokenIssuer = Depends(get_issuer),
) -> AccessTokenResponse:
    """
    Obtain an access token using client credentials (OAuth 2.0 client_credentials grant).

    ## Request Parameters
    - **grant_type**: Must be 'client_credentials'.
    - **client_id**: The ID of the registered client.
    - **client_secret**: The secret issued when the client was created or last rotated.

    ## Token Claims
    sub (the client ID), iss, aud, iat, exp.

    ## Error Handling
    - 400 `invalid_request` for missing parameters, `unsupported_grant_type` for other grants
    - 401 `invalid_client` for unknown clients, wrong secrets and inactive clients alike
    - 500 `server_error` when a downstream store is unavailable
    """
    token = await issuer.issue_token(
        token_request.grant_type,
        token_request.client_id,
        token_request.client_secret,
    )
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return token
