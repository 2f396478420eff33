from .common_schemas import MessageResponse
from .authorizer_schemas import AuthorizerRequest, PolicyDecision, PolicyDocument
from .token_schemas import AccessTokenResponse, ClientTokenRequest, OAuthErrorResponse
from .client_schemas import (
    ClientCreateRequest,
    ClientCreatedResponse,
    ClientListResponse,
    ClientResponse,
    ClientUpdateRequest,
)

__all__ = [
    "MessageResponse",
    "AuthorizerRequest",
    "PolicyDecision",
    "PolicyDocument",
    "AccessTokenResponse",
    "ClientTokenRequest",
    "OAuthErrorResponse",
    "ClientCreateRequest",
    "ClientCreatedResponse",
    "ClientListResponse",
    "ClientResponse",
    "ClientUpdateRequest",
]
