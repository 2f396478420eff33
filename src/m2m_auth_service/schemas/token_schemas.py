from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientTokenRequest(BaseModel):
    # Fields are optional here; the issuer decides between invalid_request and
    # unsupported_grant_type so the OAuth error codes stay exact.
    grant_type: Optional[str] = Field(None, description="OAuth2 grant type, must be 'client_credentials'.")
    client_id: Optional[str] = Field(None, description="The client ID.")
    client_secret: Optional[str] = Field(None, description="The client secret.")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "grant_type": "client_credentials",
                    "client_id": "550e8400-e29b-41d4-a716-446655440000",
                    "client_secret": "a-very-secret-key-generated-by-the-system",
                }
            ]
        }
    )


class AccessTokenResponse(BaseModel):
    access_token: str = Field(..., description="The signed access token.")
    token_type: Literal["Bearer"] = Field(default="Bearer", description="The type of token, always 'Bearer'.")
    expires_in: int = Field(..., description="Token lifetime in seconds.")


class OAuthErrorResponse(BaseModel):
    error: str = Field(..., description="OAuth2 error code.")
