from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ALLOW = "Allow"
DENY = "Deny"


class AuthorizerRequest(BaseModel):
    authorization_token: Optional[str] = Field(
        None,
        alias="authorizationToken",
        description="Raw Authorization header value, e.g. 'Bearer <token>'.",
    )
    method_arn: Optional[str] = Field(
        None, alias="methodArn", description="Resource being invoked (API Gateway style)."
    )
    resource_identifier: Optional[str] = Field(
        None, alias="resourceIdentifier", description="Resource being invoked."
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "authorizationToken": "Bearer eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                    "methodArn": "arn:aws:execute-api:us-east-1:123456789012:abc123/prod/GET/items",
                }
            ]
        },
    )

    @property
    def resource(self) -> str:
        return self.method_arn or self.resource_identifier or ""


class PolicyDocument(BaseModel):
    Effect: Literal["Allow", "Deny"]
    Resource: str


class PolicyDecision(BaseModel):
    principal_id: str = Field(..., alias="principalId")
    policy_document: PolicyDocument = Field(..., alias="policyDocument")
    context: Dict[str, str] = Field(
        default_factory=dict, description="Populated only on Allow decisions."
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_allowed(self) -> bool:
        return self.policy_document.Effect == ALLOW
