from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from m2m_auth_service.crud.client_registry import ClientRecord, CreatedClient


class ClientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name of the client.")
    description: Optional[str] = Field(None, max_length=500, description="Optional description for the client.")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "name": "svc-a",
                    "description": "Inventory service calling the items API.",
                }
            ]
        },
    )


class ClientUpdateRequest(BaseModel):
    # Only name and description are mutable; anything else is rejected.
    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Name of the client.")
    description: Optional[str] = Field(None, max_length=500, description="Optional description for the client.")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"examples": [{"name": "svc-a-renamed", "description": "Updated description"}]},
    )


class ClientResponse(BaseModel):
    client_id: str = Field(..., description="The unique identifier for the client (UUID).")
    name: str = Field(..., description="Name of the client.")
    description: Optional[str] = Field(None, description="Optional description for the client.")
    is_active: bool = Field(..., description="Whether the client may obtain tokens.")
    created_at: datetime = Field(..., description="Timestamp of when the client was created.")
    updated_at: datetime = Field(..., description="Timestamp of when the client was last updated.")

    @classmethod
    def from_record(cls, record: ClientRecord) -> "ClientResponse":
        return cls(
            client_id=record.client_id,
            name=record.name,
            description=record.description,
            is_active=record.is_active,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ClientCreatedResponse(ClientResponse):
    client_secret: str = Field(..., description="The client secret. Only shown once.")

    @classmethod
    def from_created(cls, created: CreatedClient) -> "ClientCreatedResponse":
        return cls(
            **ClientResponse.from_record(created.record).model_dump(),
            client_secret=created.client_secret,
        )


class ClientListResponse(BaseModel):
    clients: List[ClientResponse] = Field(..., description="List of clients.")
    count: int = Field(..., description="Total count of clients matching the filter.")
