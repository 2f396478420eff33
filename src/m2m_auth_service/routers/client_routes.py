import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from m2m_auth_service.crud.client_registry import ClientRegistry
from m2m_auth_service.dependencies.admin_deps import require_admin_client
from m2m_auth_service.dependencies.app_deps import get_registry
from m2m_auth_service.exceptions import ClientNotFound
from m2m_auth_service.schemas.client_schemas import (
    ClientCreatedResponse,
    ClientCreateRequest,
    ClientListResponse,
    ClientResponse,
    ClientUpdateRequest,
)
from m2m_auth_service.schemas.common_schemas import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/clients",
    tags=["Admin - Clients"],
    dependencies=[Depends(require_admin_client)],
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Invalid request body or parameters"},
        status.HTTP_401_UNAUTHORIZED: {"model": MessageResponse},
        status.HTTP_403_FORBIDDEN: {"model": MessageResponse},
    },
)


def _not_found(client_id: str) -> HTTPException:
    logger.warning(f"Client with ID '{client_id}' not found.")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Client with ID '{client_id}' not found.",
    )


@router.post(
    "",
    response_model=ClientCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new client",
)
async def create_client(
    client_data: ClientCreateRequest,
    registry: ClientRegistry = Depends(get_registry),
) -> ClientCreatedResponse:
    """
    Provision a client. The response carries the plaintext **client_secret**;
    it is shown here once and cannot be retrieved again (only rotated).
    """
    logger.info(f"Admin creating client: {client_data.name}")
    created = await registry.create(client_data.name, client_data.description)
    return ClientCreatedResponse.from_created(created)


@router.get(
    "",
    response_model=ClientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List clients",
)
async def list_clients(
    registry: ClientRegistry = Depends(get_registry),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=100, description="Maximum number of items to return"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
) -> ClientListResponse:
    clients, total = await registry.list(offset=offset, limit=limit, is_active=is_active)
    return ClientListResponse(
        clients=[ClientResponse.from_record(client) for client in clients],
        count=total,
    )


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a specific client",
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def get_client(
    client_id: str = Path(..., description="The ID of the client to retrieve"),
    registry: ClientRegistry = Depends(get_registry),
) -> ClientResponse:
    try:
        record = await registry.get(client_id)
    except ClientNotFound:
        raise _not_found(client_id)
    return ClientResponse.from_record(record)


@router.put(
    "/{client_id}",
    response_model=ClientResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a client's name or description",
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def update_client(
    client_data: ClientUpdateRequest,
    client_id: str = Path(..., description="The ID of the client to update"),
    registry: ClientRegistry = Depends(get_registry),
) -> ClientResponse:
    logger.info(f"Admin updating client with ID: {client_id}")
    try:
        record = await registry.update(
            client_id, name=client_data.name, description=client_data.description
        )
    except ClientNotFound:
        raise _not_found(client_id)
    return ClientResponse.from_record(record)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a client",
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def delete_client(
    client_id: str = Path(..., description="The ID of the client to deactivate"),
    registry: ClientRegistry = Depends(get_registry),
) -> Response:
    """
    Marks the client inactive. It can no longer obtain tokens but stays
    retrievable for audit. Tokens already issued remain valid until they expire.
    """
    logger.info(f"Admin deactivating client with ID: {client_id}")
    try:
        await registry.deactivate(client_id)
    except ClientNotFound:
        raise _not_found(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{client_id}/rotate-secret",
    response_model=ClientCreatedResponse,
    status_code=status.HTTP_200_OK,
    summary="Issue a new secret for a client",
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def rotate_client_secret(
    client_id: str = Path(..., description="The ID of the client whose secret is replaced"),
    registry: ClientRegistry = Depends(get_registry),
) -> ClientCreatedResponse:
    """The previous secret stops working immediately. The new one is shown once."""
    logger.info(f"Admin rotating secret for client with ID: {client_id}")
    try:
        rotated = await registry.rotate_secret(client_id)
    except ClientNotFound:
        raise _not_found(client_id)
    return ClientCreatedResponse.from_created(rotated)
