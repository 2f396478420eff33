from fastapi import APIRouter, Depends, status

from m2m_auth_service.authorizer import Authorizer
from m2m_auth_service.dependencies.app_deps import get_authorizer
from m2m_auth_service.schemas.authorizer_schemas import AuthorizerRequest, PolicyDecision

router = APIRouter(
    prefix="/auth",
    tags=["Authorizer"],
)


@router.post(
    "/authorize",
    response_model=PolicyDecision,
    status_code=status.HTTP_200_OK,
    summary="Render an Allow/Deny policy for a bearer token",
)
async def authorize_request(
    event: AuthorizerRequest,
    authorizer: Authorizer = Depends(get_authorizer),
) -> PolicyDecision:
    """
    Invoked by the request router ahead of protected handlers. The decision is
    carried in the body; the HTTP status is always 200.
    """
    return await authorizer.authorize(event.authorization_token, event.resource)
