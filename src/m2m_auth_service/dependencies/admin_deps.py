import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from m2m_auth_service.bootstrap import AuthServices
from m2m_auth_service.dependencies.app_deps import get_services

logger = logging.getLogger(__name__)


async def require_admin_client(
    request: Request,
    authorization: Optional[str] = Header(None),
    services: AuthServices = Depends(get_services),
) -> str:
    """
    Dependency guarding the client management endpoints.

    The caller's bearer token goes through the same Authorizer the request
    router uses. A Deny is a 401; an Allow for a client that is not listed in
    ADMIN_CLIENT_IDS is a 403. Returns the admin's client ID.
    """
    decision = await services.authorizer.authorize(
        authorization, f"{request.method} {request.url.path}"
    )
    if not decision.is_allowed:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if decision.principal_id not in services.settings.ADMIN_CLIENT_IDS:
        logger.warning(f"Admin access denied for client {decision.principal_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client does not have admin privileges",
        )

    return decision.principal_id
