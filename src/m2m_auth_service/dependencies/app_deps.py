from fastapi import Depends, HTTPException, Request, status

from m2m_auth_service.authorizer import Authorizer
from m2m_auth_service.bootstrap import AuthServices
from m2m_auth_service.crud.client_registry import ClientRegistry
from m2m_auth_service.issuer import TokenIssuer


def get_services(request: Request) -> AuthServices:
    """
    Returns the per-process service container built during application startup.
    """
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return services


def get_registry(services: AuthServices = Depends(get_services)) -> ClientRegistry:
    return services.registry


def get_issuer(services: AuthServices = Depends(get_services)) -> TokenIssuer:
    return services.issuer


def get_authorizer(services: AuthServices = Depends(get_services)) -> Authorizer:
    return services.authorizer
