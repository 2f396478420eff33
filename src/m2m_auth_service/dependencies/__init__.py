from .app_deps import (
    get_authorizer,
    get_issuer,
    get_registry,
    get_services,
)
from .admin_deps import require_admin_client

__all__ = [
    "get_authorizer",
    "get_issuer",
    "get_registry",
    "get_services",
    "require_admin_client",
]
