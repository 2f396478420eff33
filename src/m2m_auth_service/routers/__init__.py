from . import authorizer_routes, client_routes, token_routes

__all__ = ["authorizer_routes", "client_routes", "token_routes"]
