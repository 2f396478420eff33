"""
Error taxonomy for the M2M auth service.

Every error that can cross the HTTP boundary carries a fixed machine code and
status; the human message stays internal and is only ever logged.
"""

from typing import Optional


class AuthServiceError(Exception):
    """Base exception for the auth service."""

    error: str = "server_error"
    status_code: int = 500

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.error
        super().__init__(self.message)


# --- Token issuance -----------------------------------------------------------


class InvalidRequest(AuthServiceError):
    error = "invalid_request"
    status_code = 400


class UnsupportedGrantType(AuthServiceError):
    error = "unsupported_grant_type"
    status_code = 400


class InvalidClient(AuthServiceError):
    """Unknown client, wrong secret or inactive client. Deliberately uninformative."""

    error = "invalid_client"
    status_code = 401


class ServerError(AuthServiceError):
    error = "server_error"
    status_code = 500


# --- Downstream collaborators ------------------------------------------------


class StoreUnavailable(AuthServiceError):
    """The client record store could not be reached or failed mid-operation."""

    error = "server_error"
    status_code = 500


class SecretUnavailable(AuthServiceError):
    """The secret store failed before a signing secret was memoized."""

    error = "server_error"
    status_code = 500


class ClientNotFound(AuthServiceError):
    error = "not_found"
    status_code = 404

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client '{client_id}' not found")


# --- Token verification -------------------------------------------------------


class TokenVerificationError(AuthServiceError):
    """Base for every reason a bearer token is not trusted."""

    error = "invalid_token"
    status_code = 401


class InvalidSignature(TokenVerificationError):
    pass


class TokenExpired(TokenVerificationError):
    pass


class InvalidIssuer(TokenVerificationError):
    pass


class InvalidAudience(TokenVerificationError):
    pass


class MalformedToken(TokenVerificationError):
    """Raised by unverified decoding when the token cannot be parsed at all."""
