# src/m2m_auth_service/security.py
import hashlib
import secrets  # For generating client secrets

from passlib.context import CryptContext


def build_secret_context(rounds: int = 12) -> CryptContext:
    """
    CryptContext used for client secret hashes. Create it once and reuse it.
    """
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def generate_client_secret(n_bytes: int = 32) -> str:
    """
    Generates a cryptographically strong URL-safe text string for client secrets.
    Default length is 32 bytes, resulting in a ~43 character string.
    """
    return secrets.token_urlsafe(n_bytes)


def hash_secret(secret: str, context: CryptContext) -> str:
    """
    Hashes a secret string using bcrypt.
    """
    return context.hash(secret)


def verify_client_secret(
    plain_secret: str, hashed_secret: str, context: CryptContext
) -> bool:
    """
    Verifies a plain secret against a hashed secret.
    Returns True if the secret matches, False otherwise (including unparseable hashes).
    """
    try:
        return context.verify(plain_secret, hashed_secret)
    except (ValueError, TypeError):
        return False


def token_fingerprint(token: str) -> str:
    """Deterministic cache key for a raw token string."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
