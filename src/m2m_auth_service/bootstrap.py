import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from m2m_auth_service.authorizer import Authorizer
from m2m_auth_service.config import Settings
from m2m_auth_service.crud.client_registry import ClientRegistry
from m2m_auth_service.decision_cache import DecisionCache
from m2m_auth_service.issuer import TokenIssuer
from m2m_auth_service.security import build_secret_context
from m2m_auth_service.signing_secret import (
    AwsSecretsManagerStore,
    EnvironmentSecretStore,
    SecretStore,
    SigningSecretAccessor,
)
from m2m_auth_service.token_codec import TokenCodec

logger = logging.getLogger(__name__)


@dataclass
class AuthServices:
    """Everything built once per worker process and shared by reference."""

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    registry: ClientRegistry
    secret_accessor: SigningSecretAccessor
    codec: TokenCodec
    decision_cache: DecisionCache
    issuer: TokenIssuer
    authorizer: Authorizer


def build_secret_store(settings: Settings) -> SecretStore:
    if settings.SIGNING_SECRET_BACKEND == "aws":
        return AwsSecretsManagerStore(
            region_name=settings.AWS_REGION,
            default_algorithm=settings.SIGNING_ALGORITHM,
        )
    return EnvironmentSecretStore(algorithm=settings.SIGNING_ALGORITHM)


def build_services(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    secret_store: Optional[SecretStore] = None,
    clock: Callable[[], float] = time.time,
) -> AuthServices:
    secret_accessor = SigningSecretAccessor(
        secret_store or build_secret_store(settings), settings.SIGNING_SECRET_ID
    )
    codec = TokenCodec(
        issuer=settings.TOKEN_ISSUER,
        audience=settings.TOKEN_AUDIENCE,
        lifetime_seconds=settings.TOKEN_LIFETIME_SECONDS,
        clock=clock,
    )
    registry = ClientRegistry(
        session_factory,
        build_secret_context(settings.CLIENT_SECRET_HASH_ROUNDS),
        clock=clock,
    )
    decision_cache = DecisionCache(
        ttl_seconds=settings.DECISION_CACHE_TTL_SECONDS,
        max_entries=settings.DECISION_CACHE_MAX_ENTRIES,
        clock=clock,
    )

    logger.info(
        f"Auth services configured: secret backend={settings.SIGNING_SECRET_BACKEND}, "
        f"token lifetime={settings.TOKEN_LIFETIME_SECONDS}s, "
        f"decision cache ttl={settings.DECISION_CACHE_TTL_SECONDS}s"
    )
    return AuthServices(
        settings=settings,
        session_factory=session_factory,
        registry=registry,
        secret_accessor=secret_accessor,
        codec=codec,
        decision_cache=decision_cache,
        issuer=TokenIssuer(registry, secret_accessor, codec),
        authorizer=Authorizer(secret_accessor, codec, decision_cache),
    )
