"""
Signing secret lookup and per-process memoization.

The secret store is consulted once per worker process; the accessor keeps the
result for the life of the process (or until ``invalidate()`` is called) and
is handed by reference to whatever needs to sign or verify tokens.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from m2m_auth_service.config import SUPPORTED_SIGNING_ALGORITHMS
from m2m_auth_service.exceptions import SecretUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningSecret:
    value: bytes = field(repr=False)
    algorithm: str = "HS256"

    def __post_init__(self):
        if not self.value:
            raise SecretUnavailable("Signing secret is empty")
        if self.algorithm not in SUPPORTED_SIGNING_ALGORITHMS:
            raise SecretUnavailable(f"Unsupported signing algorithm '{self.algorithm}'")


class SecretStore:
    """Interface of the external store holding the signing secret."""

    async def fetch(self, secret_id: str) -> SigningSecret:
        raise NotImplementedError


class EnvironmentSecretStore(SecretStore):
    """Reads the secret from the environment variable named by ``secret_id``."""

    def __init__(self, algorithm: str = "HS256", environ: Optional[Mapping[str, str]] = None):
        self.algorithm = algorithm
        self._environ = environ if environ is not None else os.environ

    async def fetch(self, secret_id: str) -> SigningSecret:
        value = self._environ.get(secret_id)
        if not value:
            raise SecretUnavailable(f"Environment variable '{secret_id}' is not set")
        return SigningSecret(value=value.encode("utf-8"), algorithm=self.algorithm)


class AwsSecretsManagerStore(SecretStore):
    """
    AWS Secrets Manager backed store.

    The secret string is either the raw key or a JSON object of the form
    ``{"secret": "...", "algorithm": "HS256"}``.
    """

    def __init__(self, region_name: Optional[str] = None, client=None, default_algorithm: str = "HS256"):
        self.region_name = region_name
        self.default_algorithm = default_algorithm
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self.region_name)
        return self._client

    def _fetch_sync(self, secret_id: str) -> SigningSecret:
        response = self._get_client().get_secret_value(SecretId=secret_id)
        raw = response.get("SecretString")
        if raw is None:
            binary = response.get("SecretBinary")
            if not binary:
                raise SecretUnavailable(f"Secret '{secret_id}' has no value")
            return SigningSecret(value=bytes(binary), algorithm=self.default_algorithm)

        if raw.lstrip().startswith("{"):
            payload = json.loads(raw)
            value = payload.get("secret")
            if not isinstance(value, str):
                raise SecretUnavailable(f"Secret '{secret_id}' is missing the 'secret' key")
            algorithm = str(payload.get("algorithm", self.default_algorithm)).upper()
            return SigningSecret(value=value.encode("utf-8"), algorithm=algorithm)
        return SigningSecret(value=raw.encode("utf-8"), algorithm=self.default_algorithm)

    async def fetch(self, secret_id: str) -> SigningSecret:
        try:
            return await asyncio.to_thread(self._fetch_sync, secret_id)
        except (BotoCoreError, ClientError, ValueError) as e:
            raise SecretUnavailable(
                f"Secrets Manager lookup for '{secret_id}' failed: {e.__class__.__name__}"
            ) from e


class SigningSecretAccessor:
    """
    Fetches the signing secret on first use and memoizes it for the life of
    the process. Concurrent first callers share a single store fetch.
    """

    def __init__(self, store: SecretStore, secret_id: str):
        self._store = store
        self._secret_id = secret_id
        self._secret: Optional[SigningSecret] = None
        self._lock = asyncio.Lock()

    @property
    def secret_id(self) -> str:
        return self._secret_id

    @property
    def is_loaded(self) -> bool:
        return self._secret is not None

    async def get_signing_secret(self) -> SigningSecret:
        if self._secret is not None:
            return self._secret

        async with self._lock:
            if self._secret is None:
                try:
                    secret = await self._store.fetch(self._secret_id)
                except SecretUnavailable as e:
                    logger.error(f"Signing secret '{self._secret_id}' unavailable: {e.message}")
                    raise
                except Exception as e:
                    logger.error(
                        f"Unexpected error fetching signing secret '{self._secret_id}': "
                        f"{e.__class__.__name__}",
                        exc_info=True,
                    )
                    raise SecretUnavailable(f"Secret store error: {e.__class__.__name__}") from e
                self._secret = secret
                logger.info(
                    f"Signing secret '{self._secret_id}' loaded (algorithm {secret.algorithm})"
                )
        return self._secret

    def invalidate(self) -> None:
        """Drop the memoized secret; the next call fetches it again."""
        self._secret = None
        logger.info(f"Signing secret '{self._secret_id}' invalidated")
