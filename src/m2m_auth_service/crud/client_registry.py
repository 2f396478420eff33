# src/m2m_auth_service/crud/client_registry.py
import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, List, Optional, Tuple

from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..exceptions import ClientNotFound, StoreUnavailable
from ..models.client_record import ClientRecordModel
from ..security import generate_client_secret, hash_secret, verify_client_secret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientRecord:
    client_id: str
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    client_secret_hash: str = field(repr=False)


@dataclass(frozen=True)
class CreatedClient:
    """A client record together with its plaintext secret, handed out exactly once."""

    record: ClientRecord
    client_secret: str = field(repr=False)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; every stored timestamp is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(model: ClientRecordModel) -> ClientRecord:
    return ClientRecord(
        client_id=model.client_id,
        name=model.name,
        description=model.description,
        is_active=model.is_active,
        created_at=_as_utc(model.created_at),
        updated_at=_as_utc(model.updated_at),
        client_secret_hash=model.client_secret_hash,
    )


class ClientRegistry:
    """
    CRUD over client identities. Each operation runs in its own session; store
    failures surface as StoreUnavailable and missing clients as ClientNotFound.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secret_context: CryptContext,
        clock: Callable[[], float] = time.time,
    ):
        self._session_factory = session_factory
        self._secret_context = secret_context
        self._clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                f"Client store error during {operation}: {e.__class__.__name__}",
                exc_info=True,
            )
            raise StoreUnavailable(f"Client store unavailable during {operation}") from e

    async def _hash(self, secret: str) -> str:
        return await asyncio.to_thread(hash_secret, secret, self._secret_context)

    async def create(self, name: str, description: Optional[str] = None) -> CreatedClient:
        plain_client_secret = generate_client_secret()
        hashed_client_secret = await self._hash(plain_client_secret)
        now = self._now()

        new_client = ClientRecordModel(
            client_id=str(uuid.uuid4()),
            client_secret_hash=hashed_client_secret,
            name=name,
            description=description,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        async with self._session("create") as session:
            session.add(new_client)
            await session.commit()

        logger.info(f"Created client '{name}' with ID: {new_client.client_id}")
        return CreatedClient(record=_to_record(new_client), client_secret=plain_client_secret)

    async def get(self, client_id: str) -> ClientRecord:
        async with self._session("get") as session:
            client = await session.get(ClientRecordModel, client_id)
            if client is None:
                raise ClientNotFound(client_id)
            return _to_record(client)

    async def list(
        self, offset: int = 0, limit: int = 100, is_active: Optional[bool] = None
    ) -> Tuple[List[ClientRecord], int]:
        query = select(ClientRecordModel)
        count_query = select(func.count()).select_from(ClientRecordModel)
        if is_active is not None:
            query = query.where(ClientRecordModel.is_active == is_active)
            count_query = count_query.where(ClientRecordModel.is_active == is_active)
        query = query.order_by(ClientRecordModel.created_at, ClientRecordModel.client_id)

        async with self._session("list") as session:
            result = await session.execute(query.offset(offset).limit(limit))
            clients = [_to_record(client) for client in result.scalars().all()]
            total = (await session.execute(count_query)).scalar_one()
        return clients, total

    async def update(
        self,
        client_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ClientRecord:
        """Partial update of name/description. The ID and secret hash never change here."""
        async with self._session("update") as session:
            client = await session.get(ClientRecordModel, client_id)
            if client is None:
                raise ClientNotFound(client_id)
            if name is not None:
                client.name = name
            if description is not None:
                client.description = description
            client.updated_at = max(self._now(), _as_utc(client.updated_at))
            await session.commit()
            record = _to_record(client)

        logger.info(f"Updated client with ID: {client_id}")
        return record

    async def deactivate(self, client_id: str) -> None:
        """Logical delete. Deactivating an inactive client is a no-op."""
        async with self._session("deactivate") as session:
            client = await session.get(ClientRecordModel, client_id)
            if client is None:
                raise ClientNotFound(client_id)
            if not client.is_active:
                logger.info(f"Client {client_id} already inactive")
                return
            client.is_active = False
            client.updated_at = max(self._now(), _as_utc(client.updated_at))
            await session.commit()

        logger.info(f"Deactivated client with ID: {client_id}")

    async def rotate_secret(self, client_id: str) -> CreatedClient:
        """Replace the client's secret. The new plaintext is returned once."""
        plain_client_secret = generate_client_secret()
        hashed_client_secret = await self._hash(plain_client_secret)

        async with self._session("rotate_secret") as session:
            client = await session.get(ClientRecordModel, client_id)
            if client is None:
                raise ClientNotFound(client_id)
            client.client_secret_hash = hashed_client_secret
            client.updated_at = max(self._now(), _as_utc(client.updated_at))
            await session.commit()
            record = _to_record(client)

        logger.info(f"Rotated secret for client with ID: {client_id}")
        return CreatedClient(record=record, client_secret=plain_client_secret)

    async def verify_credentials(self, client_id: str, plaintext_secret: str) -> bool:
        async with self._session("verify_credentials") as session:
            client = await session.get(ClientRecordModel, client_id)
            hashed_secret = client.client_secret_hash if client and client.is_active else None

        if hashed_secret is None:
            # Burn the same hashing cost so response time doesn't reveal existence.
            await asyncio.to_thread(self._secret_context.dummy_verify)
            return False
        return await asyncio.to_thread(
            verify_client_secret, plaintext_secret, hashed_secret, self._secret_context
        )
