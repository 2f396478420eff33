import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import text

logger = logging.getLogger(__name__)

# All SQLAlchemy models inherit from this Base.
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for the client record store.

    Pool settings only apply to server databases; SQLite (used for local runs
    and tests) manages its own connections.
    """
    engine_kwargs: Dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=10,  # Connections kept open in the pool.
            max_overflow=20,  # "Extra" connections that can be opened.
            pool_timeout=30,  # Seconds to wait for a pooled connection.
            pool_recycle=1800,  # Recycle connections every 30 minutes.
            # Runs 'SELECT 1' on checkout and discards dead connections.
            pool_pre_ping=True,
            connect_args={"application_name": "m2m_auth_service"},
        )
    return create_async_engine(database_url, **engine_kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    # Register the models on Base.metadata before create_all runs.
    from m2m_auth_service import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Client record tables are in place")


async def ping(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Round-trip a trivial query; raises on connectivity problems."""
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
