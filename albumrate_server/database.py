# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database connection and session management."""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from albumrate_server.config import settings
from albumrate_server.models.base import Base

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict[str, Any]:
    """Pool settings per backend. SQLite shares one connection so :memory: survives."""
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = create_async_engine(settings.database_url, echo=False, **engine_options(settings.database_url))

async_session_maker = make_session_maker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI that yields a database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(force: bool = False, bind: AsyncEngine | None = None) -> None:
    """Create all tables. Call at startup. With force, existing tables are dropped first."""
    async with (bind or engine).begin() as conn:
        if force:
            logger.warning("DB_FORCE_SYNC set: dropping all tables")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database synced successfully")
