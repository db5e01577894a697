"""
Database engine and per-request transactions.

Each request gets one AsyncSession. Everything the request writes is
committed together when the handler returns, and rolled back together
if anything raises, domain errors included. Gacha, sell and claim rely on
this to keep their multi-step writes atomic.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from floris.config import settings
from floris.models.db import Base

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a transactional database session.

    Usage in FastAPI:
        @router.post("/gacha")
        async def gacha(session: Annotated[AsyncSession, Depends(get_session)]):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create all tables. Called once from the application lifespan."""
    logger.info("Initializing database schema")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
