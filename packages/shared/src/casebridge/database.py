from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator, AsyncIterator

from casebridge.config import settings
from casebridge.models import Base
from casebridge.utils import CaseBridgeError, setup_logging

logger = setup_logging(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql+asyncpg"):
        return {"server_settings": {"application_name": "casebridge"}}
    return {}


# Create async engine (asyncpg in production)
engine = create_async_engine(
    settings.DATABASE_URL,
    future=True,
    poolclass=NullPool,
    connect_args=_connect_args(settings.DATABASE_URL),
)

# Create async session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session"""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Unit of work on ``session``.

    Commits exactly once when the block exits normally. Any exception
    rolls back every write made inside the block and is re-raised
    unchanged.
    """
    try:
        yield session
        await session.commit()
    except CaseBridgeError:
        await session.rollback()
        raise
    except BaseException:
        logger.exception("Unexpected error, rolling back transaction")
        await session.rollback()
        raise

async def init_db():
    """Initialize database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
