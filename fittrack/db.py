from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fittrack.config import settings

KV_TABLE_DDL = "CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value TEXT NOT NULL)"


def async_database_url(url: str) -> str:
    """Point plain sqlite URLs at the aiosqlite driver."""
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


engine = create_async_engine(async_database_url(settings.database_url))
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.execute(text(KV_TABLE_DDL))


async def get_session() -> AsyncSession:  # type: ignore[misc]
    async with async_session() as session:
        yield session
