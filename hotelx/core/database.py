from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hotelx.core.config import settings


def to_async_url(url: str) -> str:
    """Convert postgres:// URLs to postgresql+asyncpg:// for async support."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


async_engine = create_async_engine(to_async_url(settings.DATABASE_URL))
AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
