"""Async SQLAlchemy database engine, session factory, and utilities."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from learnscore.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=settings.APP_DEBUG)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create all tables defined by ORM models."""
    # Register every mapper on Base.metadata before create_all.
    import learnscore.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """FastAPI dependency that yields an async database session.

    Uncommitted work is rolled back when the request fails.
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
