"""Database engine and session management."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def create_engine(database_url: str, *, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """Create the async engine for ``database_url``."""
    if not database_url.startswith("sqlite"):
        engine_kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(database_url, echo=echo, **engine_kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables."""
    from wphub.storage import models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
