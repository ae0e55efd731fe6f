import asyncio

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import get_settings


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
_engine_lock = asyncio.Lock()


async def get_engine() -> AsyncEngine:
    global _engine, _session_factory

    if _engine is None:
        async with _engine_lock:
            if _engine is None:
                settings = get_settings()
                _engine = create_async_engine(
                    settings.database_url, echo=settings.database_echo
                )
                _session_factory = async_sessionmaker(
                    _engine, expire_on_commit=False
                )
    return _engine


async def get_session_factory() -> async_sessionmaker[AsyncSession]:
    await get_engine()
    if _session_factory is None:
        raise RuntimeError("database session factory is not initialised")
    return _session_factory


async def init_db(engine: AsyncEngine | None = None) -> None:
    # Registers the entity tables on Base.metadata.
    from .models import entity  # noqa: F401

    engine = engine or await get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def shutdown_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
