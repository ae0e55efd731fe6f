import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

import sitemapi.database as database_module
from sitemapi.models.entity import SitemapRecord


@pytest.mark.asyncio
async def test_session_factory_lifecycle(monkeypatch, settings) -> None:
    monkeypatch.setattr(database_module, "get_settings", lambda: settings)
    try:
        factory = await database_module.get_session_factory()
        assert isinstance(factory, async_sessionmaker)
        assert await database_module.get_session_factory() is factory

        await database_module.init_db()
        async with factory() as session:
            count = await session.scalar(
                select(func.count()).select_from(SitemapRecord)
            )
        assert count == 0
    finally:
        await database_module.shutdown_engine()

    assert database_module._engine is None
    assert database_module._session_factory is None


@pytest.mark.asyncio
async def test_session_factory_requires_engine(monkeypatch) -> None:
    async def fake_get_engine():
        return None

    monkeypatch.setattr(database_module, "get_engine", fake_get_engine)
    monkeypatch.setattr(database_module, "_session_factory", None)

    with pytest.raises(RuntimeError):
        await database_module.get_session_factory()
