from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sitemapi.config import Settings
from sitemapi.database import init_db

SITEMAP_URL = "https://news.example/sitemap.xml"

SITEMAP_XML = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"
        xmlns:news="http://www.google.com/schemas/sitemap-news/0.9">
  <url>
    <loc>https://news.example/world/article-1</loc>
    <news:news>
      <news:publication>
        <news:name>Example News</news:name>
        <news:language>en</news:language>
      </news:publication>
      <news:publication_date>2024-06-01T08:00:00+00:00</news:publication_date>
      <news:title><![CDATA[Markets rally after rate decision]]></news:title>
      <news:keywords>markets, rates ,economy</news:keywords>
    </news:news>
  </url>
  <url>
    <loc>https://news.example/india/article-2</loc>
    <news:news>
      <news:publication_date>2024-03-01T12:30:00+05:30</news:publication_date>
      <news:title>Monsoon arrives early</news:title>
    </news:news>
  </url>
  <url>
    <loc>https://news.example/sports/article-3</loc>
  </url>
</urlset>
"""


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        SITEMAP_URL=SITEMAP_URL,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'sitemap.db'}",
    )


@pytest_asyncio.fixture
async def session_factory(settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(settings.database_url)
    await init_db(engine)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()
