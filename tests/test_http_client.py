import pytest
import respx

from sitemapi.config import Settings
from sitemapi.http_client import get_http_client, shutdown_http_client
from sitemapi.services.parser import SitemapParser

from .conftest import SITEMAP_XML


@pytest.mark.asyncio
async def test_shared_client_follows_redirects() -> None:
    settings = Settings(SITEMAP_URL="http://news.example/sitemap.xml")
    client = await get_http_client()
    try:
        assert client.follow_redirects is True
        assert await get_http_client() is client

        parser = SitemapParser(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("http://news.example/sitemap.xml").respond(
                301, headers={"Location": "https://news.example/sitemap.xml"}
            )
            mock.get("https://news.example/sitemap.xml").respond(200, text=SITEMAP_XML)
            entries = await parser.fetch_sitemap()
    finally:
        await shutdown_http_client()

    assert len(entries) == 3
