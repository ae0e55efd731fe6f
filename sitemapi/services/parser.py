from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup, Tag
from lxml import etree

from ..config import Settings, get_settings
from ..errors import FetchFailed, ParseFailed
from ..http_client import get_http_client
from ..models.sitemap import NewsEntry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SitemapParser:
    settings: Settings | None = None
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    async def fetch_sitemap(self) -> list[NewsEntry]:
        url = str(self.settings.sitemap_url)
        client = self.client or await get_http_client()
        logger.info("Fetching sitemap from %s", url)
        try:
            response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.error("Sitemap request to %s failed: %s", url, exc)
            raise FetchFailed(None, str(exc) or type(exc).__name__, url) from exc
        if not response.is_success:
            logger.error(
                "Sitemap request to %s returned %s", url, response.status_code
            )
            raise FetchFailed(response.status_code, response.reason_phrase, url)

        entries = parse_sitemap(
            response.content, strict=self.settings.sitemap_strict_parsing
        )
        logger.info("Parsed %d entries from %s", len(entries), url)
        return entries


def parse_sitemap(content: str | bytes, *, strict: bool = False) -> list[NewsEntry]:
    """Decode a Google News sitemap into entries.

    ``url`` elements may be absent, single or repeated; the result is always a
    list. A document that is not well-formed XML, or has no ``urlset`` root,
    yields an empty list unless ``strict`` is set, in which case
    :class:`ParseFailed` is raised.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    # BeautifulSoup recovers from broken markup, so truncated feeds are
    # rejected here before any entry is built.
    try:
        etree.fromstring(
            content, etree.XMLParser(resolve_entities=False, no_network=True)
        )
    except etree.XMLSyntaxError as exc:
        if strict:
            raise ParseFailed(str(exc)) from exc
        logger.warning("Sitemap is not well-formed XML, treating it as empty: %s", exc)
        return []

    urlset = BeautifulSoup(content, "xml").find("urlset")
    if urlset is None:
        if strict:
            raise ParseFailed("document has no <urlset> element")
        logger.warning("Sitemap has no <urlset> element, treating it as empty")
        return []

    entries: list[NewsEntry] = []
    # Local names only, the namespace prefix is chosen by the publisher.
    for element in urlset.find_all("url", recursive=False):
        entry = _build_entry(element)
        if entry is not None:
            entries.append(entry)
    return entries


def _build_entry(element: Tag) -> NewsEntry | None:
    loc = element.find("loc", recursive=False)
    url = loc.get_text() if loc is not None else ""
    if not url:
        logger.warning("Skipping sitemap <url> without <loc>")
        return None

    title = ""
    publication_date = None
    keywords: list[str] = []
    news = element.find("news", recursive=False)
    if news is not None:
        title_tag = news.find("title", recursive=False)
        if title_tag is not None:
            title = title_tag.get_text(strip=True)
        date_tag = news.find("publication_date", recursive=False)
        if date_tag is not None:
            publication_date = date_tag.get_text(strip=True) or None
        keywords = split_keywords(
            tag.get_text() for tag in news.find_all("keywords", recursive=False)
        )

    return NewsEntry(
        url=url,
        url_hash=url_hash(url),
        title=title,
        publication_date=publication_date,
        keywords=keywords,
    )


def split_keywords(values: str | Iterable[str] | None) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    keywords: list[str] = []
    for value in values:
        keywords.extend(part.strip() for part in value.split(",") if part.strip())
    return keywords


def url_hash(url: str) -> str:
    # Dedup key only, not a security boundary.
    return hashlib.md5(url.encode("utf-8")).hexdigest()
