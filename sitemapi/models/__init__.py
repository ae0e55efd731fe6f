from .sitemap import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    NewsEntry,
    SitemapPage,
    SitemapQuery,
    SitemapRecordOut,
)

__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_LIMIT",
    "NewsEntry",
    "SitemapPage",
    "SitemapQuery",
    "SitemapRecordOut",
]
