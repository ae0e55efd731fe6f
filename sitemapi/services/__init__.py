from .parser import SitemapParser
from .sitemap import SitemapService

__all__ = ["SitemapParser", "SitemapService"]
