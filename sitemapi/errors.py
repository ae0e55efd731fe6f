from __future__ import annotations


class SitemapError(Exception):
    """Base class for failures surfaced by the ingestion and query core."""


class FetchFailed(SitemapError):
    def __init__(
        self, status_code: int | None, reason: str, url: str | None = None
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        if status_code is None:
            message = f"Failed to fetch sitemap: {reason}"
        else:
            message = f"Failed to fetch sitemap: {status_code} {reason}"
        super().__init__(message)


class ParseFailed(SitemapError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to parse sitemap: {reason}")


class StorageFailed(SitemapError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Storage operation failed: {operation}")
