from __future__ import annotations

from datetime import datetime

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import ORJSONResponse
from mangum import Mangum

from sitemapi.database import init_db, shutdown_engine
from sitemapi.errors import FetchFailed, ParseFailed, SitemapError, StorageFailed
from sitemapi.http_client import shutdown_http_client
from sitemapi.logging_config import configure_logging
from sitemapi.models import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    SitemapPage,
    SitemapQuery,
    SitemapRecordOut,
)
from sitemapi.services import SitemapService

app = FastAPI(
    title="Sitemapi News Sitemap API",
    version="0.1.0",
    description=(
        "Ingests a Google News sitemap and serves the stored entries page by page."
    ),
    default_response_class=ORJSONResponse,
)

_ERROR_STATUS: dict[type[SitemapError], int] = {
    FetchFailed: 502,
    ParseFailed: 502,
    StorageFailed: 503,
}


def get_sitemap_service() -> SitemapService:
    return SitemapService()


def get_sitemap_query(
    after: datetime | None = Query(
        None,
        description="Return entries published after this timestamp (ISO 8601)",
        examples=["2024-01-01T00:00:00Z"],
    ),
    before: datetime | None = Query(
        None,
        description="Return entries published before this timestamp (ISO 8601)",
        examples=["2024-12-31T23:59:59Z"],
    ),
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, description="Items per page"),
) -> SitemapQuery:
    return SitemapQuery(after=after, before=before, page=page, limit=limit)


@app.exception_handler(SitemapError)
async def sitemap_error_handler(request: Request, exc: SitemapError) -> ORJSONResponse:
    status = _ERROR_STATUS.get(type(exc), 500)
    return ORJSONResponse(status_code=status, content={"detail": str(exc)})


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get(
    "/sitemap",
    tags=["sitemap"],
    response_model=SitemapPage,
    response_model_by_alias=True,
)
async def list_sitemap(
    query: SitemapQuery = Depends(get_sitemap_query),
    service: SitemapService = Depends(get_sitemap_service),
):
    return await service.find_all(query)


@app.post(
    "/sitemap/fetch",
    tags=["sitemap"],
    response_model=list[SitemapRecordOut],
    response_model_by_alias=True,
)
async def fetch_sitemap(service: SitemapService = Depends(get_sitemap_service)):
    records = await service.fetch_and_store()
    return [SitemapRecordOut.model_validate(record) for record in records]


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    await init_db()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await shutdown_http_client()
    await shutdown_engine()


handler = Mangum(app)
