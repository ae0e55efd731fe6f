from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Shared by the HTTP query boundary and the query builder.
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10


class NewsEntry(BaseModel):
    url: str = Field(description="Article URL exactly as listed in <loc>")
    url_hash: str = Field(
        min_length=32, max_length=32, description="MD5 hex digest of the raw URL"
    )
    title: str = Field(default="", description="news:title, empty when missing")
    publication_date: str | None = Field(
        default=None, description="news:publication_date as published, unparsed"
    )
    keywords: list[str] = Field(default_factory=list)


class SitemapQuery(BaseModel):
    after: datetime | None = Field(
        default=None, description="Only entries published strictly after this moment"
    )
    before: datetime | None = Field(
        default=None, description="Only entries published strictly before this moment"
    )
    page: int = Field(default=DEFAULT_PAGE, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, description="Items per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class SitemapRecordOut(_CamelModel):
    id: str
    url_hash: str
    url: str
    title: str
    publication_date: str | None = None
    keywords: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SitemapPage(_CamelModel):
    data: list[SitemapRecordOut] = Field(default_factory=list)
    total: int = Field(ge=0, description="Matching records ignoring pagination")
    page: int
    limit: int
    total_pages: int = Field(ge=0)
