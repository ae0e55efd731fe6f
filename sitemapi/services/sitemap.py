from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Select, func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings, get_settings
from ..database import get_session_factory
from ..errors import StorageFailed
from ..models.entity import SitemapRecord
from ..models.sitemap import NewsEntry, SitemapPage, SitemapQuery, SitemapRecordOut
from ..timestamps import published_after, published_before
from .parser import SitemapParser

logger = logging.getLogger(__name__)

UPSERT_FIELDS: tuple[str, ...] = ("url", "title", "publication_date", "keywords")
UPSERT_CHUNK_SIZE = 500

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(slots=True)
class SitemapService:
    settings: Settings | None = None
    parser: SitemapParser | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.parser is None:
            self.parser = SitemapParser(settings=self.settings)

    async def fetch_and_store(self) -> list[SitemapRecord]:
        entries = await self.parser.fetch_sitemap()
        if not entries:
            logger.info("Sitemap returned no entries, nothing to store")
            return []

        unique = _unique_by_hash(entries)
        hashes = [entry.url_hash for entry in unique]
        factory = await self._sessions()

        try:
            async with factory() as session:
                async with session.begin():
                    await self._upsert(session, unique)
            logger.info("Upserted %d sitemap entries", len(unique))

            async with factory() as session:
                result = await session.scalars(
                    select(SitemapRecord).where(SitemapRecord.url_hash.in_(hashes))
                )
                return list(result.all())
        except SQLAlchemyError as exc:
            logger.exception("Storing sitemap entries failed")
            raise StorageFailed("fetch_and_store") from exc

    async def find_all(self, query: SitemapQuery | None = None) -> SitemapPage:
        query = query or SitemapQuery()
        filtered = build_filtered_query(query)
        count_stmt = select(func.count()).select_from(filtered.subquery())
        page_stmt = (
            filtered.order_by(
                SitemapRecord.publication_date.desc().nulls_last(),
                SitemapRecord.id,
            )
            .offset(query.offset)
            .limit(query.limit)
        )

        factory = await self._sessions()
        try:
            async with factory() as session:
                total = await session.scalar(count_stmt) or 0
                rows = (await session.scalars(page_stmt)).all()
        except SQLAlchemyError as exc:
            logger.exception("Querying sitemap records failed")
            raise StorageFailed("find_all") from exc

        return SitemapPage(
            data=[SitemapRecordOut.model_validate(row) for row in rows],
            total=total,
            page=query.page,
            limit=query.limit,
            total_pages=total_pages(total, query.limit),
        )

    async def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self.session_factory is None:
            self.session_factory = await get_session_factory()
        return self.session_factory

    async def _upsert(self, session: AsyncSession, entries: Sequence[NewsEntry]) -> None:
        dialect = session.bind.dialect.name
        try:
            insert = _DIALECT_INSERTS[dialect]
        except KeyError:
            raise StorageFailed(f"upsert is not supported on {dialect}") from None

        table = SitemapRecord.__table__
        now = datetime.now(timezone.utc)
        for start in range(0, len(entries), UPSERT_CHUNK_SIZE):
            rows = [
                {
                    "id": str(uuid4()),
                    "url_hash": entry.url_hash,
                    "url": entry.url,
                    "title": entry.title,
                    "publication_date": entry.publication_date,
                    "keywords": entry.keywords,
                    "created_at": now,
                    "updated_at": now,
                }
                for entry in entries[start : start + UPSERT_CHUNK_SIZE]
            ]
            stmt = insert(table).values(rows)
            excluded = stmt.excluded
            set_ = {name: excluded[name] for name in UPSERT_FIELDS}
            set_["updated_at"] = excluded.updated_at
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.url_hash],
                set_=set_,
                # Rows whose fields are all unchanged are left untouched.
                where=or_(
                    *(table.c[name].is_distinct_from(excluded[name]) for name in UPSERT_FIELDS)
                ),
            )
            await session.execute(stmt)


def build_filtered_query(query: SitemapQuery) -> Select[tuple[SitemapRecord]]:
    stmt = select(SitemapRecord)
    if query.after is not None:
        stmt = stmt.where(published_after(SitemapRecord.publication_date, query.after))
    if query.before is not None:
        stmt = stmt.where(published_before(SitemapRecord.publication_date, query.before))
    return stmt


def total_pages(total: int, limit: int) -> int:
    if total == 0:
        return 0
    return -(-total // limit)


def _unique_by_hash(entries: Sequence[NewsEntry]) -> list[NewsEntry]:
    # One statement must not touch the same row twice; the last duplicate wins.
    latest: dict[str, NewsEntry] = {}
    for entry in entries:
        latest[entry.url_hash] = entry
    return list(latest.values())
