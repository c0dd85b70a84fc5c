"""Per-user watch history persisted in the local database."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select

from ..database import Database
from ..db_models import WatchHistoryRecord
from ..models import WatchHistoryEntry

logger = logging.getLogger(__name__)


class WatchHistoryStore:
    """Keep the newest ``limit`` watched titles per user, newest first."""

    def __init__(self, database: Database, *, limit: int = 50):
        self._database = database
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    async def entries(self, user_id: str) -> list[WatchHistoryEntry]:
        async with self._database.session() as session:
            stmt = (
                select(WatchHistoryRecord)
                .where(WatchHistoryRecord.user_id == user_id)
                .order_by(
                    WatchHistoryRecord.watched_at.desc(),
                    WatchHistoryRecord.id.desc(),
                )
                .limit(self._limit)
            )
            result = await session.execute(stmt)
            records = result.scalars().all()
        return [self._to_entry(record) for record in records]

    async def add(self, user_id: str, entry: WatchHistoryEntry) -> list[WatchHistoryEntry]:
        """Record ``entry``; a title watched again moves to the front."""

        async with self._database.session() as session:
            existing = await session.execute(
                select(WatchHistoryRecord).where(
                    WatchHistoryRecord.user_id == user_id,
                    WatchHistoryRecord.external_id == entry.external_id,
                )
            )
            record = existing.scalar_one_or_none()
            if record is None:
                record = WatchHistoryRecord(user_id=user_id, external_id=entry.external_id)
                session.add(record)
            record.content_type = entry.content_type
            record.title = entry.title
            record.poster_url = entry.poster_url
            record.year = entry.year
            record.genre = entry.genre
            record.watched_at = entry.watched_at
            await session.flush()

            keep = (
                select(WatchHistoryRecord.id)
                .where(WatchHistoryRecord.user_id == user_id)
                .order_by(
                    WatchHistoryRecord.watched_at.desc(),
                    WatchHistoryRecord.id.desc(),
                )
                .limit(self._limit)
            )
            kept_ids = [row[0] for row in (await session.execute(keep)).all()]
            trimmed = await session.execute(
                delete(WatchHistoryRecord).where(
                    WatchHistoryRecord.user_id == user_id,
                    WatchHistoryRecord.id.not_in(kept_ids),
                )
            )
            await session.commit()
        if trimmed.rowcount:
            logger.debug(
                "Trimmed %s watch history entries for %s", trimmed.rowcount, user_id
            )
        return await self.entries(user_id)

    async def clear(self, user_id: str) -> int:
        async with self._database.session() as session:
            result = await session.execute(
                delete(WatchHistoryRecord).where(WatchHistoryRecord.user_id == user_id)
            )
            await session.commit()
        return result.rowcount or 0

    @staticmethod
    def _to_entry(record: WatchHistoryRecord) -> WatchHistoryEntry:
        return WatchHistoryEntry(
            external_id=record.external_id,
            content_type=record.content_type,
            title=record.title,
            poster_url=record.poster_url,
            year=record.year,
            genre=record.genre,
            watched_at=record.watched_at,
        )


__all__ = ["WatchHistoryStore"]
