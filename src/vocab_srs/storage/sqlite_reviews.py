"""SQLite review log storage mixin."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vocab_srs.storage.sqlite_row_mappers import row_to_review
from vocab_srs.utils.timeutils import now_ms

if TYPE_CHECKING:
    import aiosqlite

    from vocab_srs.core.review_event import ReviewEvent

INSERT_REVIEW_SQL = """INSERT INTO srs_reviews
    (card_id, rating, elapsed_days, stability, difficulty, interval, timestamp)
    VALUES (?, ?, ?, ?, ?, ?, ?)"""

UPSERT_REVIEW_SQL = """INSERT INTO srs_reviews
    (id, card_id, rating, elapsed_days, stability, difficulty, interval, timestamp)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
      card_id = excluded.card_id,
      rating = excluded.rating,
      elapsed_days = excluded.elapsed_days,
      stability = excluded.stability,
      difficulty = excluded.difficulty,
      interval = excluded.interval,
      timestamp = excluded.timestamp"""


def review_params(event: ReviewEvent, timestamp: int) -> tuple[object, ...]:
    return (
        event.card_id,
        int(event.rating),
        event.elapsed_days,
        event.stability,
        event.difficulty,
        event.interval,
        timestamp,
    )


class SQLiteReviewLogMixin:
    """Mixin providing the append-only review log for SQLiteStorage."""

    def _ensure_conn(self) -> aiosqlite.Connection:
        raise NotImplementedError

    async def log_review(self, event: ReviewEvent) -> ReviewEvent:
        conn = self._ensure_conn()
        timestamp = event.timestamp or now_ms()

        cursor = await conn.execute(INSERT_REVIEW_SQL, review_params(event, timestamp))
        await conn.commit()

        event_id = cursor.lastrowid
        if event_id is None:
            raise RuntimeError("SQLite did not assign a review id")
        return event.with_log_fields(event_id, timestamp)

    async def get_review_history(self, card_id: str) -> list[ReviewEvent]:
        conn = self._ensure_conn()
        async with conn.execute(
            "SELECT * FROM srs_reviews WHERE card_id = ? ORDER BY id",
            (card_id,),
        ) as cursor:
            rows = await cursor.fetchall()
            return [row_to_review(row) for row in rows]

    async def get_recent_reviews(self, limit: int = 20) -> list[ReviewEvent]:
        conn = self._ensure_conn()
        async with conn.execute(
            "SELECT * FROM srs_reviews ORDER BY timestamp DESC, id DESC LIMIT ?",
            (max(limit, 0),),
        ) as cursor:
            rows = await cursor.fetchall()
            return [row_to_review(row) for row in rows]

    async def count_reviews_since(self, since: int) -> int:
        conn = self._ensure_conn()
        async with conn.execute(
            "SELECT COUNT(*) AS cnt FROM srs_reviews WHERE timestamp >= ?",
            (since,),
        ) as cursor:
            row = await cursor.fetchone()
            return row["cnt"] if row else 0

    async def _get_all_reviews(self) -> list[ReviewEvent]:
        conn = self._ensure_conn()
        async with conn.execute("SELECT * FROM srs_reviews ORDER BY id") as cursor:
            rows = await cursor.fetchall()
            return [row_to_review(row) for row in rows]
