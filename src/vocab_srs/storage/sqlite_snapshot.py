"""SQLite snapshot import mixin."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from vocab_srs.storage.sqlite_cards import UPSERT_CARD_SQL
from vocab_srs.storage.sqlite_meta import UPSERT_META_SQL
from vocab_srs.storage.sqlite_reviews import INSERT_REVIEW_SQL, UPSERT_REVIEW_SQL, review_params
from vocab_srs.storage.sqlite_row_mappers import card_to_params
from vocab_srs.utils.timeutils import now_ms

if TYPE_CHECKING:
    import aiosqlite

    from vocab_srs.core.card import CardRecord
    from vocab_srs.core.review_event import ReviewEvent

logger = logging.getLogger(__name__)


class SQLiteSnapshotMixin:
    """Mixin writing validated snapshot records in a single transaction."""

    def _ensure_conn(self) -> aiosqlite.Connection:
        raise NotImplementedError

    async def _import_records(
        self,
        cards: list[CardRecord],
        meta: dict[str, Any],
        reviews: list[ReviewEvent],
    ) -> None:
        conn = self._ensure_conn()
        encoded_meta = [(key, json.dumps(value)) for key, value in meta.items()]

        try:
            await conn.executemany(UPSERT_CARD_SQL, [card_to_params(c) for c in cards])
            await conn.executemany(UPSERT_META_SQL, encoded_meta)
            for event in reviews:
                timestamp = event.timestamp or now_ms()
                if event.id is None:
                    await conn.execute(INSERT_REVIEW_SQL, review_params(event, timestamp))
                else:
                    await conn.execute(
                        UPSERT_REVIEW_SQL, (event.id, *review_params(event, timestamp))
                    )
            await conn.commit()
        except BaseException:
            await conn.rollback()
            logger.warning("Snapshot import rolled back", exc_info=True)
            raise

        logger.info(
            "Imported snapshot: %d cards, %d meta entries, %d reviews",
            len(cards),
            len(encoded_meta),
            len(reviews),
        )
