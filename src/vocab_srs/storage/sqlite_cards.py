"""SQLite card storage mixin."""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING, NoReturn

from vocab_srs.core.card import CardState
from vocab_srs.errors import ConcurrentModificationError
from vocab_srs.storage.sqlite_reviews import INSERT_REVIEW_SQL, review_params
from vocab_srs.storage.sqlite_row_mappers import CARD_COLUMNS, card_to_params, row_to_card
from vocab_srs.utils.timeutils import now_ms

if TYPE_CHECKING:
    import aiosqlite

    from vocab_srs.core.card import CardRecord
    from vocab_srs.core.review_event import ReviewEvent

logger = logging.getLogger(__name__)

_COLUMN_LIST = ", ".join(CARD_COLUMNS)
_PLACEHOLDERS = ", ".join("?" for _ in CARD_COLUMNS)
_UPDATE_SET = ", ".join(f"{col} = excluded.{col}" for col in CARD_COLUMNS if col != "id")
_VERSIONED_SET = ", ".join(f"{col} = ?" for col in CARD_COLUMNS if col not in ("id", "version"))

UPSERT_CARD_SQL = f"""INSERT INTO srs_cards ({_COLUMN_LIST})
    VALUES ({_PLACEHOLDERS})
    ON CONFLICT(id) DO UPDATE SET {_UPDATE_SET}"""


def _deck_filter(deck: str | None) -> tuple[str, tuple[str, ...]]:
    if deck is None:
        return "", ()
    return " AND deck = ?", (deck,)


class SQLiteCardMixin:
    """Mixin providing card CRUD and due-queue queries for SQLiteStorage."""

    def _ensure_conn(self) -> aiosqlite.Connection:
        raise NotImplementedError

    async def get_card(self, card_id: str) -> CardRecord | None:
        conn = self._ensure_conn()
        async with conn.execute("SELECT * FROM srs_cards WHERE id = ?", (card_id,)) as cursor:
            row = await cursor.fetchone()
            return row_to_card(row) if row else None

    async def put_card(self, card: CardRecord) -> str:
        conn = self._ensure_conn()
        await conn.execute(UPSERT_CARD_SQL, card_to_params(card))
        await conn.commit()
        return card.id

    async def _execute_versioned_update(
        self, conn: aiosqlite.Connection, card: CardRecord
    ) -> bool:
        """Run the compare-and-swap UPDATE without committing."""
        params = card_to_params(card)
        # Drop id (first) and version (last) from the SET values
        values = params[1:-1]

        cursor = await conn.execute(
            f"""UPDATE srs_cards SET {_VERSIONED_SET}, version = version + 1
                WHERE id = ? AND version = ?""",
            (*values, card.id, card.version),
        )
        return cursor.rowcount > 0

    async def _raise_update_failure(self, card: CardRecord) -> NoReturn:
        if await self.get_card(card.id) is None:
            raise ValueError(f"Card {card.id} does not exist")
        raise ConcurrentModificationError(card.id, card.version)

    async def update_card(self, card: CardRecord) -> CardRecord:
        conn = self._ensure_conn()
        updated = await self._execute_versioned_update(conn, card)
        await conn.commit()

        if not updated:
            await self._raise_update_failure(card)
        return card.with_updates(version=card.version + 1)

    async def apply_review(
        self, card: CardRecord, event: ReviewEvent
    ) -> tuple[CardRecord, ReviewEvent]:
        conn = self._ensure_conn()
        timestamp = event.timestamp or now_ms()

        try:
            updated = await self._execute_versioned_update(conn, card)
            if not updated:
                await conn.rollback()
                await self._raise_update_failure(card)
            cursor = await conn.execute(INSERT_REVIEW_SQL, review_params(event, timestamp))
            await conn.commit()
        except sqlite3.Error:
            await conn.rollback()
            logger.warning("Review of %s rolled back", card.id, exc_info=True)
            raise

        if cursor.lastrowid is None:
            raise RuntimeError("SQLite did not assign a review id")
        return (
            card.with_updates(version=card.version + 1),
            event.with_log_fields(cursor.lastrowid, timestamp),
        )

    async def get_all_cards(self) -> list[CardRecord]:
        conn = self._ensure_conn()
        async with conn.execute("SELECT * FROM srs_cards") as cursor:
            rows = await cursor.fetchall()
            return [row_to_card(row) for row in rows]

    async def delete_card(self, card_id: str) -> bool:
        conn = self._ensure_conn()
        cursor = await conn.execute("DELETE FROM srs_cards WHERE id = ?", (card_id,))
        await conn.commit()
        return cursor.rowcount > 0

    async def get_due_cards(
        self,
        deck: str | None = None,
        now: int | None = None,
    ) -> list[CardRecord]:
        conn = self._ensure_conn()
        cutoff = now_ms() if now is None else now
        clause, params = _deck_filter(deck)

        async with conn.execute(
            f"SELECT * FROM srs_cards WHERE due <= ?{clause}",
            (cutoff, *params),
        ) as cursor:
            rows = await cursor.fetchall()
            return [row_to_card(row) for row in rows]

    async def count_due(self, deck: str | None = None, now: int | None = None) -> int:
        conn = self._ensure_conn()
        cutoff = now_ms() if now is None else now
        clause, params = _deck_filter(deck)

        async with conn.execute(
            f"SELECT COUNT(*) AS cnt FROM srs_cards WHERE due <= ?{clause}",
            (cutoff, *params),
        ) as cursor:
            row = await cursor.fetchone()
            return row["cnt"] if row else 0

    async def count_new(self, deck: str | None = None) -> int:
        conn = self._ensure_conn()
        clause, params = _deck_filter(deck)

        async with conn.execute(
            f"SELECT COUNT(*) AS cnt FROM srs_cards WHERE state = ?{clause}",
            (CardState.NEW.value, *params),
        ) as cursor:
            row = await cursor.fetchone()
            return row["cnt"] if row else 0
