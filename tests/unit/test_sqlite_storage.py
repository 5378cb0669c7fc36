"""Tests for SQLite-specific storage behaviour."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import aiosqlite
import pytest

from vocab_srs.core.card import CardRecord
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.errors import ImportFormatError, StorageUnavailableError
from vocab_srs.storage.sqlite_schema import SCHEMA_VERSION
from vocab_srs.storage.sqlite_store import SQLiteStorage

V1_CARDS_TABLE = """
CREATE TABLE srs_cards (
    id TEXT PRIMARY KEY,
    deck TEXT NOT NULL DEFAULT 'default',
    state TEXT NOT NULL DEFAULT 'new',
    stability REAL NOT NULL DEFAULT 0.0,
    difficulty REAL NOT NULL DEFAULT 0.0,
    due INTEGER NOT NULL DEFAULT 0,
    reps INTEGER NOT NULL DEFAULT 0,
    lapses INTEGER NOT NULL DEFAULT 0,
    last_reviewed INTEGER NOT NULL DEFAULT 0,
    front TEXT NOT NULL DEFAULT '',
    back TEXT NOT NULL DEFAULT '',
    front_lang TEXT NOT NULL DEFAULT 'de',
    back_lang TEXT NOT NULL DEFAULT 'ar',
    note_front TEXT NOT NULL DEFAULT '',
    note_back TEXT NOT NULL DEFAULT '',
    example TEXT NOT NULL DEFAULT ''
)
"""


class TestLifecycle:
    """Tests for opening and closing the database."""

    @pytest.mark.asyncio
    async def test_data_survives_reopen(self, tmp_path: Path) -> None:
        db_path = tmp_path / "srs.db"
        first = SQLiteStorage(db_path)
        await first.initialize()
        await first.put_card(CardRecord.create_new("srs_1", front="Haus"))
        await first.set_meta("requestRetention", 0.85)
        await first.close()

        second = SQLiteStorage(db_path)
        await second.initialize()
        try:
            card = await second.get_card("srs_1")
            assert card is not None
            assert card.front == "Haus"
            assert await second.get_meta("requestRetention") == 0.85
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, tmp_path: Path) -> None:
        store = SQLiteStorage(tmp_path / "nested" / "dir" / "srs.db")
        await store.initialize()
        await store.close()

        assert (tmp_path / "nested" / "dir" / "srs.db").exists()

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, sqlite_storage: SQLiteStorage) -> None:
        await sqlite_storage.initialize()
        assert await sqlite_storage.get_all_cards() == []

    @pytest.mark.asyncio
    async def test_use_before_initialize(self, tmp_path: Path) -> None:
        store = SQLiteStorage(tmp_path / "srs.db")

        with pytest.raises(StorageUnavailableError):
            await store.get_card("srs_1")

    @pytest.mark.asyncio
    async def test_unopenable_path(self, tmp_path: Path) -> None:
        """A directory in place of the database file cannot be opened."""
        db_path = tmp_path / "srs.db"
        db_path.mkdir()
        store = SQLiteStorage(db_path)

        with pytest.raises(StorageUnavailableError):
            await store.initialize()

    @pytest.mark.asyncio
    async def test_not_a_database(self, tmp_path: Path) -> None:
        db_path = tmp_path / "srs.db"
        db_path.write_bytes(b"this is not sqlite" * 100)
        store = SQLiteStorage(db_path)

        with pytest.raises(StorageUnavailableError):
            await store.initialize()

    @pytest.mark.asyncio
    async def test_new_database_is_stamped(self, sqlite_storage: SQLiteStorage) -> None:
        async with aiosqlite.connect(sqlite_storage.db_path) as conn:
            async with conn.execute("SELECT version FROM schema_version") as cursor:
                row = await cursor.fetchone()

        assert row is not None
        assert row[0] == SCHEMA_VERSION


class TestMigrations:
    """Tests for upgrading older databases."""

    @pytest.mark.asyncio
    async def test_v1_database_gains_version_column(self, tmp_path: Path) -> None:
        db_path = tmp_path / "old.db"
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("CREATE TABLE schema_version (version INTEGER PRIMARY KEY)")
            await conn.execute("INSERT INTO schema_version (version) VALUES (1)")
            await conn.execute(V1_CARDS_TABLE)
            await conn.execute(
                "INSERT INTO srs_cards (id, deck, front, back) VALUES (?, ?, ?, ?)",
                ("srs_old", "tiere", "der Hund", "الكلب"),
            )
            await conn.commit()

        store = SQLiteStorage(db_path)
        await store.initialize()
        try:
            card = await store.get_card("srs_old")
            assert card is not None
            assert card.version == 0
            assert card.front == "der Hund"

            updated = await store.update_card(card.with_updates(reps=1))
            assert updated.version == 1
        finally:
            await store.close()

        async with aiosqlite.connect(db_path) as conn:
            async with conn.execute("SELECT version FROM schema_version") as cursor:
                row = await cursor.fetchone()
        assert row is not None
        assert row[0] == SCHEMA_VERSION


class TestImport:
    """Tests for transactional snapshot import."""

    @pytest.mark.asyncio
    async def test_malformed_snapshot_writes_nothing(
        self, sqlite_storage: SQLiteStorage
    ) -> None:
        snapshot = {
            "cards": [CardRecord.create_new("srs_ok").to_dict()],
            "reviews": [{"cardId": "srs_ok", "rating": 9}],
        }

        with pytest.raises(ImportFormatError):
            await sqlite_storage.import_all(snapshot)

        assert await sqlite_storage.get_all_cards() == []

    @pytest.mark.asyncio
    async def test_rejects_non_object(self, sqlite_storage: SQLiteStorage) -> None:
        with pytest.raises(ImportFormatError):
            await sqlite_storage.import_all([1, 2, 3])


class TestApplyReview:
    """Tests for the single-transaction rating write."""

    @pytest.mark.asyncio
    async def test_failed_log_insert_keeps_card(self, sqlite_storage: SQLiteStorage) -> None:
        """If the review event cannot be written the card update is rolled back."""
        await sqlite_storage.put_card(CardRecord.create_new("srs_1", front="Haus"))
        card = await sqlite_storage.get_card("srs_1")
        assert card is not None

        conn = sqlite_storage._ensure_conn()
        await conn.execute(
            """CREATE TEMP TRIGGER reject_reviews BEFORE INSERT ON srs_reviews
               BEGIN SELECT RAISE(ABORT, 'review log unavailable'); END"""
        )
        await conn.commit()

        event = ReviewEvent(
            card_id="srs_1",
            rating=Rating.GOOD,
            elapsed_days=0.0,
            stability=3.1262,
            difficulty=6.5085,
            interval=3,
            timestamp=1_704_067_200_000,
        )
        with pytest.raises(sqlite3.Error):
            await sqlite_storage.apply_review(card.with_updates(reps=1, due=99), event)

        stored = await sqlite_storage.get_card("srs_1")
        assert stored == card

        await conn.execute("DROP TRIGGER reject_reviews")
        await conn.commit()
        assert await sqlite_storage.get_review_history("srs_1") == []
