"""SQLite storage backend for persistent scheduler state."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import aiosqlite

from vocab_srs.errors import StorageUnavailableError
from vocab_srs.storage.base import SRSStorage
from vocab_srs.storage.sqlite_cards import SQLiteCardMixin
from vocab_srs.storage.sqlite_meta import SQLiteMetaMixin
from vocab_srs.storage.sqlite_reviews import SQLiteReviewLogMixin
from vocab_srs.storage.sqlite_schema import SCHEMA, SCHEMA_VERSION, run_migrations
from vocab_srs.storage.sqlite_snapshot import SQLiteSnapshotMixin

logger = logging.getLogger(__name__)


class SQLiteStorage(
    SQLiteCardMixin,
    SQLiteReviewLogMixin,
    SQLiteMetaMixin,
    SQLiteSnapshotMixin,
    SRSStorage,
):
    """SQLite-based storage for cards, review history and settings.

    Data persists to disk and survives restarts. A single writer
    connection is used; the scheduler has one user.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path).expanduser().resolve()
        self._conn: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Open the database and bring the schema up to date.

        For existing databases, pending migrations run first, then the
        full schema is applied (CREATE ... IF NOT EXISTS).

        Raises:
            StorageUnavailableError: If the file cannot be opened or is
                not a usable SQLite database. Calling again may succeed.
        """
        if self._conn is not None:
            return

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self._db_path)
        except (OSError, sqlite3.Error) as e:
            raise StorageUnavailableError(f"Cannot open {self._db_path}: {e}") from e

        try:
            await self._prepare(conn)
        except sqlite3.Error as e:
            await conn.close()
            raise StorageUnavailableError(f"Cannot use {self._db_path}: {e}") from e

        self._conn = conn
        logger.debug("Opened SQLite storage at %s", self._db_path)

    async def _prepare(self, conn: aiosqlite.Connection) -> None:
        conn.row_factory = aiosqlite.Row

        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")

        # Ensure version table exists so we can read the current version
        await conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version (version INTEGER PRIMARY KEY)"
        )
        await conn.commit()

        async with conn.execute("SELECT version FROM schema_version") as cursor:
            row = await cursor.fetchone()

        if row is not None and row["version"] < SCHEMA_VERSION:
            await run_migrations(conn, row["version"])

        # Full schema: CREATE TABLE/INDEX IF NOT EXISTS (safe after migration)
        await conn.executescript(SCHEMA)

        # Stamp version for brand-new databases
        async with conn.execute("SELECT version FROM schema_version") as cursor:
            row = await cursor.fetchone()
        if row is None:
            await conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> aiosqlite.Connection:
        """Ensure the connection is available."""
        if self._conn is None:
            raise StorageUnavailableError("Database not initialized. Call initialize() first.")
        return self._conn
