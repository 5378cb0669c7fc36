"""SQLite schema definition for scheduler storage."""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import aiosqlite

logger = logging.getLogger(__name__)

# Schema version for migrations
SCHEMA_VERSION = 2

# ── Migrations ──────────────────────────────────────────────────────
# Each entry maps (from_version -> to_version) with a list of SQL statements.
# Migrations run sequentially in initialize() when db version < SCHEMA_VERSION.

MIGRATIONS: dict[tuple[int, int], list[str]] = {
    (1, 2): [
        # Optimistic-concurrency counter for update_card
        "ALTER TABLE srs_cards ADD COLUMN version INTEGER NOT NULL DEFAULT 0",
    ],
}


async def run_migrations(conn: aiosqlite.Connection, current_version: int) -> int:
    """Apply all pending migrations from current_version to SCHEMA_VERSION.

    Returns the final schema version after all migrations.
    """
    version = current_version

    while version < SCHEMA_VERSION:
        next_version = version + 1
        key = (version, next_version)

        for sql in MIGRATIONS.get(key, []):
            try:
                await conn.execute(sql)
            except sqlite3.OperationalError as e:
                # Column/index may already exist (partial migration or manual fix)
                message = str(e).lower()
                if "duplicate column" in message or "already exists" in message:
                    logger.debug("Migration already applied: %s", e)
                else:
                    raise

        logger.info("Migrated schema from v%d to v%d", version, next_version)
        version = next_version

    # Update stored version
    await conn.execute("UPDATE schema_version SET version = ?", (SCHEMA_VERSION,))
    await conn.commit()

    return version


SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

-- Per-card scheduling state plus the display copy taken at sync time
CREATE TABLE IF NOT EXISTS srs_cards (
    id TEXT PRIMARY KEY,
    deck TEXT NOT NULL DEFAULT 'default',
    state TEXT NOT NULL DEFAULT 'new',  -- new, review
    stability REAL NOT NULL DEFAULT 0.0,
    difficulty REAL NOT NULL DEFAULT 0.0,
    due INTEGER NOT NULL DEFAULT 0,  -- epoch ms
    reps INTEGER NOT NULL DEFAULT 0,
    lapses INTEGER NOT NULL DEFAULT 0,
    last_reviewed INTEGER NOT NULL DEFAULT 0,  -- epoch ms, 0 = never
    front TEXT NOT NULL DEFAULT '',
    back TEXT NOT NULL DEFAULT '',
    front_lang TEXT NOT NULL DEFAULT 'de',
    back_lang TEXT NOT NULL DEFAULT 'ar',
    note_front TEXT NOT NULL DEFAULT '',
    note_back TEXT NOT NULL DEFAULT '',
    example TEXT NOT NULL DEFAULT '',
    version INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_srs_cards_due ON srs_cards(due);
CREATE INDEX IF NOT EXISTS idx_srs_cards_state ON srs_cards(state);
CREATE INDEX IF NOT EXISTS idx_srs_cards_deck ON srs_cards(deck, due);

-- Append-only review log (no foreign key: cards may be deleted externally)
CREATE TABLE IF NOT EXISTS srs_reviews (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id TEXT NOT NULL,
    rating INTEGER NOT NULL CHECK (rating BETWEEN 0 AND 3),
    elapsed_days REAL NOT NULL DEFAULT 0.0,
    stability REAL NOT NULL,
    difficulty REAL NOT NULL,
    interval INTEGER NOT NULL,
    timestamp INTEGER NOT NULL  -- epoch ms
);
CREATE INDEX IF NOT EXISTS idx_srs_reviews_card ON srs_reviews(card_id, id);
CREATE INDEX IF NOT EXISTS idx_srs_reviews_timestamp ON srs_reviews(timestamp);

-- Scheduler configuration (JSON-encoded values)
CREATE TABLE IF NOT EXISTS srs_meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""
