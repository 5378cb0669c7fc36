"""SQLite meta (key/value configuration) storage mixin."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import aiosqlite

UPSERT_META_SQL = """INSERT INTO srs_meta (key, value) VALUES (?, ?)
    ON CONFLICT(key) DO UPDATE SET value = excluded.value"""


class SQLiteMetaMixin:
    """Mixin providing JSON-valued meta entries for SQLiteStorage."""

    def _ensure_conn(self) -> aiosqlite.Connection:
        raise NotImplementedError

    async def get_meta(self, key: str) -> Any:
        conn = self._ensure_conn()
        async with conn.execute("SELECT value FROM srs_meta WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
            return json.loads(row["value"]) if row else None

    async def set_meta(self, key: str, value: Any) -> None:
        conn = self._ensure_conn()
        await conn.execute(UPSERT_META_SQL, (key, json.dumps(value)))
        await conn.commit()

    async def get_all_meta(self) -> dict[str, Any]:
        conn = self._ensure_conn()
        async with conn.execute("SELECT key, value FROM srs_meta") as cursor:
            rows = await cursor.fetchall()
            return {row["key"]: json.loads(row["value"]) for row in rows}
