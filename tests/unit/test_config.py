"""Tests for configuration, storage factory and context wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from vocab_srs.context import SRSContext
from vocab_srs.engine.review_session import SessionPhase
from vocab_srs.storage.factory import create_storage
from vocab_srs.storage.memory_store import InMemoryStorage
from vocab_srs.storage.sqlite_store import SQLiteStorage
from vocab_srs.utils.config import Config, get_config, reset_config


@pytest.fixture(autouse=True)
def _fresh_config() -> None:
    reset_config()


class TestConfig:
    """Tests for Config.from_env."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("VOCAB_SRS_DIR", "VOCAB_SRS_STORAGE", "VOCAB_SRS_DB_PATH", "VOCAB_SRS_PORT"):
            monkeypatch.delenv(key, raising=False)

        config = Config.from_env()

        assert config.storage_backend == "sqlite"
        assert config.port == 8000
        assert config.db_path == config.data_dir / "srs.db"

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("VOCAB_SRS_DIR", str(tmp_path))
        monkeypatch.setenv("VOCAB_SRS_STORAGE", "MEMORY")
        monkeypatch.setenv("VOCAB_SRS_PORT", "9001")
        monkeypatch.setenv("VOCAB_SRS_DEBUG", "yes")
        monkeypatch.setenv("VOCAB_SRS_CORS_ORIGINS", "http://a.test, http://b.test")

        config = Config.from_env()

        assert config.data_dir == tmp_path
        assert config.storage_backend == "memory"
        assert config.port == 9001
        assert config.debug is True
        assert config.cors_origins == ["http://a.test", "http://b.test"]

    def test_bad_port_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VOCAB_SRS_PORT", "eighty")
        assert Config.from_env().port == 8000

    def test_explicit_db_path(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("VOCAB_SRS_DB_PATH", str(tmp_path / "x.db"))
        assert Config.from_env().db_path == tmp_path / "x.db"

    def test_get_config_is_cached(self) -> None:
        assert get_config() is get_config()


class TestFactory:
    """Tests for create_storage."""

    @pytest.mark.asyncio
    async def test_memory(self) -> None:
        storage = await create_storage(Config(storage_backend="memory"))
        assert isinstance(storage, InMemoryStorage)

    @pytest.mark.asyncio
    async def test_sqlite(self, tmp_path: Path) -> None:
        storage = await create_storage(Config(sqlite_path=str(tmp_path / "srs.db")))
        try:
            assert isinstance(storage, SQLiteStorage)
            assert await storage.get_all_cards() == []
        finally:
            await storage.close()

    @pytest.mark.asyncio
    async def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            await create_storage(Config(storage_backend="redis"))


class TestContext:
    """Tests for SRSContext wiring."""

    @pytest.mark.asyncio
    async def test_open_loads_settings(self, tmp_path: Path) -> None:
        ctx = await SRSContext.open(Config(sqlite_path=str(tmp_path / "srs.db")))
        try:
            assert ctx.settings.config.request_retention == 0.9
            assert await ctx.storage.get_meta("requestRetention") == 0.9
        finally:
            await ctx.close()

    @pytest.mark.asyncio
    async def test_new_sessions_are_independent(self, context: SRSContext) -> None:
        first = context.new_session()
        second = context.new_session()
        first.select_deck("tiere")

        assert first.id != second.id
        assert second.phase is SessionPhase.DECK_SELECTION
