"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio

from vocab_srs.context import SRSContext
from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.catalog import CatalogItem, DeckInfo
from vocab_srs.engine.fsrs import FSRSScheduler
from vocab_srs.engine.scheduler_settings import SchedulerSettings
from vocab_srs.integration.catalog import StaticCatalogSource
from vocab_srs.storage.memory_store import InMemoryStorage
from vocab_srs.storage.sqlite_store import SQLiteStorage
from vocab_srs.utils.timeutils import MS_PER_DAY

# 2024-01-01T00:00:00Z
BASE_TIME = 1_704_067_200_000


@pytest.fixture
def scheduler() -> FSRSScheduler:
    """Scheduler with the default parameters."""
    return FSRSScheduler()


@pytest_asyncio.fixture
async def storage() -> AsyncGenerator[InMemoryStorage, None]:
    """Create an empty in-memory storage."""
    store = InMemoryStorage()
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sqlite_storage(tmp_path: Path) -> AsyncGenerator[SQLiteStorage, None]:
    """Create a SQLite storage in a temporary directory."""
    store = SQLiteStorage(tmp_path / "srs.db")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def settings(storage: InMemoryStorage) -> SchedulerSettings:
    return await SchedulerSettings.load(storage)


@pytest_asyncio.fixture
async def context(storage: InMemoryStorage) -> SRSContext:
    return await SRSContext.for_storage(storage)


@pytest.fixture
def sample_items() -> list[CatalogItem]:
    """Three German-Arabic items across two decks."""
    return [
        CatalogItem(front="der Hund", back="الكلب", deck="tiere", note_front="m."),
        CatalogItem(front="die Katze", back="القطة", deck="tiere", example="Die Katze schläft."),
        CatalogItem(front="gehen", back="يذهب", deck="verben"),
    ]


@pytest.fixture
def sample_decks() -> list[DeckInfo]:
    return [
        DeckInfo(id="a1", name="A1", icon="🅰️"),
        DeckInfo(id="tiere", name="Tiere", icon="🐾", parent_id="a1"),
        DeckInfo(id="verben", name="Verben", icon="🏃"),
    ]


@pytest.fixture
def catalog(
    sample_items: list[CatalogItem], sample_decks: list[DeckInfo]
) -> StaticCatalogSource:
    return StaticCatalogSource(sample_items, sample_decks)


@pytest.fixture
def make_card() -> Callable[..., CardRecord]:
    """Factory for review-state cards."""

    def _make(card_id: str = "srs_00000001", **fields: object) -> CardRecord:
        defaults: dict[str, object] = {
            "state": CardState.REVIEW,
            "stability": 5.0,
            "difficulty": 5.0,
            "due": BASE_TIME,
            "reps": 3,
            "last_reviewed": BASE_TIME - 5 * MS_PER_DAY,
            "front": f"front {card_id}",
            "back": f"back {card_id}",
        }
        defaults.update(fields)
        return CardRecord(id=card_id, **defaults)  # type: ignore[arg-type]

    return _make
