"""Explicit wiring of storage and scheduler settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from vocab_srs.engine.card_sync import CardSyncEngine
from vocab_srs.engine.review_session import ReviewSession
from vocab_srs.engine.scheduler_settings import SchedulerSettings
from vocab_srs.storage.factory import create_storage

if TYPE_CHECKING:
    from vocab_srs.storage.base import SRSStorage
    from vocab_srs.utils.config import Config


@dataclass
class SRSContext:
    """Everything a command or request handler needs, passed explicitly."""

    storage: SRSStorage
    settings: SchedulerSettings

    @classmethod
    async def open(cls, config: Config) -> SRSContext:
        """Create storage from config and load the scheduler settings."""
        storage = await create_storage(config)
        return await cls.for_storage(storage)

    @classmethod
    async def for_storage(cls, storage: SRSStorage) -> SRSContext:
        settings = await SchedulerSettings.load(storage)
        return cls(storage=storage, settings=settings)

    def card_sync(self) -> CardSyncEngine:
        return CardSyncEngine(self.storage)

    def new_session(self) -> ReviewSession:
        return ReviewSession(self.storage, self.settings)

    async def close(self) -> None:
        await self.storage.close()
