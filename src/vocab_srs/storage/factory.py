"""Storage factory for creating storage based on configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vocab_srs.storage.memory_store import InMemoryStorage
from vocab_srs.storage.sqlite_store import SQLiteStorage

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from vocab_srs.storage.base import SRSStorage
    from vocab_srs.utils.config import Config

STORAGE_BACKENDS = ("sqlite", "memory")


async def create_storage(config: Config) -> SRSStorage:
    """
    Create and initialize a storage instance based on configuration.

    Args:
        config: Application configuration

    Returns:
        Initialized storage instance

    Raises:
        ValueError: If the configured backend is unknown
        StorageUnavailableError: If the SQLite database cannot be opened

    Examples:
        config = Config(storage_backend="sqlite", sqlite_path="./srs.db")
        storage = await create_storage(config)
    """
    backend = config.storage_backend
    if backend == "memory":
        mem_storage = InMemoryStorage()
        await mem_storage.initialize()
        return mem_storage

    if backend == "sqlite":
        sqlite_storage = SQLiteStorage(config.db_path)
        await sqlite_storage.initialize()
        logger.debug("Using SQLite storage at %s", sqlite_storage.db_path)
        return sqlite_storage

    raise ValueError(
        f"Unknown storage backend {backend!r}; expected one of {', '.join(STORAGE_BACKENDS)}"
    )
