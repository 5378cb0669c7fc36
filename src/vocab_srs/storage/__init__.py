"""Storage backends for vocab-srs."""

from vocab_srs.storage.base import SRSStorage
from vocab_srs.storage.factory import create_storage
from vocab_srs.storage.memory_store import InMemoryStorage
from vocab_srs.storage.sqlite_store import SQLiteStorage

__all__ = [
    "SRSStorage",
    "InMemoryStorage",
    "SQLiteStorage",
    "create_storage",
]
