"""Core data models for vocab-srs."""

from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.catalog import CatalogItem, DeckInfo
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.core.scheduler_config import (
    DEFAULT_MAX_INTERVAL_DAYS,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    FSRSWeights,
    SchedulerConfig,
)

__all__ = [
    "DEFAULT_MAX_INTERVAL_DAYS",
    "DEFAULT_REQUEST_RETENTION",
    "DEFAULT_WEIGHTS",
    "CardRecord",
    "CardState",
    "CatalogItem",
    "DeckInfo",
    "FSRSWeights",
    "Rating",
    "ReviewEvent",
    "SchedulerConfig",
]
