"""vocab-srs - FSRS spaced-repetition scheduler for vocabulary cards."""

from vocab_srs.context import SRSContext
from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.catalog import CatalogItem, DeckInfo
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.core.scheduler_config import FSRSWeights, SchedulerConfig
from vocab_srs.engine.card_sync import CardSyncEngine, SyncResult
from vocab_srs.engine.fsrs import FSRSScheduler, ScheduleResult
from vocab_srs.engine.review_session import ReviewSession, SessionPhase
from vocab_srs.engine.scheduler_settings import SchedulerSettings

__version__ = "0.1.0"

__all__ = [
    # Core models
    "CardRecord",
    "CardState",
    "CatalogItem",
    "DeckInfo",
    "Rating",
    "ReviewEvent",
    "FSRSWeights",
    "SchedulerConfig",
    # Engine
    "FSRSScheduler",
    "ScheduleResult",
    "SchedulerSettings",
    "CardSyncEngine",
    "SyncResult",
    "ReviewSession",
    "SessionPhase",
    # Wiring
    "SRSContext",
    # Version
    "__version__",
]
