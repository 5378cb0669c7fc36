"""Scheduling engine: FSRS math, settings, card sync and review sessions."""

from vocab_srs.engine.card_sync import CardSyncEngine, SyncResult, card_id
from vocab_srs.engine.decks import DeckOverview, DeckSummary, summarize_decks
from vocab_srs.engine.fsrs import FSRSScheduler, ScheduleResult
from vocab_srs.engine.review_session import (
    CardView,
    Dashboard,
    RatingOutcome,
    ReviewSession,
    SessionPhase,
    SessionTally,
)
from vocab_srs.engine.scheduler_settings import SchedulerSettings

__all__ = [
    "CardSyncEngine",
    "CardView",
    "Dashboard",
    "DeckOverview",
    "DeckSummary",
    "FSRSScheduler",
    "RatingOutcome",
    "ReviewSession",
    "ScheduleResult",
    "SchedulerSettings",
    "SessionPhase",
    "SessionTally",
    "SyncResult",
    "card_id",
    "summarize_decks",
]
