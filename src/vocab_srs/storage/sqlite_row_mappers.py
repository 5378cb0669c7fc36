"""Row-to-model conversion functions for SQLite storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import aiosqlite

from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent

CARD_COLUMNS = (
    "id",
    "deck",
    "state",
    "stability",
    "difficulty",
    "due",
    "reps",
    "lapses",
    "last_reviewed",
    "front",
    "back",
    "front_lang",
    "back_lang",
    "note_front",
    "note_back",
    "example",
    "version",
)


def row_to_card(row: aiosqlite.Row) -> CardRecord:
    """Convert database row to CardRecord."""
    return CardRecord(
        id=row["id"],
        deck=row["deck"],
        state=CardState(row["state"]),
        stability=row["stability"],
        difficulty=row["difficulty"],
        due=row["due"],
        reps=row["reps"],
        lapses=row["lapses"],
        last_reviewed=row["last_reviewed"],
        front=row["front"],
        back=row["back"],
        front_lang=row["front_lang"],
        back_lang=row["back_lang"],
        note_front=row["note_front"],
        note_back=row["note_back"],
        example=row["example"],
        version=row["version"],
    )


def card_to_params(card: CardRecord) -> tuple[Any, ...]:
    """Bind parameters for a CardRecord, in CARD_COLUMNS order."""
    return (
        card.id,
        card.deck,
        card.state.value,
        card.stability,
        card.difficulty,
        card.due,
        card.reps,
        card.lapses,
        card.last_reviewed,
        card.front,
        card.back,
        card.front_lang,
        card.back_lang,
        card.note_front,
        card.note_back,
        card.example,
        card.version,
    )


def row_to_review(row: aiosqlite.Row) -> ReviewEvent:
    """Convert database row to ReviewEvent."""
    return ReviewEvent(
        id=row["id"],
        card_id=row["card_id"],
        rating=Rating(row["rating"]),
        elapsed_days=row["elapsed_days"],
        stability=row["stability"],
        difficulty=row["difficulty"],
        interval=row["interval"],
        timestamp=row["timestamp"],
    )
