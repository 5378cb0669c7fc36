"""Card records - per-item scheduling state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

DEFAULT_DECK = "default"
DEFAULT_FRONT_LANG = "de"
DEFAULT_BACK_LANG = "ar"


class CardState(StrEnum):
    """Lifecycle state of a card. NEW moves to REVIEW once and stays there."""

    NEW = "new"
    REVIEW = "review"


@dataclass(frozen=True)
class CardRecord:
    """
    Scheduling state for one tracked learning item.

    The display fields are a copy of the catalog item taken when the card
    was first synced; the scheduler never reads them.

    Attributes:
        id: Deterministic identity derived from content and deck
        deck: Opaque grouping key owned by the catalog
        state: NEW until the first rating, REVIEW afterwards
        stability: Memory half-life proxy in days (0.0 while NEW)
        difficulty: Resistance to stabilizing, 1-10 (0.0 while NEW)
        due: Epoch ms when the card becomes eligible for review
        reps: Completed reviews
        lapses: Failed reviews
        last_reviewed: Epoch ms of the last rating, 0 if never reviewed
        version: Optimistic-concurrency counter, bumped on every update
    """

    id: str
    deck: str = DEFAULT_DECK
    state: CardState = CardState.NEW
    stability: float = 0.0
    difficulty: float = 0.0
    due: int = 0
    reps: int = 0
    lapses: int = 0
    last_reviewed: int = 0
    front: str = ""
    back: str = ""
    front_lang: str = DEFAULT_FRONT_LANG
    back_lang: str = DEFAULT_BACK_LANG
    note_front: str = ""
    note_back: str = ""
    example: str = ""
    version: int = 0

    @classmethod
    def create_new(
        cls,
        card_id: str,
        deck: str | None = None,
        front: str = "",
        back: str = "",
        front_lang: str = DEFAULT_FRONT_LANG,
        back_lang: str = DEFAULT_BACK_LANG,
        note_front: str = "",
        note_back: str = "",
        example: str = "",
    ) -> CardRecord:
        """Create a never-reviewed card that is due immediately."""
        return cls(
            id=card_id,
            deck=deck or DEFAULT_DECK,
            state=CardState.NEW,
            due=0,
            front=front,
            back=back,
            front_lang=front_lang,
            back_lang=back_lang,
            note_front=note_front,
            note_back=note_back,
            example=example,
        )

    @property
    def is_new(self) -> bool:
        return self.state is CardState.NEW

    def is_due(self, now: int) -> bool:
        return self.due <= now

    def with_updates(self, **changes: Any) -> CardRecord:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot (camelCase) representation."""
        return {
            "id": self.id,
            "deck": self.deck,
            "state": self.state.value,
            "stability": self.stability,
            "difficulty": self.difficulty,
            "due": self.due,
            "reps": self.reps,
            "lapses": self.lapses,
            "lastReviewed": self.last_reviewed,
            "front": self.front,
            "back": self.back,
            "frontLang": self.front_lang,
            "backLang": self.back_lang,
            "noteFront": self.note_front,
            "noteBack": self.note_back,
            "example": self.example,
            "version": self.version,
        }
