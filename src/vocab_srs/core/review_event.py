"""Review events - the append-only rating history."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from vocab_srs.core.rating import Rating


@dataclass(frozen=True)
class ReviewEvent:
    """
    One rating applied to one card.

    Attributes:
        card_id: Card that was rated (a reference, not ownership)
        rating: The rating given
        elapsed_days: Days since the previous review (0 for a first review)
        stability: Stability after the review
        difficulty: Difficulty after the review
        interval: Scheduled interval in whole days
        timestamp: Epoch ms of the review, filled in by the log if 0
        id: Assigned by the log on append
    """

    card_id: str
    rating: Rating
    elapsed_days: float
    stability: float
    difficulty: float
    interval: int
    timestamp: int = 0
    id: int | None = None

    def with_log_fields(self, event_id: int, timestamp: int) -> ReviewEvent:
        return replace(self, id=event_id, timestamp=timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Snapshot (camelCase) representation."""
        return {
            "id": self.id,
            "cardId": self.card_id,
            "rating": int(self.rating),
            "elapsedDays": self.elapsed_days,
            "stability": self.stability,
            "difficulty": self.difficulty,
            "interval": self.interval,
            "timestamp": self.timestamp,
        }
