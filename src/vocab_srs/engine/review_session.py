"""Review session - the queue state machine driving one study sitting.

Phases::

    DECK_SELECTION -> DASHBOARD -> FRONT -> BACK -> FRONT (next card) ...
                          ^                          |
                          +---- queue exhausted -----+

Each rating is scheduled, written back with an optimistic version check
and appended to the review log before the session advances.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.errors import ConcurrentModificationError, SessionStateError
from vocab_srs.utils.timeutils import days_between, now_ms

if TYPE_CHECKING:
    from vocab_srs.engine.scheduler_settings import SchedulerSettings
    from vocab_srs.storage.base import SRSStorage

logger = logging.getLogger(__name__)


class SessionPhase(StrEnum):
    """Where the learner is in the session."""

    DECK_SELECTION = "deck_selection"
    DASHBOARD = "dashboard"
    FRONT = "front"
    BACK = "back"


@dataclass(frozen=True)
class SessionTally:
    """Ratings given since the deck was selected."""

    reviewed: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0

    def record(self, rating: Rating) -> SessionTally:
        field_name = rating.name.lower()
        return replace(
            self,
            reviewed=self.reviewed + 1,
            **{field_name: getattr(self, field_name) + 1},
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "reviewed": self.reviewed,
            "again": self.again,
            "hard": self.hard,
            "good": self.good,
            "easy": self.easy,
        }


@dataclass(frozen=True)
class CardView:
    """What the learner sees of the current card."""

    card_id: str
    deck: str
    is_new: bool
    flipped: bool
    remaining: int
    front: str
    front_lang: str
    note_front: str
    back: str | None = None
    back_lang: str | None = None
    note_back: str | None = None
    example: str | None = None

    @classmethod
    def of(cls, card: CardRecord, flipped: bool, remaining: int) -> CardView:
        """Build a view; answer fields stay None until the card is flipped."""
        view = cls(
            card_id=card.id,
            deck=card.deck,
            is_new=card.is_new,
            flipped=flipped,
            remaining=remaining,
            front=card.front,
            front_lang=card.front_lang,
            note_front=card.note_front,
        )
        if not flipped:
            return view
        return replace(
            view,
            back=card.back,
            back_lang=card.back_lang,
            note_back=card.note_back,
            example=card.example,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "deck": self.deck,
            "is_new": self.is_new,
            "flipped": self.flipped,
            "remaining": self.remaining,
            "front": self.front,
            "front_lang": self.front_lang,
            "note_front": self.note_front,
            "back": self.back,
            "back_lang": self.back_lang,
            "note_back": self.note_back,
            "example": self.example,
        }


@dataclass(frozen=True)
class Dashboard:
    """Counts shown before a review starts."""

    deck: str | None
    due: int
    new: int
    total: int
    reviewed_in_session: int
    tally: SessionTally

    def to_dict(self) -> dict[str, Any]:
        return {
            "deck": self.deck,
            "due": self.due,
            "new": self.new,
            "total": self.total,
            "reviewed_in_session": self.reviewed_in_session,
            "tally": self.tally.to_dict(),
        }


@dataclass(frozen=True)
class RatingOutcome:
    """
    Result of rating the current card.

    Attributes:
        card_id: The rated card
        rating: The rating given
        applied: False if the card was changed elsewhere and was skipped
        interval: Scheduled interval in days (0 when not applied)
        due: New due time in epoch ms (0 when not applied)
        event: The logged review event, None when not applied
        next_card: View of the next card, None when the queue is exhausted
    """

    card_id: str
    rating: Rating
    applied: bool
    interval: int = 0
    due: int = 0
    event: ReviewEvent | None = None
    next_card: CardView | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "rating": int(self.rating),
            "applied": self.applied,
            "interval": self.interval,
            "due": self.due,
            "event": self.event.to_dict() if self.event else None,
            "next_card": self.next_card.to_dict() if self.next_card else None,
        }


def queue_order(card: CardRecord) -> tuple[bool, int]:
    """Sort key for the review queue: NEW cards first, then by due time.

    Ties keep the order storage returned them in (``sorted`` is stable).
    """
    return (card.state is not CardState.NEW, card.due)


class ReviewSession:
    """One learner's pass over the due cards of a deck (or all decks).

    Commands raise ``SessionStateError`` when issued in the wrong phase.
    """

    def __init__(
        self,
        storage: SRSStorage,
        settings: SchedulerSettings,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.id = uuid4().hex
        self._storage = storage
        self._settings = settings
        self._clock = clock
        self._phase = SessionPhase.DECK_SELECTION
        self._deck: str | None = None
        self._queue: deque[CardRecord] = deque()
        self._current: CardRecord | None = None
        self._tally = SessionTally()

    # ---- State ----

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def deck(self) -> str | None:
        return self._deck

    @property
    def current_card(self) -> CardRecord | None:
        return self._current

    @property
    def remaining(self) -> int:
        """Cards left including the current one."""
        return len(self._queue) + (1 if self._current is not None else 0)

    @property
    def tally(self) -> SessionTally:
        return self._tally

    def current_view(self) -> CardView | None:
        if self._current is None:
            return None
        return CardView.of(
            self._current,
            flipped=self._phase is SessionPhase.BACK,
            remaining=self.remaining,
        )

    def _require(self, *phases: SessionPhase, command: str) -> None:
        if self._phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise SessionStateError(
                f"Cannot {command} during {self._phase.value} (allowed: {allowed})"
            )

    # ---- Commands ----

    def select_deck(self, deck: str | None = None) -> None:
        """Choose a deck (None for all decks) and show its dashboard."""
        self._require(SessionPhase.DECK_SELECTION, SessionPhase.DASHBOARD, command="select a deck")
        self._deck = deck
        self._tally = SessionTally()
        self._phase = SessionPhase.DASHBOARD
        logger.debug("Session %s selected deck %s", self.id, deck or "<all>")

    async def dashboard(self) -> Dashboard:
        """Counts for the selected deck, read fresh from storage."""
        now = self._clock()
        due = await self._storage.count_due(self._deck, now=now)
        new = await self._storage.count_new(self._deck)
        cards = await self._storage.get_all_cards()
        total = sum(1 for c in cards if self._deck is None or c.deck == self._deck)
        return Dashboard(
            deck=self._deck,
            due=due,
            new=new,
            total=total,
            reviewed_in_session=self._tally.reviewed,
            tally=self._tally,
        )

    async def start_review(self) -> CardView | None:
        """Build the queue from the due cards and show the first one.

        Returns:
            The first card's front, or None if nothing is due (the
            session then stays on the dashboard).
        """
        self._require(SessionPhase.DASHBOARD, command="start a review")
        due_cards = await self._storage.get_due_cards(self._deck, now=self._clock())
        self._queue = deque(sorted(due_cards, key=queue_order))
        logger.debug("Session %s queued %d cards", self.id, len(self._queue))
        return self._advance()

    def flip(self) -> CardView:
        """Reveal the answer side of the current card."""
        self._require(SessionPhase.FRONT, command="flip")
        self._phase = SessionPhase.BACK
        view = self.current_view()
        assert view is not None
        return view

    async def rate(self, rating: Any) -> RatingOutcome:
        """Schedule the current card and move on.

        Args:
            rating: A Rating, an int 0-3 or a rating name

        Raises:
            InvalidRatingError: For an unknown rating (nothing is changed)
            SessionStateError: If the answer is not showing
        """
        self._require(SessionPhase.BACK, command="rate")
        parsed = Rating.parse(rating)
        card = self._current
        assert card is not None

        now = self._clock()
        elapsed = days_between(now, card.last_reviewed) if card.last_reviewed > 0 else 0.0
        result = self._settings.scheduler.schedule(card, parsed, elapsed, now=now)

        review = ReviewEvent(
            card_id=card.id,
            rating=parsed,
            elapsed_days=elapsed,
            stability=result.stability,
            difficulty=result.difficulty,
            interval=result.interval,
            timestamp=now,
        )
        try:
            _, event = await self._storage.apply_review(
                result.apply_to(card, reviewed_at=now), review
            )
        except (ConcurrentModificationError, ValueError) as e:
            # Rated (or removed) elsewhere; the stored state wins
            logger.warning("Skipping card %s in session %s: %s", card.id, self.id, e)
            return RatingOutcome(
                card_id=card.id,
                rating=parsed,
                applied=False,
                next_card=self._advance(),
            )

        self._tally = self._tally.record(parsed)

        return RatingOutcome(
            card_id=card.id,
            rating=parsed,
            applied=True,
            interval=result.interval,
            due=result.due,
            event=event,
            next_card=self._advance(),
        )

    def abandon(self) -> None:
        """Drop the rest of the queue and return to the dashboard.

        Ratings already given are persisted; nothing else needs undoing.
        """
        self._require(
            SessionPhase.DASHBOARD, SessionPhase.FRONT, SessionPhase.BACK, command="abandon"
        )
        if self._current is not None:
            logger.debug("Session %s abandoned with %d cards left", self.id, self.remaining)
        self._queue.clear()
        self._current = None
        self._phase = SessionPhase.DASHBOARD

    def back_to_decks(self) -> None:
        """Leave the dashboard for the deck picker."""
        self._require(SessionPhase.DASHBOARD, command="return to deck selection")
        self._deck = None
        self._phase = SessionPhase.DECK_SELECTION

    def _advance(self) -> CardView | None:
        if not self._queue:
            self._current = None
            self._phase = SessionPhase.DASHBOARD
            return None
        self._current = self._queue.popleft()
        self._phase = SessionPhase.FRONT
        return self.current_view()

    def to_dict(self) -> dict[str, Any]:
        view = self.current_view()
        return {
            "id": self.id,
            "phase": self._phase.value,
            "deck": self._deck,
            "remaining": self.remaining,
            "current_card": view.to_dict() if view else None,
            "tally": self._tally.to_dict(),
        }
