"""Abstract base class for scheduler storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from vocab_srs.storage.snapshot import parse_snapshot
from vocab_srs.utils.timeutils import now_ms

if TYPE_CHECKING:
    from vocab_srs.core.card import CardRecord
    from vocab_srs.core.review_event import ReviewEvent


class SRSStorage(ABC):
    """
    Abstract interface for scheduler storage.

    Implementations hold three collections: card records keyed by id,
    the append-only review log, and a key/value meta store for
    JSON-serializable configuration values.
    """

    async def initialize(self) -> None:  # noqa: B027
        """Open the backing store. No-op by default."""

    async def close(self) -> None:  # noqa: B027
        """Release the backing store. No-op by default."""

    # ========== Card Operations ==========

    @abstractmethod
    async def get_card(self, card_id: str) -> CardRecord | None:
        """
        Get a card by ID.

        Args:
            card_id: The card ID

        Returns:
            The card if found, None otherwise
        """
        ...

    @abstractmethod
    async def put_card(self, card: CardRecord) -> str:
        """
        Insert or replace a card (upsert, last write wins).

        The record is stored exactly as given, including ``version``.

        Args:
            card: The card to store

        Returns:
            The card ID
        """
        ...

    @abstractmethod
    async def update_card(self, card: CardRecord) -> CardRecord:
        """
        Replace a card only if it was not changed since it was read.

        Succeeds when the stored ``version`` equals ``card.version``;
        the stored record then gets ``version + 1``.

        Args:
            card: The modified card, carrying the version it was read at

        Returns:
            The stored card with its new version

        Raises:
            ConcurrentModificationError: If the stored version differs
            ValueError: If the card does not exist
        """
        ...

    @abstractmethod
    async def get_all_cards(self) -> list[CardRecord]:
        """Get every stored card, in no particular order."""
        ...

    @abstractmethod
    async def delete_card(self, card_id: str) -> bool:
        """
        Delete a card. Its review events are kept.

        Returns:
            True if deleted, False if not found
        """
        ...

    @abstractmethod
    async def get_due_cards(
        self,
        deck: str | None = None,
        now: int | None = None,
    ) -> list[CardRecord]:
        """
        Get cards with ``due <= now``.

        Args:
            deck: Restrict to one deck, or all decks if None
            now: Epoch ms cutoff, defaults to the current time

        Returns:
            Matching cards; callers must not rely on the order
        """
        ...

    @abstractmethod
    async def count_due(self, deck: str | None = None, now: int | None = None) -> int:
        """Count cards with ``due <= now``, optionally within one deck."""
        ...

    @abstractmethod
    async def count_new(self, deck: str | None = None) -> int:
        """Count cards still in the NEW state, optionally within one deck."""
        ...

    # ========== Review Log Operations ==========

    @abstractmethod
    async def log_review(self, event: ReviewEvent) -> ReviewEvent:
        """
        Append a review event.

        Args:
            event: The event; a zero ``timestamp`` is replaced by now

        Returns:
            The stored event with its assigned id and timestamp
        """
        ...

    @abstractmethod
    async def get_review_history(self, card_id: str) -> list[ReviewEvent]:
        """Get all events for a card, oldest first (ascending id)."""
        ...

    @abstractmethod
    async def get_recent_reviews(self, limit: int = 20) -> list[ReviewEvent]:
        """Get the most recent events across all cards, newest first."""
        ...

    @abstractmethod
    async def count_reviews_since(self, since: int) -> int:
        """Count events with ``timestamp >= since``."""
        ...

    async def apply_review(
        self, card: CardRecord, event: ReviewEvent
    ) -> tuple[CardRecord, ReviewEvent]:
        """
        Store a rated card and its review event as one commit.

        Either both are written or neither is. The card goes through the
        same version check as ``update_card``.

        Returns:
            The stored card and the logged event

        Raises:
            ConcurrentModificationError: If the stored version differs
            ValueError: If the card does not exist
        """
        # Only safe for in-process backends; SQLiteStorage overrides this
        updated = await self.update_card(card)
        logged = await self.log_review(event)
        return updated, logged

    # ========== Meta Operations ==========

    @abstractmethod
    async def get_meta(self, key: str) -> Any:
        """
        Get a stored configuration value.

        Returns:
            The JSON-decoded value, or None if the key is absent
        """
        ...

    @abstractmethod
    async def set_meta(self, key: str, value: Any) -> None:
        """
        Store a JSON-serializable configuration value.

        Raises:
            TypeError: If the value is not JSON-serializable
        """
        ...

    @abstractmethod
    async def get_all_meta(self) -> dict[str, Any]:
        """Get every meta entry as a key/value dict."""
        ...

    # ========== Snapshot ==========

    async def export_all(self) -> dict[str, Any]:
        """
        Export every card, meta entry and review event.

        Returns:
            ``{"cards": [...], "meta": [{"key", "value"}], "reviews": [...],
            "exportedAt": ms}`` with camelCase record fields
        """
        cards = await self.get_all_cards()
        meta = await self.get_all_meta()
        reviews = await self._get_all_reviews()
        return {
            "cards": [c.to_dict() for c in sorted(cards, key=lambda c: c.id)],
            "meta": [{"key": k, "value": v} for k, v in sorted(meta.items())],
            "reviews": [r.to_dict() for r in reviews],
            "exportedAt": now_ms(),
        }

    async def import_all(self, data: Any) -> dict[str, int]:
        """
        Validate a snapshot, then upsert everything in one transaction.

        Existing records with the same keys are overwritten; nothing is
        deleted.

        Args:
            data: A decoded snapshot as produced by ``export_all``

        Returns:
            Counts of imported cards, meta entries and reviews

        Raises:
            ImportFormatError: If the payload is malformed (nothing written)
        """
        snapshot = parse_snapshot(data)
        cards = snapshot.card_records()
        meta = snapshot.meta_entries()
        reviews = snapshot.review_events()
        await self._import_records(cards, meta, reviews)
        return {"cards": len(cards), "meta": len(meta), "reviews": len(reviews)}

    @abstractmethod
    async def _get_all_reviews(self) -> list[ReviewEvent]:
        """Every review event in ascending id order."""
        ...

    @abstractmethod
    async def _import_records(
        self,
        cards: list[CardRecord],
        meta: dict[str, Any],
        reviews: list[ReviewEvent],
    ) -> None:
        """Write already-validated snapshot records atomically."""
        ...
