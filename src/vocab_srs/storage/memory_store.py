"""In-memory storage backend."""

from __future__ import annotations

import bisect
import copy
import json
from collections import defaultdict
from typing import Any

from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.errors import ConcurrentModificationError
from vocab_srs.storage.base import SRSStorage
from vocab_srs.utils.timeutils import now_ms


class InMemoryStorage(SRSStorage):
    """Dict-based storage for development and testing.

    Cards are indexed by due time (a sorted list of ``(due, id)`` pairs),
    by state and by deck. Data is lost when the process exits unless
    explicitly exported.
    """

    def __init__(self) -> None:
        self._cards: dict[str, CardRecord] = {}
        self._due_index: list[tuple[int, str]] = []
        self._by_state: dict[CardState, set[str]] = defaultdict(set)
        self._by_deck: dict[str, set[str]] = defaultdict(set)
        self._reviews: dict[int, ReviewEvent] = {}
        self._reviews_by_card: dict[str, list[int]] = defaultdict(list)
        self._next_review_id = 1
        self._meta: dict[str, str] = {}

    # ========== Index maintenance ==========

    def _index(self, card: CardRecord) -> None:
        bisect.insort(self._due_index, (card.due, card.id))
        self._by_state[card.state].add(card.id)
        self._by_deck[card.deck].add(card.id)

    def _unindex(self, card: CardRecord) -> None:
        pos = bisect.bisect_left(self._due_index, (card.due, card.id))
        if pos < len(self._due_index) and self._due_index[pos] == (card.due, card.id):
            del self._due_index[pos]
        self._by_state[card.state].discard(card.id)
        self._by_deck[card.deck].discard(card.id)

    def _store(self, card: CardRecord) -> None:
        previous = self._cards.get(card.id)
        if previous is not None:
            self._unindex(previous)
        self._cards[card.id] = card
        self._index(card)

    def _due_ids(self, deck: str | None, now: int | None) -> list[str]:
        cutoff = now_ms() if now is None else now
        end = bisect.bisect_right(self._due_index, cutoff, key=lambda entry: entry[0])
        ids = [card_id for _, card_id in self._due_index[:end]]
        if deck is None:
            return ids
        in_deck = self._by_deck.get(deck, set())
        return [card_id for card_id in ids if card_id in in_deck]

    # ========== Card Operations ==========

    async def get_card(self, card_id: str) -> CardRecord | None:
        return self._cards.get(card_id)

    async def put_card(self, card: CardRecord) -> str:
        self._store(card)
        return card.id

    async def update_card(self, card: CardRecord) -> CardRecord:
        stored = self._cards.get(card.id)
        if stored is None:
            raise ValueError(f"Card {card.id} does not exist")
        if stored.version != card.version:
            raise ConcurrentModificationError(card.id, card.version)

        updated = card.with_updates(version=card.version + 1)
        self._store(updated)
        return updated

    async def get_all_cards(self) -> list[CardRecord]:
        return list(self._cards.values())

    async def delete_card(self, card_id: str) -> bool:
        card = self._cards.pop(card_id, None)
        if card is None:
            return False
        self._unindex(card)
        return True

    async def get_due_cards(
        self,
        deck: str | None = None,
        now: int | None = None,
    ) -> list[CardRecord]:
        return [self._cards[card_id] for card_id in self._due_ids(deck, now)]

    async def count_due(self, deck: str | None = None, now: int | None = None) -> int:
        return len(self._due_ids(deck, now))

    async def count_new(self, deck: str | None = None) -> int:
        new_ids = self._by_state.get(CardState.NEW, set())
        if deck is None:
            return len(new_ids)
        return len(new_ids & self._by_deck.get(deck, set()))

    # ========== Review Log Operations ==========

    async def log_review(self, event: ReviewEvent) -> ReviewEvent:
        stored = event.with_log_fields(self._next_review_id, event.timestamp or now_ms())
        self._append_review(stored)
        return stored

    def _append_review(self, event: ReviewEvent) -> None:
        if event.id is None:
            raise ValueError("Review event has no id")
        if event.id in self._reviews:
            old = self._reviews[event.id]
            self._reviews_by_card[old.card_id].remove(event.id)
        self._reviews[event.id] = event
        bisect.insort(self._reviews_by_card[event.card_id], event.id)
        self._next_review_id = max(self._next_review_id, event.id + 1)

    async def get_review_history(self, card_id: str) -> list[ReviewEvent]:
        return [self._reviews[rid] for rid in self._reviews_by_card.get(card_id, [])]

    async def get_recent_reviews(self, limit: int = 20) -> list[ReviewEvent]:
        events = sorted(self._reviews.values(), key=lambda e: (e.timestamp, e.id), reverse=True)
        return events[: max(limit, 0)]

    async def count_reviews_since(self, since: int) -> int:
        return sum(1 for e in self._reviews.values() if e.timestamp >= since)

    async def _get_all_reviews(self) -> list[ReviewEvent]:
        return [self._reviews[rid] for rid in sorted(self._reviews)]

    # ========== Meta Operations ==========

    # Values are stored JSON-encoded; get_meta always returns a fresh copy.

    async def get_meta(self, key: str) -> Any:
        raw = self._meta.get(key)
        return None if raw is None else json.loads(raw)

    async def set_meta(self, key: str, value: Any) -> None:
        self._meta[key] = json.dumps(value)

    async def get_all_meta(self) -> dict[str, Any]:
        return {key: json.loads(raw) for key, raw in self._meta.items()}

    # ========== Snapshot ==========

    async def _import_records(
        self,
        cards: list[CardRecord],
        meta: dict[str, Any],
        reviews: list[ReviewEvent],
    ) -> None:
        encoded_meta = {key: json.dumps(value) for key, value in meta.items()}

        # Staged on copies, swapped in once every record has been applied
        staged = copy.copy(self)
        staged._cards = dict(self._cards)
        staged._due_index = list(self._due_index)
        staged._by_state = defaultdict(set, {k: set(v) for k, v in self._by_state.items()})
        staged._by_deck = defaultdict(set, {k: set(v) for k, v in self._by_deck.items()})
        staged._reviews = dict(self._reviews)
        staged._reviews_by_card = defaultdict(
            list, {k: list(v) for k, v in self._reviews_by_card.items()}
        )

        for card in cards:
            staged._store(card)
        for event in reviews:
            if event.id is None:
                event = event.with_log_fields(staged._next_review_id, event.timestamp or now_ms())
            staged._append_review(event)

        self.__dict__.update(staged.__dict__)
        self._meta.update(encoded_meta)
