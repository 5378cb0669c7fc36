"""Behaviour shared by every storage backend."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio

from vocab_srs.core.card import CardRecord, CardState
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.errors import ConcurrentModificationError
from vocab_srs.storage.base import SRSStorage
from vocab_srs.storage.memory_store import InMemoryStorage
from vocab_srs.storage.sqlite_store import SQLiteStorage

NOW = 1_704_067_200_000
DAY = 86_400_000


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(
    request: pytest.FixtureRequest, tmp_path: Path
) -> AsyncGenerator[SRSStorage, None]:
    """Each backend in turn."""
    backend: SRSStorage
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(tmp_path / "contract.db")
    await backend.initialize()
    yield backend
    await backend.close()


def _event(card_id: str, rating: Rating = Rating.GOOD, timestamp: int = NOW) -> ReviewEvent:
    return ReviewEvent(
        card_id=card_id,
        rating=rating,
        elapsed_days=1.5,
        stability=3.0,
        difficulty=6.0,
        interval=3,
        timestamp=timestamp,
    )


class TestCards:
    """Tests for card operations."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, store: SRSStorage) -> None:
        card = CardRecord.create_new(
            "srs_1", deck="tiere", front="der Hund", back="الكلب", example="Der Hund bellt."
        )

        assert await store.put_card(card) == "srs_1"
        assert await store.get_card("srs_1") == card

    @pytest.mark.asyncio
    async def test_get_missing(self, store: SRSStorage) -> None:
        assert await store.get_card("srs_missing") is None

    @pytest.mark.asyncio
    async def test_put_overwrites(self, store: SRSStorage) -> None:
        await store.put_card(CardRecord.create_new("srs_1", front="alt"))
        await store.put_card(CardRecord.create_new("srs_1", front="neu"))

        card = await store.get_card("srs_1")
        assert card is not None
        assert card.front == "neu"
        assert len(await store.get_all_cards()) == 1

    @pytest.mark.asyncio
    async def test_delete(self, store: SRSStorage) -> None:
        await store.put_card(CardRecord.create_new("srs_1"))

        assert await store.delete_card("srs_1") is True
        assert await store.delete_card("srs_1") is False
        assert await store.get_card("srs_1") is None
        assert await store.count_due(now=NOW) == 0


class TestUpdateCard:
    """Tests for version-checked updates."""

    @pytest.mark.asyncio
    async def test_update_bumps_version(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        await store.put_card(make_card("srs_1", version=0))
        card = await store.get_card("srs_1")
        assert card is not None

        updated = await store.update_card(card.with_updates(reps=4, due=NOW + DAY))

        assert updated.version == 1
        stored = await store.get_card("srs_1")
        assert stored == updated
        assert stored is not None and stored.reps == 4

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        await store.put_card(make_card("srs_1", version=0))
        card = await store.get_card("srs_1")
        assert card is not None
        await store.update_card(card.with_updates(reps=4))

        with pytest.raises(ConcurrentModificationError):
            await store.update_card(card.with_updates(reps=9))

        stored = await store.get_card("srs_1")
        assert stored is not None
        assert stored.reps == 4

    @pytest.mark.asyncio
    async def test_update_missing_card(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        with pytest.raises(ValueError):
            await store.update_card(make_card("srs_gone"))


class TestApplyReview:
    """Tests for writing a rated card together with its review event."""

    @pytest.mark.asyncio
    async def test_writes_card_and_event(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        await store.put_card(make_card("srs_1", version=0))
        card = await store.get_card("srs_1")
        assert card is not None

        updated, event = await store.apply_review(
            card.with_updates(reps=4, due=NOW + DAY), _event("srs_1")
        )

        assert updated.version == 1
        assert await store.get_card("srs_1") == updated
        assert event.id is not None
        assert await store.get_review_history("srs_1") == [event]

    @pytest.mark.asyncio
    async def test_stale_version_writes_nothing(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        await store.put_card(make_card("srs_1", version=0))
        card = await store.get_card("srs_1")
        assert card is not None
        await store.update_card(card.with_updates(reps=4))

        with pytest.raises(ConcurrentModificationError):
            await store.apply_review(card.with_updates(reps=9), _event("srs_1"))

        stored = await store.get_card("srs_1")
        assert stored is not None and stored.reps == 4
        assert await store.get_review_history("srs_1") == []

    @pytest.mark.asyncio
    async def test_missing_card_writes_nothing(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        with pytest.raises(ValueError):
            await store.apply_review(make_card("srs_gone"), _event("srs_gone"))

        assert await store.get_review_history("srs_gone") == []


class TestDueQueries:
    """Tests for due/new counts and queries."""

    @pytest_asyncio.fixture
    async def filled(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> SRSStorage:
        await store.put_card(CardRecord.create_new("srs_new1", deck="tiere"))
        await store.put_card(CardRecord.create_new("srs_new2", deck="verben"))
        await store.put_card(make_card("srs_due", deck="tiere", due=NOW - DAY))
        await store.put_card(make_card("srs_edge", deck="verben", due=NOW))
        await store.put_card(make_card("srs_later", deck="tiere", due=NOW + DAY))
        return store

    @pytest.mark.asyncio
    async def test_due_includes_now(self, filled: SRSStorage) -> None:
        due = {c.id for c in await filled.get_due_cards(now=NOW)}

        assert due == {"srs_new1", "srs_new2", "srs_due", "srs_edge"}
        assert await filled.count_due(now=NOW) == 4

    @pytest.mark.asyncio
    async def test_due_by_deck(self, filled: SRSStorage) -> None:
        due = {c.id for c in await filled.get_due_cards("tiere", now=NOW)}

        assert due == {"srs_new1", "srs_due"}
        assert await filled.count_due("tiere", now=NOW) == 2
        assert await filled.count_due("unknown", now=NOW) == 0

    @pytest.mark.asyncio
    async def test_due_changes_with_time(self, filled: SRSStorage) -> None:
        assert await filled.count_due(now=NOW + DAY) == 5
        assert await filled.count_due(now=-1) == 0

    @pytest.mark.asyncio
    async def test_count_new(self, filled: SRSStorage) -> None:
        assert await filled.count_new() == 2
        assert await filled.count_new("verben") == 1

    @pytest.mark.asyncio
    async def test_rescheduled_card_leaves_due_set(self, filled: SRSStorage) -> None:
        card = await filled.get_card("srs_due")
        assert card is not None
        await filled.update_card(card.with_updates(due=NOW + 10 * DAY))

        due = {c.id for c in await filled.get_due_cards(now=NOW)}
        assert "srs_due" not in due

    @pytest.mark.asyncio
    async def test_new_count_drops_after_first_review(self, filled: SRSStorage) -> None:
        card = await filled.get_card("srs_new1")
        assert card is not None
        await filled.update_card(card.with_updates(state=CardState.REVIEW, due=NOW + DAY))

        assert await filled.count_new() == 1
        assert await filled.count_new("tiere") == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", [1, 7, 42])
    async def test_due_cards_match_filtered_scan(
        self, store: SRSStorage, make_card: Callable[..., CardRecord], seed: int
    ) -> None:
        """get_due_cards equals filtering get_all_cards by due time and deck."""
        rng = random.Random(seed)
        decks = ["tiere", "verben", "default"]
        for i in range(60):
            if rng.random() < 0.3:
                card = CardRecord.create_new(f"srs_{i:03d}", deck=rng.choice(decks))
            else:
                due = NOW + rng.randint(-5, 5) * DAY + rng.choice([-1, 0, 1])
                card = make_card(f"srs_{i:03d}", deck=rng.choice(decks), due=due)
            await store.put_card(card)

        all_cards = await store.get_all_cards()
        for now in (NOW - 3 * DAY, NOW, NOW + 1, NOW + 4 * DAY):
            for deck in [None, *decks, "unknown"]:
                expected = {
                    c.id
                    for c in all_cards
                    if c.due <= now and (deck is None or c.deck == deck)
                }
                due = await store.get_due_cards(deck, now=now)

                assert len(due) == len(expected)
                assert {c.id for c in due} == expected
                assert await store.count_due(deck, now=now) == len(expected)


class TestReviewLog:
    """Tests for the review log."""

    @pytest.mark.asyncio
    async def test_log_assigns_increasing_ids(self, store: SRSStorage) -> None:
        first = await store.log_review(_event("srs_1"))
        second = await store.log_review(_event("srs_1", Rating.EASY))

        assert first.id is not None and second.id is not None
        assert second.id > first.id

    @pytest.mark.asyncio
    async def test_log_fills_missing_timestamp(self, store: SRSStorage) -> None:
        logged = await store.log_review(_event("srs_1", timestamp=0))
        assert logged.timestamp > 0

    @pytest.mark.asyncio
    async def test_history_is_per_card_in_order(self, store: SRSStorage) -> None:
        await store.log_review(_event("srs_1", Rating.AGAIN))
        await store.log_review(_event("srs_2"))
        await store.log_review(_event("srs_1", Rating.GOOD))

        history = await store.get_review_history("srs_1")
        assert [e.rating for e in history] == [Rating.AGAIN, Rating.GOOD]
        assert await store.get_review_history("srs_none") == []

    @pytest.mark.asyncio
    async def test_recent_reviews_newest_first(self, store: SRSStorage) -> None:
        for i in range(5):
            await store.log_review(_event(f"srs_{i}", timestamp=NOW + i))

        recent = await store.get_recent_reviews(limit=3)
        assert [e.card_id for e in recent] == ["srs_4", "srs_3", "srs_2"]

    @pytest.mark.asyncio
    async def test_count_since(self, store: SRSStorage) -> None:
        await store.log_review(_event("srs_1", timestamp=NOW - 2 * DAY))
        await store.log_review(_event("srs_1", timestamp=NOW))

        assert await store.count_reviews_since(NOW - DAY) == 1
        assert await store.count_reviews_since(0) == 2

    @pytest.mark.asyncio
    async def test_history_survives_card_deletion(self, store: SRSStorage) -> None:
        await store.put_card(CardRecord.create_new("srs_1"))
        await store.log_review(_event("srs_1"))
        await store.delete_card("srs_1")

        assert len(await store.get_review_history("srs_1")) == 1


class TestMeta:
    """Tests for the meta store."""

    @pytest.mark.asyncio
    async def test_missing_key(self, store: SRSStorage) -> None:
        assert await store.get_meta("nothing") is None

    @pytest.mark.asyncio
    async def test_values_round_trip_as_json(self, store: SRSStorage) -> None:
        await store.set_meta("requestRetention", 0.85)
        await store.set_meta("fsrs_weights", [0.4, 1.2])
        await store.set_meta("misc", {"a": [1, "b"]})

        assert await store.get_meta("requestRetention") == 0.85
        assert await store.get_meta("fsrs_weights") == [0.4, 1.2]
        assert await store.get_all_meta() == {
            "requestRetention": 0.85,
            "fsrs_weights": [0.4, 1.2],
            "misc": {"a": [1, "b"]},
        }

    @pytest.mark.asyncio
    async def test_set_overwrites(self, store: SRSStorage) -> None:
        await store.set_meta("maxIntervalDays", 100)
        await store.set_meta("maxIntervalDays", 200)

        assert await store.get_meta("maxIntervalDays") == 200


class TestSnapshot:
    """Tests for export/import."""

    @pytest.mark.asyncio
    async def test_export_shape(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        await store.put_card(make_card("srs_b"))
        await store.put_card(CardRecord.create_new("srs_a"))
        await store.set_meta("requestRetention", 0.9)
        await store.log_review(_event("srs_b"))

        data = await store.export_all()

        assert [c["id"] for c in data["cards"]] == ["srs_a", "srs_b"]
        assert data["meta"] == [{"key": "requestRetention", "value": 0.9}]
        assert data["reviews"][0]["cardId"] == "srs_b"
        assert data["exportedAt"] > 0

    @pytest.mark.asyncio
    async def test_export_import_into_empty_store(
        self,
        store: SRSStorage,
        tmp_path: Path,
        make_card: Callable[..., CardRecord],
    ) -> None:
        await store.put_card(make_card("srs_1", version=3))
        await store.set_meta("maxIntervalDays", 365)
        await store.log_review(_event("srs_1"))
        data = await store.export_all()

        target = SQLiteStorage(tmp_path / "target.db")
        await target.initialize()
        try:
            counts = await target.import_all(data)

            assert counts == {"cards": 1, "meta": 1, "reviews": 1}
            assert await target.get_card("srs_1") == await store.get_card("srs_1")
            assert await target.get_meta("maxIntervalDays") == 365
            assert [e.to_dict() for e in await target.get_review_history("srs_1")] == [
                e.to_dict() for e in await store.get_review_history("srs_1")
            ]
        finally:
            await target.close()

    @pytest.mark.asyncio
    async def test_import_merges_by_key(
        self, store: SRSStorage, make_card: Callable[..., CardRecord]
    ) -> None:
        await store.put_card(make_card("srs_keep", reps=1))
        await store.put_card(make_card("srs_replace", reps=1))

        await store.import_all({"cards": [make_card("srs_replace", reps=7).to_dict()]})

        keep = await store.get_card("srs_keep")
        replaced = await store.get_card("srs_replace")
        assert keep is not None and keep.reps == 1
        assert replaced is not None and replaced.reps == 7

    @pytest.mark.asyncio
    async def test_import_without_review_ids_appends(self, store: SRSStorage) -> None:
        await store.log_review(_event("srs_1"))

        await store.import_all({"reviews": [{"cardId": "srs_1", "rating": 3}]})

        history = await store.get_review_history("srs_1")
        assert [e.rating for e in history] == [Rating.GOOD, Rating.EASY]
        assert history[0].id != history[1].id

    @pytest.mark.asyncio
    async def test_import_then_log_continues_ids(self, store: SRSStorage) -> None:
        await store.import_all({"reviews": [{"id": 41, "cardId": "srs_1", "rating": 2}]})

        logged = await store.log_review(_event("srs_1"))
        assert logged.id is not None and logged.id > 41
