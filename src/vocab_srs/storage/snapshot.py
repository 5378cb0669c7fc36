"""Snapshot payload models for export/import.

The whole payload is validated before any write so that a malformed
snapshot is rejected without touching the store. Field names are the
camelCase ones written by ``export_all``; the note/example keys of older
browser exports (``noteDe``, ``noteAr``, ``ex``) are accepted too.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from vocab_srs.core.card import (
    DEFAULT_BACK_LANG,
    DEFAULT_DECK,
    DEFAULT_FRONT_LANG,
    CardRecord,
    CardState,
)
from vocab_srs.core.rating import Rating
from vocab_srs.core.review_event import ReviewEvent
from vocab_srs.engine.fsrs import D_MAX, D_MIN, S_MIN
from vocab_srs.errors import ImportFormatError


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CardPayload(_SnapshotModel):
    id: str = Field(..., min_length=1)
    deck: str = DEFAULT_DECK
    state: CardState = CardState.NEW
    stability: float = Field(default=0.0, ge=0.0)
    difficulty: float = Field(default=0.0, ge=0.0)
    due: int = 0
    reps: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)
    last_reviewed: int = Field(
        default=0, validation_alias=AliasChoices("lastReviewed", "last_reviewed")
    )
    front: str = ""
    back: str = ""
    front_lang: str = Field(
        default=DEFAULT_FRONT_LANG, validation_alias=AliasChoices("frontLang", "front_lang")
    )
    back_lang: str = Field(
        default=DEFAULT_BACK_LANG, validation_alias=AliasChoices("backLang", "back_lang")
    )
    note_front: str = Field(
        default="", validation_alias=AliasChoices("noteFront", "noteDe", "note_front")
    )
    note_back: str = Field(
        default="", validation_alias=AliasChoices("noteBack", "noteAr", "note_back")
    )
    example: str = Field(default="", validation_alias=AliasChoices("example", "ex"))
    version: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_memory_state(self) -> CardPayload:
        # Reviewed cards must carry a state the scheduler can continue from
        if self.state is CardState.REVIEW:
            if self.stability < S_MIN:
                raise ValueError(
                    f"card {self.id} is in review with stability {self.stability} < {S_MIN}"
                )
            if not D_MIN <= self.difficulty <= D_MAX:
                raise ValueError(
                    f"card {self.id} is in review with difficulty {self.difficulty} "
                    f"outside [{D_MIN}, {D_MAX}]"
                )
        return self

    def to_record(self) -> CardRecord:
        return CardRecord(
            id=self.id,
            deck=self.deck or DEFAULT_DECK,
            state=self.state,
            stability=self.stability,
            difficulty=self.difficulty,
            due=self.due,
            reps=self.reps,
            lapses=self.lapses,
            last_reviewed=self.last_reviewed,
            front=self.front,
            back=self.back,
            front_lang=self.front_lang,
            back_lang=self.back_lang,
            note_front=self.note_front,
            note_back=self.note_back,
            example=self.example,
            version=self.version,
        )


class MetaPayload(_SnapshotModel):
    key: str = Field(..., min_length=1)
    value: Any = None


class ReviewPayload(_SnapshotModel):
    id: int | None = Field(default=None, ge=1)
    card_id: str = Field(..., min_length=1, validation_alias=AliasChoices("cardId", "card_id"))
    rating: Rating
    elapsed_days: float = Field(
        default=0.0, ge=0.0, validation_alias=AliasChoices("elapsedDays", "elapsed_days")
    )
    stability: float = 0.0
    difficulty: float = 0.0
    interval: int = Field(default=0, ge=0)
    timestamp: int = Field(default=0, ge=0)

    def to_event(self) -> ReviewEvent:
        return ReviewEvent(
            id=self.id,
            card_id=self.card_id,
            rating=self.rating,
            elapsed_days=self.elapsed_days,
            stability=self.stability,
            difficulty=self.difficulty,
            interval=self.interval,
            timestamp=self.timestamp,
        )


class SnapshotPayload(_SnapshotModel):
    cards: list[CardPayload] = Field(default_factory=list)
    meta: list[MetaPayload] = Field(default_factory=list)
    reviews: list[ReviewPayload] = Field(default_factory=list)
    exported_at: int | None = Field(
        default=None, validation_alias=AliasChoices("exportedAt", "exported_at")
    )

    def card_records(self) -> list[CardRecord]:
        return [c.to_record() for c in self.cards]

    def meta_entries(self) -> dict[str, Any]:
        return {m.key: m.value for m in self.meta}

    def review_events(self) -> list[ReviewEvent]:
        return [r.to_event() for r in self.reviews]


def parse_snapshot(data: Any) -> SnapshotPayload:
    """Validate a decoded snapshot.

    Raises:
        ImportFormatError: If the payload is not a snapshot object or any
            record in it is malformed.
    """
    if not isinstance(data, dict):
        raise ImportFormatError(
            f"Snapshot must be a JSON object, got {type(data).__name__}"
        )
    try:
        return SnapshotPayload.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ImportFormatError(
            f"Invalid snapshot at {location or '<root>'}: {first['msg']} "
            f"({e.error_count()} error(s))"
        ) from e
