"""Pydantic models for API request/response."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from vocab_srs.core.card import DEFAULT_BACK_LANG, DEFAULT_FRONT_LANG
from vocab_srs.core.catalog import DEFAULT_DECK_ICON, CatalogItem, DeckInfo
from vocab_srs.engine.scheduler_settings import MAX_INTERVAL_RANGE, RETENTION_RANGE

if TYPE_CHECKING:
    from vocab_srs.core.card import CardRecord
    from vocab_srs.core.review_event import ReviewEvent
    from vocab_srs.engine.review_session import Dashboard, ReviewSession

# ============ Request Models ============


class CatalogItemModel(BaseModel):
    """One catalog item to sync."""

    front: str = Field(..., max_length=10_000)
    back: str = Field(..., max_length=10_000)
    front_lang: str = Field(DEFAULT_FRONT_LANG, max_length=16)
    back_lang: str = Field(DEFAULT_BACK_LANG, max_length=16)
    deck: str | None = Field(None, max_length=200, description="Deck key (default deck if unset)")
    note_front: str = ""
    note_back: str = ""
    example: str = ""

    def to_item(self) -> CatalogItem:
        return CatalogItem(
            front=self.front,
            back=self.back,
            front_lang=self.front_lang,
            back_lang=self.back_lang,
            deck=self.deck or None,
            note_front=self.note_front,
            note_back=self.note_back,
            example=self.example,
        )


class DeckInfoModel(BaseModel):
    """Display metadata for a deck."""

    id: str = Field(..., min_length=1, max_length=200)
    name: str = Field(..., min_length=1, max_length=200)
    icon: str = DEFAULT_DECK_ICON
    parent_id: str | None = None

    def to_info(self) -> DeckInfo:
        return DeckInfo(id=self.id, name=self.name, icon=self.icon, parent_id=self.parent_id)


class SyncRequest(BaseModel):
    """Request to sync catalog items into cards."""

    items: list[CatalogItemModel] = Field(..., max_length=100_000)
    decks: list[DeckInfoModel] = Field(default_factory=list)


class CreateSessionRequest(BaseModel):
    """Request to open a review session."""

    deck: str | None = Field(None, description="Deck to review (all decks if unset)")


class RateRequest(BaseModel):
    """Rating for the card currently shown."""

    rating: int | str = Field(
        ..., description="0-3 or again/hard/good/easy", examples=[2, "good"]
    )


class UpdateSettingsRequest(BaseModel):
    """New scheduler settings; omitted fields are unchanged."""

    request_retention: float | None = Field(
        None, ge=RETENTION_RANGE[0], le=RETENTION_RANGE[1], description="Target recall probability"
    )
    max_interval_days: int | None = Field(
        None, ge=MAX_INTERVAL_RANGE[0], le=MAX_INTERVAL_RANGE[1], description="Interval cap"
    )


# ============ Response Models ============


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class SyncResponse(BaseModel):
    """Outcome of a catalog sync."""

    total: int
    created: int
    existing: int
    collisions: int


class CardResponse(BaseModel):
    """A card and its scheduling state."""

    id: str
    deck: str
    state: str
    stability: float
    difficulty: float
    due: int
    reps: int
    lapses: int
    last_reviewed: int
    front: str
    back: str
    front_lang: str
    back_lang: str
    note_front: str
    note_back: str
    example: str
    version: int


class ReviewEventResponse(BaseModel):
    """One logged review."""

    id: int
    card_id: str
    rating: int
    elapsed_days: float
    stability: float
    difficulty: float
    interval: int
    timestamp: int


class DeckSummaryResponse(BaseModel):
    id: str
    name: str
    icon: str
    parent_name: str
    total: int
    due: int
    new: int


class DeckOverviewResponse(BaseModel):
    decks: list[DeckSummaryResponse]
    total_due: int
    total_cards: int


class TallyResponse(BaseModel):
    reviewed: int = 0
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0


class StatsResponse(BaseModel):
    """Dashboard counts plus recent activity."""

    deck: str | None
    due: int
    new: int
    total: int
    reviews_last_24h: int
    reviews_last_7d: int


class CardViewResponse(BaseModel):
    """The current card as shown; answer fields are null before flipping."""

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


class DashboardResponse(BaseModel):
    deck: str | None
    due: int
    new: int
    total: int
    reviewed_in_session: int
    tally: TallyResponse


class SessionResponse(BaseModel):
    """State of a review session."""

    id: str
    phase: str
    deck: str | None
    remaining: int
    current_card: CardViewResponse | None = None
    tally: TallyResponse
    dashboard: DashboardResponse | None = Field(
        None, description="Present while the session is on its dashboard"
    )


class RateResponse(BaseModel):
    """Result of rating a card."""

    card_id: str
    rating: int
    applied: bool = Field(..., description="False if the card was changed elsewhere and skipped")
    interval: int
    due: int
    event: ReviewEventResponse | None = None
    session: SessionResponse


class SettingsResponse(BaseModel):
    request_retention: float
    max_interval_days: int
    weights: list[float]


class ImportResponse(BaseModel):
    cards: int
    meta: int
    reviews: int


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str | None = None
    extra: dict[str, Any] | None = None


# ============ Converters ============


def card_response(card: CardRecord) -> CardResponse:
    return CardResponse(
        id=card.id,
        deck=card.deck,
        state=card.state.value,
        stability=card.stability,
        difficulty=card.difficulty,
        due=card.due,
        reps=card.reps,
        lapses=card.lapses,
        last_reviewed=card.last_reviewed,
        front=card.front,
        back=card.back,
        front_lang=card.front_lang,
        back_lang=card.back_lang,
        note_front=card.note_front,
        note_back=card.note_back,
        example=card.example,
        version=card.version,
    )


def review_response(event: ReviewEvent) -> ReviewEventResponse:
    assert event.id is not None
    return ReviewEventResponse(
        id=event.id,
        card_id=event.card_id,
        rating=int(event.rating),
        elapsed_days=event.elapsed_days,
        stability=event.stability,
        difficulty=event.difficulty,
        interval=event.interval,
        timestamp=event.timestamp,
    )


def session_response(
    session: ReviewSession, dashboard: Dashboard | None = None
) -> SessionResponse:
    data = session.to_dict()
    if dashboard is not None:
        data["dashboard"] = dashboard.to_dict()
    return SessionResponse.model_validate(data)
