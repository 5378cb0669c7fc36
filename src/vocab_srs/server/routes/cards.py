"""Card and deck API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vocab_srs.context import SRSContext
from vocab_srs.engine.decks import summarize_decks
from vocab_srs.integration.catalog import StaticCatalogSource
from vocab_srs.server.dependencies import get_context
from vocab_srs.server.models import (
    CardResponse,
    DeckOverviewResponse,
    ErrorResponse,
    ReviewEventResponse,
    StatsResponse,
    SyncRequest,
    SyncResponse,
    card_response,
    review_response,
)
from vocab_srs.utils.timeutils import MS_PER_DAY, now_ms

router = APIRouter(prefix="/cards", tags=["cards"])


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Sync catalog items",
    description="Create NEW cards for catalog items that are not tracked yet. "
    "Existing cards keep their progress.",
)
async def sync_cards(
    request: SyncRequest,
    http_request: Request,
    context: Annotated[SRSContext, Depends(get_context)],
) -> SyncResponse:
    """Sync catalog items into scheduler records."""
    decks = [d.to_info() for d in request.decks]
    source = StaticCatalogSource([i.to_item() for i in request.items], decks, name="api")
    result = await context.card_sync().sync_cards(source)
    if decks:
        # Deck metadata is display-only; the latest sync wins
        http_request.app.state.deck_info = {d.id: d for d in decks}
    return SyncResponse(**result.to_dict())


@router.get(
    "/decks",
    response_model=DeckOverviewResponse,
    summary="List decks",
    description="Card counts per deck, decks with due cards first.",
)
async def list_decks(
    http_request: Request,
    context: Annotated[SRSContext, Depends(get_context)],
) -> DeckOverviewResponse:
    deck_info = getattr(http_request.app.state, "deck_info", {})
    overview = await summarize_decks(context.storage, deck_info.values())
    return DeckOverviewResponse.model_validate(overview.to_dict())


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Get review stats",
)
async def get_stats(
    context: Annotated[SRSContext, Depends(get_context)],
    deck: Annotated[str | None, Query(description="Limit to one deck")] = None,
) -> StatsResponse:
    """Due/new/total counts plus reviews in the last day and week."""
    storage = context.storage
    now = now_ms()
    cards = await storage.get_all_cards()
    return StatsResponse(
        deck=deck,
        due=await storage.count_due(deck, now=now),
        new=await storage.count_new(deck),
        total=sum(1 for c in cards if deck is None or c.deck == deck),
        reviews_last_24h=await storage.count_reviews_since(now - MS_PER_DAY),
        reviews_last_7d=await storage.count_reviews_since(now - 7 * MS_PER_DAY),
    )


@router.get(
    "/{card_id}",
    response_model=CardResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get card",
)
async def get_card(
    card_id: str,
    context: Annotated[SRSContext, Depends(get_context)],
) -> CardResponse:
    card = await context.storage.get_card(card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    return card_response(card)


@router.get(
    "/{card_id}/history",
    response_model=list[ReviewEventResponse],
    responses={404: {"model": ErrorResponse}},
    summary="Get review history",
    description="All reviews of a card, oldest first.",
)
async def get_history(
    card_id: str,
    context: Annotated[SRSContext, Depends(get_context)],
) -> list[ReviewEventResponse]:
    card = await context.storage.get_card(card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    events = await context.storage.get_review_history(card_id)
    return [review_response(e) for e in events]
