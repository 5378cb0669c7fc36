"""Review session API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from vocab_srs.context import SRSContext
from vocab_srs.engine.review_session import ReviewSession, SessionPhase
from vocab_srs.server.dependencies import (
    SessionRegistry,
    get_context,
    get_session,
    get_sessions,
)
from vocab_srs.server.models import (
    CreateSessionRequest,
    ErrorResponse,
    RateRequest,
    RateResponse,
    SessionResponse,
    review_response,
    session_response,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])

SESSION_ERRORS: dict[int | str, dict[str, object]] = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


async def _respond(session: ReviewSession) -> SessionResponse:
    if session.phase is SessionPhase.DASHBOARD:
        return session_response(session, await session.dashboard())
    return session_response(session)


@router.post(
    "",
    response_model=SessionResponse,
    status_code=201,
    summary="Open a review session",
    description="Select a deck (or all decks) and show its dashboard.",
)
async def create_session(
    request: CreateSessionRequest,
    context: Annotated[SRSContext, Depends(get_context)],
    sessions: Annotated[SessionRegistry, Depends(get_sessions)],
) -> SessionResponse:
    session = sessions.add(context.new_session())
    session.select_deck(request.deck)
    return await _respond(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get session state",
)
async def get_session_state(
    session: Annotated[ReviewSession, Depends(get_session)],
) -> SessionResponse:
    return await _respond(session)


@router.post(
    "/{session_id}/start",
    response_model=SessionResponse,
    responses=SESSION_ERRORS,
    summary="Start reviewing",
    description="Queue the due cards and show the first front. "
    "With nothing due the session stays on its dashboard.",
)
async def start_review(
    session: Annotated[ReviewSession, Depends(get_session)],
) -> SessionResponse:
    await session.start_review()
    return await _respond(session)


@router.post(
    "/{session_id}/flip",
    response_model=SessionResponse,
    responses=SESSION_ERRORS,
    summary="Reveal the answer",
)
async def flip_card(
    session: Annotated[ReviewSession, Depends(get_session)],
) -> SessionResponse:
    session.flip()
    return await _respond(session)


@router.post(
    "/{session_id}/rate",
    response_model=RateResponse,
    responses={**SESSION_ERRORS, 422: {"model": ErrorResponse}},
    summary="Rate the current card",
    description="Schedule the current card and advance to the next one.",
)
async def rate_card(
    request: RateRequest,
    session: Annotated[ReviewSession, Depends(get_session)],
) -> RateResponse:
    outcome = await session.rate(request.rating)
    return RateResponse(
        card_id=outcome.card_id,
        rating=int(outcome.rating),
        applied=outcome.applied,
        interval=outcome.interval,
        due=outcome.due,
        event=review_response(outcome.event) if outcome.event else None,
        session=await _respond(session),
    )


@router.post(
    "/{session_id}/abandon",
    response_model=SessionResponse,
    responses=SESSION_ERRORS,
    summary="Abandon the review",
    description="Drop the rest of the queue and return to the dashboard. "
    "Ratings already given are kept.",
)
async def abandon_review(
    session: Annotated[ReviewSession, Depends(get_session)],
) -> SessionResponse:
    session.abandon()
    return await _respond(session)


@router.delete(
    "/{session_id}",
    responses={404: {"model": ErrorResponse}},
    summary="Close a session",
)
async def delete_session(
    session_id: str,
    sessions: Annotated[SessionRegistry, Depends(get_sessions)],
) -> dict[str, str]:
    if not sessions.remove(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "deleted", "session_id": session_id}
