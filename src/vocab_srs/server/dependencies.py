"""Shared dependencies for API routes."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Annotated

from fastapi import Depends, HTTPException

from vocab_srs.context import SRSContext
from vocab_srs.engine.review_session import ReviewSession

logger = logging.getLogger(__name__)

MAX_SESSIONS = 100


class SessionRegistry:
    """Open review sessions by id; the oldest is dropped past the limit."""

    def __init__(self, max_sessions: int = MAX_SESSIONS) -> None:
        self._sessions: OrderedDict[str, ReviewSession] = OrderedDict()
        self._max_sessions = max_sessions

    def add(self, session: ReviewSession) -> ReviewSession:
        self._sessions[session.id] = session
        while len(self._sessions) > self._max_sessions:
            dropped, _ = self._sessions.popitem(last=False)
            logger.debug("Dropped idle review session %s", dropped)
        return session

    def get(self, session_id: str) -> ReviewSession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


async def get_context() -> SRSContext:
    """
    Dependency to get the application context.

    This is overridden by the application at startup.
    """
    raise NotImplementedError("Context not configured")


async def get_sessions() -> SessionRegistry:
    """Dependency to get the session registry (overridden at startup)."""
    raise NotImplementedError("Session registry not configured")


async def get_session(
    session_id: str,
    sessions: Annotated[SessionRegistry, Depends(get_sessions)],
) -> ReviewSession:
    """Dependency resolving a session id from the path."""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session
