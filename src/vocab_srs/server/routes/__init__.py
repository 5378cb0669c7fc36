"""API routes for the vocab-srs server."""

from vocab_srs.server.routes.cards import router as cards_router
from vocab_srs.server.routes.data import router as data_router
from vocab_srs.server.routes.sessions import router as sessions_router
from vocab_srs.server.routes.settings import router as settings_router

__all__ = [
    "cards_router",
    "data_router",
    "sessions_router",
    "settings_router",
]
