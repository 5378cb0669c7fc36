"""Export/import API routes."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends

from vocab_srs.context import SRSContext
from vocab_srs.server.dependencies import get_context
from vocab_srs.server.models import ErrorResponse, ImportResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data", tags=["data"])


@router.get(
    "/export",
    summary="Export all data",
    description="Snapshot of every card, setting and review as JSON.",
)
async def export_data(
    context: Annotated[SRSContext, Depends(get_context)],
) -> dict[str, Any]:
    return await context.storage.export_all()


@router.post(
    "/import",
    response_model=ImportResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Import a snapshot",
    description="Merge a snapshot into the store. Records with the same id are replaced; "
    "a malformed snapshot is rejected without writing anything.",
)
async def import_data(
    snapshot: Annotated[Any, Body()],
    context: Annotated[SRSContext, Depends(get_context)],
) -> ImportResponse:
    counts = await context.storage.import_all(snapshot)
    await context.settings.reload()
    logger.info("Imported snapshot via API: %s", counts)
    return ImportResponse(**counts)
