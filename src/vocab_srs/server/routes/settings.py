"""Scheduler settings API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from vocab_srs.context import SRSContext
from vocab_srs.server.dependencies import get_context
from vocab_srs.server.models import ErrorResponse, SettingsResponse, UpdateSettingsRequest

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_response(context: SRSContext) -> SettingsResponse:
    config = context.settings.config
    return SettingsResponse(
        request_retention=config.request_retention,
        max_interval_days=config.max_interval_days,
        weights=config.weights.to_list(),
    )


@router.get("", response_model=SettingsResponse, summary="Get scheduler settings")
async def get_settings(
    context: Annotated[SRSContext, Depends(get_context)],
) -> SettingsResponse:
    return _settings_response(context)


@router.put(
    "",
    response_model=SettingsResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Update scheduler settings",
    description="Persist a new retention target and/or interval cap. "
    "Applies to cards scheduled from now on.",
)
async def update_settings(
    request: UpdateSettingsRequest,
    context: Annotated[SRSContext, Depends(get_context)],
) -> SettingsResponse:
    try:
        await context.settings.save(
            request_retention=request.request_retention,
            max_interval_days=request.max_interval_days,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _settings_response(context)
