from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_context_manager, require_api_key
from api.models import ConfigResponse, ConfigUpdateRequest
from config import SETTINGS_HELP, settings
from context import ContextManager
from predictions import ProbabilityTable

router = APIRouter(prefix="/config", tags=["config"], dependencies=[Depends(require_api_key)])

_TABLE_KNOB = "probability_table_path"


@router.get("/", response_model=ConfigResponse, summary="List current model knobs")
async def get_config() -> ConfigResponse:
    return ConfigResponse(knobs=settings.snapshot())


@router.patch("/", response_model=ConfigResponse, summary="Update or reset model knobs")
async def patch_config(
    payload: ConfigUpdateRequest,
    manager: ContextManager = Depends(get_context_manager),
) -> ConfigResponse:
    if not payload.reset and not payload.updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No updates provided")
    known = set(settings.names())
    unknown = sorted(set(payload.updates) - known)
    if unknown:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown knob '{unknown[0]}'")

    previous_table = settings.get(_TABLE_KNOB)
    if payload.reset:
        settings.reset()
    for name, value in payload.updates.items():
        settings.set(name, value)

    # The loaded context holds the table, so a new path only takes effect on reload.
    if settings.get(_TABLE_KNOB) != previous_table:
        try:
            ProbabilityTable.default()
        except (OSError, ValueError) as exc:
            settings.set(_TABLE_KNOB, previous_table)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        manager.reload()
    return ConfigResponse(knobs=settings.snapshot())


@router.get("/help", summary="Describe available configuration knobs")
async def config_help() -> dict[str, str]:
    return SETTINGS_HELP.copy()
