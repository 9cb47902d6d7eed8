from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_context_manager, require_api_key
from api.models import LeagueMetadataResponse, LeagueReloadRequest
from context import ContextManager, LeagueDataContext

router = APIRouter(prefix="/league", tags=["league"], dependencies=[Depends(require_api_key)])


def _metadata(ctx: LeagueDataContext) -> LeagueMetadataResponse:
    return LeagueMetadataResponse(
        team_count=len(ctx.teams),
        completed_games=len(ctx.completed_games),
        upcoming_games=len(ctx.upcoming_games),
        last_reload=ctx.created_at,
        teams_path=str(ctx.teams_path) if ctx.teams_path else None,
        games_path=str(ctx.games_path) if ctx.games_path else None,
        age_groups=ctx.age_groups(),
        leagues=ctx.leagues(),
        settings=ctx.settings_snapshot,
    )


def _existing_file(value: Optional[str], label: str) -> Optional[str]:
    if not value:
        return None
    path = Path(value).expanduser()
    if not path.exists() or not path.is_file():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} path not found")
    return str(path)


@router.get("", response_model=LeagueMetadataResponse, summary="Describe the loaded team and game data")
async def get_league_metadata(
    manager: ContextManager = Depends(get_context_manager),
) -> LeagueMetadataResponse:
    return _metadata(manager.get())


@router.post("/reload", response_model=LeagueMetadataResponse, summary="Reload team and game data from disk")
async def reload_league(
    payload: LeagueReloadRequest,
    manager: ContextManager = Depends(get_context_manager),
) -> LeagueMetadataResponse:
    teams_path = _existing_file(payload.teams_path, "Teams")
    games_path = _existing_file(payload.games_path, "Games")
    try:
        fresh = manager.reload(teams_path=teams_path, games_path=games_path)
    except (OSError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _metadata(fresh)
