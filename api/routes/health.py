from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_league_context
from context import LeagueDataContext

router = APIRouter(tags=["health"])


@router.get("/healthz", summary="Application health check")
async def healthcheck(ctx: LeagueDataContext = Depends(get_league_context)) -> dict[str, object]:
    return {"status": "ok", "teams": len(ctx.teams)}
