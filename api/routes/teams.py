from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from alias import TeamLookup, resolve_team
from api.dependencies import get_league_context, require_api_key
from api.models import ResolvedName, ResolveRequest, ResolveResponse, TeamListResponse, TeamSummary
from api.utils import suggestion_payload, team_summary
from context import LeagueDataContext
from data import normalize_conference

router = APIRouter(prefix="/teams", tags=["teams"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=TeamListResponse, summary="List ranked teams")
async def list_teams(
    age_group: Optional[str] = Query(None, alias="ageGroup"),
    league: Optional[str] = Query(None),
    conference: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: LeagueDataContext = Depends(get_league_context),
) -> TeamListResponse:
    teams = [
        team
        for team in ctx.teams
        if (age_group is None or team.age_group == age_group)
        and (league is None or team.league == league)
        and (conference is None or normalize_conference(team.conference) == normalize_conference(conference))
    ]
    teams.sort(key=lambda team: (team.rank is None, team.rank or 0, -(team.power_score or 0.0)))
    page = teams[offset : offset + limit]
    return TeamListResponse(items=[team_summary(t) for t in page], total=len(teams), limit=limit, offset=offset)


@router.post("/resolve", response_model=ResolveResponse, summary="Match free-text names to ranked teams")
async def resolve_names(
    payload: ResolveRequest,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> ResolveResponse:
    lookup = TeamLookup.build(ctx.teams)
    results = []
    for name in payload.names:
        team = resolve_team(name, payload.age_group, lookup=lookup)
        results.append(
            ResolvedName(
                query=name,
                matched=not team.is_unranked,
                team=team_summary(team),
                suggestions=suggestion_payload(lookup.suggestions(name, payload.age_group)) if team.is_unranked else [],
            )
        )
    return ResolveResponse(age_group=payload.age_group, results=results)


@router.get("/{team_id}", response_model=TeamSummary, summary="Get a single ranked team")
async def get_team(
    team_id: str,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> TeamSummary:
    team = ctx.team_by_id(team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown team")
    return team_summary(team)
