from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from alias import TeamLookup, resolve_team
from api.dependencies import get_league_context, require_api_key
from api.models import PredictRequest, PredictResponse, TeamPerformanceResponse
from api.utils import performance_entries, prediction_model, team_summary
from context import LeagueDataContext
from predictions import games_for_team, predict_game, rank_games_by_performance
from ratings import Team

router = APIRouter(prefix="/predictions", tags=["predictions"], dependencies=[Depends(require_api_key)])


def _team_for(ctx: LeagueDataContext, lookup: TeamLookup, value: str, age_group: Optional[str], by_id: bool) -> Team:
    if by_id:
        team = ctx.team_by_id(value)
        if team is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown team id '{value}'")
        return team
    if not age_group:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ageGroup is required when predicting by team name",
        )
    return resolve_team(value, age_group, lookup=lookup)


@router.post("", response_model=PredictResponse, summary="Predict a single match")
async def predict_match(
    payload: PredictRequest,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> PredictResponse:
    lookup = TeamLookup.build(ctx.teams)
    home = _team_for(ctx, lookup, payload.home_team, payload.age_group, payload.by_id)
    away = _team_for(ctx, lookup, payload.away_team, payload.away_age_group or payload.age_group, payload.by_id)
    result = predict_game(home, away, table=ctx.table, reference_year=payload.reference_year)
    return PredictResponse(home=team_summary(home), away=team_summary(away), prediction=prediction_model(result))


@router.get(
    "/performance/{team_id}",
    response_model=TeamPerformanceResponse,
    summary="Rank a team's played games against their predictions",
)
async def team_performance(
    team_id: str,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> TeamPerformanceResponse:
    team = ctx.team_by_id(team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown team")
    games = games_for_team(ctx.completed_games, team)
    ranked = rank_games_by_performance(games, team, ctx.teams, table=ctx.table)
    return TeamPerformanceResponse(team=team_summary(team), games=performance_entries(ranked))
