from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.background import JobControl, JobManager
from api.dependencies import get_job_manager, get_league_context, require_api_key
from api.models import (
    ConferenceListResponse,
    JobCreatedResponse,
    JobStatus,
    SimulationRequest,
    SimulationResponse,
)
from context import LeagueDataContext
from simulation import available_conferences, compute_conference_predictions, select_conference_teams

router = APIRouter(prefix="/simulation", tags=["simulation"], dependencies=[Depends(require_api_key)])


def _check_group(ctx: LeagueDataContext, payload: SimulationRequest) -> None:
    if not select_conference_teams(ctx.teams, payload.league, payload.age_group, payload.conference):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No teams for {payload.league} {payload.age_group}"
            + (f" / {payload.conference}" if payload.conference else ""),
        )


def _run(ctx: LeagueDataContext, payload: SimulationRequest, control: JobControl | None = None) -> Dict[str, Any]:
    return compute_conference_predictions(
        ctx.teams,
        ctx.completed_games,
        ctx.upcoming_games,
        league=payload.league,
        age_group=payload.age_group,
        conference=payload.conference,
        trials=payload.trials,
        seed=payload.seed,
        table=ctx.table,
        should_cancel=control.should_cancel if control is not None else None,
        progress_callback=control.report_progress if control is not None else None,
    )


@router.get("/conferences", response_model=ConferenceListResponse, summary="List conferences for a group")
async def list_conferences(
    league: str = Query(...),
    age_group: str = Query(..., alias="ageGroup"),
    ctx: LeagueDataContext = Depends(get_league_context),
) -> ConferenceListResponse:
    return ConferenceListResponse(
        league=league,
        age_group=age_group,
        conferences=available_conferences(ctx.teams, league, age_group),
    )


@router.post("/run", response_model=SimulationResponse, summary="Simulate the rest of a season synchronously")
def run_simulation(
    payload: SimulationRequest,
    ctx: LeagueDataContext = Depends(get_league_context),
) -> SimulationResponse:
    _check_group(ctx, payload)
    return SimulationResponse(**_run(ctx, payload))


@router.post(
    "/jobs",
    response_model=JobCreatedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start a season simulation in the background",
)
async def start_simulation_job(
    payload: SimulationRequest,
    ctx: LeagueDataContext = Depends(get_league_context),
    job_manager: JobManager = Depends(get_job_manager),
) -> JobCreatedResponse:
    _check_group(ctx, payload)

    def task(control: JobControl) -> Dict[str, Any]:
        return _run(ctx, payload, control)

    job_id = job_manager.create_job(
        "simulation",
        task,
        metadata=payload.model_dump(by_alias=True),
    )
    return JobCreatedResponse(
        job_id=job_id,
        status=JobStatus.pending,
        job_type="simulation",
        poll_url=f"/jobs/{job_id}",
    )
