"""Pydantic schemas used by the API endpoints."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    knobs: Dict[str, Any]


class ConfigUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    updates: Dict[str, Any] = Field(default_factory=dict)
    reset: bool = False


class LeagueMetadataResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_count: int = Field(..., alias="teamCount")
    completed_games: int = Field(..., alias="completedGames")
    upcoming_games: int = Field(..., alias="upcomingGames")
    last_reload: datetime = Field(..., alias="lastReload")
    teams_path: Optional[str] = Field(default=None, alias="teamsPath")
    games_path: Optional[str] = Field(default=None, alias="gamesPath")
    age_groups: List[str] = Field(default_factory=list, alias="ageGroups")
    leagues: List[str] = Field(default_factory=list)
    settings: Dict[str, Any]


class LeagueReloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    teams_path: Optional[str] = Field(default=None, alias="teamsPath")
    games_path: Optional[str] = Field(default=None, alias="gamesPath")


class TeamSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    age_group: Optional[str] = Field(default=None, alias="ageGroup")
    league: Optional[str] = None
    conference: Optional[str] = None
    rank: Optional[int] = None
    power_score: Optional[float] = Field(default=None, alias="powerScore")
    offensive_power_score: Optional[float] = Field(default=None, alias="offensivePowerScore")
    defensive_power_score: Optional[float] = Field(default=None, alias="defensivePowerScore")
    goals_per_game: Optional[float] = Field(default=None, alias="goalsPerGame")
    goals_against_per_game: Optional[float] = Field(default=None, alias="goalsAgainstPerGame")
    record: str = ""
    is_unranked: bool = Field(default=False, alias="isUnranked")


class TeamListResponse(BaseModel):
    items: List[TeamSummary]
    total: int
    limit: int
    offset: int


class ResolveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    names: List[str] = Field(..., min_length=1)
    age_group: str = Field(..., alias="ageGroup")


class ResolvedName(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str
    matched: bool
    team: TeamSummary
    suggestions: List[Dict[str, Any]] = Field(default_factory=list)


class ResolveResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    age_group: str = Field(..., alias="ageGroup")
    results: List[ResolvedName]


class PredictRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    home_team: str = Field(..., alias="homeTeam")
    away_team: str = Field(..., alias="awayTeam")
    age_group: Optional[str] = Field(default=None, alias="ageGroup")
    away_age_group: Optional[str] = Field(default=None, alias="awayAgeGroup")
    by_id: bool = Field(default=False, alias="byId")
    reference_year: Optional[int] = Field(default=None, alias="referenceYear")


class Prediction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    predicted_home_score: int = Field(..., alias="predictedHomeScore")
    predicted_away_score: int = Field(..., alias="predictedAwayScore")
    home_expected_goals: float = Field(..., alias="homeExpectedGoals")
    away_expected_goals: float = Field(..., alias="awayExpectedGoals")
    expected_goal_diff: float = Field(..., alias="expectedGoalDiff")
    home_win_probability: int = Field(..., alias="homeWinProbability")
    draw_probability: int = Field(..., alias="drawProbability")
    away_win_probability: int = Field(..., alias="awayWinProbability")
    confidence: int
    power_diff: float = Field(..., alias="powerDiff")
    is_cross_age_group: bool = Field(..., alias="isCrossAgeGroup")
    home_age_group: Optional[str] = Field(default=None, alias="homeAgeGroup")
    away_age_group: Optional[str] = Field(default=None, alias="awayAgeGroup")
    age_adjustment: int = Field(default=0, alias="ageAdjustment")


class PredictResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    home: TeamSummary
    away: TeamSummary
    prediction: Prediction


class GamePerformanceEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = None
    opponent: str
    opponent_id: Optional[str] = Field(default=None, alias="opponentId")
    is_home: bool = Field(..., alias="isHome")
    actual_score: str = Field(..., alias="actualScore")
    predicted_score: str = Field(..., alias="predictedScore")
    performance_diff: int = Field(..., alias="performanceDiff")
    performance_score: float = Field(..., alias="performanceScore")
    performance_label: str = Field(..., alias="performanceLabel")
    performance_rank: int = Field(..., alias="performanceRank")


class TeamPerformanceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team: TeamSummary
    games: List[GamePerformanceEntry]


class SimulationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    league: str
    age_group: str = Field(..., alias="ageGroup")
    conference: Optional[str] = None
    trials: Optional[int] = Field(default=None, ge=1, le=100000)
    seed: Optional[int] = None


class SimulationGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    league: Optional[str] = None
    age_group: Optional[str] = Field(default=None, alias="ageGroup")
    conference: Optional[str] = None
    team_count: int = Field(..., alias="teamCount")


class SimulationStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completed_games_used: int = Field(..., alias="completedGamesUsed")
    upcoming_games_to_simulate: int = Field(..., alias="upcomingGamesToSimulate")
    simulations_run: int = Field(..., alias="simulationsRun")
    simulations_requested: int = Field(..., alias="simulationsRequested")
    cancelled: bool = False
    seed: Optional[int] = None


class SimulationTeamProjection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_id: str = Field(..., alias="teamId")
    team: str
    power_score: Optional[float] = Field(default=None, alias="powerScore")
    current_standings: Dict[str, int] = Field(default_factory=dict, alias="currentStandings")
    champ_probability: float = Field(..., alias="champProbability")
    top_three_probability: float = Field(..., alias="topThreeProbability")
    avg_position: float = Field(..., alias="avgPosition")
    expected_remaining_wins: float = Field(..., alias="expectedRemainingWins")
    expected_remaining_losses: float = Field(..., alias="expectedRemainingLosses")
    expected_remaining_draws: float = Field(..., alias="expectedRemainingDraws")


class SimulationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group: SimulationGroup
    standings: List[Dict[str, Any]] = Field(default_factory=list)
    teams: List[SimulationTeamProjection]
    simulation: SimulationStats


class ConferenceListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    league: str
    age_group: str = Field(..., alias="ageGroup")
    conferences: List[str]


class JobStatus(str, Enum):
    pending = "pending"
    running = "running"
    completed = "completed"
    cancelled = "cancelled"
    failed = "failed"


class JobInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    job_type: str = Field(..., alias="jobType")
    status: JobStatus
    created_at: datetime = Field(..., alias="createdAt")
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")
    finished_at: Optional[datetime] = Field(default=None, alias="finishedAt")
    progress: Dict[str, int] = Field(default_factory=dict)
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class JobCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    status: JobStatus
    job_type: str = Field(..., alias="jobType")
    poll_url: str = Field(..., alias="pollUrl")
