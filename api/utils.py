from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from api.models import GamePerformanceEntry, Prediction, TeamSummary
from predictions import PredictionResult, RankedGame
from ratings import Team


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


def team_summary(team: Team) -> TeamSummary:
    return TeamSummary(
        id=team.team_id,
        name=team.name,
        age_group=team.age_group,
        league=team.league,
        conference=team.conference,
        rank=team.rank,
        power_score=_finite(team.power_score),
        offensive_power_score=_finite(team.offensive_power_score),
        defensive_power_score=_finite(team.defensive_power_score),
        goals_per_game=_finite(team.goals_per_game),
        goals_against_per_game=_finite(team.goals_against_per_game),
        record=f"{team.wins}-{team.losses}-{team.draws}",
        is_unranked=team.is_unranked,
    )


def prediction_model(result: PredictionResult) -> Prediction:
    return Prediction(**result.to_dict())


def performance_entries(ranked: List[RankedGame]) -> List[GamePerformanceEntry]:
    entries: List[GamePerformanceEntry] = []
    for item in ranked:
        analysis = item.analysis
        entries.append(
            GamePerformanceEntry(
                date=item.game.date,
                opponent=item.opponent.name,
                opponent_id=None if item.opponent.is_unranked else item.opponent.team_id,
                is_home=item.is_home,
                actual_score=analysis.actual_score,
                predicted_score=analysis.predicted_score,
                performance_diff=analysis.performance_diff,
                performance_score=round(analysis.performance_score, 1),
                performance_label=analysis.performance_label,
                performance_rank=item.performance_rank,
            )
        )
    return entries


def suggestion_payload(suggestions: List[tuple[str, float]]) -> List[Dict[str, Any]]:
    return [{"name": name, "score": score} for name, score in suggestions]
