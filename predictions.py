"""Match outcome predictions from power ratings and scoring history.

Two sub-models are combined for every fixture:

* win/draw/loss shares come from an empirical table keyed by the effective
  power difference (home minus away, plus the cross-age adjustment);
* expected goals blend each side's goals-per-game with the opponent's
  goals-against-per-game when both teams have history, and otherwise fall back
  to a rating-only model with a lower confidence.

The probability table is data: build it from records or a CSV so it can be
recalibrated without touching the predictor.
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from alias import GameTeamIndex, TeamLookup, resolve_team
from config import DEFAULT_WIN_PROBABILITY_TABLE, settings
from data import MatchRecord, normalize_team_name
from ratings import (
    Team,
    defensive_rating,
    offensive_rating,
    power_score,
    scoring_rates,
    team_age,
)

logger = logging.getLogger(__name__)

ROUNDING_TOLERANCE = 0.005


@dataclass(frozen=True)
class ProbabilityBucket:
    low: float
    high: float
    home_win: float
    draw: float
    away_win: float

    def contains(self, diff: float) -> bool:
        return self.low <= diff < self.high


class ProbabilityTable:
    """Ordered, contiguous power-difference buckets of outcome shares.

    Construction validates the table once: buckets must be sorted, non-empty
    and contiguous, shares non-negative, and each triple must sum to 1 within
    ``tolerance``. Accepted triples are rescaled to sum to exactly 1. Values
    outside the table use the outermost bucket.
    """

    def __init__(self, buckets: Sequence[ProbabilityBucket], *, tolerance: float = ROUNDING_TOLERANCE) -> None:
        if not buckets:
            raise ValueError("Probability table must contain at least one bucket")
        cleaned: List[ProbabilityBucket] = []
        previous: Optional[ProbabilityBucket] = None
        for bucket in buckets:
            if not bucket.low < bucket.high:
                raise ValueError(f"Bucket [{bucket.low}, {bucket.high}) is empty")
            if previous is not None and not math.isclose(previous.high, bucket.low):
                raise ValueError(
                    f"Buckets are not contiguous: [{previous.low}, {previous.high}) then [{bucket.low}, {bucket.high})"
                )
            shares = (bucket.home_win, bucket.draw, bucket.away_win)
            if any(share < 0 for share in shares):
                raise ValueError(f"Negative probability in bucket [{bucket.low}, {bucket.high})")
            total = sum(shares)
            if abs(total - 1.0) > tolerance:
                raise ValueError(
                    f"Probabilities in bucket [{bucket.low}, {bucket.high}) sum to {total:.4f}, expected 1.0"
                )
            cleaned.append(
                ProbabilityBucket(
                    low=float(bucket.low),
                    high=float(bucket.high),
                    home_win=bucket.home_win / total,
                    draw=bucket.draw / total,
                    away_win=bucket.away_win / total,
                )
            )
            previous = bucket
        self.buckets: Tuple[ProbabilityBucket, ...] = tuple(cleaned)
        self._lows = [b.low for b in self.buckets]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]], **kwargs: Any) -> "ProbabilityTable":
        buckets = [
            ProbabilityBucket(
                low=float(rec["low"]),
                high=float(rec["high"]),
                home_win=float(rec.get("home_win", rec.get("homeWin"))),
                draw=float(rec["draw"]),
                away_win=float(rec.get("away_win", rec.get("awayWin"))),
            )
            for rec in records
        ]
        return cls(buckets, **kwargs)

    @classmethod
    def from_csv(cls, path: str | Path, **kwargs: Any) -> "ProbabilityTable":
        csv_path = Path(path)
        if not csv_path.exists():
            raise FileNotFoundError(f"Probability table not found: {csv_path}")
        df = pd.read_csv(csv_path)
        df.columns = df.columns.astype(str).str.strip()
        required = ["low", "high", "home_win", "draw", "away_win"]
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise ValueError(f"Probability table missing required columns: {missing}")
        df = df.sort_values("low").reset_index(drop=True)
        return cls.from_records(df[required].to_dict(orient="records"), **kwargs)

    @classmethod
    def default(cls) -> "ProbabilityTable":
        """Table named by the ``probability_table_path`` knob, else the built-in one."""
        path = settings.get("probability_table_path")
        if path:
            return cls.from_csv(path)
        return cls.from_records(DEFAULT_WIN_PROBABILITY_TABLE)

    def lookup(self, diff: float) -> ProbabilityBucket:
        idx = bisect_right(self._lows, diff) - 1
        return self.buckets[max(0, min(idx, len(self.buckets) - 1))]

    def probabilities(self, diff: float) -> Tuple[float, float, float]:
        bucket = self.lookup(diff)
        return bucket.home_win, bucket.draw, bucket.away_win

    def to_records(self) -> List[Dict[str, float]]:
        return [b.__dict__.copy() for b in self.buckets]


@dataclass
class PredictionResult:
    predicted_home_score: int
    predicted_away_score: int
    home_expected_goals: float
    away_expected_goals: float
    home_win_probability: float
    draw_probability: float
    away_win_probability: float
    confidence: int
    power_diff: float
    age_adjustment: float = 0.0
    is_cross_age_group: bool = False
    home_age_group: Optional[str] = None
    away_age_group: Optional[str] = None
    used_scoring_history: bool = False

    @property
    def expected_goal_diff(self) -> float:
        return self.home_expected_goals - self.away_expected_goals

    def percentages(self) -> Tuple[int, int, int]:
        return (
            int(round(self.home_win_probability * 100)),
            int(round(self.draw_probability * 100)),
            int(round(self.away_win_probability * 100)),
        )

    def to_dict(self) -> Dict[str, Any]:
        home_pct, draw_pct, away_pct = self.percentages()
        return {
            "predictedHomeScore": self.predicted_home_score,
            "predictedAwayScore": self.predicted_away_score,
            "homeExpectedGoals": round(self.home_expected_goals, 2),
            "awayExpectedGoals": round(self.away_expected_goals, 2),
            "expectedGoalDiff": round(self.expected_goal_diff, 2),
            "homeWinProbability": home_pct,
            "drawProbability": draw_pct,
            "awayWinProbability": away_pct,
            "confidence": self.confidence,
            "powerDiff": round(self.power_diff, 1),
            "isCrossAgeGroup": self.is_cross_age_group,
            "homeAgeGroup": self.home_age_group,
            "awayAgeGroup": self.away_age_group,
            "ageAdjustment": int(round(self.age_adjustment)) if self.is_cross_age_group else 0,
        }


def _clamp(value: float, bounds: Sequence[float]) -> float:
    low, high = bounds
    return max(float(low), min(float(high), value))


def age_group_power_adjustment(
    home_age: Optional[int],
    away_age: Optional[int],
    home_power: float,
    away_power: float,
) -> float:
    """Power points added to the home side for being older (negative if younger).

    A year of age is worth ``age_base_points_per_year`` scaled by a factor
    that shrinks as the average power of the two teams rises: age gaps
    matter less between elite teams.
    """
    if home_age is None or away_age is None or home_age == away_age:
        return 0.0
    avg_power = (home_power + away_power) / 2.0
    pivot = float(settings.get("age_scale_pivot"))
    span = float(settings.get("age_scale_span"))
    scale = _clamp(2.0 - (avg_power - pivot) / span, settings.get("age_scale_range"))
    return (home_age - away_age) * float(settings.get("age_base_points_per_year")) * scale


def expected_goals_with_rates(
    power_diff: float,
    home_off: float,
    home_def: float,
    away_off: float,
    away_def: float,
    home_rates: Tuple[float, float],
    away_rates: Tuple[float, float],
    home_age: Optional[int] = None,
    away_age: Optional[int] = None,
) -> Tuple[float, float]:
    """Expected goals from scoring history (GPG/GAPG), ratings and power gap."""
    gpg_weight = float(settings.get("team_gpg_weight"))
    gapg_weight = float(settings.get("opp_gapg_weight"))
    home_advantage = float(settings.get("home_advantage_goals"))
    power_factor = float(settings.get("power_goal_factor")) * float(settings.get("power_goal_damping"))
    off_def = float(settings.get("off_def_factor_gpg"))

    # History against a team's own bracket overstates/understates cross-age play.
    age_diff = (home_age - away_age) if home_age is not None and away_age is not None else 0
    shift = age_diff * float(settings.get("age_stat_adjustment")) * 0.5
    home_gpg, home_gapg = home_rates[0] + shift, home_rates[1] - shift
    away_gpg, away_gapg = away_rates[0] - shift, away_rates[1] + shift

    home_base = home_gpg * gpg_weight + away_gapg * gapg_weight
    away_base = away_gpg * gpg_weight + home_gapg * gapg_weight
    home_off_def = (home_off - 50) * off_def - (away_def - 50) * off_def
    away_off_def = (away_off - 50) * off_def - (home_def - 50) * off_def

    expected_home = home_base + home_advantage + home_off_def + power_diff * power_factor
    expected_away = away_base + away_off_def - power_diff * power_factor
    return (
        _clamp(expected_home, settings.get("gpg_home_goal_range")),
        _clamp(expected_away, settings.get("gpg_away_goal_range")),
    )


def expected_goals_basic(
    power_diff: float,
    home_off: float,
    home_def: float,
    away_off: float,
    away_def: float,
) -> Tuple[float, float]:
    """Rating-only expected goals, used when either side lacks scoring history."""
    base = float(settings.get("base_goals"))
    home_advantage = float(settings.get("home_advantage_goals"))
    power_factor = float(settings.get("power_goal_factor")) * float(settings.get("power_goal_damping"))
    off_def = float(settings.get("off_def_factor_basic"))

    home_off_def = (home_off - 50) * off_def - (away_def - 50) * off_def
    away_off_def = (away_off - 50) * off_def - (home_def - 50) * off_def
    expected_home = base + home_advantage + power_diff * power_factor + home_off_def
    expected_away = base - float(settings.get("away_base_goals_offset")) - power_diff * power_factor + away_off_def
    return (
        _clamp(expected_home, settings.get("basic_home_goal_range")),
        _clamp(expected_away, settings.get("basic_away_goal_range")),
    )


def predict_game(
    home: Team,
    away: Team,
    *,
    table: Optional[ProbabilityTable] = None,
    reference_year: Optional[int] = None,
) -> PredictionResult:
    """Predict score and outcome shares for ``home`` hosting ``away``."""
    if table is None:
        table = ProbabilityTable.default()

    home_power = power_score(home)
    away_power = power_score(away)
    home_age = team_age(home, reference_year)
    away_age = team_age(away, reference_year)
    age_adjustment = age_group_power_adjustment(home_age, away_age, home_power, away_power)
    power_diff = (home_power - away_power) + age_adjustment

    ratings = (offensive_rating(home), defensive_rating(home), offensive_rating(away), defensive_rating(away))
    home_rates = scoring_rates(home)
    away_rates = scoring_rates(away)
    if home_rates is not None and away_rates is not None:
        expected_home, expected_away = expected_goals_with_rates(
            power_diff, *ratings, home_rates, away_rates, home_age, away_age
        )
        confidence = int(settings.get("confidence_full"))
        used_history = True
    else:
        expected_home, expected_away = expected_goals_basic(power_diff, *ratings)
        confidence = int(settings.get("confidence_basic"))
        used_history = False

    home_win, draw, away_win = table.probabilities(power_diff)
    is_cross_age = home_age is not None and away_age is not None and home_age != away_age

    return PredictionResult(
        predicted_home_score=int(round(expected_home)),
        predicted_away_score=int(round(expected_away)),
        home_expected_goals=expected_home,
        away_expected_goals=expected_away,
        home_win_probability=home_win,
        draw_probability=draw,
        away_win_probability=away_win,
        confidence=confidence,
        power_diff=power_diff,
        age_adjustment=age_adjustment,
        is_cross_age_group=is_cross_age,
        home_age_group=home.age_group,
        away_age_group=away.age_group,
        used_scoring_history=used_history,
    )


# Performance analysis --------------------------------------------------


@dataclass
class GamePerformance:
    actual_score: str
    predicted_score: str
    goal_diff_actual: int
    goal_diff_predicted: int
    performance_diff: int
    performance_score: float
    performance_label: str

    @property
    def outperformed(self) -> bool:
        return self.performance_diff > 0


def _performance_label(diff: int) -> str:
    if diff >= 2:
        return "Greatly Outperformed"
    if diff >= 1:
        return "Outperformed"
    if diff > -1:
        return "Met Expectations"
    if diff > -2:
        return "Underperformed"
    return "Greatly Underperformed"


def analyze_game_performance(game: MatchRecord, prediction: PredictionResult, is_home: bool) -> GamePerformance:
    """Compare a played game with its prediction from one team's point of view."""
    if not game.has_score:
        raise ValueError("Cannot analyse a game without a final score")
    team_score = game.home_score if is_home else game.away_score
    opp_score = game.away_score if is_home else game.home_score
    predicted_team = prediction.predicted_home_score if is_home else prediction.predicted_away_score
    predicted_opp = prediction.predicted_away_score if is_home else prediction.predicted_home_score

    actual_gd = team_score - opp_score
    predicted_gd = predicted_team - predicted_opp
    diff = actual_gd - predicted_gd

    score = 50.0 + diff * 12
    if actual_gd > 0 and predicted_gd <= 0:
        score += 15
    elif actual_gd == 0 and predicted_gd < 0:
        score += 10
    elif actual_gd < 0 and predicted_gd >= 0:
        score -= 15
    elif actual_gd == 0 and predicted_gd > 0:
        score -= 10

    return GamePerformance(
        actual_score=f"{team_score}-{opp_score}",
        predicted_score=f"{predicted_team}-{predicted_opp}",
        goal_diff_actual=actual_gd,
        goal_diff_predicted=predicted_gd,
        performance_diff=diff,
        performance_score=max(0.0, min(100.0, score)),
        performance_label=_performance_label(diff),
    )


@dataclass
class RankedGame:
    game: MatchRecord
    opponent: Team
    is_home: bool
    prediction: PredictionResult
    analysis: GamePerformance
    performance_rank: int = 0
    total_games: int = 0


def rank_games_by_performance(
    games: Iterable[MatchRecord],
    team: Team,
    teams: Sequence[Team],
    *,
    table: Optional[ProbabilityTable] = None,
    reference_year: Optional[int] = None,
) -> List[RankedGame]:
    """Analyse every scored game of ``team`` and order them best result first."""
    if table is None:
        table = ProbabilityTable.default()
    lookup = TeamLookup.build(teams)
    team_norm = normalize_team_name(team.name)

    analysed: List[RankedGame] = []
    for game in games:
        if not game.has_score:
            logger.debug("Skipping unscored game %s vs %s", game.home_team, game.away_team)
            continue
        home_norm = normalize_team_name(game.home_team)
        is_home = home_norm == team_norm or team_norm in (game.home_team or "").lower()
        opponent_name = game.away_team if is_home else game.home_team
        opponent = resolve_team(opponent_name, team.age_group, lookup=lookup)
        if is_home:
            prediction = predict_game(team, opponent, table=table, reference_year=reference_year)
        else:
            prediction = predict_game(opponent, team, table=table, reference_year=reference_year)
        analysed.append(
            RankedGame(
                game=game,
                opponent=opponent,
                is_home=is_home,
                prediction=prediction,
                analysis=analyze_game_performance(game, prediction, is_home),
            )
        )

    analysed.sort(key=lambda item: item.analysis.performance_score, reverse=True)
    for idx, item in enumerate(analysed, start=1):
        item.performance_rank = idx
        item.total_games = len(analysed)
    return analysed


def games_for_team(games: Iterable[MatchRecord], team: Team) -> List[MatchRecord]:
    """Games of ``team``'s age group in which it appeared on either side."""
    index = GameTeamIndex([team])
    return [
        g
        for g in games
        if g.age_group in (None, team.age_group)
        and (index.find(g.home_team, team.age_group) or index.find(g.away_team, team.age_group))
    ]
