"""League standings from match results (3 points a win, 1 a draw)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from data import MatchRecord
from ratings import Team

logger = logging.getLogger(__name__)

POINTS_PER_WIN = 3
POINTS_PER_DRAW = 1


@dataclass
class StandingsRow:
    wins: int = 0
    losses: int = 0
    draws: int = 0
    goals_for: int = 0
    goals_against: int = 0

    def clone(self) -> "StandingsRow":
        return StandingsRow(
            wins=self.wins,
            losses=self.losses,
            draws=self.draws,
            goals_for=self.goals_for,
            goals_against=self.goals_against,
        )

    @property
    def points(self) -> int:
        return POINTS_PER_WIN * self.wins + POINTS_PER_DRAW * self.draws

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def goal_diff(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def points_per_game(self) -> float:
        if self.games_played == 0:
            return 0.0
        return self.points / self.games_played

    def add_result(self, scored: int, conceded: int) -> None:
        self.goals_for += scored
        self.goals_against += conceded
        if scored > conceded:
            self.wins += 1
        elif scored < conceded:
            self.losses += 1
        else:
            self.draws += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": self.points,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "goalsFor": self.goals_for,
            "goalsAgainst": self.goals_against,
            "gamesPlayed": self.games_played,
        }


def apply_result(
    standings: Dict[str, StandingsRow],
    home_id: str,
    away_id: str,
    home_goals: int,
    away_goals: int,
) -> None:
    standings.setdefault(home_id, StandingsRow()).add_result(home_goals, away_goals)
    standings.setdefault(away_id, StandingsRow()).add_result(away_goals, home_goals)


def fold_results(
    results: Iterable[MatchRecord],
    *,
    resolve: Optional[Callable[[MatchRecord, str], Optional[str]]] = None,
    team_ids: Optional[Iterable[str]] = None,
) -> Dict[str, StandingsRow]:
    """Fold played games into standings keyed by team id.

    ``resolve(record, side)`` maps the ``"home"``/``"away"`` side of a record
    to a team id (``None`` drops the game); by default the raw team names are
    used as ids. ``team_ids`` seeds empty rows so teams without games still
    appear. Records without a final score are skipped and logged.
    """
    standings: Dict[str, StandingsRow] = {tid: StandingsRow() for tid in team_ids or ()}
    for record in results:
        if not record.has_score:
            logger.warning(
                "Skipping completed game %s (%s vs %s) without a final score",
                record.game_id,
                record.home_team,
                record.away_team,
            )
            continue
        if resolve is None:
            home_id, away_id = record.home_team, record.away_team
        else:
            home_id, away_id = resolve(record, "home"), resolve(record, "away")
        if home_id is None or away_id is None:
            logger.debug("Dropping game %s vs %s: team outside the group", record.home_team, record.away_team)
            continue
        apply_result(standings, home_id, away_id, int(record.home_score), int(record.away_score))
    return standings


def clone_standings(standings: Mapping[str, StandingsRow]) -> Dict[str, StandingsRow]:
    return {tid: row.clone() for tid, row in standings.items()}


def rank_standings(
    standings: Mapping[str, StandingsRow],
    order: Optional[Sequence[str]] = None,
) -> List[str]:
    """Team ids best first: points per game, then goal difference.

    Teams level on both keys keep their position in ``order`` (defaults to
    the mapping's own order); no further tie-break is applied.
    """
    ids = list(order) if order is not None else list(standings.keys())
    empty = StandingsRow()
    return sorted(
        ids,
        key=lambda tid: (
            -standings.get(tid, empty).points_per_game,
            -standings.get(tid, empty).goal_diff,
        ),
    )


def build_standings_dataframe(
    standings: Mapping[str, StandingsRow],
    teams: Sequence[Team],
) -> pd.DataFrame:
    """Turn a standings map into a ranked dataframe."""

    names = {team.team_id: team.name for team in teams}
    ordered = rank_standings(standings, [t.team_id for t in teams if t.team_id in standings])
    rows: List[Dict[str, Any]] = []
    for position, team_id in enumerate(ordered, start=1):
        row = standings[team_id]
        rows.append(
            {
                "Rank": position,
                "TeamId": team_id,
                "Team": names.get(team_id, team_id),
                "Points": row.points,
                "Wins": row.wins,
                "Losses": row.losses,
                "Draws": row.draws,
                "GamesPlayed": row.games_played,
                "GoalsFor": row.goals_for,
                "GoalsAgainst": row.goals_against,
                "GoalDiff": row.goal_diff,
                "PointsPerGame": row.points_per_game,
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "Rank",
            "TeamId",
            "Team",
            "Points",
            "Wins",
            "Losses",
            "Draws",
            "GamesPlayed",
            "GoalsFor",
            "GoalsAgainst",
            "GoalDiff",
            "PointsPerGame",
        ],
    )
