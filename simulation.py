"""Monte Carlo projection of conference standings.

Completed games are folded once into fixed base standings. Each trial copies
those standings, draws one outcome per remaining fixture from the predictor's
win/draw/loss shares, ranks the result and records where every team finished.
The core entry point, :func:`simulate_season`, returns per-team aggregates;
:func:`compute_conference_predictions` wraps game filtering, standings and the
simulation into one payload for the CLI and API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from alias import GameTeamIndex
from config import settings
from data import MatchRecord, normalize_conference, season_start
from predictions import ProbabilityTable, predict_game
from ratings import Team
from standings import (
    StandingsRow,
    apply_result,
    build_standings_dataframe,
    clone_standings,
    fold_results,
    rank_standings,
)

logger = logging.getLogger(__name__)

HOME, DRAW, AWAY = 0, 1, 2


@dataclass
class SimulationAggregate:
    """Counters for one team across all trials of a simulation."""

    team: Team
    base: StandingsRow
    trials: int = 0
    champion_count: int = 0
    top_three_count: int = 0
    position_sum: int = 0
    remaining_wins_sum: int = 0
    remaining_losses_sum: int = 0
    remaining_draws_sum: int = 0

    def _per_trial(self, total: int) -> float:
        return total / self.trials if self.trials else 0.0

    @property
    def championship_probability(self) -> float:
        return self._per_trial(self.champion_count) * 100.0

    @property
    def top_three_probability(self) -> float:
        return self._per_trial(self.top_three_count) * 100.0

    @property
    def average_position(self) -> float:
        return self._per_trial(self.position_sum)

    @property
    def expected_remaining_wins(self) -> float:
        return self._per_trial(self.remaining_wins_sum)

    @property
    def expected_remaining_losses(self) -> float:
        return self._per_trial(self.remaining_losses_sum)

    @property
    def expected_remaining_draws(self) -> float:
        return self._per_trial(self.remaining_draws_sum)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamId": self.team.team_id,
            "team": self.team.name,
            "powerScore": self.team.power_score,
            "currentStandings": self.base.to_dict(),
            "champProbability": round(self.championship_probability, 1),
            "topThreeProbability": round(self.top_three_probability, 1),
            "avgPosition": round(self.average_position, 1),
            "expectedRemainingWins": round(self.expected_remaining_wins, 1),
            "expectedRemainingLosses": round(self.expected_remaining_losses, 1),
            "expectedRemainingDraws": round(self.expected_remaining_draws, 1),
        }


@dataclass
class SeasonSimulation:
    aggregates: Dict[str, SimulationAggregate]
    base_standings: Dict[str, StandingsRow]
    trials_requested: int
    trials_completed: int
    completed_games_used: int
    upcoming_games_to_simulate: int
    seed: Optional[int] = None
    cancelled: bool = False
    skipped_fixtures: List[MatchRecord] = field(default_factory=list)

    def ordered(self) -> List[SimulationAggregate]:
        """Aggregates by average finishing position, best first."""
        return sorted(self.aggregates.values(), key=lambda agg: agg.average_position)

    def stats(self) -> Dict[str, Any]:
        return {
            "completedGamesUsed": self.completed_games_used,
            "upcomingGamesToSimulate": self.upcoming_games_to_simulate,
            "simulationsRun": self.trials_completed,
            "simulationsRequested": self.trials_requested,
            "cancelled": self.cancelled,
            "seed": self.seed,
        }


@dataclass(frozen=True)
class _Fixture:
    home_id: str
    away_id: str
    home_threshold: float
    draw_threshold: float


def _prepare_fixtures(
    upcoming: Iterable[MatchRecord],
    index: GameTeamIndex,
    table: ProbabilityTable,
    reference_year: Optional[int],
) -> Tuple[List[_Fixture], List[MatchRecord]]:
    fixtures: List[_Fixture] = []
    skipped: List[MatchRecord] = []
    for record in upcoming:
        home = index.find(record.home_team, record.age_group)
        away = index.find(record.away_team, record.age_group)
        if home is None or away is None or home.team_id == away.team_id:
            logger.debug("Dropping fixture %s vs %s: not resolvable within the group", record.home_team, record.away_team)
            skipped.append(record)
            continue
        prediction = predict_game(home, away, table=table, reference_year=reference_year)
        fixtures.append(
            _Fixture(
                home_id=home.team_id,
                away_id=away.team_id,
                home_threshold=prediction.home_win_probability,
                draw_threshold=prediction.home_win_probability + prediction.draw_probability,
            )
        )
    return fixtures, skipped


def _outcome(fixture: _Fixture, roll: float) -> int:
    if roll < fixture.home_threshold:
        return HOME
    if roll < fixture.draw_threshold:
        return DRAW
    return AWAY


def simulate_season(
    teams: Sequence[Team],
    completed: Iterable[MatchRecord],
    upcoming: Iterable[MatchRecord],
    trials: Optional[int] = None,
    *,
    table: Optional[ProbabilityTable] = None,
    seed: Optional[int] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    reference_year: Optional[int] = None,
) -> SeasonSimulation:
    """Simulate the rest of the season ``trials`` times.

    Games whose teams cannot be matched within ``teams`` are skipped, never
    fatal. ``should_cancel`` is polled between trials; a cancelled run keeps
    the trials it finished and normalises by that count. Simulated wins are
    recorded as 1-0 and draws as 0-0.
    """
    if trials is None:
        trials = int(settings.get("simulation_trials"))
    if trials < 1:
        raise ValueError("trials must be at least 1")
    if table is None:
        table = ProbabilityTable.default()

    order = [team.team_id for team in teams]
    index = GameTeamIndex(teams)

    def resolve(record: MatchRecord, side: str) -> Optional[str]:
        name = record.home_team if side == "home" else record.away_team
        team = index.find(name, record.age_group)
        return team.team_id if team is not None else None

    completed = list(completed)
    base = fold_results(completed, resolve=resolve, team_ids=order)
    fixtures, skipped = _prepare_fixtures(upcoming, index, table, reference_year)

    aggregates = {team.team_id: SimulationAggregate(team=team, base=base[team.team_id]) for team in teams}
    result = SeasonSimulation(
        aggregates=aggregates,
        base_standings=base,
        trials_requested=trials,
        trials_completed=0,
        completed_games_used=len(completed),
        upcoming_games_to_simulate=len(fixtures),
        seed=seed,
        skipped_fixtures=skipped,
    )
    if not teams:
        return result

    logger.info(
        "Simulating %d fixtures for %d teams over %d trials",
        len(fixtures),
        len(teams),
        trials,
    )

    if not fixtures:
        # Nothing left to play: every trial would produce the base ranking.
        for position, team_id in enumerate(rank_standings(base, order), start=1):
            agg = aggregates[team_id]
            agg.champion_count = trials if position == 1 else 0
            agg.top_three_count = trials if position <= 3 else 0
            agg.position_sum = position * trials
        for agg in aggregates.values():
            agg.trials = trials
        result.trials_completed = trials
        return result

    rng = np.random.default_rng(seed)
    completed_trials = 0
    for trial in range(trials):
        if should_cancel is not None and should_cancel():
            result.cancelled = True
            logger.info("Simulation cancelled after %d of %d trials", completed_trials, trials)
            break

        season = clone_standings(base)
        remaining = {team_id: [0, 0, 0] for team_id in order}
        rolls = rng.random(len(fixtures))
        for fixture, roll in zip(fixtures, rolls):
            outcome = _outcome(fixture, float(roll))
            if outcome == HOME:
                apply_result(season, fixture.home_id, fixture.away_id, 1, 0)
                remaining[fixture.home_id][0] += 1
                remaining[fixture.away_id][1] += 1
            elif outcome == AWAY:
                apply_result(season, fixture.home_id, fixture.away_id, 0, 1)
                remaining[fixture.away_id][0] += 1
                remaining[fixture.home_id][1] += 1
            else:
                apply_result(season, fixture.home_id, fixture.away_id, 0, 0)
                remaining[fixture.home_id][2] += 1
                remaining[fixture.away_id][2] += 1

        for position, team_id in enumerate(rank_standings(season, order), start=1):
            agg = aggregates[team_id]
            if position == 1:
                agg.champion_count += 1
            if position <= 3:
                agg.top_three_count += 1
            agg.position_sum += position
            wins, losses, draws = remaining[team_id]
            agg.remaining_wins_sum += wins
            agg.remaining_losses_sum += losses
            agg.remaining_draws_sum += draws

        completed_trials = trial + 1
        if progress_callback is not None:
            progress_callback(completed_trials, trials)

    for agg in aggregates.values():
        agg.trials = completed_trials
    result.trials_completed = completed_trials
    logger.info("Simulation finished: %d trials", completed_trials)
    return result


# Group selection -------------------------------------------------------


def filter_games_for_simulation(
    games: Iterable[MatchRecord],
    league: Optional[str],
    age_group: Optional[str],
    conference: Optional[str] = None,
    *,
    start: Optional[datetime] = None,
) -> List[MatchRecord]:
    """Current-season games of one league/age group.

    With a ``conference`` only league play of that (normalised) conference is
    kept; showcase, playoff and cup events are dropped. Undated games are
    treated as current.
    """
    conference = normalize_conference(conference)
    if start is None:
        start = season_start()
    selected: List[MatchRecord] = []
    for game in games:
        if game.league != league or game.age_group != age_group:
            continue
        game_date = game.game_date
        if game_date is not None and game_date < start:
            continue
        if conference:
            if normalize_conference(game.conference) != conference or game.is_event:
                continue
        selected.append(game)
    return selected


def available_conferences(teams: Iterable[Team], league: str, age_group: str) -> List[str]:
    conferences = {
        normalize_conference(team.conference)
        for team in teams
        if team.league == league and team.age_group == age_group and team.conference
    }
    return sorted(c for c in conferences if c)


def select_conference_teams(
    teams: Iterable[Team],
    league: Optional[str],
    age_group: Optional[str],
    conference: Optional[str] = None,
) -> List[Team]:
    """Teams of the group, strongest power score first."""
    conference = normalize_conference(conference)
    selected = [
        team
        for team in teams
        if team.league == league
        and team.age_group == age_group
        and (not conference or normalize_conference(team.conference) == conference)
    ]
    return sorted(selected, key=lambda team: team.power_score or 0.0, reverse=True)


def compute_conference_predictions(
    teams: Sequence[Team],
    completed_games: Iterable[MatchRecord],
    upcoming_games: Iterable[MatchRecord],
    *,
    league: Optional[str],
    age_group: Optional[str],
    conference: Optional[str] = None,
    trials: Optional[int] = None,
    seed: Optional[int] = None,
    table: Optional[ProbabilityTable] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> Dict[str, Any]:
    """High-level helper returning standings and simulated outcomes for one group."""

    group = select_conference_teams(teams, league, age_group, conference)
    completed = filter_games_for_simulation(completed_games, league, age_group, conference)
    upcoming = filter_games_for_simulation(upcoming_games, league, age_group, conference)

    sim = simulate_season(
        group,
        completed,
        upcoming,
        trials,
        table=table,
        seed=seed,
        should_cancel=should_cancel,
        progress_callback=progress_callback,
    )
    standings_df = build_standings_dataframe(sim.base_standings, group)

    return {
        "group": {
            "league": league,
            "ageGroup": age_group,
            "conference": conference,
            "teamCount": len(group),
        },
        "standings": standings_df.to_dict(orient="records") if not standings_df.empty else [],
        "teams": [agg.to_dict() for agg in sim.ordered()],
        "simulation": sim.stats(),
    }
