from __future__ import annotations

import pandas as pd
import pytest

from alias import resolve_team
from config import DEFAULT_WIN_PROBABILITY_TABLE, settings
from data import MatchRecord
from predictions import (
    PredictionResult,
    ProbabilityBucket,
    ProbabilityTable,
    age_group_power_adjustment,
    analyze_game_performance,
    games_for_team,
    predict_game,
    rank_games_by_performance,
)
from ratings import Team


def _team(team_id: str, power: float, age_group: str = "G12", **kwargs) -> Team:
    return Team(team_id=team_id, name=team_id.title(), age_group=age_group, power_score=power, **kwargs)


def test_default_table_is_closed():
    table = ProbabilityTable.default()
    assert len(table.buckets) == len(DEFAULT_WIN_PROBABILITY_TABLE)
    for bucket in table.buckets:
        assert bucket.home_win + bucket.draw + bucket.away_win == pytest.approx(1.0, abs=1e-9)


def test_table_lookup_boundaries():
    table = ProbabilityTable.default()
    assert table.lookup(-5000).low == -3000
    assert table.lookup(5000).low == 800
    assert table.lookup(200).low == 200
    assert table.lookup(199.9).low == 150
    assert table.lookup(0).low == 0


@pytest.mark.parametrize(
    "buckets",
    [
        [],
        [ProbabilityBucket(0, 50, 0.5, 0.2, 0.3), ProbabilityBucket(60, 100, 0.5, 0.2, 0.3)],
        [ProbabilityBucket(0, 50, 0.5, 0.2, 0.2)],
        [ProbabilityBucket(0, 50, 1.1, 0.0, -0.1)],
        [ProbabilityBucket(50, 50, 0.5, 0.2, 0.3)],
    ],
)
def test_invalid_tables_are_rejected(buckets):
    with pytest.raises(ValueError):
        ProbabilityTable(buckets)


def test_table_from_csv(tmp_path):
    path = tmp_path / "table.csv"
    pd.DataFrame(
        [
            {"low": 0, "high": 100, "home_win": 0.6, "draw": 0.2, "away_win": 0.2},
            {"low": -100, "high": 0, "home_win": 0.2, "draw": 0.2, "away_win": 0.6},
        ]
    ).to_csv(path, index=False)
    table = ProbabilityTable.from_csv(path)
    assert [b.low for b in table.buckets] == [-100, 0]

    settings.set("probability_table_path", str(path))
    assert ProbabilityTable.default().probabilities(50) == pytest.approx((0.6, 0.2, 0.2))


def test_stronger_home_team_without_history():
    home = _team("home", 1700)
    away = _team("away", 1500)
    result = predict_game(home, away, reference_year=2025)
    assert result.percentages() == (59, 17, 24)
    assert result.power_diff == pytest.approx(200)
    assert result.home_expected_goals == pytest.approx(2.35)
    assert result.away_expected_goals == pytest.approx(1.45)
    assert (result.predicted_home_score, result.predicted_away_score) == (2, 1)
    assert result.confidence == 60
    assert not result.used_scoring_history
    assert not result.is_cross_age_group


def test_prediction_with_scoring_history():
    home = _team("home", 1500, goals_per_game=2.0, goals_against_per_game=1.0)
    away = _team("away", 1500, goals_per_game=1.5, goals_against_per_game=1.5)
    result = predict_game(home, away, reference_year=2025)
    assert result.confidence == 85
    assert result.used_scoring_history
    assert result.home_expected_goals == pytest.approx(1.925)
    assert result.away_expected_goals == pytest.approx(1.275)


def test_one_side_without_history_uses_basic_model():
    home = _team("home", 1500, goals_per_game=2.0, goals_against_per_game=1.0)
    away = _team("away", 1500)
    assert predict_game(home, away).confidence == 60


def test_outcome_shares_sum_to_one():
    for diff in (-2000, -333, 0, 49.9, 812, 4000):
        home = _team("home", 1500 + diff)
        away = _team("away", 1500)
        result = predict_game(home, away)
        total = result.home_win_probability + result.draw_probability + result.away_win_probability
        assert total == pytest.approx(1.0)


def test_expected_goals_are_clamped():
    result = predict_game(_team("home", 4000), _team("away", 0))
    assert result.home_expected_goals == 6.0
    assert result.away_expected_goals == 0.2


def test_cross_age_adjustment_favours_older_team():
    older = _team("older", 1500, age_group="G11")
    younger = _team("younger", 1500, age_group="G12")
    home_older = predict_game(older, younger, reference_year=2025)
    home_younger = predict_game(younger, older, reference_year=2025)
    assert home_older.is_cross_age_group
    assert home_older.age_adjustment > 0
    assert home_younger.age_adjustment < 0
    assert home_older.age_adjustment == pytest.approx(-home_younger.age_adjustment)
    # avg 1500 -> scale 2.0 - 400/600
    assert home_older.age_adjustment == pytest.approx(425 * (2.0 - 400 / 600))


def test_age_adjustment_scale_is_clamped():
    assert age_group_power_adjustment(14, 13, 3000, 3000) == pytest.approx(425 * 0.5)
    assert age_group_power_adjustment(14, 13, 0, 0) == pytest.approx(425 * 2.2)
    assert age_group_power_adjustment(None, 13, 1500, 1500) == 0.0
    assert age_group_power_adjustment(13, 13, 1500, 1500) == 0.0


def test_to_dict_uses_whole_percentages():
    payload = predict_game(_team("home", 1700), _team("away", 1500)).to_dict()
    assert payload["homeWinProbability"] == 59
    assert payload["ageAdjustment"] == 0
    assert set(payload) >= {"predictedHomeScore", "confidence", "expectedGoalDiff"}


def _prediction(home_score: int, away_score: int) -> PredictionResult:
    return PredictionResult(
        predicted_home_score=home_score,
        predicted_away_score=away_score,
        home_expected_goals=float(home_score),
        away_expected_goals=float(away_score),
        home_win_probability=0.4,
        draw_probability=0.2,
        away_win_probability=0.4,
        confidence=60,
        power_diff=0.0,
    )


def test_analyze_game_performance_home_upset():
    game = MatchRecord(home_team="A", away_team="B", home_score=2, away_score=1)
    analysis = analyze_game_performance(game, _prediction(0, 1), is_home=True)
    assert analysis.actual_score == "2-1"
    assert analysis.predicted_score == "0-1"
    assert analysis.performance_diff == 2
    assert analysis.performance_score == pytest.approx(50 + 24 + 15)
    assert analysis.performance_label == "Greatly Outperformed"
    assert analysis.outperformed


def test_analyze_game_performance_from_away_side():
    game = MatchRecord(home_team="A", away_team="B", home_score=1, away_score=1)
    analysis = analyze_game_performance(game, _prediction(1, 2), is_home=True)
    assert analysis.performance_label == "Outperformed"
    away_view = analyze_game_performance(game, _prediction(1, 2), is_home=False)
    assert away_view.actual_score == "1-1"
    assert away_view.predicted_score == "2-1"
    assert away_view.performance_diff == -1
    assert away_view.performance_score == pytest.approx(50 - 12 - 10)
    assert away_view.performance_label == "Underperformed"


def test_analyze_game_performance_requires_score():
    with pytest.raises(ValueError):
        analyze_game_performance(MatchRecord(home_team="A", away_team="B"), _prediction(1, 1), is_home=True)


def test_rank_games_by_performance(teams, games):
    completed, _ = games
    legends = next(t for t in teams if t.team_id == "legends-g12")
    played = games_for_team(completed, legends)
    assert {g.game_id for g in played} == {"c1", "old"}

    ranked = rank_games_by_performance(played, legends, teams, reference_year=2025)
    assert [item.performance_rank for item in ranked] == [1, 2]
    assert ranked[0].game.game_id == "c1"
    assert ranked[0].is_home
    assert ranked[0].opponent.team_id == "slammers-g12"
    assert not ranked[1].is_home
    assert ranked[1].analysis.performance_score <= ranked[0].analysis.performance_score
    assert all(item.total_games == 2 for item in ranked)


def test_unresolved_opponent_still_gets_full_prediction(teams):
    legends = next(t for t in teams if t.team_id == "legends-g12")
    opponent = resolve_team("Nomads SC 12G", "G12", teams)
    assert opponent.is_unranked

    result = predict_game(legends, opponent, reference_year=2025)
    assert result.used_scoring_history
    assert result.confidence == 85
    assert not result.is_cross_age_group
    assert result.home_win_probability > result.away_win_probability
    assert result.home_win_probability + result.draw_probability + result.away_win_probability == pytest.approx(1.0)
    assert 0.2 <= result.away_expected_goals <= result.home_expected_goals <= 6.0
    payload = result.to_dict()
    assert all(payload[key] is not None for key in ("predictedHomeScore", "predictedAwayScore", "confidence"))
