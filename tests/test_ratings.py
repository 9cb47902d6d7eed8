from __future__ import annotations

import math

import pytest

from config import settings
from ratings import (
    Team,
    defensive_rating,
    make_placeholder_team,
    offensive_rating,
    parse_age_from_age_group,
    power_score,
    scoring_rates,
)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("G12", 13),
        ("B12", 13),
        ("2011G", 14),
        ("B2013", 12),
        ("11B", 14),
        ("G08/07", 17),
        ("08/07G", 17),
        ("B10/09", 15),
        ("U13", None),
        ("Open", None),
        (None, None),
    ],
)
def test_parse_age_from_age_group(label, expected):
    assert parse_age_from_age_group(label, reference_year=2025) == expected


def test_accessors_fall_back_to_league_average():
    team = Team(team_id="x", name="X")
    assert power_score(team) == 1500.0
    assert offensive_rating(team) == 50.0
    assert defensive_rating(team) == 50.0
    assert scoring_rates(team) is None

    settings.set("default_power_score", 1400.0)
    assert power_score(team) == 1400.0


def test_scoring_rates_need_both_values():
    assert scoring_rates(Team(team_id="a", name="A", goals_per_game=2.0)) is None
    assert scoring_rates(Team(team_id="a", name="A", goals_per_game=2.0, goals_against_per_game=math.nan)) is None
    # A zero rate is still history.
    assert scoring_rates(Team(team_id="a", name="A", goals_per_game=0.0, goals_against_per_game=1.0)) == (0.0, 1.0)


def test_placeholder_team_estimates_from_power():
    weak = make_placeholder_team("Nomads SC", age_group="G12")
    assert weak.is_unranked
    assert weak.power_score == 800.0
    assert weak.goals_per_game == pytest.approx(0.95)
    assert weak.goals_against_per_game == pytest.approx(3.05)
    assert weak.offensive_power_score == pytest.approx(29.0)
    assert weak.age_group == "G12"

    average = make_placeholder_team("Nomads SC", 1500.0)
    assert average.goals_per_game == pytest.approx(2.0)
    assert average.goals_against_per_game == pytest.approx(2.0)
    assert average.defensive_power_score == pytest.approx(50.0)


def test_placeholder_rates_are_clamped():
    tiny = make_placeholder_team("Tiny", 0.0)
    assert tiny.goals_per_game == 0.5
    assert tiny.goals_against_per_game == 4.0
