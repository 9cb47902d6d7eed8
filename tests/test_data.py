from __future__ import annotations

import json
import logging

import pandas as pd
import pytest

from data import (
    base_club_name,
    clean_team_name,
    games_dataframe,
    is_event_conference,
    load_games,
    load_teams,
    normalize_conference,
    normalize_team_name,
    parse_game_date,
    records_from_dataframe,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Legends FC 08/07G ECNL", "legends fc"),
        ("Legends FC (CA) 2008 Gold", "legends fc"),
        ("Slammers FC G12", "slammers fc"),
        ("Slammers FC 12G", "slammers fc"),
        ("Beach FC U13", "beach fc"),
        ("Beach FC 13 Girls", "beach fc"),
        ("Sporting   California  ECNL RL", "sporting california"),
        ("Albion SC San Diego Premier II", "albion sc san diego"),
    ],
)
def test_normalize_team_name_strips_decorations(raw, expected):
    assert normalize_team_name(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "Legends FC 08/07G ECNL",
        "Legends FC (CA) 2008 Gold",
        "Beach FC ECNL Elite 2011",
        "2008",
        "ECNL",
        "Real Colorado Athletico Premier",
    ],
)
def test_normalize_team_name_is_idempotent(raw):
    once = normalize_team_name(raw)
    assert normalize_team_name(once) == once


def test_normalize_team_name_keeps_something_when_all_would_strip():
    assert normalize_team_name("2008") == "2008"
    assert normalize_team_name(None) == ""
    assert normalize_team_name("") == ""


def test_base_club_name_drops_club_suffixes():
    assert base_club_name("Beach Soccer Club") == "beach"
    assert base_club_name("Beach FC") == "beach"
    assert base_club_name("Albion SC San Diego") == "albion sc san diego"


def test_clean_team_name_preserves_case():
    assert clean_team_name("Legends FC G12 ECNL") == "Legends FC"
    assert clean_team_name("Slammers FC 12G") == "Slammers FC"
    assert clean_team_name(None) is None


def test_normalize_conference_drops_age_suffix():
    assert normalize_conference("Southwest U13") == "Southwest"
    assert normalize_conference("Northwest-U12") == "Northwest"
    assert normalize_conference("Mid-Atlantic") == "Mid-Atlantic"
    assert normalize_conference(None) is None


@pytest.mark.parametrize(
    "conference, event_type, expected",
    [
        ("Southwest", None, False),
        ("ECNL National Playoffs", None, True),
        ("Winter Showcase", None, True),
        ("Southwest", "SHOWCASE", True),
        ("Southwest", "league", False),
        (None, None, False),
    ],
)
def test_is_event_conference(conference, event_type, expected):
    assert is_event_conference(conference, event_type) is expected


def test_parse_game_date_formats():
    assert parse_game_date("2025-09-06").day == 6
    assert parse_game_date("Sep 6, 2025").month == 9
    assert parse_game_date("09/06/2025").year == 2025
    assert parse_game_date("next week") is None
    assert parse_game_date(None) is None


def test_load_teams_from_json_and_csv(tmp_path, teams, team_records):
    json_path = tmp_path / "teams.json"
    json_path.write_text(json.dumps({"teams": team_records}), encoding="utf-8")
    loaded = load_teams(json_path)
    assert [t.team_id for t in loaded] == [t.team_id for t in teams]

    csv_path = tmp_path / "teams.csv"
    pd.DataFrame(team_records).to_csv(csv_path, index=False)
    from_csv = load_teams(csv_path)
    assert len(from_csv) == len(team_records)
    albion = next(t for t in from_csv if t.team_id == "albion-g12")
    assert albion.goals_per_game is None
    assert albion.power_score == pytest.approx(1400.0)


def test_load_teams_requires_name_and_age_group(tmp_path):
    path = tmp_path / "teams.json"
    path.write_text(json.dumps([{"name": "Legends FC"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_teams(path)


def test_load_games_splits_completed_and_upcoming(data_files):
    _, games_path = data_files
    completed, upcoming = load_games(games_path)
    assert len(completed) == 5
    # The TBD fixture is dropped.
    assert len(upcoming) == 4
    assert all(g.has_score for g in completed)
    assert not any(g.has_score for g in upcoming)


def test_load_games_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_games(tmp_path / "missing.json")
    bad = tmp_path / "games.json"
    bad.write_text(json.dumps([{"homeTeam": "A", "awayTeam": "B"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_games(bad)


def test_non_numeric_scores_are_logged_and_treated_as_unplayed(caplog):
    raw = [{"gameId": "x1", "homeTeam": "A", "awayTeam": "B", "homeScore": "forfeit", "awayScore": 0}]
    with caplog.at_level(logging.WARNING):
        records = records_from_dataframe(games_dataframe(raw))
    assert records[0].home_score is None
    assert not records[0].has_score
    assert "Non-numeric score" in caplog.text
