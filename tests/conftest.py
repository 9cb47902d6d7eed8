from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from config import settings
from context import context_manager
from data import games_dataframe, records_from_dataframe, teams_from_dataframe

SAMPLE_TEAMS = [
    {"id": "legends-g12", "name": "Legends FC", "ageGroup": "G12", "league": "ECNL", "conference": "Southwest",
     "rank": 1, "powerScore": 1700, "offensivePowerScore": 62, "defensivePowerScore": 58,
     "goalsPerGame": 2.6, "goalsAgainstPerGame": 0.7, "wins": 3, "losses": 0, "draws": 0,
     "goalsFor": 7, "goalsAgainst": 1},
    {"id": "slammers-g12", "name": "Slammers FC", "ageGroup": "G12", "league": "ECNL", "conference": "Southwest",
     "rank": 2, "powerScore": 1600, "offensivePowerScore": 57, "defensivePowerScore": 55,
     "goalsPerGame": 2.1, "goalsAgainstPerGame": 1.0, "wins": 1, "losses": 1, "draws": 1,
     "goalsFor": 4, "goalsAgainst": 4},
    {"id": "beach-g12", "name": "Beach FC", "ageGroup": "G12", "league": "ECNL", "conference": "Southwest",
     "rank": 3, "powerScore": 1500, "offensivePowerScore": 50, "defensivePowerScore": 50,
     "goalsPerGame": 1.6, "goalsAgainstPerGame": 1.5, "wins": 1, "losses": 1, "draws": 0,
     "goalsFor": 3, "goalsAgainst": 3},
    {"id": "albion-g12", "name": "Albion SC San Diego", "ageGroup": "G12", "league": "ECNL",
     "conference": "Southwest U13", "rank": 4, "powerScore": 1400, "offensivePowerScore": 45,
     "defensivePowerScore": 44},
    {"id": "crossfire-g12", "name": "Crossfire Premier", "ageGroup": "G12", "league": "ECNL",
     "conference": "Northwest", "rank": 5, "powerScore": 1550},
    {"id": "legends-g11", "name": "Legends FC", "ageGroup": "G11", "league": "ECNL", "conference": "Southwest",
     "rank": 1, "powerScore": 1750, "goalsPerGame": 2.8, "goalsAgainstPerGame": 0.6},
]

SAMPLE_GAMES = {
    "completedGames": [
        {"gameId": "c1", "date": "2025-09-06", "homeTeam": "Legends FC G12 ECNL", "awayTeam": "Slammers FC 12G",
         "homeScore": 2, "awayScore": 1, "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "c2", "date": "2025-09-13", "homeTeam": "Beach FC", "awayTeam": "Albion SC San Diego",
         "homeScore": 3, "awayScore": 0, "league": "ECNL", "ageGroup": "G12", "conference": "Southwest U13"},
        {"gameId": "c3", "date": "2025-09-20", "homeTeam": "Slammers FC", "awayTeam": "Beach FC",
         "homeScore": 1, "awayScore": 1, "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "old", "date": "2025-03-01", "homeTeam": "Albion SC San Diego", "awayTeam": "Legends FC",
         "homeScore": 5, "awayScore": 0, "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "event", "date": "2025-10-04", "homeTeam": "Albion SC San Diego", "awayTeam": "Slammers FC",
         "homeScore": 4, "awayScore": 0, "league": "ECNL", "ageGroup": "G12",
         "conference": "ECNL National Showcase"},
    ],
    "upcomingGames": [
        {"gameId": "u1", "date": "2025-11-01", "homeTeam": "Legends FC", "awayTeam": "Beach FC",
         "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "u2", "date": "2025-11-01", "homeTeam": "Albion SC San Diego", "awayTeam": "Slammers FC",
         "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "u3", "date": "2025-11-08", "homeTeam": "Slammers FC", "awayTeam": "Legends FC",
         "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "u4", "date": "2025-11-08", "homeTeam": "Albion SC San Diego", "awayTeam": "Beach FC",
         "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
        {"gameId": "tbd", "date": "2025-11-15", "homeTeam": "Legends FC", "awayTeam": "TBD",
         "league": "ECNL", "ageGroup": "G12", "conference": "Southwest"},
    ],
}


@pytest.fixture(autouse=True)
def _reset_settings():
    yield
    settings.reset()


@pytest.fixture
def team_records():
    return [dict(record) for record in SAMPLE_TEAMS]


@pytest.fixture
def teams():
    return teams_from_dataframe(pd.DataFrame(SAMPLE_TEAMS))


@pytest.fixture
def games():
    completed = records_from_dataframe(games_dataframe(SAMPLE_GAMES["completedGames"]))
    upcoming = records_from_dataframe(games_dataframe(SAMPLE_GAMES["upcomingGames"]))
    return completed, upcoming


@pytest.fixture(scope="session")
def data_files(tmp_path_factory) -> tuple[Path, Path]:
    root = tmp_path_factory.mktemp("league")
    teams_path = root / "rankings_for_react.json"
    games_path = root / "conference_games.json"
    teams_path.write_text(json.dumps({"teams": SAMPLE_TEAMS}), encoding="utf-8")
    games_path.write_text(json.dumps(SAMPLE_GAMES), encoding="utf-8")
    return teams_path, games_path


@pytest.fixture(scope="module")
def client(data_files) -> TestClient:
    from api.main import app

    teams_path, games_path = data_files
    context_manager.reload(teams_path=teams_path, games_path=games_path)
    return TestClient(app)
