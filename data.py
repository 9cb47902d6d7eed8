import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from config import (
    EVENT_CONFERENCE_KEYWORDS,
    LEAGUE_SUFFIXES,
    CLUB_SUFFIXES,
    TIER_WORDS,
    settings,
)
from ratings import Team

logger = logging.getLogger(__name__)

_TIER_ALTERNATION = "|".join(re.escape(w) for w in sorted(TIER_WORDS + LEAGUE_SUFFIXES, key=len, reverse=True))
_CLUB_ALTERNATION = "|".join(re.escape(w) for w in sorted(CLUB_SUFFIXES, key=len, reverse=True))

_COMBINED_AGE_RE = re.compile(r"\s+\d{2}\s*/\s*\d{2}\s*[gb]$")
_SIMPLE_AGE_RES = [
    re.compile(r"\s+(?:20)?\d{2}\s*[gb]$"),
    re.compile(r"\s+[gb]\s*(?:20)?\d{2}$"),
    re.compile(r"\s+u-?\d{1,2}$"),
    re.compile(r"\s+\d{2}\s+(?:girls?|boys?)$"),
]
_TIER_RE = re.compile(rf"\s+(?:{_TIER_ALTERNATION})$")
_BIRTH_YEAR_RE = re.compile(r"(?:^|\s+)(?:19|20)\d{2}(?=\s|$)")
_STATE_CODE_RE = re.compile(r"\s*\([a-z]{2}\)")
_CLUB_SUFFIX_RE = re.compile(rf"\s+(?:{_CLUB_ALTERNATION})$")

NON_CONFERENCE_EVENT_TYPES = {"CHAMPIONS_CUP", "PLAYOFFS", "FINALS", "REGIONAL", "SHOWCASE"}
EXCLUDED_TEAMS = {"TBDG", "TBD", "TBA", "BYE"}
DATE_FORMATS = ("%Y-%m-%d", "%b %d, %Y", "%B %d, %Y", "%m/%d/%Y")


def _collapse(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()


def _strip_once(s: str) -> str:
    s = _COMBINED_AGE_RE.sub("", s)
    for pattern in _SIMPLE_AGE_RES:
        s = pattern.sub("", s)
    while True:
        stripped = _TIER_RE.sub("", s)
        if stripped == s:
            break
        s = stripped
    s = _BIRTH_YEAR_RE.sub("", s)
    s = _STATE_CODE_RE.sub("", s)
    return _collapse(s)


def normalize_team_name(name: Optional[str]) -> str:
    """Lower-case a team name and strip age, tier, year and state decorations.

    ``"Legends FC 08/07G ECNL"`` and ``"Legends FC (CA) 2008 Gold"`` both
    become ``"legends fc"``. Stripping repeats until nothing changes, so the
    result is a fixed point. If everything would be stripped the collapsed
    lower-case input is returned instead.
    """
    if not name:
        return ""
    original = _collapse(str(name).lower())
    s = original
    while True:
        stripped = _strip_once(s)
        if stripped == s:
            break
        s = stripped
    return s or original


def base_club_name(name: Optional[str]) -> str:
    """Normalized name without generic club suffixes such as "SC" or "Soccer Club"."""
    normalized = normalize_team_name(name)
    s = normalized
    while True:
        stripped = _CLUB_SUFFIX_RE.sub("", s).strip()
        if stripped == s:
            break
        s = stripped
    return s or normalized


def clean_team_name(name: Optional[str]) -> Optional[str]:
    """Case-preserving cleanup used to key game records against team names."""
    if not name:
        return name
    s = str(name)
    s = re.sub(r"\s+\d{2}/\d{2}[GB](?=\s|$)", "", s, flags=re.I)
    s = re.sub(r"\s+(?:20)?\d{2}[GB](?=\s|$)", "", s, flags=re.I)
    s = re.sub(r"\s+[GB](?:20)?\d{2}(?=\s|$)", "", s, flags=re.I)
    s = re.sub(r"\s+20(?:0[6-9]|1[0-9])(?=\s|$)", "", s)
    s = re.sub(r"\s+\d{2}\s+(?:Girls?|Boys?)(?=\s|$)", "", s, flags=re.I)
    s = re.sub(
        r"\s+(?:NPL|ECNL|ECNL-RL|GA|Aspire|Academy|Premier|Elite|Pre-Academy|Pre GA|Pre-GA)(?=\s|$)",
        "",
        s,
        flags=re.I,
    )
    s = re.sub(r"\s*\(U\d+\)", "", s, flags=re.I)
    s = re.sub(r"\s+U\d+(?=\s|$)", "", s, flags=re.I)
    s = re.sub(r"\s+-\s+\w+$", "", s)
    s = re.sub(
        r"\s+(?:White|Blue|Gold|Red|Black|Green|Orange|Purple|Silver|Gray|Navy)(?=\s|$)",
        "",
        s,
        flags=re.I,
    )
    return _collapse(s)


def normalize_conference(conference: Optional[str]) -> Optional[str]:
    """Drop trailing age suffixes such as ``" U15"`` or ``"-U12"``."""
    if not conference:
        return conference
    return re.sub(r"\s*[-\s]?\s*U1[0-9]\s*$", "", conference, flags=re.I).strip()


def is_event_conference(conference: Optional[str], event_type: Optional[str] = None) -> bool:
    """True for showcase/playoff/cup style events, False for regular league play."""
    if event_type and str(event_type).upper() in NON_CONFERENCE_EVENT_TYPES:
        return True
    if not conference:
        return False
    lowered = conference.lower()
    return any(keyword in lowered for keyword in EVENT_CONFERENCE_KEYWORDS)


def parse_game_date(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text or text.lower() in {"nan", "nat", "none"}:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def season_start() -> datetime:
    raw = settings.get("season_start_date")
    parsed = parse_game_date(raw)
    if parsed is None:
        logger.warning("Invalid season_start_date %r; using 2025-08-01", raw)
        return datetime(2025, 8, 1)
    return parsed


@dataclass(frozen=True)
class MatchRecord:
    """One fixture. Scores are ``None`` until the game has been played."""

    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    date: Optional[str] = None
    league: Optional[str] = None
    age_group: Optional[str] = None
    conference: Optional[str] = None
    event_type: Optional[str] = None
    game_id: Optional[str] = None

    @property
    def has_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    @property
    def is_event(self) -> bool:
        return is_event_conference(self.conference, self.event_type)

    @property
    def game_date(self) -> Optional[datetime]:
        return parse_game_date(self.date)


# Loaders ---------------------------------------------------------------

TEAM_COLUMNS = {
    "id": "team_id",
    "name": "name",
    "ageGroup": "age_group",
    "league": "league",
    "conference": "conference",
    "rank": "rank",
    "powerScore": "power_score",
    "offensivePowerScore": "offensive_power_score",
    "defensivePowerScore": "defensive_power_score",
    "goalsPerGame": "goals_per_game",
    "goalsAgainstPerGame": "goals_against_per_game",
    "wins": "wins",
    "losses": "losses",
    "draws": "draws",
    "goalsFor": "goals_for",
    "goalsAgainst": "goals_against",
}

GAME_COLUMNS = {
    "gameId": "game_id",
    "date": "date",
    "gameDate": "date",
    "homeTeam": "home_team",
    "awayTeam": "away_team",
    "homeScore": "home_score",
    "awayScore": "away_score",
    "league": "league",
    "ageGroup": "age_group",
    "conference": "conference",
    "eventType": "event_type",
}

_NUMERIC_TEAM_COLUMNS = [
    "rank",
    "power_score",
    "offensive_power_score",
    "defensive_power_score",
    "goals_per_game",
    "goals_against_per_game",
    "wins",
    "losses",
    "draws",
    "goals_for",
    "goals_against",
]


def _read_records(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    return json.loads(path.read_text(encoding="utf-8"))


def _clean(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NA or value is pd.NaT:
        return None
    return value


def _opt_str(value: Any) -> Optional[str]:
    value = _clean(value)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _opt_float(value: Any) -> Optional[float]:
    value = _clean(value)
    return None if value is None else float(value)


def prepare_teams_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    df = df.rename(columns=TEAM_COLUMNS)
    if "name" not in df.columns or "age_group" not in df.columns:
        raise ValueError("Team data must provide 'name' and 'ageGroup' columns")
    if "team_id" not in df.columns:
        df["team_id"] = df["name"].astype(str) + "|" + df["age_group"].astype(str)
    for col in _NUMERIC_TEAM_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    df["name"] = df["name"].fillna("").astype(str).str.strip()
    df = df[df["name"] != ""]
    return df.reset_index(drop=True)


def teams_from_dataframe(df: pd.DataFrame) -> List[Team]:
    df = prepare_teams_dataframe(df)
    teams: List[Team] = []
    for row in df.to_dict(orient="records"):
        rank = _opt_float(row.get("rank"))
        teams.append(
            Team(
                team_id=str(row["team_id"]),
                name=row["name"],
                age_group=_opt_str(row.get("age_group")),
                league=_opt_str(row.get("league")),
                conference=_opt_str(row.get("conference")),
                rank=int(rank) if rank is not None else None,
                power_score=_opt_float(row.get("power_score")),
                offensive_power_score=_opt_float(row.get("offensive_power_score")),
                defensive_power_score=_opt_float(row.get("defensive_power_score")),
                goals_per_game=_opt_float(row.get("goals_per_game")),
                goals_against_per_game=_opt_float(row.get("goals_against_per_game")),
                wins=int(_opt_float(row.get("wins")) or 0),
                losses=int(_opt_float(row.get("losses")) or 0),
                draws=int(_opt_float(row.get("draws")) or 0),
                goals_for=int(_opt_float(row.get("goals_for")) or 0),
                goals_against=int(_opt_float(row.get("goals_against")) or 0),
            )
        )
    return teams


def load_teams(path: str | Path) -> List[Team]:
    """Load the ranked team list from a rankings JSON export or CSV."""
    raw = _read_records(Path(path))
    if isinstance(raw, pd.DataFrame):
        return teams_from_dataframe(raw)
    if isinstance(raw, dict):
        raw = raw.get("teams", [])
    if not raw:
        return []
    return teams_from_dataframe(pd.DataFrame(raw))


def games_dataframe(records: List[Dict[str, Any]]) -> pd.DataFrame:
    """Normalize raw game dicts into a typed dataframe."""
    columns = list(dict.fromkeys(GAME_COLUMNS.values()))
    if not records:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(records).rename(columns=GAME_COLUMNS)
    df = df.loc[:, ~df.columns.duplicated()]
    for col in columns:
        if col not in df.columns:
            df[col] = None
    for col in ("home_team", "away_team"):
        df[col] = df[col].fillna("").astype(str).str.strip()
    supplied = pd.DataFrame(
        {
            col: df[col].notna() & (df[col].astype(str).str.strip() != "")
            for col in ("home_score", "away_score")
        }
    )
    df["home_score"] = pd.to_numeric(df["home_score"], errors="coerce")
    df["away_score"] = pd.to_numeric(df["away_score"], errors="coerce")
    garbled = (supplied & df[["home_score", "away_score"]].isna()).any(axis=1)
    for idx in df.index[garbled]:
        logger.warning(
            "Non-numeric score in game %s (%s vs %s); treating as unplayed",
            df.at[idx, "game_id"],
            df.at[idx, "home_team"],
            df.at[idx, "away_team"],
        )
    return df[columns]


def records_from_dataframe(df: pd.DataFrame) -> List[MatchRecord]:
    records: List[MatchRecord] = []
    for row in df.to_dict(orient="records"):
        home = row.get("home_team") or ""
        away = row.get("away_team") or ""
        if not home or not away or home.upper() in EXCLUDED_TEAMS or away.upper() in EXCLUDED_TEAMS:
            continue
        home_score = _opt_float(row.get("home_score"))
        away_score = _opt_float(row.get("away_score"))
        records.append(
            MatchRecord(
                home_team=home,
                away_team=away,
                home_score=int(home_score) if home_score is not None else None,
                away_score=int(away_score) if away_score is not None else None,
                date=_opt_str(row.get("date")),
                league=_opt_str(row.get("league")),
                age_group=_opt_str(row.get("age_group")),
                conference=_opt_str(row.get("conference")),
                event_type=_opt_str(row.get("event_type")),
                game_id=_opt_str(row.get("game_id")),
            )
        )
    return records


def load_games(path: str | Path) -> Tuple[List[MatchRecord], List[MatchRecord]]:
    """Load a conference games export; returns ``(completed, upcoming)``."""
    raw = _read_records(Path(path))
    if isinstance(raw, pd.DataFrame):
        df = games_dataframe(raw.to_dict(orient="records"))
        played = df["home_score"].notna() & df["away_score"].notna()
        return records_from_dataframe(df[played]), records_from_dataframe(df[~played])
    if not isinstance(raw, dict):
        raise ValueError("Games export must be an object with 'completedGames' and 'upcomingGames'")
    completed = records_from_dataframe(games_dataframe(raw.get("completedGames") or []))
    upcoming = records_from_dataframe(games_dataframe(raw.get("upcomingGames") or []))
    return completed, upcoming
