"""Team ratings and the defaults applied when a rating is missing."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from config import settings

_FULL_YEAR_RE = re.compile(r"(?<!\d)(20\d{2})(?!\d)")
_COMBINED_YEAR_RE = re.compile(r"(?<!\d)(\d{2})/\d{2}(?!\d)")
_SHORT_YEAR_RE = re.compile(r"[GB](\d{2})(?!\d)|(?<!\d)(\d{2})[GB]", re.I)


@dataclass(frozen=True)
class Team:
    """A ranked team as produced by the external ranking run.

    Rating fields are optional; use the accessor functions in this module to
    read them with league-average defaults applied.
    """

    team_id: str
    name: str
    age_group: Optional[str] = None
    league: Optional[str] = None
    conference: Optional[str] = None
    rank: Optional[int] = None
    power_score: Optional[float] = None
    offensive_power_score: Optional[float] = None
    defensive_power_score: Optional[float] = None
    goals_per_game: Optional[float] = None
    goals_against_per_game: Optional[float] = None
    wins: int = 0
    losses: int = 0
    draws: int = 0
    goals_for: int = 0
    goals_against: int = 0
    is_unranked: bool = False

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.draws


def _present(value: Optional[float]) -> bool:
    return value is not None and not (isinstance(value, float) and math.isnan(value))


def power_score(team: Team) -> float:
    if _present(team.power_score):
        return float(team.power_score)
    return float(settings.get("default_power_score"))


def offensive_rating(team: Team) -> float:
    if _present(team.offensive_power_score):
        return float(team.offensive_power_score)
    return float(settings.get("default_sub_rating"))


def defensive_rating(team: Team) -> float:
    if _present(team.defensive_power_score):
        return float(team.defensive_power_score)
    return float(settings.get("default_sub_rating"))


def scoring_rates(team: Team) -> Optional[Tuple[float, float]]:
    """``(goals_per_game, goals_against_per_game)`` or ``None`` if either is unknown."""
    if _present(team.goals_per_game) and _present(team.goals_against_per_game):
        return float(team.goals_per_game), float(team.goals_against_per_game)
    return None


def parse_age_from_age_group(age_group: Optional[str], reference_year: Optional[int] = None) -> Optional[int]:
    """Actual age of a birth-year bracket label.

    Accepts four-digit (``"2011G"``, ``"B2013"``) and two-digit (``"G13"``,
    ``"11B"``) encodings. Returns ``None`` when no birth year can be found.
    """
    if not age_group:
        return None
    year = reference_year if reference_year is not None else datetime.now().year
    full = _FULL_YEAR_RE.search(age_group)
    if full:
        return year - int(full.group(1))
    # Combined brackets ("08/07G", "G08/07") take the first year.
    combined = _COMBINED_YEAR_RE.search(age_group)
    if combined:
        return year - (2000 + int(combined.group(1)))
    short = _SHORT_YEAR_RE.search(age_group)
    if short:
        suffix = short.group(1) or short.group(2)
        return year - (2000 + int(suffix))
    return None


def team_age(team: Team, reference_year: Optional[int] = None) -> Optional[int]:
    return parse_age_from_age_group(team.age_group, reference_year)


def make_placeholder_team(
    name: Optional[str],
    power: Optional[float] = None,
    *,
    age_group: Optional[str] = None,
) -> Team:
    """Stand-in for an opponent that matches no ranked team.

    Scoring rates are estimated from ``power``: weaker placeholders score less
    and concede more (800 -> ~0.95 GPG / ~3.05 GAPG, 1500 -> 2.0 / 2.0).
    """
    if power is None:
        power = float(settings.get("placeholder_power_score"))
    power_factor = (power - 1500.0) / 1000.0
    gpg = max(0.5, min(5.0, 2.0 + power_factor * 1.5))
    gapg = max(0.3, min(4.0, 2.0 - power_factor * 1.5))
    label = name or "Unknown opponent"
    return Team(
        team_id=f"unranked:{label}",
        name=label,
        age_group=age_group,
        power_score=float(power),
        offensive_power_score=50.0 + power_factor * 30.0,
        defensive_power_score=50.0 + power_factor * 30.0,
        goals_per_game=gpg,
        goals_against_per_game=gapg,
        is_unranked=True,
    )
