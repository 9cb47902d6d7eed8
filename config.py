"""Runtime configuration knobs for the prediction and simulation engine.

All model constants live in a thread-safe :class:`SettingsManager` so they can
be recalibrated at runtime (API layer, notebooks) without code changes.
Modules should call ``settings.get(...)``; the module-level constants below
keep the initial default values for scripts that only need a quick number.
"""

from __future__ import annotations

from threading import RLock
from typing import Any, Dict, List


class SettingsManager:
    """Thread-safe accessor for mutable model knobs.

    The manager stores a copy of the default settings and exposes ``get``/``set``
    helpers. ``snapshot`` returns a plain dictionary that can be embedded in
    API responses without risking mid-request mutation.
    """

    def __init__(self, defaults: Dict[str, Any]) -> None:
        self._defaults = dict(defaults)
        self._settings = dict(defaults)
        self._lock = RLock()

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._settings.keys())

    def get(self, name: str) -> Any:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            return self._settings[name]

    def set(self, name: str, value: Any) -> None:
        with self._lock:
            if name not in self._settings:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = value

    def reset(self, name: str | None = None) -> None:
        with self._lock:
            if name is None:
                self._settings = dict(self._defaults)
                return
            if name not in self._defaults:
                raise KeyError(f"Unknown setting '{name}'")
            self._settings[name] = self._defaults[name]

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._settings)


_DEFAULT_SETTINGS: Dict[str, Any] = {
    "simulation_trials": 10000,
    "default_power_score": 1500.0,
    "default_sub_rating": 50.0,
    "home_advantage_goals": 0.15,
    "team_gpg_weight": 0.55,
    "opp_gapg_weight": 0.45,
    "power_goal_factor": 0.0025,
    "power_goal_damping": 0.7,
    "off_def_factor_gpg": 0.015,
    "off_def_factor_basic": 0.023,
    "base_goals": 1.85,
    "away_base_goals_offset": 0.05,
    "age_stat_adjustment": 0.25,
    "gpg_home_goal_range": (0.3, 8.0),
    "gpg_away_goal_range": (0.2, 7.0),
    "basic_home_goal_range": (0.3, 6.0),
    "basic_away_goal_range": (0.2, 5.5),
    "age_base_points_per_year": 425.0,
    "age_scale_pivot": 1100.0,
    "age_scale_span": 600.0,
    "age_scale_range": (0.5, 2.2),
    "confidence_full": 85,
    "confidence_basic": 60,
    "placeholder_power_score": 800.0,
    "missing_opponent_power_score": 1500.0,
    "substring_min_length": 8,
    "shared_word_min_length": 5,
    "suggestion_cutoff": 0.6,
    "season_start_date": "2025-08-01",
    "probability_table_path": None,
}

SETTINGS_HELP: Dict[str, str] = {
    "simulation_trials": "Number of Monte Carlo trials run per season simulation.",
    "default_power_score": "Power rating assumed when a team has none (league average).",
    "default_sub_rating": "Offensive/defensive rating assumed when a team has none.",
    "home_advantage_goals": "Goals added to the home side's expected goals.",
    "team_gpg_weight": "Weight of a team's own goals-per-game in its expected goals.",
    "opp_gapg_weight": "Weight of the opponent's goals-against-per-game in expected goals.",
    "power_goal_factor": "Goals per point of effective power difference.",
    "power_goal_damping": "Fraction of the power-difference goal term actually applied.",
    "off_def_factor_gpg": "Goals per offensive/defensive point away from 50 (GPG model).",
    "off_def_factor_basic": "Goals per offensive/defensive point away from 50 (basic model).",
    "base_goals": "Baseline expected goals used by the basic model.",
    "away_base_goals_offset": "Amount subtracted from the away side's baseline in the basic model.",
    "age_stat_adjustment": "Goals per year of age difference applied to GPG/GAPG in cross-age games.",
    "gpg_home_goal_range": "Clamp (low, high) for home expected goals in the GPG model.",
    "gpg_away_goal_range": "Clamp (low, high) for away expected goals in the GPG model.",
    "basic_home_goal_range": "Clamp (low, high) for home expected goals in the basic model.",
    "basic_away_goal_range": "Clamp (low, high) for away expected goals in the basic model.",
    "age_base_points_per_year": "Power points per year of age difference before scaling.",
    "age_scale_pivot": "Average power at which the age scale factor equals 2.0.",
    "age_scale_span": "Power span over which the age scale factor drops by 1.0.",
    "age_scale_range": "Clamp (low, high) for the age scale factor.",
    "confidence_full": "Confidence reported when both teams have scoring history.",
    "confidence_basic": "Confidence reported when the basic model is used.",
    "placeholder_power_score": "Power assigned to opponents that match no ranked team.",
    "missing_opponent_power_score": "Power assigned when no candidate teams are supplied at all.",
    "substring_min_length": "Shortest normalized name allowed to match by substring containment.",
    "shared_word_min_length": "Minimum length of a lone shared word for word-overlap matching.",
    "suggestion_cutoff": "Minimum similarity for near-miss suggestions on unresolved names (never used to match).",
    "season_start_date": "Games dated before this ISO date belong to the previous season.",
    "probability_table_path": "Optional CSV (low, high, home_win, draw, away_win) replacing the built-in table.",
}

settings = SettingsManager(_DEFAULT_SETTINGS)


def set_knob(name: str, value: Any) -> None:
    settings.set(name, value)


def get_knob(name: str) -> Any:
    return settings.get(name)


def all_knobs() -> Dict[str, Any]:
    return settings.snapshot()


# Initial defaults, for callers that do not need runtime overrides.
SIMULATION_TRIALS = _DEFAULT_SETTINGS["simulation_trials"]
DEFAULT_POWER_SCORE = _DEFAULT_SETTINGS["default_power_score"]
DEFAULT_SUB_RATING = _DEFAULT_SETTINGS["default_sub_rating"]
HOME_ADVANTAGE_GOALS = _DEFAULT_SETTINGS["home_advantage_goals"]
PLACEHOLDER_POWER_SCORE = _DEFAULT_SETTINGS["placeholder_power_score"]

# Empirical win/draw/loss shares by power difference (home minus away),
# measured over ~50,000 matched games. Outer buckets extend to infinity.
DEFAULT_WIN_PROBABILITY_TABLE: List[Dict[str, float]] = [
    {"low": -3000, "high": -800, "home_win": 0.142, "draw": 0.110, "away_win": 0.748},
    {"low": -800, "high": -600, "home_win": 0.157, "draw": 0.116, "away_win": 0.727},
    {"low": -600, "high": -500, "home_win": 0.170, "draw": 0.126, "away_win": 0.704},
    {"low": -500, "high": -400, "home_win": 0.178, "draw": 0.145, "away_win": 0.676},
    {"low": -400, "high": -300, "home_win": 0.186, "draw": 0.161, "away_win": 0.654},
    {"low": -300, "high": -250, "home_win": 0.205, "draw": 0.176, "away_win": 0.619},
    {"low": -250, "high": -200, "home_win": 0.272, "draw": 0.198, "away_win": 0.530},
    {"low": -200, "high": -150, "home_win": 0.294, "draw": 0.194, "away_win": 0.511},
    {"low": -150, "high": -100, "home_win": 0.295, "draw": 0.228, "away_win": 0.477},
    {"low": -100, "high": -50, "home_win": 0.364, "draw": 0.201, "away_win": 0.435},
    {"low": -50, "high": 0, "home_win": 0.389, "draw": 0.225, "away_win": 0.387},
    {"low": 0, "high": 50, "home_win": 0.438, "draw": 0.179, "away_win": 0.382},
    {"low": 50, "high": 100, "home_win": 0.492, "draw": 0.188, "away_win": 0.321},
    {"low": 100, "high": 150, "home_win": 0.532, "draw": 0.205, "away_win": 0.263},
    {"low": 150, "high": 200, "home_win": 0.568, "draw": 0.167, "away_win": 0.266},
    {"low": 200, "high": 250, "home_win": 0.592, "draw": 0.172, "away_win": 0.236},
    {"low": 250, "high": 300, "home_win": 0.692, "draw": 0.159, "away_win": 0.150},
    {"low": 300, "high": 400, "home_win": 0.699, "draw": 0.144, "away_win": 0.156},
    {"low": 400, "high": 500, "home_win": 0.714, "draw": 0.135, "away_win": 0.151},
    {"low": 500, "high": 600, "home_win": 0.711, "draw": 0.127, "away_win": 0.162},
    {"low": 600, "high": 800, "home_win": 0.754, "draw": 0.102, "away_win": 0.143},
    {"low": 800, "high": 3000, "home_win": 0.777, "draw": 0.095, "away_win": 0.128},
]

# Words that identify an age bracket or a competition tier rather than a club.
TIER_WORDS = [
    "gold", "white", "blue", "red", "black", "green", "orange", "purple",
    "silver", "gray", "grey", "navy", "premier", "elite", "academy", "select",
    "pre-academy", "pre-ga", "i", "ii", "iii", "iv",
]
LEAGUE_SUFFIXES = ["ga", "ecnl", "ecnl-rl", "ecnl rl", "aspire", "rl", "npl"]

# Club suffixes dropped when comparing "base" club names.
CLUB_SUFFIXES = ["sc", "fc", "soccer club", "soccer", "club", "academy", "united"]

# Too common across clubs to identify one on their own.
GENERIC_TEAM_WORDS = {
    "united", "fc", "sc", "soccer", "club", "academy", "athletic", "athletics",
    "city", "county", "youth", "premier", "elite", "select", "fire", "heat",
    "storm", "thunder", "lightning", "rush", "force", "spirit", "pride",
    "white", "blue", "gold", "red", "black", "green", "orange", "purple",
    "silver", "gray", "grey", "navy",
}

# Conference labels containing any of these are events, not league play.
EVENT_CONFERENCE_KEYWORDS = [
    "national", "showcase", "playoff", "cup", "championship", "regional event",
]
