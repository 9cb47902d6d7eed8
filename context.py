"""Shared team/game data context and reload management utilities."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Optional

from config import settings
from data import MatchRecord, load_games, load_teams
from predictions import ProbabilityTable
from ratings import Team

logger = logging.getLogger(__name__)


def _resolve_data_path(name: str) -> Path:
    path = Path(name)
    if not path.is_absolute():
        path = Path(__file__).resolve().parent / name
    return path


DEFAULT_TEAMS_PATH = _resolve_data_path(os.getenv("TEAMS_JSON", os.getenv("TEAMS_CSV", "rankings_for_react.json")))
DEFAULT_GAMES_PATH = _resolve_data_path(os.getenv("GAMES_JSON", "conference_games.json"))


@dataclass(frozen=True)
class LeagueDataContext:
    """Immutable snapshot of the inputs the engine reads."""

    teams: List[Team]
    completed_games: List[MatchRecord]
    upcoming_games: List[MatchRecord]
    table: ProbabilityTable
    created_at: datetime
    teams_path: Optional[Path]
    games_path: Optional[Path]
    settings_snapshot: Dict[str, Any] = field(default_factory=dict)

    def team_by_id(self, team_id: str) -> Optional[Team]:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        return None

    def age_groups(self) -> List[str]:
        return sorted({team.age_group for team in self.teams if team.age_group})

    def leagues(self) -> List[str]:
        return sorted({team.league for team in self.teams if team.league})


def build_context(
    teams_path: Optional[Path] = None,
    games_path: Optional[Path] = None,
) -> LeagueDataContext:
    """Construct a fresh :class:`LeagueDataContext`.

    Missing files yield an empty context so the API can start before the
    first ranking export lands.
    """

    teams: List[Team] = []
    completed: List[MatchRecord] = []
    upcoming: List[MatchRecord] = []

    if teams_path is not None and Path(teams_path).exists():
        teams = load_teams(teams_path)
    elif teams_path is not None:
        logger.warning("Team data not found at %s; starting with no teams", teams_path)

    if games_path is not None and Path(games_path).exists():
        completed, upcoming = load_games(games_path)
    elif games_path is not None:
        logger.warning("Game data not found at %s; simulations will use no fixtures", games_path)

    return LeagueDataContext(
        teams=teams,
        completed_games=completed,
        upcoming_games=upcoming,
        table=ProbabilityTable.default(),
        created_at=datetime.now(timezone.utc),
        teams_path=Path(teams_path) if teams_path else None,
        games_path=Path(games_path) if games_path else None,
        settings_snapshot=settings.snapshot(),
    )


class ContextManager:
    """Manage the active :class:`LeagueDataContext` with atomic reloads."""

    def __init__(
        self,
        *,
        teams_path: Path | str | None = None,
        games_path: Path | str | None = None,
    ) -> None:
        self._lock = RLock()
        self._teams_path = Path(teams_path) if teams_path else DEFAULT_TEAMS_PATH
        self._games_path = Path(games_path) if games_path else DEFAULT_GAMES_PATH
        self._context: Optional[LeagueDataContext] = None

    def get(self) -> LeagueDataContext:
        """Return the current context, loading it lazily if needed."""

        with self._lock:
            if self._context is None:
                self._context = build_context(self._teams_path, self._games_path)
            return self._context

    def reload(
        self,
        *,
        teams_path: Path | str | None = None,
        games_path: Path | str | None = None,
    ) -> LeagueDataContext:
        """Reload inputs and swap in a brand-new context atomically."""

        new_teams = Path(teams_path) if teams_path else self._teams_path
        new_games = Path(games_path) if games_path else self._games_path
        fresh = build_context(new_teams, new_games)

        with self._lock:
            self._teams_path = new_teams
            self._games_path = new_games
            self._context = fresh
            return self._context

    def metadata(self) -> Dict[str, Any]:
        """Return lightweight info about the active context."""

        ctx = self.get()
        return {
            "last_reload": ctx.created_at.isoformat(),
            "teams_path": str(ctx.teams_path) if ctx.teams_path else None,
            "games_path": str(ctx.games_path) if ctx.games_path else None,
            "team_count": len(ctx.teams),
            "completed_games": len(ctx.completed_games),
            "upcoming_games": len(ctx.upcoming_games),
            "settings": ctx.settings_snapshot,
        }


# Global singleton used by the CLI/API layers.
context_manager = ContextManager()
