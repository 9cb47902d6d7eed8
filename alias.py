import logging
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import GENERIC_TEAM_WORDS, settings
from data import base_club_name, clean_team_name, normalize_team_name
from ratings import Team, make_placeholder_team

logger = logging.getLogger(__name__)


def significant_words(normalized: str) -> List[str]:
    """Tokens of a normalized name that can identify a club on their own."""
    words: List[str] = []
    for word in normalized.split():
        if len(word) > 2 and word not in GENERIC_TEAM_WORDS and word not in words:
            words.append(word)
    return words


@dataclass(frozen=True)
class _Candidate:
    team: Team
    lowered: str
    normalized: str
    base: str
    words: Tuple[str, ...]


@dataclass
class TeamLookup:
    """Name-matching index over one candidate list.

    Build one per request (``TeamLookup.build(teams)``) and discard it with
    the request. Candidates are bucketed by age group so a query never sees a
    team from another bracket.
    """

    by_age_group: Dict[Optional[str], List[_Candidate]] = field(default_factory=dict)

    @classmethod
    def build(cls, teams: Iterable[Team]) -> "TeamLookup":
        lookup = cls()
        for team in teams:
            normalized = normalize_team_name(team.name)
            candidate = _Candidate(
                team=team,
                lowered=(team.name or "").lower(),
                normalized=normalized,
                base=base_club_name(team.name),
                words=tuple(significant_words(normalized)),
            )
            lookup.by_age_group.setdefault(team.age_group, []).append(candidate)
        return lookup

    def candidates(self, age_group: Optional[str]) -> List[_Candidate]:
        return self.by_age_group.get(age_group, [])

    def match(self, name: Optional[str], age_group: Optional[str]) -> Optional[Team]:
        """Return the first candidate matched by the strategy cascade, or ``None``."""
        if not name:
            return None
        pool = self.candidates(age_group)
        if not pool:
            return None

        lowered = name.lower()
        for cand in pool:
            if cand.lowered == lowered:
                return cand.team

        normalized = normalize_team_name(name)
        for cand in pool:
            if cand.normalized == normalized:
                return cand.team

        base = base_club_name(name)
        if base:
            for cand in pool:
                if cand.base == base:
                    return cand.team

        min_length = int(settings.get("substring_min_length"))
        for cand in pool:
            shorter = cand.normalized if len(cand.normalized) < len(normalized) else normalized
            if len(shorter) < min_length:
                continue
            if cand.normalized in normalized or normalized in cand.normalized:
                return cand.team

        query_words = significant_words(normalized)
        if not query_words:
            return None
        lone_word_length = int(settings.get("shared_word_min_length"))
        for cand in pool:
            shared = [w for w in query_words if w in cand.words]
            if len(shared) >= 2:
                return cand.team
            if (
                len(shared) == 1
                and len(query_words) == 1
                and len(cand.words) == 1
                and len(shared[0]) >= lone_word_length
            ):
                return cand.team
        return None

    def suggestions(self, name: Optional[str], age_group: Optional[str], limit: int = 3) -> List[Tuple[str, float]]:
        """Closest same-bracket names by similarity ratio, for operator diagnostics."""
        if not name:
            return []
        normalized = normalize_team_name(name)
        cutoff = float(settings.get("suggestion_cutoff"))
        scored = []
        for cand in self.candidates(age_group):
            score = SequenceMatcher(None, normalized, cand.normalized).ratio()
            if score >= cutoff:
                scored.append((cand.team.name, round(score, 3)))
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[:limit]


def resolve_team(
    name: Optional[str],
    age_group: Optional[str],
    teams: Optional[Sequence[Team]] = None,
    *,
    lookup: Optional[TeamLookup] = None,
) -> Team:
    """Match a free-text opponent to a ranked team in the same age group.

    Falls back to an unranked placeholder instead of failing: a weak
    placeholder when candidates were searched without success, an
    average-strength one when no candidate list was supplied at all.
    """
    if lookup is None:
        if teams is None:
            return make_placeholder_team(
                name, float(settings.get("missing_opponent_power_score")), age_group=age_group
            )
        lookup = TeamLookup.build(teams)
    match = lookup.match(name, age_group)
    if match is not None:
        return match
    logger.debug("No %s match for %r; using unranked placeholder", age_group, name)
    return make_placeholder_team(name, age_group=age_group)


def build_alias_map(
    names: Iterable[str],
    age_group: Optional[str],
    teams: Sequence[Team],
) -> Dict[str, Optional[str]]:
    """Map each free-text name to a matched team id (``None`` when unresolved)."""
    lookup = TeamLookup.build(teams)
    m: Dict[str, Optional[str]] = {}
    for nm in names:
        team = lookup.match(nm, age_group)
        m[nm] = team.team_id if team is not None else None
    return m


class GameTeamIndex:
    """Resolve game-record team names against the teams of one simulated group."""

    def __init__(self, teams: Sequence[Team]) -> None:
        self._keys: Dict[str, Team] = {}
        for team in teams:
            self._keys.setdefault(team.name, team)
            self._keys.setdefault(team.name.lower(), team)
        for team in teams:
            cleaned = clean_team_name(team.name) or ""
            self._keys.setdefault(cleaned, team)
            self._keys.setdefault(cleaned.lower(), team)
        self._lookup = TeamLookup.build(teams)
        brackets = {team.age_group for team in teams}
        self._single_bracket = next(iter(brackets)) if len(brackets) == 1 else None

    def find(self, name: Optional[str], age_group: Optional[str] = None) -> Optional[Team]:
        if not name:
            return None
        bracket = age_group if age_group is not None else self._single_bracket
        cleaned = clean_team_name(name) or ""
        for key in (name, name.lower(), cleaned, cleaned.lower()):
            team = self._keys.get(key)
            if team is None:
                continue
            if bracket is not None and team.age_group != bracket:
                continue
            return team
        if bracket is None:
            return None
        return self._lookup.match(name, bracket)
