from __future__ import annotations

import pytest

from alias import GameTeamIndex, TeamLookup, build_alias_map, resolve_team, significant_words
from ratings import Team


@pytest.fixture
def lookup(teams):
    return TeamLookup.build(teams)


@pytest.mark.parametrize(
    "query, expected",
    [
        ("legends fc", "legends-g12"),  # exact, case-insensitive
        ("Legends FC G12 ECNL", "legends-g12"),  # normalized
        ("Beach Soccer Club", "beach-g12"),  # base club name
        ("Albion SC San Diego North", "albion-g12"),  # substring
        ("San Diego Albion", "albion-g12"),  # two shared words
        ("Legends Rush", "legends-g12"),  # lone distinctive word
    ],
)
def test_cascade_matches(lookup, query, expected):
    team = lookup.match(query, "G12")
    assert team is not None
    assert team.team_id == expected


def test_match_never_crosses_age_groups(lookup):
    assert lookup.match("Legends FC", "G11").team_id == "legends-g11"
    assert lookup.match("Legends FC", "G12").team_id == "legends-g12"
    assert lookup.match("Beach FC", "G11") is None
    assert lookup.match("Legends FC", "G13") is None


def test_single_shared_word_needs_lone_token_on_both_sides(lookup):
    # "beach" is shared but the query also carries "rovers".
    assert lookup.match("Beach Rovers Elite", "G12") is None


def test_short_names_do_not_match_by_substring(teams):
    lookup = TeamLookup.build(teams)
    assert lookup.match("Leg", "G12") is None


def test_significant_words_skip_generic_tokens():
    assert significant_words("legends fc united") == ["legends"]
    assert significant_words("san diego san") == ["san", "diego"]


def test_resolve_team_placeholders(teams):
    unknown = resolve_team("Nomads SC", "G12", teams)
    assert unknown.is_unranked
    assert unknown.power_score == 800.0
    assert unknown.name == "Nomads SC"

    no_candidates = resolve_team("Nomads SC", "G12")
    assert no_candidates.is_unranked
    assert no_candidates.power_score == 1500.0

    empty_list = resolve_team("Nomads SC", "G12", [])
    assert empty_list.power_score == 800.0

    assert resolve_team("Slammers FC", "G12", teams).team_id == "slammers-g12"


def test_build_alias_map(teams):
    mapping = build_alias_map(["Slammers FC 12G", "Nomads SC"], "G12", teams)
    assert mapping == {"Slammers FC 12G": "slammers-g12", "Nomads SC": None}


def test_suggestions_report_near_misses(lookup):
    suggestions = lookup.suggestions("Slamers", "G12")
    assert suggestions
    assert suggestions[0][0] == "Slammers FC"


def test_game_team_index_uses_bracket(teams):
    index = GameTeamIndex(teams)
    assert index.find("Slammers FC 12G", "G12").team_id == "slammers-g12"
    assert index.find("Legends FC", "G11").team_id == "legends-g11"
    assert index.find("Legends FC", "G12").team_id == "legends-g12"
    assert index.find("TBD", "G12") is None
    assert index.find(None) is None


def test_game_team_index_single_group_infers_bracket(teams):
    group = [t for t in teams if t.age_group == "G12"]
    index = GameTeamIndex(group)
    assert index.find("Beach Soccer Club").team_id == "beach-g12"


def test_game_team_index_rejects_teams_without_a_bracket():
    index = GameTeamIndex(
        [
            Team(team_id="legends-g11", name="Legends FC", age_group="G11"),
            Team(team_id="rovers", name="Rovers United", age_group=None),
        ]
    )
    assert index.find("Rovers United", "G12") is None
    assert index.find("Legends FC", "G11").team_id == "legends-g11"
