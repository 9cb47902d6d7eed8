# main.py  (print-only front end)

from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional, Sequence

from alias import TeamLookup, resolve_team
from config import settings
from context import DEFAULT_GAMES_PATH, DEFAULT_TEAMS_PATH, build_context
from predictions import PredictionResult, games_for_team, predict_game, rank_games_by_performance
from ratings import Team
from simulation import available_conferences, compute_conference_predictions

LOG = logging.getLogger("seedline")


def hr(char="─", n=80):  # horizontal rule
    print(char * n)


def print_prediction(home: Team, away: Team, prediction: PredictionResult):
    home_pct, draw_pct, away_pct = prediction.percentages()
    print(f"{home.name} vs {away.name}"); hr()
    print(f"{'Predicted score':<24} {prediction.predicted_home_score}-{prediction.predicted_away_score}")
    print(
        f"{'Expected goals':<24} {prediction.home_expected_goals:.2f}-{prediction.away_expected_goals:.2f}"
        f"  (diff {prediction.expected_goal_diff:+.2f})"
    )
    print(f"{'Home / Draw / Away':<24} {home_pct}% / {draw_pct}% / {away_pct}%")
    print(f"{'Confidence':<24} {prediction.confidence}")
    if prediction.is_cross_age_group:
        print(
            f"{'Age adjustment':<24} {prediction.age_adjustment:+.0f} "
            f"({prediction.home_age_group} vs {prediction.away_age_group})"
        )
    for team in (home, away):
        if team.is_unranked:
            print(f"(No ranked match for '{team.name}'; using an unranked estimate.)")
    print()


def print_simulation(payload: Dict):
    group = payload["group"]
    label = " / ".join(str(v) for v in (group["league"], group["ageGroup"], group["conference"]) if v)
    stats = payload["simulation"]
    print(f"Conference simulation — {label}"); hr()
    print(
        f"{stats['simulationsRun']} trials, {stats['completedGamesUsed']} completed games, "
        f"{stats['upcomingGamesToSimulate']} fixtures simulated"
    )
    if stats["cancelled"]:
        print("(cancelled before all trials finished)")
    hr("—", 80)
    print(f"{'#':<4}{'Team':<32} {'Champ%':>7} {'Top3%':>7} {'AvgPos':>7} {'W-L-D rem':>12}")
    hr("—", 80)
    for i, row in enumerate(payload["teams"], 1):
        remaining = (
            f"{row['expectedRemainingWins']:.1f}-{row['expectedRemainingLosses']:.1f}-"
            f"{row['expectedRemainingDraws']:.1f}"
        )
        print(
            f"{i:<4}{row['team'][:32]:<32} {row['champProbability']:>7.1f} {row['topThreeProbability']:>7.1f} "
            f"{row['avgPosition']:>7.1f} {remaining:>12}"
        )
    print()


def _find_ranked(teams: List[Team], name: str, age_group: Optional[str]) -> Team:
    return resolve_team(name, age_group, lookup=TeamLookup.build(teams))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Match predictions and conference simulations from team rankings.")
    parser.add_argument("--teams", default=str(DEFAULT_TEAMS_PATH), help="Rankings export (JSON or CSV).")
    parser.add_argument("--games", default=str(DEFAULT_GAMES_PATH), help="Conference games export (JSON).")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    sub = parser.add_subparsers(dest="command", required=True)

    predict = sub.add_parser("predict", help="Predict one match.")
    predict.add_argument("home")
    predict.add_argument("away")
    predict.add_argument("--age-group", required=True, help="Age group used to resolve both names.")
    predict.add_argument("--away-age-group", help="Away team's age group for cross-age matches.")

    resolve = sub.add_parser("resolve", help="Show which ranked team a name resolves to.")
    resolve.add_argument("name")
    resolve.add_argument("--age-group", required=True)

    simulate = sub.add_parser("simulate", help="Project final standings for a league/age group.")
    simulate.add_argument("--league", required=True)
    simulate.add_argument("--age-group", required=True)
    simulate.add_argument("--conference", help="Restrict to one conference's league games.")
    simulate.add_argument("--trials", type=int, default=None, help="Monte Carlo trials (default from settings).")
    simulate.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible runs.")

    perf = sub.add_parser("performance", help="Rank a team's played games against their predictions.")
    perf.add_argument("team")
    perf.add_argument("--age-group", required=True)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(levelname)s - %(message)s")

    ctx = build_context(args.teams, args.games)
    LOG.info("Loaded %d teams, %d completed and %d upcoming games", len(ctx.teams), len(ctx.completed_games), len(ctx.upcoming_games))

    if args.command == "predict":
        home = _find_ranked(ctx.teams, args.home, args.age_group)
        away = _find_ranked(ctx.teams, args.away, args.away_age_group or args.age_group)
        print_prediction(home, away, predict_game(home, away, table=ctx.table))
        return 0

    if args.command == "resolve":
        lookup = TeamLookup.build(ctx.teams)
        team = lookup.match(args.name, args.age_group)
        if team is None:
            print(f"No {args.age_group} team matches '{args.name}'.")
            for name, score in lookup.suggestions(args.name, args.age_group):
                print(f"  did you mean {name}? ({score:.2f})")
            return 1
        print(f"{args.name} -> {team.name} [{team.team_id}] power={team.power_score}")
        return 0

    if args.command == "simulate":
        conferences = available_conferences(ctx.teams, args.league, args.age_group)
        if args.conference and args.conference not in conferences:
            LOG.warning("Conference %r not among %s", args.conference, conferences)
        payload = compute_conference_predictions(
            ctx.teams,
            ctx.completed_games,
            ctx.upcoming_games,
            league=args.league,
            age_group=args.age_group,
            conference=args.conference,
            trials=args.trials or settings.get("simulation_trials"),
            seed=args.seed,
            table=ctx.table,
        )
        if not payload["teams"]:
            print("No teams found for that league/age group.")
            return 1
        print_simulation(payload)
        return 0

    if args.command == "performance":
        team = _find_ranked(ctx.teams, args.team, args.age_group)
        games = games_for_team(ctx.completed_games, team)
        ranked = rank_games_by_performance(games, team, ctx.teams, table=ctx.table)
        print(f"Game performance — {team.name}"); hr()
        for item in ranked:
            a = item.analysis
            print(
                f"{item.performance_rank:<4}{item.opponent.name[:30]:<30} {a.actual_score:>6} "
                f"(pred {a.predicted_score}) {a.performance_score:>5.0f}  {a.performance_label}"
            )
        print()
        return 0

    parser.error(f"Unknown command {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
