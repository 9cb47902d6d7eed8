from __future__ import annotations

import pytest

from main import main


@pytest.fixture
def cli_args(data_files):
    teams_path, games_path = data_files
    return ["--teams", str(teams_path), "--games", str(games_path)]


def test_predict_command(cli_args, capsys):
    assert main(cli_args + ["predict", "Legends FC", "Beach FC", "--age-group", "G12"]) == 0
    out = capsys.readouterr().out
    assert "Legends FC vs Beach FC" in out
    assert "59%" in out


def test_resolve_command(cli_args, capsys):
    assert main(cli_args + ["resolve", "Slammers FC 12G", "--age-group", "G12"]) == 0
    assert "slammers-g12" in capsys.readouterr().out
    assert main(cli_args + ["resolve", "Nomads SC", "--age-group", "G12"]) == 1


def test_simulate_command(cli_args, capsys):
    code = main(
        cli_args
        + ["simulate", "--league", "ECNL", "--age-group", "G12", "--conference", "Southwest", "--trials", "50", "--seed", "3"]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "50 trials" in out
    assert "Albion SC San Diego" in out
    assert main(cli_args + ["simulate", "--league", "GA", "--age-group", "G12", "--trials", "5"]) == 1


def test_performance_command(cli_args, capsys):
    assert main(cli_args + ["performance", "Legends FC", "--age-group", "G12"]) == 0
    out = capsys.readouterr().out
    assert "Slammers FC" in out
