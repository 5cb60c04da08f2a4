"""Tests for the command line interface."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from cricket_scorer.cli.main import app

runner = CliRunner()


@pytest.fixture
def cli(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'scorer.db'}"

    def invoke(*args):
        return runner.invoke(app, ["--db-url", db_url, *args], env={"SCORER_USER": "scorer-1"})

    result = invoke("setup-db")
    assert result.exit_code == 0, result.output
    return invoke


def test_score_an_over(cli):
    assert cli("add-player", "Asha").exit_code == 0
    assert cli("add-player", "Ravi").exit_code == 0
    assert cli("add-player", "Meera").exit_code == 0
    result = cli("new-match", "--team-a", "Thunder", "--team-b", "Strikers", "--overs", "2")
    assert result.exit_code == 0, result.output
    assert "Match 1" in result.output

    assert cli("start-innings", "1", "A").exit_code == 0
    assert cli("set-batters", "1", "1", "2").exit_code == 0
    assert cli("set-bowler", "1", "3").exit_code == 0

    for _ in range(6):
        assert cli("ball", "1", "-r", "1").exit_code == 0
    result = cli("ball", "1", "--wide")
    assert result.exit_code == 0, result.output
    assert "Ball #7 (1.1): Wd" in result.output
    assert "7/0" in result.output

    result = cli("undo", "1")
    assert result.exit_code == 0, result.output
    assert "Removed ball #7" in result.output

    result = cli("scorecard", "1")
    assert result.exit_code == 0
    assert "6/0" in result.output


def test_wrong_scorer_is_refused(cli):
    cli("add-player", "Asha")
    cli("add-player", "Meera")
    cli("new-match", "--team-a", "Thunder", "--team-b", "Strikers", "--overs", "5")
    cli("start-innings", "1", "A")

    result = cli("ball", "1", "--batter", "1", "--bowler", "2", "--as", "intruder")
    assert result.exit_code == 1
    assert "not the current scorer" in result.output


def test_transfer_and_complete(cli):
    cli("new-match", "--team-a", "Thunder", "--team-b", "Strikers", "--overs", "5")
    result = cli("transfer", "1", "scorer-2")
    assert result.exit_code == 0, result.output

    result = cli("accept-transfer", "1", "--as", "scorer-2")
    assert result.exit_code == 0, result.output
    assert "scorer-2 now scores match 1" in result.output

    result = cli("complete-match", "1")
    assert result.exit_code == 0, result.output
    assert "Match 1 completed" in result.output

    assert cli("complete-match", "1").exit_code == 1


def test_rankings_table(cli):
    cli("add-player", "Asha")
    result = cli("rankings", "--category", "wickets")
    assert result.exit_code == 0
    assert "Asha" in result.output
