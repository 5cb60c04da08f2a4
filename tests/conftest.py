"""Shared test fixtures for cricket scorer tests."""

from __future__ import annotations

import pytest

from cricket_scorer.coordinator import MatchCoordinator
from cricket_scorer.database import create_tables, get_database_engine, get_session_factory
from cricket_scorer.models import TeamSide
from cricket_scorer.roster import PlayerRegistry
from cricket_scorer.schemas import BallEventCreate, MatchCreate
from cricket_scorer.scoring import ScoringEngine
from cricket_scorer.stats import PlayerStatsAggregator

SCORER = "scorer-1"


@pytest.fixture
def session_factory():
    engine = get_database_engine("sqlite://", echo=False)
    create_tables(engine)
    yield get_session_factory(engine)
    engine.dispose()


@pytest.fixture
def registry(session_factory) -> PlayerRegistry:
    return PlayerRegistry(session_factory)


@pytest.fixture
def coordinator(session_factory) -> MatchCoordinator:
    return MatchCoordinator(session_factory)


@pytest.fixture
def engine(session_factory) -> ScoringEngine:
    return ScoringEngine(session_factory, aggregator=PlayerStatsAggregator(credit_policy="roster"), max_wickets=10)


@pytest.fixture
def players(registry):
    """Eleven batters for team A and two bowlers for team B."""
    batters = [registry.add_player(f"Bat_{i}", pool_id="pool-1").id for i in range(1, 12)]
    bowlers = [registry.add_player(f"Bowl_{i}", pool_id="pool-1").id for i in range(1, 3)]
    return {"batters": batters, "bowlers": bowlers}


def make_match(coordinator, overs: int = 20, two_innings: bool = False, wide_no_ball_runs: bool = True):
    return coordinator.create_match(
        MatchCreate(
            pool_id="pool-1",
            created_by=SCORER,
            team_a_name="Thunder",
            team_b_name="Strikers",
            overs_per_innings=overs,
            two_innings=two_innings,
            wide_no_ball_runs=wide_no_ball_runs,
        )
    )


@pytest.fixture
def match(coordinator, players):
    match = make_match(coordinator)
    for player_id in players["batters"]:
        coordinator.add_player_to_team(match.id, player_id, TeamSide.A)
    for player_id in players["bowlers"]:
        coordinator.add_player_to_team(match.id, player_id, TeamSide.B)
    return match


@pytest.fixture
def innings(engine, match):
    return engine.start_innings(match.id, TeamSide.A)


def make_ball(players, runs: int = 0, batter: int = 0, bowler: int = 0, **flags) -> BallEventCreate:
    return BallEventCreate(
        batter_id=players["batters"][batter],
        bowler_id=players["bowlers"][bowler],
        runs_scored=runs,
        **flags,
    )
