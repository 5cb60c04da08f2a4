"""Tests for player rankings."""

from __future__ import annotations

from conftest import SCORER, make_ball
from cricket_scorer.database import session_scope
from cricket_scorer.models import WicketType
from cricket_scorer.stats import get_player_rankings


def score(engine, innings, players, plan):
    """plan: list of (batter index, runs) pairs, all bowled by bowler 0."""
    for batter, runs in plan:
        engine.record_ball(innings.id, make_ball(players, runs=runs, batter=batter), SCORER)


def test_runs_ranking_orders_descending(engine, innings, players, session_factory):
    score(engine, innings, players, [(0, 4), (1, 6), (1, 6), (2, 1)])
    with session_scope(session_factory) as session:
        rows = get_player_rankings(session, category="runs", pool_id="pool-1", limit=3)

    assert [row.player_id for row in rows] == [players["batters"][1], players["batters"][0], players["batters"][2]]
    assert [row.rank for row in rows] == [1, 2, 3]
    assert rows[0].player_name == "Bat_2"
    assert rows[0].runs == 12


def test_wickets_ranking(engine, innings, players, session_factory):
    engine.record_ball(innings.id, make_ball(players, bowler=1, is_wicket=True, wicket_type=WicketType.BOWLED), SCORER)
    engine.record_ball(innings.id, make_ball(players, bowler=1, is_wicket=True, wicket_type=WicketType.LBW), SCORER)
    engine.record_ball(innings.id, make_ball(players, bowler=0, is_wicket=True, wicket_type=WicketType.CAUGHT), SCORER)
    with session_scope(session_factory) as session:
        rows = get_player_rankings(session, category="wickets", limit=2)

    assert [(row.player_id, row.wickets) for row in rows] == [(players["bowlers"][1], 2), (players["bowlers"][0], 1)]


def test_ties_keep_player_order(players, session_factory):
    with session_scope(session_factory) as session:
        rows = get_player_rankings(session, category="runs", limit=5)
    assert [row.player_id for row in rows] == sorted(players["batters"] + players["bowlers"])[:5]


def test_unknown_category_falls_back_to_runs(engine, innings, players, session_factory):
    score(engine, innings, players, [(3, 2)])
    with session_scope(session_factory) as session:
        rows = get_player_rankings(session, category="catches", limit=1)
    assert rows[0].player_id == players["batters"][3]


def test_average_uses_innings_played(engine, innings, players, registry, session_factory):
    score(engine, innings, players, [(0, 4), (1, 6)])
    for _ in range(10):
        engine.record_ball(innings.id, make_ball(players, batter=2, is_wicket=True, wicket_type=WicketType.BOWLED), SCORER)
    with session_scope(session_factory) as session:
        rows = get_player_rankings(session, category="average", pool_id="pool-1", limit=2)

    assert [row.player_id for row in rows] == [players["batters"][1], players["batters"][0]]
    assert rows[0].batting_average == 6.0
    assert rows[0].innings == 1


def test_pool_filter_and_limit(registry, session_factory):
    registry.add_player("Elsewhere", pool_id="pool-9")
    with session_scope(session_factory) as session:
        assert [row.player_name for row in get_player_rankings(session, pool_id="pool-9")] == ["Elsewhere"]
        assert get_player_rankings(session, pool_id="pool-0") == []
