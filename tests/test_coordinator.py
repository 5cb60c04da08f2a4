"""Tests for match setup, rosters, scorer handoff and the player registry."""

from __future__ import annotations

import pytest

from conftest import SCORER, make_ball, make_match
from cricket_scorer.exceptions import AuthorizationError, NotFoundError, ValidationError
from cricket_scorer.models import MatchStatus, TeamSide, TossDecision, WicketType
from cricket_scorer.schemas import MatchCreate


class TestMatchSetup:
    def test_creator_is_first_scorer(self, coordinator):
        match = make_match(coordinator, overs=5, two_innings=True)
        assert match.current_scorer_id == SCORER
        assert match.status == MatchStatus.ONGOING
        assert match.two_innings is True
        assert match.wide_no_ball_runs is True

    def test_team_names_must_differ(self):
        with pytest.raises(ValueError):
            MatchCreate(created_by=SCORER, team_a_name="Thunder", team_b_name="Thunder", overs_per_innings=20)

    def test_toss(self, coordinator):
        match = make_match(coordinator)
        coordinator.set_toss(match.id, TeamSide.B, TossDecision.FIELD)
        stored = coordinator.get_match(match.id)
        assert stored.toss_winner == TeamSide.B
        assert stored.toss_decision == TossDecision.FIELD

    def test_unknown_match(self, coordinator):
        with pytest.raises(NotFoundError):
            coordinator.get_match(404)

    def test_invalid_toss_choices(self, coordinator):
        match = make_match(coordinator)
        with pytest.raises(ValidationError):
            coordinator.set_toss(match.id, "C", TossDecision.BAT)
        with pytest.raises(ValidationError):
            coordinator.set_toss(match.id, TeamSide.A, "bowl")
        assert coordinator.get_match(match.id).toss_winner is None


class TestRoster:
    def test_team_in_batting_order(self, coordinator, players):
        match = make_match(coordinator)
        first, second, third = players["batters"][:3]
        m1 = coordinator.add_player_to_team(match.id, first, TeamSide.A)
        m2 = coordinator.add_player_to_team(match.id, second, TeamSide.A, is_captain=True)
        coordinator.add_player_to_team(match.id, third, TeamSide.A)
        coordinator.set_batting_order(m2.id, 1)
        coordinator.set_batting_order(m1.id, 2)

        team = coordinator.get_team(match.id, TeamSide.A)
        assert [m.player_id for m in team] == [second, first, third]
        assert team[0].is_captain is True
        assert coordinator.get_team(match.id, TeamSide.B) == []

    def test_remove_member(self, coordinator, players):
        match = make_match(coordinator)
        member = coordinator.add_player_to_team(match.id, players["batters"][0], TeamSide.A)
        coordinator.remove_player_from_team(member.id)
        assert coordinator.get_team(match.id, TeamSide.A) == []
        with pytest.raises(NotFoundError):
            coordinator.remove_player_from_team(member.id)

    def test_unknown_player(self, coordinator):
        match = make_match(coordinator)
        with pytest.raises(NotFoundError):
            coordinator.add_player_to_team(match.id, 999, TeamSide.A)

    def test_invalid_side(self, coordinator, players):
        match = make_match(coordinator)
        with pytest.raises(ValidationError):
            coordinator.add_player_to_team(match.id, players["batters"][0], "C")
        with pytest.raises(ValidationError):
            coordinator.get_team(match.id, "C")

    def test_batting_order_starts_at_one(self, coordinator, players):
        match = make_match(coordinator)
        member = coordinator.add_player_to_team(match.id, players["batters"][0], TeamSide.A)
        with pytest.raises(ValidationError):
            coordinator.set_batting_order(member.id, 0)


class TestTransfers:
    def test_request_does_not_move_scoring_rights(self, coordinator, engine, innings, match, players):
        coordinator.transfer_match(match.id, "scorer-2")
        assert coordinator.get_match(match.id).current_scorer_id == SCORER

        with pytest.raises(AuthorizationError):
            engine.record_ball(innings.id, make_ball(players), "scorer-2")
        engine.record_ball(innings.id, make_ball(players), SCORER)

    def test_accept_hands_over(self, coordinator, engine, innings, match, players):
        transfer = coordinator.transfer_match(match.id, "scorer-2")
        accepted = coordinator.accept_transfer(transfer.id, caller_id="scorer-2")
        assert accepted.accepted is True
        assert accepted.responded_at is not None
        assert coordinator.get_match(match.id).current_scorer_id == "scorer-2"

        with pytest.raises(AuthorizationError):
            engine.record_ball(innings.id, make_ball(players), SCORER)
        engine.record_ball(innings.id, make_ball(players), "scorer-2")

    def test_accept_supersedes_other_requests(self, coordinator, match):
        first = coordinator.transfer_match(match.id, "scorer-2")
        second = coordinator.transfer_match(match.id, "scorer-3")
        assert [t.id for t in coordinator.pending_transfers(match.id)] == [first.id, second.id]

        coordinator.accept_transfer(second.id)
        assert coordinator.pending_transfers(match.id) == []
        with pytest.raises(ValidationError):
            coordinator.accept_transfer(first.id)
        assert coordinator.get_match(match.id).current_scorer_id == "scorer-3"

    def test_only_addressee_may_accept(self, coordinator, match):
        transfer = coordinator.transfer_match(match.id, "scorer-2")
        with pytest.raises(AuthorizationError):
            coordinator.accept_transfer(transfer.id, caller_id="scorer-3")
        assert coordinator.get_match(match.id).current_scorer_id == SCORER

    def test_accepting_twice(self, coordinator, match):
        transfer = coordinator.transfer_match(match.id, "scorer-2")
        coordinator.accept_transfer(transfer.id)
        with pytest.raises(ValidationError):
            coordinator.accept_transfer(transfer.id)

    def test_transfer_to_current_scorer(self, coordinator, match):
        with pytest.raises(ValidationError):
            coordinator.transfer_match(match.id, SCORER)

    def test_handoff_chain(self, coordinator, match):
        coordinator.accept_transfer(coordinator.transfer_match(match.id, "scorer-2").id)
        onward = coordinator.transfer_match(match.id, "scorer-3")
        assert onward.from_user_id == "scorer-2"
        coordinator.accept_transfer(onward.id, caller_id="scorer-3")
        assert coordinator.get_match(match.id).current_scorer_id == "scorer-3"

    def test_unknown_transfer(self, coordinator):
        with pytest.raises(NotFoundError):
            coordinator.accept_transfer(12345)


class TestLifecycle:
    def test_complete_writes_summary(self, coordinator, engine, innings, match, players):
        for runs in (1, 4, 0):
            engine.record_ball(innings.id, make_ball(players, runs=runs), SCORER)
        engine.record_ball(innings.id, make_ball(players, is_wide=True), SCORER)

        summary = coordinator.complete_match(match.id)
        assert summary.total_innings == 1
        assert summary.total_balls == 4
        assert summary.innings_summary[0].runs == 6
        assert summary.innings_summary[0].overs == 0.5
        assert coordinator.get_match(match.id).status == MatchStatus.COMPLETED
        assert coordinator.get_summary(match.id) == summary

    def test_no_balls_after_completion(self, coordinator, engine, innings, match, players):
        coordinator.complete_match(match.id)
        with pytest.raises(ValidationError):
            engine.record_ball(innings.id, make_ball(players), SCORER)
        with pytest.raises(ValidationError):
            engine.start_innings(match.id, TeamSide.B)
        assert engine.get_ledger(innings.id) == []

    def test_abandon(self, coordinator, match):
        coordinator.abandon_match(match.id)
        assert coordinator.get_match(match.id).status == MatchStatus.ABANDONED
        with pytest.raises(ValidationError):
            coordinator.complete_match(match.id)
        with pytest.raises(NotFoundError):
            coordinator.get_summary(match.id)


class TestRegistry:
    def test_new_player_has_zeroed_stats(self, registry):
        player = registry.add_player("  Asha  ", pool_id="pool-1")
        assert player.name == "Asha"
        stats = registry.get_stats(player.id)
        assert (stats.matches, stats.runs, stats.wickets, stats.economy) == (0, 0, 0, 0.0)

    def test_empty_name(self, registry):
        with pytest.raises(ValidationError):
            registry.add_player("   ")

    def test_remove_unused_player(self, registry):
        player = registry.add_player("Bench")
        registry.remove_player(player.id)
        with pytest.raises(NotFoundError):
            registry.get_stats(player.id)
        with pytest.raises(NotFoundError):
            registry.remove_player(player.id)

    def test_cannot_remove_player_with_recorded_balls(self, registry, engine, innings, players):
        engine.record_ball(innings.id, make_ball(players, is_wicket=True, wicket_type=WicketType.BOWLED), SCORER)
        with pytest.raises(ValidationError):
            registry.remove_player(players["bowlers"][0])

    def test_cannot_remove_batter_run_out_off_strike(self, registry, engine, innings, players):
        non_striker = players["batters"][1]
        ball = make_ball(players, is_wicket=True, wicket_type=WicketType.RUN_OUT, run_out_batter_id=non_striker)
        engine.record_ball(innings.id, ball, SCORER)
        with pytest.raises(ValidationError):
            registry.remove_player(non_striker)
        assert registry.get_stats(non_striker).player_id == non_striker

    def test_link_and_list(self, registry):
        player = registry.add_player("Ravi", pool_id="pool-2")
        registry.link_player_to_user(player.id, "user-7")
        listed = registry.list_players(pool_id="pool-2")
        assert [p.name for p in listed] == ["Ravi"]
        assert listed[0].linked_user_id == "user-7"
