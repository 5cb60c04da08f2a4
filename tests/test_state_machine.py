"""Tests for the pure innings state machine."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from cricket_scorer.models import InningsStatus
from cricket_scorer.scoring import state_machine
from cricket_scorer.scoring.state_machine import InningsTotals, apply_ball, evaluate_status, replay


def delivery(runs: int = 0, wide: bool = False, no_ball: bool = False, wicket: bool = False):
    return SimpleNamespace(runs_scored=runs, is_wide=wide, is_no_ball=no_ball, is_wicket=wicket)


def run_innings(deliveries, overs: int = 20, target=None, wide_no_ball_runs: bool = True):
    """Apply deliveries one by one; returns (outcomes, stored events)."""
    totals = InningsTotals()
    outcomes, events = [], []
    for ball in deliveries:
        outcome = apply_ball(totals, ball, overs, target=target, wide_no_ball_runs=wide_no_ball_runs)
        outcomes.append(outcome)
        events.append(SimpleNamespace(**vars(ball), extra_runs=outcome.extra_runs))
        totals = outcome.totals
    return outcomes, events


class TestLegalDeliveryCounting:
    @pytest.mark.parametrize("n", [0, 1, 5, 6, 7, 11, 12, 13, 35, 36, 59])
    def test_pointer_and_overs_after_n_legal_balls(self, n: int):
        outcomes, _ = run_innings([delivery(1) for _ in range(n)], overs=50)
        totals = outcomes[-1].totals if outcomes else InningsTotals()

        assert (totals.current_over, totals.current_ball) == (n // 6, n % 6)
        assert totals.overs_faced == pytest.approx(n // 6 + (n % 6) / 6)

    def test_illegal_deliveries_do_not_move_pointer(self):
        outcomes, _ = run_innings([delivery(1), delivery(0, wide=True), delivery(2, no_ball=True)])

        assert [(o.totals.current_over, o.totals.current_ball) for o in outcomes] == [(0, 1), (0, 1), (0, 1)]
        assert outcomes[-1].totals.balls_recorded == 3

    def test_ball_completing_over_is_stamped_in_its_own_over(self):
        outcomes, _ = run_innings([delivery(0) for _ in range(6)])
        sixth = outcomes[-1]

        assert (sixth.over_number, sixth.ball_number) == (0, 5)
        assert (sixth.totals.current_over, sixth.totals.current_ball) == (1, 0)

    def test_illegal_delivery_stamped_with_current_slot(self):
        outcomes, _ = run_innings([delivery(0) for _ in range(6)] + [delivery(0, wide=True)])
        wide = outcomes[-1]

        assert (wide.over_number, wide.ball_number) == (1, 0)
        assert (wide.totals.current_over, wide.totals.current_ball) == (1, 0)


class TestRuns:
    @pytest.mark.parametrize(
        "runs, wide, no_ball, expected",
        [(0, False, False, 0), (4, False, False, 4), (0, True, False, 1), (2, True, False, 3), (6, False, True, 7)],
    )
    def test_total_runs(self, runs, wide, no_ball, expected):
        assert state_machine.total_runs(runs, wide, no_ball) == expected

    def test_extra_not_credited_when_match_disables_it(self):
        assert state_machine.total_runs(0, True, False, wide_no_ball_runs=False) == 0
        outcomes, _ = run_innings([delivery(1, no_ball=True)], wide_no_ball_runs=False)
        assert outcomes[0].totals.runs == 1
        assert outcomes[0].extra_runs == 0

    def test_wickets_accumulate(self):
        outcomes, _ = run_innings([delivery(wicket=True), delivery(), delivery(wicket=True)])
        assert outcomes[-1].totals.wickets == 2


class TestCompletion:
    def test_all_out_beats_overs_complete(self):
        totals = InningsTotals(runs=80, wickets=10, current_over=20, current_ball=0)
        assert evaluate_status(totals, overs_per_innings=20, target=50) == InningsStatus.ALL_OUT

    def test_overs_complete_beats_target(self):
        totals = InningsTotals(runs=80, wickets=3, current_over=20, current_ball=0)
        assert evaluate_status(totals, overs_per_innings=20, target=50) == InningsStatus.COMPLETED

    def test_target_chased(self):
        totals = InningsTotals(runs=50, wickets=3, current_over=9, current_ball=2)
        assert evaluate_status(totals, overs_per_innings=20, target=50) == InningsStatus.TARGET_CHASED

    def test_in_progress_without_target(self):
        totals = InningsTotals(runs=500, wickets=9, current_over=19, current_ball=5)
        assert evaluate_status(totals, overs_per_innings=20) == InningsStatus.IN_PROGRESS

    def test_custom_wicket_limit(self):
        totals = InningsTotals(wickets=7)
        assert evaluate_status(totals, overs_per_innings=20, max_wickets=7) == InningsStatus.ALL_OUT

    def test_last_ball_of_innings_completes(self):
        outcomes, _ = run_innings([delivery(1) for _ in range(12)], overs=2)
        assert outcomes[10].status == InningsStatus.IN_PROGRESS
        assert outcomes[11].status == InningsStatus.COMPLETED


class TestReplay:
    def test_replay_matches_incremental_totals(self):
        balls = [
            delivery(1), delivery(4), delivery(0, wide=True), delivery(6), delivery(wicket=True),
            delivery(2, no_ball=True), delivery(0), delivery(3), delivery(1, wide=True), delivery(0), delivery(1),
        ]
        outcomes, events = run_innings(balls)

        for i in range(len(events) + 1):
            expected = outcomes[i - 1].totals if i else InningsTotals()
            assert replay(events[:i]) == expected

    def test_replay_uses_frozen_extra(self):
        _, events = run_innings([delivery(0, wide=True)], wide_no_ball_runs=False)
        assert replay(events).runs == 0


@pytest.mark.parametrize("over, ball, expected", [(0, 0, "0"), (8, 2, "8.2"), (20, 0, "20")])
def test_display_overs(over, ball, expected):
    assert state_machine.display_overs(over, ball) == expected
