"""Innings state machine.

Pure derivation of innings counters from ball events. Nothing here
touches the database; the scoring engine feeds it the current pointer
or the remaining ledger and persists whatever comes back.

Stamping convention: a delivery is stamped with the slot it was bowled
in, i.e. the pointer *before* the ball. The sixth legal ball of over N
is stored as (N, 5) and leaves the pointer at (N + 1, 0). Illegal
deliveries are stamped with the current slot and do not move it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from ..models import InningsStatus

BALLS_PER_OVER = 6


class Delivery(Protocol):
    """Anything carrying the fields the derivation reads."""

    runs_scored: int
    is_wide: bool
    is_no_ball: bool
    is_wicket: bool


@dataclass(frozen=True)
class InningsTotals:
    """Counters derived for an innings at one point in its ledger."""

    runs: int = 0
    wickets: int = 0
    current_over: int = 0
    current_ball: int = 0
    balls_recorded: int = 0

    @property
    def legal_balls(self) -> int:
        return self.current_over * BALLS_PER_OVER + self.current_ball

    @property
    def overs_faced(self) -> float:
        return overs_from_balls(self.legal_balls)


@dataclass(frozen=True)
class BallOutcome:
    """Result of applying one delivery to the running totals."""

    over_number: int
    ball_number: int
    extra_runs: int
    totals: InningsTotals
    status: InningsStatus


def is_legal(is_wide: bool, is_no_ball: bool) -> bool:
    """A delivery is legal iff it is neither a wide nor a no-ball."""
    return not (is_wide or is_no_ball)


def extra_runs_for(is_wide: bool, is_no_ball: bool, wide_no_ball_runs: bool = True) -> int:
    """The automatic run for an illegal delivery, if the match credits it."""
    if wide_no_ball_runs and not is_legal(is_wide, is_no_ball):
        return 1
    return 0


def total_runs(runs_scored: int, is_wide: bool, is_no_ball: bool, wide_no_ball_runs: bool = True) -> int:
    return runs_scored + extra_runs_for(is_wide, is_no_ball, wide_no_ball_runs)


def overs_from_balls(legal_balls: int) -> float:
    """Fractional overs: completed overs plus legal balls of the current over / 6."""
    overs, balls = divmod(legal_balls, BALLS_PER_OVER)
    return overs + balls / BALLS_PER_OVER


def display_overs(current_over: int, current_ball: int) -> str:
    """Cricket notation, whole overs and balls joined by a literal dot."""
    if current_ball:
        return f"{current_over}.{current_ball}"
    return str(current_over)


def advance_pointer(current_over: int, current_ball: int, legal: bool) -> tuple[int, int]:
    """Move the (over, ball) pointer past one delivery, rolling over at six."""
    if not legal:
        return current_over, current_ball
    current_ball += 1
    if current_ball == BALLS_PER_OVER:
        return current_over + 1, 0
    return current_over, current_ball


def evaluate_status(
    totals: InningsTotals,
    overs_per_innings: int,
    target: Optional[int] = None,
    max_wickets: int = 10,
) -> InningsStatus:
    """Completion check in priority order: all out, overs done, target reached."""
    if totals.wickets >= max_wickets:
        return InningsStatus.ALL_OUT
    if totals.legal_balls >= overs_per_innings * BALLS_PER_OVER:
        return InningsStatus.COMPLETED
    if target is not None and totals.runs >= target:
        return InningsStatus.TARGET_CHASED
    return InningsStatus.IN_PROGRESS


def apply_ball(
    totals: InningsTotals,
    ball: Delivery,
    overs_per_innings: int,
    target: Optional[int] = None,
    wide_no_ball_runs: bool = True,
    max_wickets: int = 10,
) -> BallOutcome:
    """Derive the stamp, new totals and status for one proposed delivery."""
    legal = is_legal(ball.is_wide, ball.is_no_ball)
    extra = extra_runs_for(ball.is_wide, ball.is_no_ball, wide_no_ball_runs)
    current_over, current_ball = advance_pointer(totals.current_over, totals.current_ball, legal)
    new_totals = InningsTotals(
        runs=totals.runs + ball.runs_scored + extra,
        wickets=totals.wickets + (1 if ball.is_wicket else 0),
        current_over=current_over,
        current_ball=current_ball,
        balls_recorded=totals.balls_recorded + 1,
    )
    return BallOutcome(
        over_number=totals.current_over,
        ball_number=totals.current_ball,
        extra_runs=extra,
        totals=new_totals,
        status=evaluate_status(new_totals, overs_per_innings, target, max_wickets),
    )


def replay(events: Iterable) -> InningsTotals:
    """Recompute counters from committed ledger events.

    Uses the extra run frozen on each event, so the result does not depend
    on the match settings at replay time.
    """
    runs = wickets = legal_balls = recorded = 0
    for event in events:
        runs += event.runs_scored + event.extra_runs
        if event.is_wicket:
            wickets += 1
        if is_legal(event.is_wide, event.is_no_ball):
            legal_balls += 1
        recorded += 1
    current_over, current_ball = divmod(legal_balls, BALLS_PER_OVER)
    return InningsTotals(
        runs=runs,
        wickets=wickets,
        current_over=current_over,
        current_ball=current_ball,
        balls_recorded=recorded,
    )


def totals_of(innings) -> InningsTotals:
    """Read the stored counters of an innings record."""
    return InningsTotals(
        runs=innings.runs,
        wickets=innings.wickets,
        current_over=innings.current_over,
        current_ball=innings.current_ball,
        balls_recorded=innings.last_ball_sequence,
    )


def store_totals(innings, totals: InningsTotals) -> None:
    """Write derived counters back onto an innings record."""
    innings.runs = totals.runs
    innings.wickets = totals.wickets
    innings.current_over = totals.current_over
    innings.current_ball = totals.current_ball
    innings.overs_faced = totals.overs_faced
    innings.last_ball_sequence = totals.balls_recorded
