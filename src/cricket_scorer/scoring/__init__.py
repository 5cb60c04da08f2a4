"""Innings state machine and scoring engine."""

from .engine import ScoringEngine
from .events import SnapshotBus, Subscription
from .state_machine import InningsTotals, apply_ball, replay, evaluate_status

__all__ = [
    "ScoringEngine",
    "SnapshotBus",
    "Subscription",
    "InningsTotals",
    "apply_ball",
    "replay",
    "evaluate_status",
]
