"""Player statistics aggregation and rankings."""

from .aggregator import PlayerStatsAggregator, ball_deltas
from .rankings import get_player_rankings

__all__ = ["PlayerStatsAggregator", "ball_deltas", "get_player_rankings"]
