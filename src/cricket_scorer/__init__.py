"""Cricket Scorer - ball-by-ball scoring engine and player statistics."""

from .config import settings
from .database import get_database_engine, get_session_factory, session_scope
from .coordinator import MatchCoordinator
from .roster import PlayerRegistry
from .scoring import ScoringEngine
from .stats import PlayerStatsAggregator, get_player_rankings

__all__ = [
    "settings",
    "get_database_engine",
    "get_session_factory",
    "session_scope",
    "MatchCoordinator",
    "PlayerRegistry",
    "ScoringEngine",
    "PlayerStatsAggregator",
    "get_player_rankings",
]
