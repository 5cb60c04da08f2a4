"""Pydantic schemas for data validation."""

from .ball_events import BallEventCreate, BallEventResponse
from .innings import InningsResponse, InningsSnapshot
from .matches import MatchCreate, MatchResponse, MatchTransferResponse, MatchSummaryResponse, InningsSummaryEntry
from .player_stats import PlayerStatsResponse, PlayerRanking

__all__ = [
    "BallEventCreate",
    "BallEventResponse",
    "InningsResponse",
    "InningsSnapshot",
    "MatchCreate",
    "MatchResponse",
    "MatchTransferResponse",
    "MatchSummaryResponse",
    "InningsSummaryEntry",
    "PlayerStatsResponse",
    "PlayerRanking",
]
