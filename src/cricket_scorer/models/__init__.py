"""Database models for the cricket scorer."""

from .base import Base
from .players import Player, BattingHand, BowlingHand, BowlingStyle
from .matches import Match, MatchStatus, MatchTeam, MatchTransfer, MatchSummary, TeamSide, TossDecision
from .innings import Innings, InningsStatus
from .ball_events import BallEvent, WicketType
from .player_stats import PlayerStats, StatContribution

# Counted fields shared by PlayerStats and StatContribution
STAT_FIELDS = (
    "matches",
    "innings",
    "runs",
    "balls_faced",
    "fours",
    "sixes",
    "wickets",
    "balls_bowled",
    "runs_conceded",
)

__all__ = [
    "Base",
    "Player",
    "BattingHand",
    "BowlingHand",
    "BowlingStyle",
    "Match",
    "MatchStatus",
    "MatchTeam",
    "MatchTransfer",
    "MatchSummary",
    "TeamSide",
    "TossDecision",
    "Innings",
    "InningsStatus",
    "BallEvent",
    "WicketType",
    "PlayerStats",
    "StatContribution",
    "STAT_FIELDS",
]
