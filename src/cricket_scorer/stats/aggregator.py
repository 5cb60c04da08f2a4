"""Incremental player statistics.

Each committed ball, and each innings reaching a terminal status, is
turned into per-player deltas. The deltas are stored as contribution
rows under a source key before being added to ``PlayerStats``, which
gives two guarantees:

- applying the same source twice is a no-op, so a redelivered trigger
  does not double-count;
- undoing a source subtracts exactly what it added.
"""

from collections import defaultdict
from typing import Dict, Iterable, Literal

from loguru import logger
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from ..config import settings
from ..models import BallEvent, Innings, MatchTeam, PlayerStats, StatContribution, STAT_FIELDS

Deltas = Dict[int, Dict[str, int]]


def ball_source_key(event: BallEvent) -> str:
    return f"ball:{event.id}"


def innings_source_key(innings: Innings) -> str:
    return f"innings:{innings.id}"


def ball_deltas(event: BallEvent) -> Deltas:
    """Per-player stat deltas for one ball."""
    deltas: Deltas = defaultdict(lambda: dict.fromkeys(STAT_FIELDS, 0))
    legal = event.is_legal_delivery
    
    batter = deltas[event.batter_id]
    batter["runs"] += event.runs_scored
    batter["balls_faced"] += 1 if legal else 0
    batter["fours"] += 1 if event.runs_scored == 4 else 0
    batter["sixes"] += 1 if event.runs_scored == 6 else 0
    
    bowler = deltas[event.bowler_id]
    bowler["runs_conceded"] += event.total_runs
    bowler["balls_bowled"] += 1 if legal else 0
    if event.is_wicket and event.wicket_type is not None and event.wicket_type.credits_to_bowler:
        bowler["wickets"] += 1
    
    return dict(deltas)


class PlayerStatsAggregator:
    """Applies and reverses stat contributions inside the caller's transaction."""
    
    def __init__(self, credit_policy: Literal["roster", "batted"] | None = None):
        self.credit_policy = credit_policy or settings.scoring.innings_credit_policy
    
    def apply_ball(self, session: Session, event: BallEvent) -> bool:
        """Credit batter and bowler for a committed ball. Returns False if already applied."""
        return self._apply(session, ball_source_key(event), ball_deltas(event))
    
    def revert_ball(self, session: Session, event: BallEvent) -> bool:
        return self._revert(session, ball_source_key(event))
    
    def apply_innings_completion(self, session: Session, innings: Innings) -> bool:
        """Credit a match and an innings to the batting side when an innings ends."""
        player_ids = self._credited_players(session, innings)
        deltas = {
            player_id: dict(dict.fromkeys(STAT_FIELDS, 0), matches=1, innings=1)
            for player_id in player_ids
        }
        return self._apply(session, innings_source_key(innings), deltas)
    
    def revert_innings_completion(self, session: Session, innings: Innings) -> bool:
        return self._revert(session, innings_source_key(innings))
    
    def _credited_players(self, session: Session, innings: Innings) -> Iterable[int]:
        roster = session.execute(
            select(MatchTeam.player_id).where(
                (MatchTeam.match_id == innings.match_id) & (MatchTeam.team == innings.team)
            )
        ).scalars().all()
        if self.credit_policy == "roster":
            return sorted(set(roster))
        
        faced = set(
            session.execute(
                select(BallEvent.batter_id).where(
                    (BallEvent.innings_id == innings.id)
                    & (BallEvent.is_wide.is_(False))
                    & (BallEvent.is_no_ball.is_(False))
                )
            ).scalars().all()
        )
        return sorted(set(roster) & faced)
    
    def _apply(self, session: Session, source_key: str, deltas: Deltas) -> bool:
        already = session.execute(
            select(StatContribution.id).where(StatContribution.source_key == source_key).limit(1)
        ).first()
        if already is not None:
            logger.debug(f"Stat contribution {source_key} already applied, skipping")
            return False
        
        for player_id, delta in deltas.items():
            stats = self._stats_for(session, player_id)
            for field in STAT_FIELDS:
                setattr(stats, field, getattr(stats, field) + delta[field])
            session.add(StatContribution(source_key=source_key, player_id=player_id, **delta))
        
        session.flush()
        logger.debug(f"Applied stat contribution {source_key} to {len(deltas)} players")
        return True
    
    def _revert(self, session: Session, source_key: str) -> bool:
        contributions = session.execute(
            select(StatContribution).where(StatContribution.source_key == source_key)
        ).scalars().all()
        if not contributions:
            logger.debug(f"No stat contribution {source_key} to revert")
            return False
        
        for contribution in contributions:
            stats = self._stats_for(session, contribution.player_id)
            for field in STAT_FIELDS:
                setattr(stats, field, getattr(stats, field) - getattr(contribution, field))
        
        session.execute(delete(StatContribution).where(StatContribution.source_key == source_key))
        session.flush()
        logger.debug(f"Reverted stat contribution {source_key} from {len(contributions)} players")
        return True
    
    @staticmethod
    def _stats_for(session: Session, player_id: int) -> PlayerStats:
        stats = session.execute(
            select(PlayerStats).where(PlayerStats.player_id == player_id)
        ).scalar_one_or_none()
        if stats is None:
            stats = PlayerStats(player_id=player_id, **dict.fromkeys(STAT_FIELDS, 0))
            session.add(stats)
        return stats
