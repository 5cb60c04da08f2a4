"""Scoring engine: the write side of ball-by-ball scoring.

Every operation runs in a single transaction. A ball is appended and the
innings counters updated together, or neither is. Writers are serialized
in-process, and the ``version`` column on ``Innings`` plus the unique
``(innings_id, ball_sequence)`` constraint catch anything that slips past
(another process, a second engine), turning it into ``ConsistencyError``.
"""

import threading
from contextlib import contextmanager
from typing import Generator, List, Optional

from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.orm import Session, sessionmaker

from ..config import settings
from ..database import session_scope
from ..exceptions import (
    AuthorizationError,
    ConsistencyError,
    NotFoundError,
    ValidationError,
    parse_choice,
    translate_store_errors,
)
from ..models import BallEvent, Innings, InningsStatus, Match, Player, TeamSide
from ..schemas import BallEventCreate, InningsSnapshot
from ..stats.aggregator import PlayerStatsAggregator
from . import state_machine
from .events import SnapshotBus, SnapshotCallback, Subscription


class ScoringEngine:
    """Validates proposed events against innings state and commits them."""
    
    def __init__(
        self,
        session_factory: sessionmaker,
        aggregator: Optional[PlayerStatsAggregator] = None,
        bus: Optional[SnapshotBus] = None,
        max_wickets: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.aggregator = aggregator or PlayerStatsAggregator()
        self.bus = bus or SnapshotBus()
        self.max_wickets = max_wickets or settings.scoring.max_wickets
        self._write_lock = threading.RLock()
    
    @contextmanager
    def _transaction(self) -> Generator[Session, None, None]:
        with self._write_lock, translate_store_errors(), session_scope(self.session_factory) as session:
            yield session
    
    # Write operations
    
    def start_innings(self, match_id: int, batting_team: TeamSide, target: Optional[int] = None) -> Innings:
        """Open a new innings for ``batting_team``; only one may be in progress per match."""
        batting_team = parse_choice(TeamSide, batting_team, "batting team")
        if target is not None and target < 1:
            raise ValidationError(f"Target must be at least 1 run, got {target}")
        with self._transaction() as session:
            match = self._get_match(session, match_id)
            if not match.is_ongoing:
                raise ValidationError(f"Match {match_id} is {match.status.value}, cannot start an innings")
            
            in_progress = session.execute(
                select(Innings.id).where(
                    (Innings.match_id == match_id) & (Innings.status == InningsStatus.IN_PROGRESS)
                )
            ).first()
            if in_progress is not None:
                raise ValidationError(f"Innings {in_progress[0]} of match {match_id} is already in progress")
            
            existing = session.execute(
                select(func.count(Innings.id)).where(Innings.match_id == match_id)
            ).scalar_one()
            max_innings = 4 if match.two_innings else 2
            if existing >= max_innings:
                raise ValidationError(f"Match {match_id} already has all {max_innings} innings")
            
            innings = Innings(
                match_id=match_id,
                team=batting_team,
                innings_number=existing + 1,
                status=InningsStatus.IN_PROGRESS,
                target=target,
                runs=0,
                wickets=0,
                overs_faced=0.0,
                current_over=0,
                current_ball=0,
                last_ball_sequence=0,
            )
            session.add(innings)
            session.flush()
            snapshot = InningsSnapshot.build(innings, [])
        
        logger.info(f"Started innings {innings.innings_number} for team {batting_team.value} in match {match_id}")
        self.bus.publish(snapshot)
        return innings
    
    def record_ball(
        self,
        innings_id: int,
        ball: BallEventCreate,
        caller_id: str,
        expected_sequence: Optional[int] = None,
    ) -> BallEvent:
        """Append one delivery and update the innings counters atomically.
        
        ``expected_sequence`` lets a retrying caller fence the append: if the
        ledger has moved on since the caller last looked, nothing is written.
        """
        with self._transaction() as session:
            innings = self._get_innings(session, innings_id)
            match = self._get_match(session, innings.match_id)
            self._authorize(match, caller_id)
            if not match.is_ongoing:
                raise ValidationError(f"Match {match.id} is {match.status.value}")
            if innings.status != InningsStatus.IN_PROGRESS:
                raise ValidationError(f"Innings {innings_id} is {innings.status.value}, no further balls accepted")
            
            self._require_players(session, ball.batter_id, ball.bowler_id, ball.run_out_batter_id)
            
            ledger_length = self._ledger_length(session, innings_id)
            if ledger_length != innings.last_ball_sequence:
                raise ConsistencyError(
                    f"Innings {innings_id} ledger has {ledger_length} balls but counters record {innings.last_ball_sequence}"
                )
            sequence = ledger_length + 1
            if expected_sequence is not None and expected_sequence != sequence:
                raise ConsistencyError(
                    f"Expected to append ball {expected_sequence} to innings {innings_id}, next is {sequence}"
                )
            
            outcome = state_machine.apply_ball(
                state_machine.totals_of(innings),
                ball,
                overs_per_innings=match.overs_per_innings,
                target=innings.target,
                wide_no_ball_runs=match.wide_no_ball_runs,
                max_wickets=self.max_wickets,
            )
            
            event = BallEvent(
                innings_id=innings_id,
                ball_sequence=sequence,
                over_number=outcome.over_number,
                ball_number=outcome.ball_number,
                batter_id=ball.batter_id,
                bowler_id=ball.bowler_id,
                runs_scored=ball.runs_scored,
                extra_runs=outcome.extra_runs,
                is_wide=ball.is_wide,
                is_no_ball=ball.is_no_ball,
                is_wicket=ball.is_wicket,
                wicket_type=ball.wicket_type,
                run_out_batter_id=ball.run_out_batter_id,
                grant_without_ball=ball.grant_without_ball,
                recorded_by=caller_id,
            )
            session.add(event)
            state_machine.store_totals(innings, outcome.totals)
            innings.status = outcome.status
            session.flush()
            
            self.aggregator.apply_ball(session, event)
            if outcome.status.is_terminal:
                self.aggregator.apply_innings_completion(session, innings)
                logger.info(f"Innings {innings_id} ended: {outcome.status.value} at {innings.display_score} ({innings.display_overs} ov)")
            
            snapshot = InningsSnapshot.build(innings, self._ledger(session, innings_id))
        
        logger.debug(f"Recorded ball #{event.ball_sequence} ({event.label} {event.display_text}) in innings {innings_id}")
        self.bus.publish(snapshot)
        return event
    
    def undo_last_ball(self, innings_id: int, caller_id: str) -> BallEvent:
        """Remove the highest-sequence ball and recompute the counters from what remains."""
        with self._transaction() as session:
            innings = self._get_innings(session, innings_id)
            match = self._get_match(session, innings.match_id)
            self._authorize(match, caller_id)
            if not match.is_ongoing:
                raise ValidationError(f"Match {match.id} is {match.status.value}")
            
            # Only the latest innings of a match can be undone; a later one may be chasing its total
            later = session.execute(
                select(Innings.id, Innings.innings_number).where(
                    (Innings.match_id == innings.match_id)
                    & (Innings.innings_number > innings.innings_number)
                )
            ).first()
            if later is not None:
                raise ValidationError(
                    f"Innings {later[0]} (innings {later[1]}) follows innings {innings_id}; cannot reopen it"
                )
            
            last = session.execute(
                select(BallEvent)
                .where(BallEvent.innings_id == innings_id)
                .order_by(BallEvent.ball_sequence.desc())
                .limit(1)
            ).scalar_one_or_none()
            if last is None:
                raise NotFoundError(f"Innings {innings_id} has no ball to undo")
            if last.ball_sequence != innings.last_ball_sequence:
                raise ConsistencyError(
                    f"Innings {innings_id} last ball is #{last.ball_sequence} but counters record {innings.last_ball_sequence}"
                )
            
            was_terminal = innings.is_complete
            self.aggregator.revert_ball(session, last)
            if was_terminal:
                self.aggregator.revert_innings_completion(session, innings)
            
            session.delete(last)
            session.flush()
            
            remaining = self._ledger(session, innings_id)
            state_machine.store_totals(innings, state_machine.replay(remaining))
            innings.status = InningsStatus.IN_PROGRESS
            session.flush()
            snapshot = InningsSnapshot.build(innings, remaining)
        
        logger.info(f"Undid ball #{last.ball_sequence} ({last.label} {last.display_text}) in innings {innings_id}")
        self.bus.publish(snapshot)
        return last
    
    def set_batters(self, innings_id: int, batter1_id: Optional[int], batter2_id: Optional[int]) -> Innings:
        with self._transaction() as session:
            innings = self._get_innings(session, innings_id)
            innings.current_batter1_id = batter1_id
            innings.current_batter2_id = batter2_id
            session.flush()
            snapshot = InningsSnapshot.build(innings, self._ledger(session, innings_id))
        
        self.bus.publish(snapshot)
        return innings
    
    def set_bowler(self, innings_id: int, bowler_id: Optional[int]) -> Innings:
        with self._transaction() as session:
            innings = self._get_innings(session, innings_id)
            innings.current_bowler_id = bowler_id
            session.flush()
            snapshot = InningsSnapshot.build(innings, self._ledger(session, innings_id))
        
        self.bus.publish(snapshot)
        return innings
    
    # Read accessors
    
    def get_match(self, match_id: int) -> Match:
        with session_scope(self.session_factory) as session:
            return self._get_match(session, match_id)
    
    def get_innings(self, innings_id: int) -> Innings:
        with session_scope(self.session_factory) as session:
            return self._get_innings(session, innings_id)
    
    def get_current_innings(self, match_id: int) -> Optional[Innings]:
        """The innings in progress (or not yet started) for a match, if any."""
        with session_scope(self.session_factory) as session:
            return session.execute(
                select(Innings)
                .where(
                    (Innings.match_id == match_id)
                    & Innings.status.in_([InningsStatus.IN_PROGRESS, InningsStatus.NOT_STARTED])
                )
                .order_by(Innings.innings_number)
                .limit(1)
            ).scalar_one_or_none()
    
    def list_innings(self, match_id: int) -> List[Innings]:
        with session_scope(self.session_factory) as session:
            return list(
                session.execute(
                    select(Innings).where(Innings.match_id == match_id).order_by(Innings.innings_number)
                ).scalars().all()
            )
    
    def get_ledger(self, innings_id: int) -> List[BallEvent]:
        with session_scope(self.session_factory) as session:
            self._get_innings(session, innings_id)
            return self._ledger(session, innings_id)
    
    def snapshot(self, innings_id: int) -> InningsSnapshot:
        with session_scope(self.session_factory) as session:
            innings = self._get_innings(session, innings_id)
            return InningsSnapshot.build(innings, self._ledger(session, innings_id))
    
    def chase_target(self, match_id: int) -> int:
        """Runs the second side needs: first innings total plus one."""
        with session_scope(self.session_factory) as session:
            first = session.execute(
                select(Innings).where((Innings.match_id == match_id) & (Innings.innings_number == 1))
            ).scalar_one_or_none()
            if first is None:
                raise NotFoundError(f"Match {match_id} has no first innings")
            if not first.is_complete:
                raise ValidationError(f"First innings of match {match_id} is still {first.status.value}")
            return first.runs + 1
    
    def verify_innings(self, innings_id: int) -> state_machine.InningsTotals:
        """Recompute counters from the ledger and fail loudly if they drifted."""
        with session_scope(self.session_factory) as session:
            innings = self._get_innings(session, innings_id)
            expected = state_machine.replay(self._ledger(session, innings_id))
            stored = state_machine.totals_of(innings)
            if expected != stored:
                raise ConsistencyError(f"Innings {innings_id} counters {stored} do not match ledger {expected}")
            return expected
    
    def subscribe(self, innings_id: int, callback: SnapshotCallback) -> Subscription:
        return self.bus.subscribe(innings_id, callback)
    
    # Helpers
    
    @staticmethod
    def _authorize(match: Match, caller_id: str) -> None:
        if match.current_scorer_id is None or caller_id != match.current_scorer_id:
            logger.warning(f"User {caller_id} attempted to score match {match.id} without scoring rights")
            raise AuthorizationError(f"User {caller_id} is not the current scorer of match {match.id}")
    
    @staticmethod
    def _get_match(session: Session, match_id: int) -> Match:
        match = session.get(Match, match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match
    
    @staticmethod
    def _get_innings(session: Session, innings_id: int) -> Innings:
        innings = session.get(Innings, innings_id)
        if innings is None:
            raise NotFoundError(f"Innings {innings_id} not found")
        return innings
    
    @staticmethod
    def _require_players(session: Session, *player_ids: Optional[int]) -> None:
        for player_id in player_ids:
            if player_id is not None and session.get(Player, player_id) is None:
                raise NotFoundError(f"Player {player_id} not found")
    
    @staticmethod
    def _ledger_length(session: Session, innings_id: int) -> int:
        return session.execute(
            select(func.count(BallEvent.id)).where(BallEvent.innings_id == innings_id)
        ).scalar_one()
    
    @staticmethod
    def _ledger(session: Session, innings_id: int) -> List[BallEvent]:
        return list(
            session.execute(
                select(BallEvent).where(BallEvent.innings_id == innings_id).order_by(BallEvent.ball_sequence)
            ).scalars().all()
        )
