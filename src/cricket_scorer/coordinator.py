"""Match setup, roster management and the single-scorer handoff."""

import json
from contextlib import contextmanager
from typing import Generator, List, Optional

from loguru import logger
from sqlalchemy import select, func
from sqlalchemy.orm import Session, sessionmaker

from .database import session_scope
from .exceptions import AuthorizationError, NotFoundError, ValidationError, parse_choice, translate_store_errors
from .models import (
    BallEvent,
    Innings,
    Match,
    MatchStatus,
    MatchSummary,
    MatchTeam,
    MatchTransfer,
    Player,
    TeamSide,
    TossDecision,
)
from .models.base import utcnow
from .schemas import MatchCreate, MatchSummaryResponse, InningsSummaryEntry


class MatchCoordinator:
    """Owns match-level state: format, toss, rosters and who may score."""
    
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
    
    @contextmanager
    def _transaction(self) -> Generator[Session, None, None]:
        with translate_store_errors(), session_scope(self.session_factory) as session:
            yield session
    
    def create_match(self, data: MatchCreate) -> Match:
        """Create a match; its creator holds scoring rights first."""
        with self._transaction() as session:
            match = Match(
                **data.model_dump(),
                status=MatchStatus.ONGOING,
                current_scorer_id=data.created_by,
            )
            session.add(match)
            session.flush()
        
        logger.info(f"Created match {match.id}: {match.team_a_name} vs {match.team_b_name} ({match.overs_per_innings} overs)")
        return match
    
    def get_match(self, match_id: int) -> Match:
        with session_scope(self.session_factory) as session:
            return self._get_match(session, match_id)
    
    def set_toss(self, match_id: int, winner: TeamSide, decision: TossDecision) -> Match:
        with self._transaction() as session:
            match = self._get_match(session, match_id)
            match.toss_winner = parse_choice(TeamSide, winner, "toss winner")
            match.toss_decision = parse_choice(TossDecision, decision, "toss decision")
        return match
    
    # Roster
    
    def add_player_to_team(
        self,
        match_id: int,
        player_id: int,
        team: TeamSide,
        is_captain: bool = False,
        is_common_player: bool = False,
    ) -> MatchTeam:
        with self._transaction() as session:
            self._get_match(session, match_id)
            if session.get(Player, player_id) is None:
                raise NotFoundError(f"Player {player_id} not found")
            
            member = MatchTeam(
                match_id=match_id,
                team=parse_choice(TeamSide, team, "team"),
                player_id=player_id,
                is_captain=is_captain,
                is_common_player=is_common_player,
                batting_order=None,
            )
            session.add(member)
            session.flush()
        
        logger.debug(f"Added player {player_id} to team {member.team.value} of match {match_id}")
        return member
    
    def remove_player_from_team(self, match_team_id: int) -> None:
        with self._transaction() as session:
            member = self._get_member(session, match_team_id)
            session.delete(member)
    
    def set_batting_order(self, match_team_id: int, order: int) -> MatchTeam:
        if order < 1:
            raise ValidationError("Batting order starts at 1")
        with self._transaction() as session:
            member = self._get_member(session, match_team_id)
            member.batting_order = order
        return member
    
    def get_team(self, match_id: int, team: TeamSide) -> List[MatchTeam]:
        """Side roster in batting order; players without a position come last."""
        team = parse_choice(TeamSide, team, "team")
        with session_scope(self.session_factory) as session:
            members = session.execute(
                select(MatchTeam).where((MatchTeam.match_id == match_id) & (MatchTeam.team == team))
            ).scalars().all()
        return sorted(members, key=lambda m: (m.batting_order if m.batting_order is not None else 99, m.id))
    
    # Scoring handoff
    
    def transfer_match(self, match_id: int, to_user_id: str) -> MatchTransfer:
        """Request a handoff from the current scorer. Scoring rights do not move yet."""
        with self._transaction() as session:
            match = self._get_match(session, match_id)
            if match.current_scorer_id is None:
                raise ValidationError(f"Match {match_id} has no current scorer to transfer from")
            if match.current_scorer_id == to_user_id:
                raise ValidationError(f"User {to_user_id} already scores match {match_id}")
            
            transfer = MatchTransfer(
                match_id=match_id,
                from_user_id=match.current_scorer_id,
                to_user_id=to_user_id,
                accepted=False,
                superseded=False,
                requested_at=utcnow(),
            )
            session.add(transfer)
            session.flush()
        
        logger.info(f"Transfer {transfer.id} requested: match {match_id} from {transfer.from_user_id} to {to_user_id}")
        return transfer
    
    def accept_transfer(self, transfer_id: int, caller_id: Optional[str] = None) -> MatchTransfer:
        """Accept a handoff; only now does the match's current scorer change.
        
        Other pending requests for the same match are marked superseded.
        """
        with self._transaction() as session:
            transfer = session.get(MatchTransfer, transfer_id)
            if transfer is None:
                raise NotFoundError(f"Transfer {transfer_id} not found")
            if caller_id is not None and caller_id != transfer.to_user_id:
                raise AuthorizationError(f"Transfer {transfer_id} is addressed to {transfer.to_user_id}, not {caller_id}")
            if transfer.accepted:
                raise ValidationError(f"Transfer {transfer_id} was already accepted")
            if transfer.superseded:
                raise ValidationError(f"Transfer {transfer_id} was superseded by another handoff")
            
            match = self._get_match(session, transfer.match_id)
            if match.current_scorer_id != transfer.from_user_id:
                raise ValidationError(
                    f"Transfer {transfer_id} is stale: match {match.id} is now scored by {match.current_scorer_id}"
                )
            
            now = utcnow()
            transfer.accepted = True
            transfer.responded_at = now
            match.current_scorer_id = transfer.to_user_id
            
            others = session.execute(
                select(MatchTransfer).where(
                    (MatchTransfer.match_id == match.id)
                    & (MatchTransfer.id != transfer_id)
                    & (MatchTransfer.accepted.is_(False))
                    & (MatchTransfer.superseded.is_(False))
                )
            ).scalars().all()
            for other in others:
                other.superseded = True
                other.responded_at = now
        
        logger.info(f"Transfer {transfer_id} accepted: match {transfer.match_id} now scored by {transfer.to_user_id}")
        if others:
            logger.info(f"Superseded {len(others)} pending transfers for match {transfer.match_id}")
        return transfer
    
    def pending_transfers(self, match_id: int) -> List[MatchTransfer]:
        with session_scope(self.session_factory) as session:
            return list(
                session.execute(
                    select(MatchTransfer)
                    .where(
                        (MatchTransfer.match_id == match_id)
                        & (MatchTransfer.accepted.is_(False))
                        & (MatchTransfer.superseded.is_(False))
                    )
                    .order_by(MatchTransfer.requested_at, MatchTransfer.id)
                ).scalars().all()
            )
    
    # Lifecycle
    
    def complete_match(self, match_id: int) -> MatchSummaryResponse:
        """Close the match and write its summary."""
        with self._transaction() as session:
            match = self._close(session, match_id, MatchStatus.COMPLETED)
            summary = self._build_summary(session, match)
            session.add(
                MatchSummary(
                    match_id=match.id,
                    team_a_name=summary.team_a_name,
                    team_b_name=summary.team_b_name,
                    total_innings=summary.total_innings,
                    total_balls=summary.total_balls,
                    innings_summary=json.dumps([entry.model_dump(mode="json") for entry in summary.innings_summary]),
                )
            )
        
        logger.info(f"Match {match_id} completed: {summary.total_innings} innings, {summary.total_balls} balls")
        return summary
    
    def abandon_match(self, match_id: int) -> Match:
        with self._transaction() as session:
            match = self._close(session, match_id, MatchStatus.ABANDONED)
        logger.info(f"Match {match_id} abandoned")
        return match
    
    def get_summary(self, match_id: int) -> MatchSummaryResponse:
        with session_scope(self.session_factory) as session:
            row = session.execute(
                select(MatchSummary).where(MatchSummary.match_id == match_id)
            ).scalar_one_or_none()
            if row is None:
                raise NotFoundError(f"Match {match_id} has no summary")
            return MatchSummaryResponse(
                match_id=row.match_id,
                team_a_name=row.team_a_name,
                team_b_name=row.team_b_name,
                total_innings=row.total_innings,
                total_balls=row.total_balls,
                innings_summary=json.loads(row.innings_summary),
            )
    
    def _close(self, session: Session, match_id: int, status: MatchStatus) -> Match:
        match = self._get_match(session, match_id)
        if not match.is_ongoing:
            raise ValidationError(f"Match {match_id} is already {match.status.value}")
        match.status = status
        return match
    
    @staticmethod
    def _build_summary(session: Session, match: Match) -> MatchSummaryResponse:
        innings = session.execute(
            select(Innings).where(Innings.match_id == match.id).order_by(Innings.innings_number)
        ).scalars().all()
        total_balls = 0
        if innings:
            total_balls = session.execute(
                select(func.count(BallEvent.id)).where(BallEvent.innings_id.in_([i.id for i in innings]))
            ).scalar_one()
        return MatchSummaryResponse(
            match_id=match.id,
            team_a_name=match.team_a_name,
            team_b_name=match.team_b_name,
            total_innings=len(innings),
            total_balls=total_balls,
            innings_summary=[
                InningsSummaryEntry(
                    innings_number=i.innings_number,
                    team=i.team,
                    runs=i.runs,
                    wickets=i.wickets,
                    overs=i.overs_faced,
                )
                for i in innings
            ],
        )
    
    @staticmethod
    def _get_match(session: Session, match_id: int) -> Match:
        match = session.get(Match, match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match
    
    @staticmethod
    def _get_member(session: Session, match_team_id: int) -> MatchTeam:
        member = session.get(MatchTeam, match_team_id)
        if member is None:
            raise NotFoundError(f"Team membership {match_team_id} not found")
        return member
