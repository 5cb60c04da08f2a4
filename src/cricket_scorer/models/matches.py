"""Match, roster and scoring-transfer models for cricket scorer database."""

from enum import Enum

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index, Text, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from .base import Base


class MatchStatus(str, Enum):
    """Enumeration of match lifecycle statuses."""
    ONGOING = "ongoing"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class TeamSide(str, Enum):
    """The two sides of a match."""
    A = "A"
    B = "B"
    
    @property
    def opposite(self) -> "TeamSide":
        return TeamSide.B if self is TeamSide.A else TeamSide.A


class TossDecision(str, Enum):
    """Enumeration of toss decisions."""
    BAT = "bat"
    FIELD = "field"


class Match(Base):
    """Match model holding format parameters and the current scorer."""
    
    __tablename__ = "matches"
    
    pool_id = Column(String(64), nullable=True, index=True)
    created_by = Column(String(128), nullable=False)
    
    team_a_name = Column(String(100), nullable=False)
    team_b_name = Column(String(100), nullable=False)
    
    # Format parameters
    overs_per_innings = Column(Integer, nullable=False)
    two_innings = Column(Boolean, default=False, nullable=False)
    wide_no_ball_runs = Column(Boolean, default=True, nullable=False)  # credit the automatic extra
    
    toss_winner = Column(SQLEnum(TeamSide), nullable=True)
    toss_decision = Column(SQLEnum(TossDecision), nullable=True)
    
    status = Column(SQLEnum(MatchStatus), nullable=False, default=MatchStatus.ONGOING, index=True)
    
    # Single user allowed to append ball events
    current_scorer_id = Column(String(128), nullable=True, index=True)
    
    innings = relationship("Innings", back_populates="match", order_by="Innings.innings_number")
    team_members = relationship("MatchTeam", back_populates="match", cascade="all, delete-orphan")
    transfers = relationship("MatchTransfer", back_populates="match", cascade="all, delete-orphan")
    summary = relationship("MatchSummary", back_populates="match", uselist=False, cascade="all, delete-orphan")
    
    @property
    def is_ongoing(self) -> bool:
        """Check if match still accepts scoring."""
        return self.status == MatchStatus.ONGOING
    
    def team_name(self, side: TeamSide) -> str:
        return self.team_a_name if side == TeamSide.A else self.team_b_name
    
    def __repr__(self) -> str:
        return f"<Match({self.team_a_name} vs {self.team_b_name}, {self.overs_per_innings} overs, {self.status.value if self.status else None})>"


class MatchTeam(Base):
    """Membership of a player in one side of a match."""
    
    __tablename__ = "match_teams"
    
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    team = Column(SQLEnum(TeamSide), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    is_captain = Column(Boolean, default=False, nullable=False)
    is_common_player = Column(Boolean, default=False, nullable=False)  # plays for both sides
    batting_order = Column(Integer, nullable=True)
    
    match = relationship("Match", back_populates="team_members")
    player = relationship("Player", back_populates="memberships")
    
    __table_args__ = (
        UniqueConstraint("match_id", "team", "player_id", name="uq_match_team_player"),
        Index("idx_match_team_side", "match_id", "team"),
    )
    
    def __repr__(self) -> str:
        return f"<MatchTeam(match_id={self.match_id}, team={self.team.value if self.team else None}, player_id={self.player_id})>"


class MatchTransfer(Base):
    """Request to hand scoring rights from one user to another."""
    
    __tablename__ = "match_transfers"
    
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    from_user_id = Column(String(128), nullable=False)
    to_user_id = Column(String(128), nullable=False, index=True)
    accepted = Column(Boolean, default=False, nullable=False)
    superseded = Column(Boolean, default=False, nullable=False)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    
    match = relationship("Match", back_populates="transfers")
    
    @property
    def is_pending(self) -> bool:
        return not self.accepted and not self.superseded
    
    def __repr__(self) -> str:
        return f"<MatchTransfer(match_id={self.match_id}, {self.from_user_id} -> {self.to_user_id}, accepted={self.accepted})>"


class MatchSummary(Base):
    """Summary written when a match is completed."""
    
    __tablename__ = "match_summaries"
    
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, unique=True, index=True)
    team_a_name = Column(String(100), nullable=False)
    team_b_name = Column(String(100), nullable=False)
    total_innings = Column(Integer, default=0, nullable=False)
    total_balls = Column(Integer, default=0, nullable=False)
    innings_summary = Column(Text, nullable=False)  # JSON list
    
    match = relationship("Match", back_populates="summary")
