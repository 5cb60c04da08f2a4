"""Innings model for cricket scorer database."""

from enum import Enum

from sqlalchemy import Column, String, Integer, Float, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from .base import Base
from .matches import TeamSide


class InningsStatus(str, Enum):
    """Enumeration of innings statuses."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ALL_OUT = "all_out"
    TARGET_CHASED = "target_chased"
    
    @property
    def is_terminal(self) -> bool:
        return self in (InningsStatus.COMPLETED, InningsStatus.ALL_OUT, InningsStatus.TARGET_CHASED)


class Innings(Base):
    """Innings model holding running totals derived from the ball ledger."""
    
    __tablename__ = "innings"
    
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    team = Column(SQLEnum(TeamSide), nullable=False, index=True)
    innings_number = Column(Integer, nullable=False)
    
    status = Column(SQLEnum(InningsStatus), nullable=False, default=InningsStatus.NOT_STARTED, index=True)
    target = Column(Integer, nullable=True)
    
    # Running totals
    runs = Column(Integer, default=0, nullable=False)
    wickets = Column(Integer, default=0, nullable=False)
    overs_faced = Column(Float, default=0.0, nullable=False)
    current_over = Column(Integer, default=0, nullable=False)
    current_ball = Column(Integer, default=0, nullable=False)  # 0-5
    
    # Highest committed ball_sequence; fences the ledger against the counters
    last_ball_sequence = Column(Integer, default=0, nullable=False)
    
    current_batter1_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    current_batter2_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    current_bowler_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    
    # Optimistic concurrency counter
    version = Column(Integer, nullable=False)
    
    match = relationship("Match", back_populates="innings")
    ball_events = relationship(
        "BallEvent", back_populates="innings", order_by="BallEvent.ball_sequence", cascade="all, delete-orphan"
    )
    
    __mapper_args__ = {"version_id_col": version}
    
    __table_args__ = (
        Index("idx_innings_match_number", "match_id", "innings_number", unique=True),
        Index("idx_innings_match_status", "match_id", "status"),
    )
    
    @property
    def is_complete(self) -> bool:
        return self.status is not None and InningsStatus(self.status).is_terminal
    
    @property
    def legal_balls(self) -> int:
        return self.current_over * 6 + self.current_ball
    
    @property
    def display_score(self) -> str:
        return f"{self.runs}/{self.wickets}"
    
    @property
    def display_overs(self) -> str:
        """Overs in cricket notation, e.g. 8.2 for 8 overs and 2 balls."""
        if self.current_ball:
            return f"{self.current_over}.{self.current_ball}"
        return str(self.current_over)
    
    @property
    def run_rate(self) -> float:
        if self.legal_balls == 0:
            return 0.0
        return round(self.runs * 6 / self.legal_balls, 2)
    
    def __repr__(self) -> str:
        return f"<Innings({self.innings_number}, team={self.team.value if self.team else None}, {self.runs}/{self.wickets} in {self.display_overs})>"
