"""Ball event model: the append-only scoring ledger."""

from enum import Enum

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Index, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from .base import Base


class WicketType(str, Enum):
    """Enumeration of dismissal types."""
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"
    RETIRED = "retired"
    TIMED_OUT = "timed_out"
    
    @property
    def display_name(self) -> str:
        if self is WicketType.LBW:
            return "LBW"
        return self.value.replace("_", " ").title()
    
    @property
    def credits_to_keeper(self) -> bool:
        return self is WicketType.STUMPED
    
    @property
    def credits_to_bowler(self) -> bool:
        return self in (WicketType.BOWLED, WicketType.CAUGHT, WicketType.LBW, WicketType.HIT_WICKET)


class BallEvent(Base):
    """A single committed delivery within an innings."""
    
    __tablename__ = "ball_events"
    
    innings_id = Column(Integer, ForeignKey("innings.id"), nullable=False, index=True)
    # Gapless per-innings order, assigned at append time
    ball_sequence = Column(Integer, nullable=False)
    
    # Slot the delivery was bowled in (0-indexed, not advanced by illegal deliveries)
    over_number = Column(Integer, nullable=False)
    ball_number = Column(Integer, nullable=False)
    
    batter_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    bowler_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    
    runs_scored = Column(Integer, default=0, nullable=False)  # bat runs only
    extra_runs = Column(Integer, default=0, nullable=False)  # automatic wide/no-ball run actually credited
    is_wide = Column(Boolean, default=False, nullable=False)
    is_no_ball = Column(Boolean, default=False, nullable=False)
    is_wicket = Column(Boolean, default=False, nullable=False)
    wicket_type = Column(SQLEnum(WicketType), nullable=True)
    run_out_batter_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    grant_without_ball = Column(Boolean, default=False, nullable=False)
    
    recorded_by = Column(String(128), nullable=True)
    
    innings = relationship("Innings", back_populates="ball_events")
    
    __table_args__ = (
        UniqueConstraint("innings_id", "ball_sequence", name="uq_ball_innings_sequence"),
        Index("idx_ball_innings_over", "innings_id", "over_number", "ball_number"),
    )
    
    @property
    def is_legal_delivery(self) -> bool:
        """Check if this is a legal delivery (not wide or no-ball)."""
        return not (self.is_wide or self.is_no_ball)
    
    @property
    def total_runs(self) -> int:
        """Runs added to the batting total by this ball."""
        return self.runs_scored + self.extra_runs
    
    @property
    def dismissed_player_id(self):
        """Player dismissed by this ball; a run-out may remove the non-striker."""
        if not self.is_wicket:
            return None
        if self.wicket_type == WicketType.RUN_OUT and self.run_out_batter_id is not None:
            return self.run_out_batter_id
        return self.batter_id
    
    @property
    def label(self) -> str:
        return f"{self.over_number}.{self.ball_number + 1}"
    
    @property
    def display_text(self) -> str:
        text = ""
        if self.is_wide:
            text += "Wd"
        if self.is_no_ball:
            text += "Nb"
        if self.runs_scored > 0:
            text += f"+{self.runs_scored}" if text else str(self.runs_scored)
        elif not text:
            text = "0"
        if self.is_wicket:
            text += " W"
        if self.grant_without_ball:
            text += " (GWB)"
        return text
    
    def __repr__(self) -> str:
        return f"<BallEvent(#{self.ball_sequence} {self.label}, {self.display_text})>"
