"""Player statistics models for cricket scorer database."""

from sqlalchemy import Column, String, Integer, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class PlayerStats(Base):
    """Cumulative figures for one player across all matches."""
    
    __tablename__ = "player_stats"
    
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, unique=True, index=True)
    
    matches = Column(Integer, default=0, nullable=False)
    innings = Column(Integer, default=0, nullable=False)
    
    # Batting
    runs = Column(Integer, default=0, nullable=False)
    balls_faced = Column(Integer, default=0, nullable=False)
    fours = Column(Integer, default=0, nullable=False)
    sixes = Column(Integer, default=0, nullable=False)
    
    # Bowling
    wickets = Column(Integer, default=0, nullable=False)
    balls_bowled = Column(Integer, default=0, nullable=False)
    runs_conceded = Column(Integer, default=0, nullable=False)
    
    player = relationship("Player", back_populates="stats")
    
    @property
    def overs_bowled(self) -> float:
        """Overs bowled as a fraction (legal balls / 6)."""
        return self.balls_bowled / 6.0
    
    @property
    def overs_display(self) -> str:
        overs, balls = divmod(self.balls_bowled, 6)
        return f"{overs}.{balls}" if balls else str(overs)
    
    @property
    def batting_average(self) -> float:
        if self.innings == 0:
            return 0.0
        return self.runs / self.innings
    
    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return self.runs / self.balls_faced * 100
    
    @property
    def bowling_average(self) -> float:
        if self.wickets == 0:
            return 0.0
        return self.runs_conceded / self.wickets
    
    @property
    def economy(self) -> float:
        if self.balls_bowled == 0:
            return 0.0
        return self.runs_conceded / self.overs_bowled
    
    def __repr__(self) -> str:
        return f"<PlayerStats(player_id={self.player_id}, runs={self.runs}, wickets={self.wickets})>"


class StatContribution(Base):
    """Stat delta applied to one player on behalf of one source (ball or innings).
    
    Keyed by ``source_key`` so a source is applied at most once and can be
    subtracted exactly when it is undone.
    """
    
    __tablename__ = "stat_contributions"
    
    source_key = Column(String(64), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    
    matches = Column(Integer, default=0, nullable=False)
    innings = Column(Integer, default=0, nullable=False)
    runs = Column(Integer, default=0, nullable=False)
    balls_faced = Column(Integer, default=0, nullable=False)
    fours = Column(Integer, default=0, nullable=False)
    sixes = Column(Integer, default=0, nullable=False)
    wickets = Column(Integer, default=0, nullable=False)
    balls_bowled = Column(Integer, default=0, nullable=False)
    runs_conceded = Column(Integer, default=0, nullable=False)
    
    __table_args__ = (
        UniqueConstraint("source_key", "player_id", name="uq_contribution_source_player"),
        Index("idx_contribution_source", "source_key"),
    )
    
    def __repr__(self) -> str:
        return f"<StatContribution({self.source_key}, player_id={self.player_id})>"
