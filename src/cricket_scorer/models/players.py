"""Player model for cricket scorer database."""

from enum import Enum

from sqlalchemy import Column, String, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from .base import Base


class BattingHand(str, Enum):
    """Enumeration of batting hands."""
    LEFT = "left"
    RIGHT = "right"


class BowlingHand(str, Enum):
    """Enumeration of bowling arms."""
    LEFT = "left"
    RIGHT = "right"


class BowlingStyle(str, Enum):
    """Enumeration of bowling styles."""
    FAST = "fast"
    MEDIUM = "medium"
    SPIN = "spin"
    OFF_SPIN = "off_spin"
    LEG_SPIN = "leg_spin"


class Player(Base):
    """Player model representing a member of a player pool."""
    
    __tablename__ = "players"
    
    pool_id = Column(String(64), nullable=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    
    batting_hand = Column(SQLEnum(BattingHand), nullable=True)
    bowling_hand = Column(SQLEnum(BowlingHand), nullable=True)
    bowling_style = Column(SQLEnum(BowlingStyle), nullable=True)
    
    # Identity-provider user this player belongs to, if any
    linked_user_id = Column(String(128), nullable=True, index=True)
    
    stats = relationship("PlayerStats", back_populates="player", uselist=False, cascade="all, delete-orphan")
    memberships = relationship("MatchTeam", back_populates="player", cascade="all, delete-orphan")
    
    __table_args__ = (
        Index("idx_player_pool_name", "pool_id", "name"),
    )
    
    def __repr__(self) -> str:
        return f"<Player(name='{self.name}', pool='{self.pool_id}')>"
