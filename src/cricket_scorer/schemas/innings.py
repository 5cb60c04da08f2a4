"""Pydantic schemas for innings state."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.innings import InningsStatus
from ..models.matches import TeamSide
from .ball_events import BallEventResponse


class InningsResponse(BaseModel):
    """Schema for innings counters."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    match_id: int
    team: TeamSide
    innings_number: int
    status: InningsStatus
    target: Optional[int] = None
    runs: int
    wickets: int
    overs_faced: float
    current_over: int
    current_ball: int
    last_ball_sequence: int
    current_batter1_id: Optional[int] = None
    current_batter2_id: Optional[int] = None
    current_bowler_id: Optional[int] = None
    display_score: str
    display_overs: str
    run_rate: float


class InningsSnapshot(BaseModel):
    """State pushed to subscribers after each committed change."""
    
    innings: InningsResponse
    last_ball: Optional[BallEventResponse] = Field(None, description="Highest-sequence ball, if any")
    ledger_length: int = 0
    
    @classmethod
    def build(cls, innings, events: List) -> "InningsSnapshot":
        return cls(
            innings=InningsResponse.model_validate(innings),
            last_ball=BallEventResponse.model_validate(events[-1]) if events else None,
            ledger_length=len(events),
        )
