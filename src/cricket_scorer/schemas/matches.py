"""Pydantic schemas for match setup and handoff."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.matches import MatchStatus, TeamSide, TossDecision


class MatchCreate(BaseModel):
    """Schema for creating a new match."""
    
    pool_id: Optional[str] = Field(None, max_length=64, description="Player pool ID")
    created_by: str = Field(..., min_length=1, max_length=128, description="Creating user, becomes the first scorer")
    team_a_name: str = Field(..., min_length=1, max_length=100, description="Team A name")
    team_b_name: str = Field(..., min_length=1, max_length=100, description="Team B name")
    overs_per_innings: int = Field(..., ge=1, le=100, description="Overs per innings")
    two_innings: bool = Field(False, description="Whether each side bats twice")
    wide_no_ball_runs: bool = Field(True, description="Credit one run for each wide/no-ball")
    
    @field_validator("team_b_name")
    @classmethod
    def validate_different_teams(cls, v, info):
        """Validate that the two sides are named differently."""
        if info.data.get("team_a_name") == v:
            raise ValueError("Team A and Team B must have different names")
        return v


class MatchResponse(BaseModel):
    """Schema for match response data."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    pool_id: Optional[str] = None
    created_by: str
    team_a_name: str
    team_b_name: str
    overs_per_innings: int
    two_innings: bool
    wide_no_ball_runs: bool
    toss_winner: Optional[TeamSide] = None
    toss_decision: Optional[TossDecision] = None
    status: MatchStatus
    current_scorer_id: Optional[str] = None


class MatchTransferResponse(BaseModel):
    """Schema for a scoring handoff request."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    match_id: int
    from_user_id: str
    to_user_id: str
    accepted: bool
    superseded: bool
    requested_at: datetime
    responded_at: Optional[datetime] = None


class InningsSummaryEntry(BaseModel):
    innings_number: int
    team: TeamSide
    runs: int
    wickets: int
    overs: float


class MatchSummaryResponse(BaseModel):
    """Schema for the summary written at match completion."""
    
    match_id: int
    team_a_name: str
    team_b_name: str
    total_innings: int
    total_balls: int
    innings_summary: List[InningsSummaryEntry] = Field(default_factory=list)
