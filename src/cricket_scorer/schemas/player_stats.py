"""Pydantic schemas for player statistics."""

from pydantic import BaseModel, ConfigDict, Field


class PlayerStatsResponse(BaseModel):
    """Cumulative figures with derived averages and rates."""
    
    model_config = ConfigDict(from_attributes=True)
    
    player_id: int = Field(..., description="Player ID")
    matches: int = Field(0, ge=0)
    innings: int = Field(0, ge=0)
    runs: int = Field(0, ge=0)
    balls_faced: int = Field(0, ge=0)
    fours: int = Field(0, ge=0)
    sixes: int = Field(0, ge=0)
    wickets: int = Field(0, ge=0)
    balls_bowled: int = Field(0, ge=0)
    overs_bowled: float = Field(0.0, ge=0.0)
    runs_conceded: int = Field(0, ge=0)
    batting_average: float = Field(0.0, ge=0.0)
    strike_rate: float = Field(0.0, ge=0.0)
    bowling_average: float = Field(0.0, ge=0.0)
    economy: float = Field(0.0, ge=0.0)


class PlayerRanking(PlayerStatsResponse):
    """One row of a rankings table."""
    
    rank: int = Field(..., ge=1)
    player_name: str
