"""Pydantic schemas for ball event validation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.ball_events import WicketType


class BallEventCreate(BaseModel):
    """A proposed delivery, validated before it reaches the engine."""
    
    batter_id: int = Field(..., description="Striker facing the ball")
    bowler_id: int = Field(..., description="Bowler delivering the ball")
    runs_scored: int = Field(0, ge=0, le=7, description="Bat runs, excluding the automatic wide/no-ball extra")
    is_wide: bool = Field(False, description="Whether ball was wide")
    is_no_ball: bool = Field(False, description="Whether ball was a no-ball")
    is_wicket: bool = Field(False, description="Whether a wicket fell")
    wicket_type: Optional[WicketType] = Field(None, description="Type of dismissal")
    run_out_batter_id: Optional[int] = Field(None, description="Batter dismissed by a run-out")
    grant_without_ball: bool = Field(False, description="Administrative credit without a physical ball")
    
    @model_validator(mode="after")
    def validate_consistency(self) -> "BallEventCreate":
        """Validate the flag combinations."""
        if self.is_wide and self.is_no_ball:
            raise ValueError("A delivery cannot be both a wide and a no-ball")
        if self.is_wicket and self.wicket_type is None:
            raise ValueError("wicket_type is required when is_wicket is set")
        if not self.is_wicket and self.wicket_type is not None:
            raise ValueError("wicket_type must be empty when no wicket fell")
        if self.run_out_batter_id is not None and self.wicket_type != WicketType.RUN_OUT:
            raise ValueError("run_out_batter_id is only valid for a run-out")
        return self


class BallEventResponse(BaseModel):
    """Schema for committed ball event data."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    innings_id: int
    ball_sequence: int
    over_number: int
    ball_number: int
    batter_id: int
    bowler_id: int
    runs_scored: int
    extra_runs: int
    total_runs: int
    is_wide: bool
    is_no_ball: bool
    is_wicket: bool
    wicket_type: Optional[WicketType] = None
    run_out_batter_id: Optional[int] = None
    grant_without_ball: bool
    is_legal_delivery: bool
    label: str
    display_text: str
