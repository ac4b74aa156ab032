"""Pydantic schemas for the tilt feature."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from clashboard.core.enums import DecayStage, TiltAction, TiltLevel


class TiltRequest(BaseModel):
    """Battles to evaluate, newest first."""

    battles: List[Dict[str, Any]] = Field(default_factory=list)
    now: Optional[datetime] = Field(
        None, description="Reference instant, defaults to the current time"
    )


class TiltStateResponse(BaseModel):
    base_level: TiltLevel
    base_risk: int
    decay_stage: DecayStage
    risk: int = Field(..., ge=0, le=100)
    level: TiltLevel
    alert: bool
    last_battle_at: Optional[datetime] = None
    hours_since_last_battle: Optional[float] = None


class TiltDetectionResponse(BaseModel):
    is_on_tilt: bool
    consecutive_losses: int
    trophies_lost: float
    suggested_action: TiltAction


class TiltEventResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    consecutive_losses: int
    trophies_lost: float


class TiltResponse(BaseModel):
    """Tilt state plus loss-streak detection."""

    state: TiltStateResponse
    detection: TiltDetectionResponse
    history: List[TiltEventResponse] = Field(default_factory=list)
