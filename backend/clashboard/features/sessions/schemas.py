"""Pydantic schemas for the sessions feature."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from clashboard.core.enums import StreakType


class SessionsRequest(BaseModel):
    """Battles to cluster, with optional clustering overrides."""

    battles: List[Dict[str, Any]] = Field(
        default_factory=list, description="Raw battle payloads, any order"
    )
    max_gap_minutes: Optional[int] = Field(
        None, ge=1, description="Largest gap inside one session"
    )
    min_battles: Optional[int] = Field(
        None, ge=1, description="Smallest cluster reported as a session"
    )


class PushSessionResponse(BaseModel):
    """One push session."""

    start_time: datetime
    end_time: datetime
    battles: int = Field(..., description="Number of battles in the session")
    wins: int
    losses: int
    draws: int
    win_rate: float = Field(..., description="Win percentage (0-100)")
    net_trophies: float


class SessionsResponse(BaseModel):
    """Clustering result, newest session first."""

    sessions: List[PushSessionResponse]
    consecutive_losses: int = Field(
        ..., description="Non-wins at the head of the supplied list"
    )


class StreakResponse(BaseModel):
    type: StreakType
    count: int


class BattleStatsResponse(BaseModel):
    """Overall stats of a battle list."""

    total: int
    wins: int
    losses: int
    win_rate: float
    streak: StreakResponse
    last_battle_at: Optional[datetime] = None


class DailySummaryResponse(BaseModel):
    """Today's push activity (UTC day)."""

    date: str = Field(..., description="YYYY-MM-DD")
    battles: int
    wins: int
    losses: int
    trophy_delta: float
    win_rate: int
    streak: StreakResponse
    sessions: List[PushSessionResponse]


class TrophyProgressionPointResponse(BaseModel):
    time: datetime
    trophies: int
    session_index: int
    trophy_delta: float
    wins: int
    losses: int
