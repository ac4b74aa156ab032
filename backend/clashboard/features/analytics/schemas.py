"""Pydantic schemas for the analytics feature."""

from typing import List, Optional

from pydantic import BaseModel, Field

from clashboard.core.enums import HistoryRange
from clashboard.features.sessions.schemas import (
    BattleStatsResponse,
    DailySummaryResponse,
    PushSessionResponse,
    TrophyProgressionPointResponse,
)
from clashboard.features.tilt.schemas import TiltResponse


class AnalyticsReport(BaseModel):
    """Everything computed from one battle list."""

    player_tag: Optional[str] = None
    battles: int = Field(..., ge=0, description="Battles analysed")
    push_sessions: List[PushSessionResponse]
    consecutive_losses: int
    stats: BattleStatsResponse
    tilt: TiltResponse
    daily_summary: DailySummaryResponse
    history_range: HistoryRange = HistoryRange.WEEK
    trophy_progression: List[TrophyProgressionPointResponse] = Field(
        default_factory=list,
        description="Per-session trophy points, only when current trophies are known",
    )
