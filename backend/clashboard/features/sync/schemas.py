"""Pydantic schemas for the player sync feature."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from clashboard.core.enums import SubscriptionTier
from clashboard.features.analytics.schemas import AnalyticsReport
from clashboard.features.battles.schemas import IngestResult
from clashboard.features.goals.schemas import GoalResponse, GoalSyncResult


class SyncStatus(str, Enum):
    OK = "ok"
    PARTIAL = "partial"


class SyncRequest(BaseModel):
    """Fresh player data pushed by the client."""

    player_tag: str = Field(..., description="Player tag, with or without '#'")
    tier: SubscriptionTier = SubscriptionTier.FREE
    trophies: Optional[float] = Field(
        None, ge=0, description="Current trophy count of the player"
    )
    battles: List[Dict[str, Any]] = Field(
        default_factory=list, description="Raw battle log, newest first"
    )


class SyncError(BaseModel):
    """One step of the sync that did not complete."""

    source: str = Field(..., description="Failed step: battlelog or goals")
    code: str
    message: str


class SyncResponse(BaseModel):
    """Result of a full player sync."""

    status: SyncStatus
    partial: bool
    player_tag: str
    ingest: Optional[IngestResult] = None
    analytics: AnalyticsReport
    goal_sync: Optional[GoalSyncResult] = None
    goals: List[GoalResponse] = Field(default_factory=list)
    errors: List[SyncError] = Field(default_factory=list)
