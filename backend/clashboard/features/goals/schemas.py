"""Pydantic schemas for the goals feature."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from clashboard.core.enums import GoalType


class GoalCreate(BaseModel):
    """New goal declared by the user."""

    type: GoalType
    target_value: float = Field(..., gt=0)
    current_value: Optional[float] = Field(0, ge=0)
    title: Optional[str] = Field(None, max_length=120)


class GoalResponse(BaseModel):
    id: int
    user_id: str
    type: str
    title: Optional[str] = None
    target_value: float
    current_value: Optional[float] = None
    completed: bool
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GoalListResponse(BaseModel):
    goals: List[GoalResponse]
    total: int


class GoalSyncResult(BaseModel):
    """What one auto-progress pass changed."""

    evaluated: int = Field(..., ge=0, description="Open goals looked at")
    updated: int = Field(..., ge=0, description="Goals whose value changed")
    completed_goal_ids: List[int] = Field(
        default_factory=list, description="Goals completed by this pass"
    )
