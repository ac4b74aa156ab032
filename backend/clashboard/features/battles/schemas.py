"""Pydantic schemas for the battles feature."""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from clashboard.core.enums import SubscriptionTier


class BattleIngestRequest(BaseModel):
    """Raw battles pushed for a user's player tag."""

    player_tag: str = Field(..., description="Player tag, with or without '#'")
    tier: SubscriptionTier = Field(
        SubscriptionTier.FREE, description="Subscription tier of the user"
    )
    battles: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Raw battle payloads as returned by the game API, newest first",
    )


class IngestResult(BaseModel):
    """Outcome of one ingestion + retention pass."""

    player_tag: str = Field(..., description="Normalized player tag")
    received: int = Field(..., ge=0, description="Battles in the request")
    skipped: int = Field(
        ..., ge=0, description="Battles without a parseable battle time"
    )
    inserted: int = Field(..., ge=0, description="New rows stored")
    duplicates: int = Field(..., ge=0, description="Battles already stored")
    pruned: int = Field(..., ge=0, description="Rows removed by retention")


class BattleResponse(BaseModel):
    """Stored battle as returned by history queries."""

    battle_key: str = Field(..., description="Content-addressed battle key")
    player_tag: str = Field(..., description="Normalized player tag")
    battle_time: datetime = Field(..., description="When the battle was played")
    battle: Dict[str, Any] = Field(..., description="Raw battle payload")

    model_config = ConfigDict(from_attributes=True)


class BattleHistoryResponse(BaseModel):
    """History query result."""

    player_tag: str
    tier: SubscriptionTier
    days: int | None = Field(None, description="Window applied (pro tier only)")
    limit: int = Field(..., description="Row limit applied")
    battles: List[BattleResponse]
