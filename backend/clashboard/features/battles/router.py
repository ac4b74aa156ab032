"""Battle history API endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Query

from clashboard.core.enums import SubscriptionTier
from clashboard.core.exceptions import ServiceException
from clashboard.core.http_errors import to_http_exception

from .dependencies import BattleHistoryServiceDep
from .schemas import BattleHistoryResponse, BattleIngestRequest, IngestResult

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/users/{user_id}/battles", tags=["battles"])


@router.post("", response_model=IngestResult)
async def ingest_battles(
    user_id: str,
    request: BattleIngestRequest,
    service: BattleHistoryServiceDep,
) -> IngestResult:
    """
    Store raw battles for a player and apply the tier retention policy.

    Battles already stored for this user are ignored, so the same battle log
    can be pushed repeatedly.
    """
    try:
        return await service.ingest(
            user_id, request.player_tag, request.battles, tier=request.tier
        )
    except ServiceException as e:
        logger.error(
            "battle_ingest_failed", user_id=user_id, error=str(e), exc_info=True
        )
        raise to_http_exception(e, "Failed to store battles")


@router.get("", response_model=BattleHistoryResponse)
async def get_battle_history(
    user_id: str,
    service: BattleHistoryServiceDep,
    player_tag: str = Query(..., description="Player tag, with or without '#'"),
    tier: SubscriptionTier = Query(SubscriptionTier.FREE),
    days: Optional[str] = Query(None, description="History window (pro tier)"),
    limit: Optional[str] = Query(None, description="Row limit (pro tier)"),
) -> BattleHistoryResponse:
    """
    Get stored battles, newest first.

    Free tier always returns the latest battles kept by retention. For pro
    tier, ``days`` is clamped to [1, 60] and ``limit`` to [1, 2000]; invalid
    values fall back to the defaults.
    """
    try:
        return await service.get_history(
            user_id, player_tag, tier=tier, days=days, limit=limit
        )
    except ServiceException as e:
        logger.error(
            "battle_history_failed", user_id=user_id, error=str(e), exc_info=True
        )
        raise to_http_exception(e, "Failed to load battle history")
