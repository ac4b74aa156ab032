"""Analytics API endpoints.

Supplied-battle endpoints are stateless; the per-user endpoint reads the
stored battle history.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Query

from clashboard.core.enums import HistoryRange, SubscriptionTier
from clashboard.core.exceptions import ServiceException
from clashboard.core.http_errors import to_http_exception
from clashboard.features.sessions.schemas import SessionsRequest, SessionsResponse
from clashboard.features.tilt.schemas import TiltRequest, TiltResponse

from .dependencies import AnalyticsServiceDep
from .schemas import AnalyticsReport

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["analytics"])


@router.post("/analytics/sessions", response_model=SessionsResponse)
async def cluster_sessions(
    request: SessionsRequest, service: AnalyticsServiceDep
) -> SessionsResponse:
    """Group supplied battles into push sessions, newest first."""
    try:
        return await service.cluster_sessions(
            request.battles,
            max_gap_minutes=request.max_gap_minutes,
            min_battles=request.min_battles,
        )
    except ServiceException as e:
        logger.error("session_clustering_failed", error=str(e), exc_info=True)
        raise to_http_exception(e, "Failed to compute push sessions")


@router.post("/analytics/tilt", response_model=TiltResponse)
async def evaluate_tilt(
    request: TiltRequest, service: AnalyticsServiceDep
) -> TiltResponse:
    """Tilt state of supplied battles (newest first) at ``now``."""
    try:
        return await service.evaluate_tilt(request.battles, now=request.now)
    except ServiceException as e:
        logger.error("tilt_evaluation_failed", error=str(e), exc_info=True)
        raise to_http_exception(e, "Failed to compute tilt state")


@router.get("/users/{user_id}/analytics", response_model=AnalyticsReport)
async def get_player_analytics(
    user_id: str,
    service: AnalyticsServiceDep,
    player_tag: str = Query(..., description="Player tag, with or without '#'"),
    tier: SubscriptionTier = Query(SubscriptionTier.FREE),
    trophies: Optional[float] = Query(
        None, description="Current trophies, enables trophy progression"
    ),
    history_range: HistoryRange = Query(HistoryRange.WEEK, alias="range"),
) -> AnalyticsReport:
    """Sessions, stats, tilt and today's summary from stored battles."""
    try:
        return await service.get_player_analytics(
            user_id,
            player_tag,
            tier=tier,
            current_trophies=trophies,
            history_range=history_range,
        )
    except ServiceException as e:
        logger.error(
            "player_analytics_failed", user_id=user_id, error=str(e), exc_info=True
        )
        raise to_http_exception(e, "Failed to compute analytics")
