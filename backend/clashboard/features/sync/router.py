"""Player sync API endpoint."""

import structlog
from fastapi import APIRouter

from clashboard.core.exceptions import ServiceException
from clashboard.core.http_errors import to_http_exception

from .dependencies import PlayerSyncServiceDep
from .schemas import SyncRequest, SyncResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/users/{user_id}/sync", tags=["sync"])


@router.post("", response_model=SyncResponse)
async def sync_player(
    user_id: str, request: SyncRequest, service: PlayerSyncServiceDep
) -> SyncResponse:
    """
    Sync a player's battle log.

    Stores and prunes battles, recomputes sessions, stats and tilt, then
    advances goals. A failure in storage or goals returns ``status="partial"``
    with an entry in ``errors``.
    """
    try:
        return await service.sync(user_id, request)
    except ServiceException as e:
        logger.error("player_sync_failed", user_id=user_id, error=str(e), exc_info=True)
        raise to_http_exception(e, "Failed to sync player data")
