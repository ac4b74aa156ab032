"""Dependencies for the player sync feature."""

from typing import Annotated

from fastapi import Depends

from clashboard.features.analytics.dependencies import AnalyticsServiceDep
from clashboard.features.battles.dependencies import BattleHistoryServiceDep
from clashboard.features.goals.dependencies import GoalServiceDep
from .service import PlayerSyncService


async def get_player_sync_service(
    battle_service: BattleHistoryServiceDep,
    goal_service: GoalServiceDep,
    analytics_service: AnalyticsServiceDep,
) -> PlayerSyncService:
    """Get player sync service instance.

    FastAPI caches ``get_db`` per request, so every collaborator shares one
    database session.
    """
    return PlayerSyncService(battle_service, goal_service, analytics_service)


PlayerSyncServiceDep = Annotated[PlayerSyncService, Depends(get_player_sync_service)]

__all__ = ["get_player_sync_service", "PlayerSyncServiceDep"]
