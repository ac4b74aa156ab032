"""Dependencies for the analytics feature.

Engine configs are built once per request from settings and passed in
explicitly.
"""

from typing import Annotated

from fastapi import Depends

from clashboard.core import get_global_settings
from clashboard.features.battles.dependencies import BattleHistoryServiceDep
from .service import AnalyticsService


async def get_analytics_service(
    battle_service: BattleHistoryServiceDep,
) -> AnalyticsService:
    """Get analytics service with engine configs from settings.

    :param battle_service: Battle history service for stored analytics
    :returns: Analytics service
    """
    settings = get_global_settings()
    return AnalyticsService(
        battle_service,
        session_config=settings.session_config(),
        tilt_config=settings.tilt_config(),
    )


AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]

__all__ = ["get_analytics_service", "AnalyticsServiceDep"]
