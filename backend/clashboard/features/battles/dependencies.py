"""Dependencies for the battles feature.

Injects the repository and retention limits into the service.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clashboard.core import get_db, get_global_settings
from .repository import BattleRepositoryInterface, SQLAlchemyBattleRepository
from .service import BattleHistoryService


async def get_battle_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BattleRepositoryInterface:
    """Get battle repository instance.

    :param db: Database session
    :returns: Battle repository implementation
    """
    return SQLAlchemyBattleRepository(db)


async def get_battle_history_service(
    repository: Annotated[BattleRepositoryInterface, Depends(get_battle_repository)],
) -> BattleHistoryService:
    """Get battle history service with retention limits from settings.

    :param repository: Battle repository
    :returns: Battle history service
    """
    return BattleHistoryService(
        repository, config=get_global_settings().retention_config()
    )


# Type aliases for cleaner dependency injection
BattleHistoryServiceDep = Annotated[
    BattleHistoryService, Depends(get_battle_history_service)
]

__all__ = [
    "get_battle_repository",
    "get_battle_history_service",
    "BattleHistoryServiceDep",
]
