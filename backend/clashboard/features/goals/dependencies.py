"""Dependencies for the goals feature."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clashboard.core import get_db
from .repository import GoalRepositoryInterface, SQLAlchemyGoalRepository
from .service import GoalService


async def get_goal_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> GoalRepositoryInterface:
    """Get goal repository instance."""
    return SQLAlchemyGoalRepository(db)


async def get_goal_service(
    repository: Annotated[GoalRepositoryInterface, Depends(get_goal_repository)],
) -> GoalService:
    """Get goal service instance."""
    return GoalService(repository)


GoalServiceDep = Annotated[GoalService, Depends(get_goal_service)]

__all__ = ["get_goal_repository", "get_goal_service", "GoalServiceDep"]
