"""Repository pattern implementation for the goals feature."""

from abc import ABC, abstractmethod
from typing import List, Sequence

import structlog
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from .orm_models import GoalORM

logger = structlog.get_logger(__name__)


class GoalRepositoryInterface(ABC):
    """Interface for goal repository following Repository pattern."""

    @abstractmethod
    async def list_by_user(
        self, user_id: str, include_completed: bool = True
    ) -> List[GoalORM]:
        """List a user's goals, newest first."""
        pass

    @abstractmethod
    async def create(self, goal: GoalORM) -> GoalORM:
        """Persist a new goal."""
        pass

    @abstractmethod
    async def save_all(self, goals: Sequence[GoalORM]) -> None:
        """Commit changes made to already loaded goals."""
        pass


class SQLAlchemyGoalRepository(GoalRepositoryInterface):
    """SQLAlchemy implementation of goal repository."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        :param db: SQLAlchemy async session
        """
        self.db = db

    async def list_by_user(
        self, user_id: str, include_completed: bool = True
    ) -> List[GoalORM]:
        stmt = select(GoalORM).where(GoalORM.user_id == user_id)
        if not include_completed:
            stmt = stmt.where(GoalORM.completed.is_(False))
        stmt = stmt.order_by(desc(GoalORM.created_at), desc(GoalORM.id))

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, goal: GoalORM) -> GoalORM:
        """Create new goal."""
        self.db.add(goal)
        await self.db.commit()
        await self.db.refresh(goal)

        logger.debug("goal_created", goal_id=goal.id, user_id=goal.user_id)

        return goal

    async def save_all(self, goals: Sequence[GoalORM]) -> None:
        """Save modified goals in one commit."""
        if not goals:
            return
        await self.db.commit()
