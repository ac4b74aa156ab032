"""Goal service.

Thin orchestration: goals are loaded through the repository, evaluated by
the pure evaluator and the resulting deltas are persisted in one commit.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog

from clashboard.core.decorators import input_validation, service_error_handler

from .evaluator import GoalProgressContext, evaluate_goal_progress
from .orm_models import GoalORM
from .repository import GoalRepositoryInterface
from .schemas import GoalCreate, GoalResponse, GoalSyncResult

logger = structlog.get_logger(__name__)


class GoalService:
    """Service for user goals and their auto-progress."""

    def __init__(self, repository: GoalRepositoryInterface):
        """
        Initialize goal service.

        :param repository: Goal repository instance
        """
        self.repository = repository

    @service_error_handler("GoalService")
    @input_validation(validate_non_empty=["user_id"])
    async def list_goals(
        self, user_id: str, include_completed: bool = True
    ) -> List[GoalResponse]:
        """List a user's goals, newest first."""
        goals = await self.repository.list_by_user(user_id, include_completed)
        return [GoalResponse.model_validate(goal) for goal in goals]

    @service_error_handler("GoalService")
    @input_validation(validate_non_empty=["user_id"])
    async def create_goal(self, user_id: str, goal_in: GoalCreate) -> GoalResponse:
        """
        Create a goal for a user.

        :param user_id: Owning user
        :param goal_in: Goal type, target and optional starting value
        :returns: Stored goal
        """
        goal = GoalORM(
            user_id=user_id,
            type=goal_in.type.value,
            title=goal_in.title,
            target_value=goal_in.target_value,
            current_value=goal_in.current_value or 0,
            completed=False,
        )
        goal = await self.repository.create(goal)

        logger.info(
            "goal_created",
            user_id=user_id,
            goal_id=goal.id,
            goal_type=goal.type,
            target_value=goal.target_value,
        )
        return GoalResponse.model_validate(goal)

    @service_error_handler("GoalService")
    @input_validation(validate_non_empty=["user_id"])
    async def sync_progress(
        self,
        user_id: str,
        context: GoalProgressContext,
        now: Optional[datetime] = None,
    ) -> GoalSyncResult:
        """
        Advance a user's open goals from live player data.

        Only goals the evaluator marks for update are written. Completion is
        stamped with ``now`` and is never reverted.

        :param user_id: Owning user
        :param context: Current trophies, win rate and streak
        :param now: Completion timestamp (defaults to utcnow)
        :returns: Counts of evaluated and updated goals
        """
        now = now or datetime.now(timezone.utc)
        goals = await self.repository.list_by_user(user_id, include_completed=False)

        updated: List[GoalORM] = []
        completed_ids: List[int] = []

        for goal in goals:
            progress = evaluate_goal_progress(goal, context)
            if progress is None or not progress.should_update:
                continue

            goal.mark_progress(progress.current_value, progress.completed, now)
            updated.append(goal)
            if progress.completed:
                completed_ids.append(goal.id)

        await self.repository.save_all(updated)

        logger.info(
            "goals_synced",
            user_id=user_id,
            evaluated=len(goals),
            updated=len(updated),
            completed=len(completed_ids),
        )

        return GoalSyncResult(
            evaluated=len(goals),
            updated=len(updated),
            completed_goal_ids=completed_ids,
        )
