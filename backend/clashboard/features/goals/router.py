"""Goal API endpoints."""

import structlog
from fastapi import APIRouter, status

from clashboard.core.exceptions import ServiceException
from clashboard.core.http_errors import to_http_exception

from .dependencies import GoalServiceDep
from .schemas import GoalCreate, GoalListResponse, GoalResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/users/{user_id}/goals", tags=["goals"])


@router.get("", response_model=GoalListResponse)
async def list_goals(
    user_id: str, service: GoalServiceDep, include_completed: bool = True
) -> GoalListResponse:
    """List a user's goals, newest first."""
    try:
        goals = await service.list_goals(user_id, include_completed)
        return GoalListResponse(goals=goals, total=len(goals))
    except ServiceException as e:
        logger.error("goal_list_failed", user_id=user_id, error=str(e), exc_info=True)
        raise to_http_exception(e, "Failed to load goals")


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    user_id: str, goal_in: GoalCreate, service: GoalServiceDep
) -> GoalResponse:
    """Create a goal. Custom goals are never advanced automatically."""
    try:
        return await service.create_goal(user_id, goal_in)
    except ServiceException as e:
        logger.error(
            "goal_create_failed", user_id=user_id, error=str(e), exc_info=True
        )
        raise to_http_exception(e, "Failed to create goal")
