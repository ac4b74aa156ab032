"""Goals feature module.

User-declared goals and their auto-progress from live player data.
"""

from .evaluator import GoalProgress, GoalProgressContext, evaluate_goal_progress
from .orm_models import GoalORM
from .schemas import GoalCreate, GoalResponse, GoalSyncResult
from .service import GoalService

__all__ = [
    # Evaluator
    "GoalProgress",
    "GoalProgressContext",
    "evaluate_goal_progress",
    # Models
    "GoalORM",
    # Schemas
    "GoalCreate",
    "GoalResponse",
    "GoalSyncResult",
    # Service
    "GoalService",
]
