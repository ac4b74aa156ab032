"""
Goal auto-progress evaluation.

Side-effect free: the caller persists the returned delta and stamps the
completion time.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol

from clashboard.core.enums import GoalType, StreakType
from clashboard.features.sessions.summary import Streak
from clashboard.utils.statistics import round_half_up


class GoalLike(Protocol):
    """Anything shaped like a stored goal."""

    type: str
    target_value: float
    current_value: Optional[float]
    completed: Optional[bool]


@dataclass(frozen=True)
class GoalProgressContext:
    """Live player data goals are measured against."""

    player_trophies: float
    win_rate: float
    streak: Streak = field(default_factory=Streak)


@dataclass(frozen=True)
class GoalProgress:
    """Delta to apply to one goal."""

    should_update: bool
    current_value: float
    completed: bool


def _goal_type(value: object) -> Optional[GoalType]:
    try:
        return GoalType(value)
    except ValueError:
        return None


def evaluate_goal_progress(
    goal: Optional[GoalLike], context: GoalProgressContext
) -> Optional[GoalProgress]:
    """
    Work out how a goal moves given live player data.

    Completed goals, custom goals and unknown types never auto-advance.
    Streak goals only react to a winning streak and never go down.

    Args:
        goal: Stored goal
        context: Current trophies, win rate and streak

    Returns:
        GoalProgress, or None when the goal is not touched
    """
    if goal is None or goal.completed:
        return None

    current = goal.current_value or 0
    goal_type = _goal_type(goal.type)

    if goal_type == GoalType.TROPHIES:
        value = context.player_trophies
        return GoalProgress(
            should_update=value != current,
            current_value=value,
            completed=value >= goal.target_value,
        )

    if goal_type == GoalType.WINRATE:
        value = round_half_up(context.win_rate)
        return GoalProgress(
            should_update=value != current,
            current_value=value,
            completed=value >= goal.target_value,
        )

    if goal_type == GoalType.STREAK and context.streak.type == StreakType.WIN:
        value = context.streak.count
        return GoalProgress(
            should_update=value > current,
            current_value=value,
            completed=value >= goal.target_value,
        )

    return None
