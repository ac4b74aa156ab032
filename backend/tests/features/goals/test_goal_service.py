from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from clashboard.core.enums import GoalType, StreakType
from clashboard.core.exceptions import DatabaseError, ValidationError
from clashboard.features.goals.evaluator import GoalProgressContext
from clashboard.features.goals.orm_models import GoalORM
from clashboard.features.goals.repository import GoalRepositoryInterface
from clashboard.features.goals.schemas import GoalCreate
from clashboard.features.goals.service import GoalService
from clashboard.features.sessions.summary import Streak


@pytest.fixture
def mock_repository():
    return AsyncMock(spec=GoalRepositoryInterface)


@pytest.fixture
def service(mock_repository):
    return GoalService(mock_repository)


def _goal(goal_id, goal_type, target, current, completed=False):
    return GoalORM(
        id=goal_id,
        user_id="user-1",
        type=goal_type,
        target_value=target,
        current_value=current,
        completed=completed,
    )


async def test_sync_progress_updates_and_completes(service, mock_repository, utc):
    trophies = _goal(1, "trophies", 6000, 5900)
    winrate = _goal(2, "winrate", 70, 55)
    streak = _goal(3, "streak", 5, 4)
    custom = _goal(4, "custom", 10, 2)
    mock_repository.list_by_user.return_value = [trophies, winrate, streak, custom]
    now = utc(2026, 2, 8, 12, 0)

    result = await service.sync_progress(
        "user-1",
        GoalProgressContext(
            player_trophies=6200, win_rate=55.0, streak=Streak(StreakType.WIN, 2)
        ),
        now,
    )

    assert result.evaluated == 4
    assert result.updated == 1
    assert result.completed_goal_ids == [1]
    assert trophies.completed is True
    assert trophies.completed_at == now
    assert trophies.current_value == 6200
    assert streak.current_value == 4
    assert custom.current_value == 2
    mock_repository.list_by_user.assert_awaited_once_with(
        "user-1", include_completed=False
    )
    mock_repository.save_all.assert_awaited_once_with([trophies])


async def test_sync_progress_with_nothing_to_change(service, mock_repository, utc):
    mock_repository.list_by_user.return_value = [_goal(1, "trophies", 6000, 5900)]

    result = await service.sync_progress(
        "user-1",
        GoalProgressContext(player_trophies=5900, win_rate=0),
        utc(2026, 2, 8),
    )

    assert result.updated == 0
    assert result.completed_goal_ids == []
    mock_repository.save_all.assert_awaited_once_with([])


async def test_sync_progress_requires_user_id(service):
    with pytest.raises(ValidationError):
        await service.sync_progress("", GoalProgressContext(0, 0))


async def test_sync_progress_wraps_database_errors(service, mock_repository):
    mock_repository.list_by_user.side_effect = OperationalError("SELECT", {}, None)

    with pytest.raises(DatabaseError):
        await service.sync_progress("user-1", GoalProgressContext(0, 0))


async def test_create_goal(service, mock_repository):
    async def assign_id(goal):
        goal.id = 7
        return goal

    mock_repository.create.side_effect = assign_id

    created = await service.create_goal(
        "user-1", GoalCreate(type=GoalType.STREAK, target_value=5, title="Five")
    )

    assert created.id == 7
    assert created.type == "streak"
    assert created.current_value == 0
    assert created.completed is False
    stored = mock_repository.create.call_args.args[0]
    assert stored.user_id == "user-1"
    assert stored.title == "Five"


async def test_list_goals(service, mock_repository):
    mock_repository.list_by_user.return_value = [
        _goal(2, "winrate", 60, 58),
        _goal(1, "trophies", 6000, 6000, completed=True),
    ]

    goals = await service.list_goals("user-1")

    assert [g.id for g in goals] == [2, 1]
    assert goals[1].completed is True
