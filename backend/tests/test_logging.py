from datetime import timedelta
from unittest.mock import AsyncMock

import structlog
from structlog.contextvars import get_contextvars

from clashboard.core.logging import build_processors, player_log_context
from clashboard.features.battles.retention import RetentionConfig
from clashboard.features.battles.service import BattleHistoryService


def test_player_context_is_bound_inside_block_only():
    with player_log_context("user-1", "#P1", operation="sync"):
        assert get_contextvars() == {
            "user_id": "user-1",
            "player_tag": "#P1",
            "operation": "sync",
        }

    assert "player_tag" not in get_contextvars()


def test_nested_context_restores_outer_values():
    with player_log_context("user-1", "#P1", operation="sync"):
        with player_log_context("user-1", "#P1", tier="free"):
            assert get_contextvars()["tier"] == "free"
            assert get_contextvars()["operation"] == "sync"
        assert "tier" not in get_contextvars()
        assert get_contextvars()["operation"] == "sync"


def test_renderer_follows_json_flag():
    assert isinstance(build_processors(True)[-1], structlog.processors.JSONRenderer)
    assert isinstance(build_processors(False)[-1], structlog.dev.ConsoleRenderer)


async def test_ingest_binds_player_to_repository_logs(
    battle_repository, make_battle, utc
):
    now = utc(2026, 2, 8, 20, 0)
    seen = {}

    def capture(rows):
        seen.update(get_contextvars())
        return len(rows)

    battle_repository.insert_if_absent = AsyncMock(side_effect=capture)
    service = BattleHistoryService(battle_repository, config=RetentionConfig())

    await service.ingest(
        "user-1", "p1", [make_battle(now - timedelta(minutes=1))], now=now
    )

    assert seen["user_id"] == "user-1"
    assert seen["player_tag"] == "#P1"
    assert seen["tier"] == "free"
    assert "player_tag" not in get_contextvars()
