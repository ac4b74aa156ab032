from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from clashboard.features.battles.orm_models import BattleORM
from clashboard.features.battles.repository import BattleRepositoryInterface


def build_battle(
    battle_time: Optional[datetime],
    team_crowns: Optional[int] = 1,
    opponent_crowns: Optional[int] = 0,
    trophy_change: Optional[int] = None,
    team_cards: Optional[List[int]] = None,
    opponent_cards: Optional[List[int]] = None,
    team_tag: str = "#PLAYER1",
    opponent_tag: str = "#RIVAL1",
) -> Dict[str, Any]:
    """Raw battle shaped like the game API battlelog entries."""
    team: Dict[str, Any] = {
        "tag": team_tag,
        "cards": [{"id": card_id} for card_id in (team_cards or [26000000, 26000001])],
    }
    if team_crowns is not None:
        team["crowns"] = team_crowns
    if trophy_change is not None:
        team["trophyChange"] = trophy_change

    opponent: Dict[str, Any] = {
        "tag": opponent_tag,
        "cards": [
            {"id": card_id} for card_id in (opponent_cards or [26000010, 26000011])
        ],
    }
    if opponent_crowns is not None:
        opponent["crowns"] = opponent_crowns

    battle: Dict[str, Any] = {
        "type": "PvP",
        "gameMode": {"id": 72000006, "name": "Ladder"},
        "team": [team],
        "opponent": [opponent],
    }
    if battle_time is not None:
        battle["battleTime"] = battle_time.strftime("%Y%m%dT%H%M%S.000Z")
    return battle


@pytest.fixture
def make_battle():
    return build_battle


@pytest.fixture
def utc():
    """Shortcut for building aware UTC datetimes."""

    def _utc(*args: int) -> datetime:
        return datetime(*args, tzinfo=timezone.utc)

    return _utc


class InMemoryBattleRepository(BattleRepositoryInterface):
    """Battle store with the same insert-if-absent contract as the database."""

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}

    def _scoped(self, user_id: str, player_tag: str) -> List[Dict[str, Any]]:
        return [
            row
            for row in self.rows.values()
            if row["user_id"] == user_id and row["player_tag"] == player_tag
        ]

    async def insert_if_absent(self, rows: Sequence[Dict[str, Any]]) -> int:
        inserted = 0
        for row in rows:
            if row["battle_key"] not in self.rows:
                self.rows[row["battle_key"]] = dict(row)
                inserted += 1
        return inserted

    async def list_battle_refs(self, user_id, player_tag):
        scoped = sorted(
            self._scoped(user_id, player_tag),
            key=lambda row: row["battle_time"],
            reverse=True,
        )
        return [(row["battle_key"], row["battle_time"]) for row in scoped]

    async def delete_except(self, user_id, player_tag, keep_keys):
        keep = set(keep_keys)
        doomed = [
            row["battle_key"]
            for row in self._scoped(user_id, player_tag)
            if not keep or row["battle_key"] not in keep
        ]
        for key in doomed:
            del self.rows[key]
        return len(doomed)

    async def delete_before(self, user_id, player_tag, cutoff):
        doomed = [
            row["battle_key"]
            for row in self._scoped(user_id, player_tag)
            if row["battle_time"] < cutoff
        ]
        for key in doomed:
            del self.rows[key]
        return len(doomed)

    async def find_history(self, user_id, player_tag, limit, since=None):
        scoped = [
            row
            for row in self._scoped(user_id, player_tag)
            if since is None or row["battle_time"] >= since
        ]
        scoped.sort(key=lambda row: row["battle_time"], reverse=True)
        return [BattleORM(**row) for row in scoped[:limit]]


@pytest.fixture
def battle_repository():
    return InMemoryBattleRepository()


@pytest.fixture
def app():
    from clashboard.main import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
