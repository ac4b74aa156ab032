from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from clashboard.features.battles.dependencies import get_battle_repository


@pytest.fixture
def client(app, client, battle_repository):
    app.dependency_overrides[get_battle_repository] = lambda: battle_repository
    return client


def _recent_log(make_battle, count):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return [
        make_battle(now - timedelta(minutes=5 * i), trophy_change=30)
        for i in range(count)
    ]


def test_ingest_then_read_history(client, make_battle):
    battles = _recent_log(make_battle, 12)

    response = client.post(
        "/api/v1/users/user-1/battles",
        json={"player_tag": "player1", "battles": battles},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["player_tag"] == "#PLAYER1"
    assert body["received"] == 12
    assert body["inserted"] == 10

    history = client.get(
        "/api/v1/users/user-1/battles", params={"player_tag": "#player1"}
    )

    assert history.status_code == 200
    payload = history.json()
    assert payload["tier"] == "free"
    assert payload["days"] is None
    assert payload["limit"] == 10
    assert len(payload["battles"]) == 10
    assert payload["battles"][0]["battle"] == battles[0]


def test_reingest_reports_duplicates(client, make_battle):
    battles = _recent_log(make_battle, 3)
    request = {"player_tag": "#P1", "battles": battles}

    client.post("/api/v1/users/user-1/battles", json=request)
    response = client.post("/api/v1/users/user-1/battles", json=request)

    assert response.json()["inserted"] == 0
    assert response.json()["duplicates"] == 3


def test_pro_history_clamps_query_params(client, make_battle):
    client.post(
        "/api/v1/users/user-1/battles",
        json={"player_tag": "#P1", "tier": "pro", "battles": _recent_log(make_battle, 3)},
    )

    response = client.get(
        "/api/v1/users/user-1/battles",
        params={"player_tag": "#P1", "tier": "pro", "days": "365", "limit": "abc"},
    )

    assert response.status_code == 200
    assert response.json()["days"] == 60
    assert response.json()["limit"] == 2000
    assert len(response.json()["battles"]) == 3


def test_invalid_player_tag_is_bad_request(client):
    response = client.post(
        "/api/v1/users/user-1/battles", json={"player_tag": "#", "battles": []}
    )

    assert response.status_code == 400
    assert "Invalid player tag" in response.json()["detail"]


def test_database_failure_is_internal_error(client, battle_repository, make_battle):
    battle_repository.insert_if_absent = AsyncMock(
        side_effect=OperationalError("INSERT", {}, None)
    )

    response = client.post(
        "/api/v1/users/user-1/battles",
        json={"player_tag": "#P1", "battles": _recent_log(make_battle, 2)},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to store battles"
