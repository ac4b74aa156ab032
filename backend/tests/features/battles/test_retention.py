from datetime import timedelta

import pytest

from clashboard.core.enums import SubscriptionTier
from clashboard.features.battles.retention import (
    RetentionConfig,
    RetentionPlan,
    build_retention_plan,
    clamp_history_days,
    clamp_history_limit,
    select_battles_to_store,
)


def test_free_plan_keeps_ten_most_recent(utc):
    now = utc(2026, 2, 8, 12, 0)
    # Stored in arbitrary order
    stored = [(f"key-{i:02d}", now - timedelta(minutes=i)) for i in range(15)]
    stored = stored[7:] + stored[:7]

    plan = build_retention_plan(stored, SubscriptionTier.FREE, now, RetentionConfig())

    assert plan.cutoff is None
    assert set(plan.keep_keys) == {f"key-{i:02d}" for i in range(10)}
    assert sorted(plan.select_deletions(stored)) == [
        f"key-{i:02d}" for i in range(10, 15)
    ]


def test_free_plan_with_few_battles_deletes_nothing(utc):
    now = utc(2026, 2, 8)
    stored = [("a", now), ("b", now - timedelta(hours=1))]
    plan = build_retention_plan(stored, SubscriptionTier.FREE, now, RetentionConfig())
    assert plan.select_deletions(stored) == []


def test_pro_plan_uses_rolling_cutoff(utc):
    now = utc(2026, 4, 1)
    stored = [
        ("fresh", now - timedelta(days=1)),
        ("edge", now - timedelta(days=60)),
        ("old", now - timedelta(days=61)),
    ]

    plan = build_retention_plan(stored, SubscriptionTier.PRO, now, RetentionConfig())

    assert plan.keep_keys is None
    assert plan.cutoff == now - timedelta(days=60)
    assert plan.select_deletions(stored) == ["old"]


def test_plan_limits_come_from_config(utc):
    now = utc(2026, 2, 8)
    stored = [(str(i), now - timedelta(minutes=i)) for i in range(5)]
    plan = build_retention_plan(
        stored, SubscriptionTier.FREE, now, RetentionConfig(free_battle_limit=3)
    )
    assert plan.keep_keys == ("0", "1", "2")


def test_empty_plan_deletes_nothing(utc):
    plan = RetentionPlan(tier=SubscriptionTier.FREE)
    assert plan.select_deletions([("a", utc(2026, 1, 1))]) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 60),
        (30, 30),
        ("30", 30),
        ("14days", 14),
        (500, 60),
        (0, 60),
        (-5, 60),
        ("abc", 60),
        (7.9, 7),
        (0.5, 1),
        (True, 60),
        (float("inf"), 60),
    ],
)
def test_clamp_history_days(value, expected):
    assert clamp_history_days(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 2000),
        (100, 100),
        ("250", 250),
        (10_000, 2000),
        (0, 2000),
        ("-1", 2000),
        ("lots", 2000),
        ([], 2000),
    ],
)
def test_clamp_history_limit(value, expected):
    assert clamp_history_limit(value) == expected


def test_clamps_respect_custom_config():
    config = RetentionConfig(
        pro_history_max_days=30,
        pro_history_default_days=7,
        pro_history_max_limit=50,
        pro_history_default_limit=20,
    )
    assert clamp_history_days(None, config) == 7
    assert clamp_history_days(45, config) == 30
    assert clamp_history_limit(None, config) == 20
    assert clamp_history_limit(99, config) == 50


def test_free_selection_is_newest_ten_of_any_order(make_battle, utc):
    now = utc(2026, 2, 8, 12, 0)
    battles = [make_battle(now - timedelta(minutes=i)) for i in range(14, -1, -1)]

    selected = select_battles_to_store(
        battles, SubscriptionTier.FREE, RetentionConfig()
    )

    assert [b["battleTime"] for b in selected] == [
        battles[14 - i]["battleTime"] for i in range(10)
    ]


def test_selection_drops_untimed_battles(make_battle, utc):
    now = utc(2026, 2, 8, 12, 0)
    untimed = [make_battle(None), {"battleTime": "yesterday"}, "not a battle"]
    timed = [make_battle(now - timedelta(minutes=i)) for i in range(3)]

    selected = select_battles_to_store(
        untimed + timed, SubscriptionTier.PRO, RetentionConfig()
    )

    assert selected == timed


def test_selection_keeps_input_order_for_simultaneous_battles(make_battle, utc):
    now = utc(2026, 2, 8, 12, 0)
    first = make_battle(now, 3, 0)
    second = make_battle(now, 0, 3)
    older = make_battle(now - timedelta(minutes=5))

    selected = select_battles_to_store(
        [older, first, second], SubscriptionTier.FREE, RetentionConfig()
    )

    assert selected == [first, second, older]


def test_selection_of_non_list_payload_is_empty():
    assert select_battles_to_store(None, SubscriptionTier.FREE, RetentionConfig()) == []
