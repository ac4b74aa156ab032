from datetime import timedelta

import pytest

from clashboard.core.enums import DecayStage, TiltLevel
from clashboard.features.tilt.engine import (
    TiltConfig,
    compute_tilt_level,
    compute_tilt_state,
    level_from_risk,
    resolve_decay_stage,
    risk_from_level,
)


def _losses(make_battle, last_battle_at, count=3, trophy_change=-30):
    return [
        make_battle(
            last_battle_at - timedelta(minutes=4 * i), 0, 1, trophy_change=trophy_change
        )
        for i in range(count)
    ]


def test_three_losses_right_now_trigger_alert(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)

    state = compute_tilt_state(_losses(make_battle, now), now)

    assert state.base_level == TiltLevel.HIGH
    assert state.base_risk == 100
    assert state.decay_stage == DecayStage.NONE
    assert state.risk == 100
    assert state.level == TiltLevel.HIGH
    assert state.alert is True
    assert state.last_battle_at == now
    assert state.hours_since_last_battle == 0


def test_same_losses_six_hours_later_decay_to_medium(make_battle, utc):
    last = utc(2026, 2, 8, 14, 0)

    state = compute_tilt_state(_losses(make_battle, last), last + timedelta(hours=6))

    assert state.base_level == TiltLevel.HIGH
    assert state.decay_stage == DecayStage.SIX_HOURS
    assert state.risk == 40
    assert state.level == TiltLevel.MEDIUM
    assert state.alert is False
    assert state.hours_since_last_battle == 6


@pytest.mark.parametrize(
    "hours, stage, risk, level",
    [
        (0, DecayStage.NONE, 100, TiltLevel.HIGH),
        (1.99, DecayStage.NONE, 100, TiltLevel.HIGH),
        (2, DecayStage.TWO_HOURS, 70, TiltLevel.HIGH),
        (5.99, DecayStage.TWO_HOURS, 70, TiltLevel.HIGH),
        (6, DecayStage.SIX_HOURS, 40, TiltLevel.MEDIUM),
        (11.99, DecayStage.SIX_HOURS, 40, TiltLevel.MEDIUM),
        (12, DecayStage.TWELVE_HOURS, 0, TiltLevel.NONE),
        (72, DecayStage.TWELVE_HOURS, 0, TiltLevel.NONE),
    ],
)
def test_decay_stage_boundaries(make_battle, utc, hours, stage, risk, level):
    last = utc(2026, 2, 8, 8, 0)

    state = compute_tilt_state(
        _losses(make_battle, last), last + timedelta(hours=hours)
    )

    assert state.decay_stage == stage
    assert state.risk == risk
    assert state.level == level


@pytest.mark.parametrize("outcomes", ["LLL", "LWLLWW"])
def test_risk_never_increases_as_time_passes(make_battle, utc, outcomes):
    last = utc(2026, 2, 8, 8, 0)
    crowns = {"W": (1, 0), "L": (0, 1)}
    battles = [
        make_battle(last - timedelta(minutes=5 * i), *crowns[o], trophy_change=-30)
        for i, o in enumerate(outcomes)
    ]

    risks = [
        compute_tilt_state(battles, last + timedelta(hours=h)).risk
        for h in (0, 1, 2, 3, 6, 9, 12, 24)
    ]

    assert risks == sorted(risks, reverse=True)
    assert risks[-1] == 0


def test_medium_base_level_decays(make_battle, utc):
    last = utc(2026, 2, 8, 8, 0)
    # 5 wins / 10, net trophies negative, no 3-loss run
    outcomes = "WLWLWLWLWL"
    crowns = {"W": (1, 0), "L": (0, 1)}
    trophies = {"W": 25, "L": -30}
    battles = [
        make_battle(last - timedelta(minutes=5 * i), *crowns[o], trophy_change=trophies[o])
        for i, o in enumerate(outcomes)
    ]

    assert compute_tilt_level(battles) == TiltLevel.MEDIUM
    fresh = compute_tilt_state(battles, last)
    assert (fresh.base_risk, fresh.risk, fresh.level) == (60, 60, TiltLevel.MEDIUM)
    two_hours = compute_tilt_state(battles, last + timedelta(hours=2))
    # 60 * 0.7 = 42
    assert (two_hours.risk, two_hours.level) == (42, TiltLevel.MEDIUM)
    six_hours = compute_tilt_state(battles, last + timedelta(hours=6))
    # 60 * 0.4 = 24
    assert (six_hours.risk, six_hours.level) == (24, TiltLevel.NONE)


def test_no_battles_means_no_tilt(utc):
    state = compute_tilt_state([], utc(2026, 2, 8))

    assert state.base_level == TiltLevel.NONE
    assert state.risk == 0
    assert state.level == TiltLevel.NONE
    assert state.alert is False
    assert state.last_battle_at is None
    assert state.hours_since_last_battle is None
    assert state.decay_stage == DecayStage.NONE


def test_battles_without_time_do_not_decay(make_battle, utc):
    battles = [make_battle(None, 0, 1) for _ in range(3)]

    state = compute_tilt_state(battles, utc(2026, 2, 8))

    assert state.last_battle_at is None
    assert state.decay_stage == DecayStage.NONE
    assert state.risk == 100
    assert state.alert is True


def test_last_battle_is_latest_parseable_time(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)
    battles = [
        make_battle(now - timedelta(hours=3), 0, 1),
        make_battle(now - timedelta(hours=1), 0, 1),
        make_battle(None, 0, 1),
    ]

    state = compute_tilt_state(battles, now)

    assert state.last_battle_at == now - timedelta(hours=1)
    assert state.decay_stage == DecayStage.NONE


def test_future_battle_clamps_elapsed_time_to_zero(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)
    state = compute_tilt_state(_losses(make_battle, now + timedelta(hours=1)), now)
    assert state.hours_since_last_battle == 0
    assert state.decay_stage == DecayStage.NONE


def test_tilt_level_rules(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)

    def battles(outcomes, trophy_change):
        crowns = {"W": (1, 0), "L": (0, 1), "D": (1, 1)}
        return [
            make_battle(now - timedelta(minutes=i), *crowns[o], trophy_change=trophy_change[o])
            for i, o in enumerate(outcomes)
        ]

    # Draws extend a losing run
    assert compute_tilt_level(
        battles("LDLW", {"W": 30, "L": -30, "D": 0})
    ) == TiltLevel.HIGH
    # Low win rate with heavy trophy losses
    assert compute_tilt_level(
        battles("LLWLLWLLWL", {"W": 20, "L": -30, "D": 0})
    ) == TiltLevel.HIGH
    # Winning player
    assert compute_tilt_level(
        battles("WWLWWLWW", {"W": 30, "L": -30, "D": 0})
    ) == TiltLevel.NONE
    # Only the most recent window counts
    assert compute_tilt_level(
        battles("WLWLWWWWWWLLLLL", {"W": 30, "L": -30, "D": 0})
    ) == TiltLevel.NONE
    assert compute_tilt_level([]) == TiltLevel.NONE


def test_risk_and_level_mapping():
    assert risk_from_level(TiltLevel.HIGH) == 100
    assert risk_from_level(TiltLevel.MEDIUM) == 60
    assert risk_from_level(TiltLevel.NONE) == 0
    assert level_from_risk(70) == TiltLevel.HIGH
    assert level_from_risk(69) == TiltLevel.MEDIUM
    assert level_from_risk(40) == TiltLevel.MEDIUM
    assert level_from_risk(39) == TiltLevel.NONE


def test_custom_decay_stages():
    config = TiltConfig(decay_stages=((1, DecayStage.TWO_HOURS, 0.5),))
    assert resolve_decay_stage(0.5, config) == (DecayStage.NONE, 1.0)
    assert resolve_decay_stage(1, config) == (DecayStage.TWO_HOURS, 0.5)
    assert resolve_decay_stage(None, config) == (DecayStage.NONE, 1.0)
