from datetime import timedelta

from clashboard.core.enums import HistoryRange, StreakType
from clashboard.features.sessions.summary import (
    Streak,
    build_trophy_progression,
    compute_battle_stats,
    compute_daily_summary,
    compute_streak,
    filter_battles_by_range,
)


def _results(make_battle, now, outcomes, step_minutes=5):
    """Newest-first battles from a string like 'WWLD'."""
    crowns = {"W": (1, 0), "L": (0, 1), "D": (1, 1)}
    trophies = {"W": 30, "L": -30, "D": 0}
    return [
        make_battle(
            now - timedelta(minutes=step_minutes * i),
            *crowns[outcome],
            trophy_change=trophies[outcome],
        )
        for i, outcome in enumerate(outcomes)
    ]


def test_compute_streak(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)

    assert compute_streak(_results(make_battle, now, "WWWL")) == Streak(
        StreakType.WIN, 3
    )
    assert compute_streak(_results(make_battle, now, "LLW")) == Streak(
        StreakType.LOSS, 2
    )
    assert compute_streak(_results(make_battle, now, "WDW")) == Streak(
        StreakType.WIN, 1
    )
    assert compute_streak(_results(make_battle, now, "DWW")) == Streak()
    assert compute_streak([]) == Streak(StreakType.NONE, 0)


def test_compute_battle_stats_counts_draws_as_losses(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)
    stats = compute_battle_stats(_results(make_battle, now, "LDWW"))

    assert stats.total == 4
    assert stats.wins == 2
    assert stats.losses == 2
    assert stats.win_rate == 50.0
    assert stats.streak == Streak(StreakType.LOSS, 2)
    assert stats.last_battle_at == now


def test_compute_battle_stats_empty():
    stats = compute_battle_stats([])
    assert stats.total == 0
    assert stats.win_rate == 0
    assert stats.streak == Streak()
    assert stats.last_battle_at is None


def test_daily_summary_only_counts_today(make_battle, utc):
    now = utc(2026, 2, 8, 1, 0)
    today = _results(make_battle, now, "WWLD", step_minutes=10)
    yesterday = [make_battle(utc(2026, 2, 7, 23, 50), 1, 0, trophy_change=30)]

    summary = compute_daily_summary(today + yesterday, now)

    assert summary.date == "2026-02-08"
    assert summary.battles == 4
    assert summary.wins == 2
    assert summary.losses == 1
    assert summary.trophy_delta == 30
    # 2 wins out of 3 decided battles
    assert summary.win_rate == 67
    assert summary.streak == Streak(StreakType.WIN, 2)
    assert len(summary.sessions) == 1


def test_daily_summary_keeps_single_battle_sessions(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)
    battles = [
        make_battle(now, 1, 0),
        make_battle(now - timedelta(hours=3), 0, 1),
    ]

    summary = compute_daily_summary(battles, now)

    assert [s.size for s in summary.sessions] == [1, 1]


def test_daily_summary_win_rate_rounds_half_up(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)
    # 5 wins out of 8 decided battles = 62.5%
    summary = compute_daily_summary(_results(make_battle, now, "WWWWWLLL"), now)
    assert summary.win_rate == 63


def test_daily_summary_without_battles(utc):
    summary = compute_daily_summary([], utc(2026, 2, 8, 20, 0))
    assert summary.battles == 0
    assert summary.win_rate == 0
    assert summary.sessions == []


def test_trophy_progression_walks_back_from_current(make_battle, utc):
    now = utc(2026, 2, 8, 20, 0)
    recent = _results(make_battle, now, "WW")
    older = _results(make_battle, now - timedelta(hours=4), "LLL")

    points = build_trophy_progression(recent + older, current_trophies=6000)

    assert [p.session_index for p in points] == [0, 1]
    assert [p.trophy_delta for p in points] == [-90, 60]
    assert [p.trophies for p in points] == [5940, 6000]
    assert points[0].time < points[1].time
    assert points[0].losses == 3
    assert points[1].wins == 2


def test_trophy_progression_without_battles():
    assert build_trophy_progression([], 5000) == []


def test_filter_battles_by_range(make_battle, utc):
    now = utc(2026, 2, 20, 15, 0)
    battles = [
        make_battle(utc(2026, 2, 20, 1, 0)),
        make_battle(utc(2026, 2, 19, 23, 0)),
        make_battle(utc(2026, 2, 13, 0, 0)),
        make_battle(utc(2026, 2, 12, 23, 59)),
        make_battle(utc(2026, 1, 16, 0, 0)),
        make_battle(utc(2026, 1, 15, 23, 0)),
        make_battle(None),
    ]

    assert len(filter_battles_by_range(battles, HistoryRange.TODAY, now)) == 1
    assert len(filter_battles_by_range(battles, HistoryRange.WEEK, now)) == 3
    assert len(filter_battles_by_range(battles, HistoryRange.SEASON, now)) == 5
    assert filter_battles_by_range([], HistoryRange.WEEK, now) == []
