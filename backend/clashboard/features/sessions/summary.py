"""
Aggregate battle statistics built on top of push sessions.

Covers the current streak, overall battle stats used as goal context, the
daily push summary and the per-session trophy progression used for charts.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from clashboard.core.enums import HistoryRange, StreakType
from clashboard.features.battles.normalizer import (
    extract_battle_time,
    get_trophy_change,
    is_loss,
    is_win,
)
from clashboard.utils.statistics import round_half_up, safe_percentage

from .clustering import PushSession, SessionConfig, cluster_push_sessions

_RANGE_DAYS = {
    HistoryRange.TODAY: 0,
    HistoryRange.WEEK: 7,
    HistoryRange.SEASON: 35,
}


@dataclass(frozen=True)
class Streak:
    """Current run of identical results, newest battle first."""

    type: StreakType = StreakType.NONE
    count: int = 0


@dataclass
class BattleStats:
    """Overall stats of a battle list."""

    total: int
    wins: int
    losses: int
    win_rate: float
    streak: Streak
    last_battle_at: Optional[datetime] = None


@dataclass
class DailySummary:
    """Today's push activity."""

    date: str
    battles: int
    wins: int
    losses: int
    trophy_delta: float
    win_rate: int
    streak: Streak
    sessions: List[PushSession] = field(default_factory=list)


@dataclass
class TrophyProgressionPoint:
    """Trophy count at the end of one session."""

    time: datetime
    trophies: int
    session_index: int
    trophy_delta: float
    wins: int
    losses: int


def compute_streak(battles: Sequence[Dict[str, Any]]) -> Streak:
    """
    Compute the current win or loss streak.

    Args:
        battles: Raw battles, newest first

    Returns:
        Streak type and length; a draw ends the streak
    """
    streak_type = StreakType.NONE
    count = 0

    for battle in battles:
        if is_win(battle):
            result = StreakType.WIN
        elif is_loss(battle):
            result = StreakType.LOSS
        else:
            break

        if count == 0:
            streak_type = result
        elif result != streak_type:
            break
        count += 1

    return Streak(type=streak_type, count=count)


def _latest_battle_time(battles: Sequence[Dict[str, Any]]) -> Optional[datetime]:
    times = [t for t in (extract_battle_time(b) for b in battles) if t is not None]
    return max(times) if times else None


def compute_battle_stats(battles: Sequence[Dict[str, Any]]) -> BattleStats:
    """
    Compute overall stats of a battle list.

    Every battle that is not a win counts as a loss. The streak follows the
    same rule, so a draw extends a losing streak here.

    Args:
        battles: Raw battles, newest first

    Returns:
        BattleStats with a percentage win rate
    """
    wins = sum(1 for battle in battles if is_win(battle))
    total = len(battles)

    streak_type = StreakType.NONE
    count = 0
    for battle in battles:
        result = StreakType.WIN if is_win(battle) else StreakType.LOSS
        if count == 0:
            streak_type = result
        elif result != streak_type:
            break
        count += 1

    return BattleStats(
        total=total,
        wins=wins,
        losses=total - wins,
        win_rate=safe_percentage(wins, total),
        streak=Streak(type=streak_type, count=count),
        last_battle_at=_latest_battle_time(battles),
    )


def _start_of_day(now: datetime) -> datetime:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)


def _battles_since(
    battles: Sequence[Dict[str, Any]], cutoff: datetime
) -> List[Dict[str, Any]]:
    selected = []
    for battle in battles:
        battle_time = extract_battle_time(battle)
        if battle_time is not None and battle_time >= cutoff:
            selected.append(battle)
    return selected


def compute_daily_summary(
    battles: Sequence[Dict[str, Any]],
    now: datetime,
    config: Optional[SessionConfig] = None,
) -> DailySummary:
    """
    Summarize the battles played since UTC midnight of ``now``.

    The win rate only counts decided battles and is rounded to a whole
    percentage. Sessions include single-battle ones.

    Args:
        battles: Raw battles, newest first
        now: Reference instant
        config: Clustering gap (``min_battles`` is forced to 1)

    Returns:
        DailySummary for the UTC day of ``now``
    """
    day_start = _start_of_day(now)
    today = _battles_since(battles, day_start)

    wins = sum(1 for battle in today if is_win(battle))
    losses = sum(1 for battle in today if is_loss(battle))
    gap = (config or SessionConfig()).max_gap_minutes

    return DailySummary(
        date=day_start.date().isoformat(),
        battles=len(today),
        wins=wins,
        losses=losses,
        trophy_delta=sum(get_trophy_change(battle) for battle in today),
        win_rate=round_half_up(safe_percentage(wins, wins + losses)),
        streak=compute_streak(today),
        sessions=cluster_push_sessions(
            today, SessionConfig(max_gap_minutes=gap, min_battles=1)
        ),
    )


def build_trophy_progression(
    battles: Sequence[Dict[str, Any]],
    current_trophies: float,
    config: Optional[SessionConfig] = None,
) -> List[TrophyProgressionPoint]:
    """
    Build one trophy point per session for charting.

    Walks back from the current trophy count through every session's net
    trophies, then replays them oldest first.

    Args:
        battles: Raw battles in the desired range
        current_trophies: Player's trophy count now
        config: Clustering gap (``min_battles`` is forced to 1)

    Returns:
        Points ordered oldest session first
    """
    gap = (config or SessionConfig()).max_gap_minutes
    sessions = cluster_push_sessions(
        battles, SessionConfig(max_gap_minutes=gap, min_battles=1)
    )
    chronological = list(reversed(sessions))

    running = current_trophies - sum(s.net_trophies for s in chronological)
    points = []
    for index, session in enumerate(chronological):
        running += session.net_trophies
        points.append(
            TrophyProgressionPoint(
                time=session.end_time,
                trophies=round_half_up(running),
                session_index=index,
                trophy_delta=session.net_trophies,
                wins=session.wins,
                losses=session.losses,
            )
        )
    return points


def filter_battles_by_range(
    battles: Sequence[Dict[str, Any]],
    history_range: HistoryRange,
    now: datetime,
) -> List[Dict[str, Any]]:
    """Keep battles played since the start of the range.

    Ranges start at UTC midnight of ``now``, minus 7 days for ``week`` and
    35 days (one season) for ``season``.
    """
    days = _RANGE_DAYS.get(HistoryRange(history_range), 7)
    cutoff = _start_of_day(now) - timedelta(days=days)
    return _battles_since(battles, cutoff)
