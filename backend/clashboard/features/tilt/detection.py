"""
Loss-streak detection for tilt coaching.

Unlike the tilt state engine, detection looks only at runs of non-wins and
the trophies lost during them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Sequence

from clashboard.core.enums import TiltAction
from clashboard.features.battles.normalizer import (
    extract_battle_time,
    get_trophy_change,
    is_win,
)

TILT_STREAK = 3
BREAK_STREAK = 5


@dataclass
class TiltDetection:
    """Current loss streak and the suggested reaction."""

    is_on_tilt: bool
    consecutive_losses: int
    trophies_lost: float
    suggested_action: TiltAction


@dataclass
class TiltEvent:
    """A past run of at least three non-wins."""

    start_time: datetime
    end_time: datetime
    consecutive_losses: int
    trophies_lost: float


def suggest_action(streak: int) -> TiltAction:
    if streak >= BREAK_STREAK:
        return TiltAction.BREAK
    if streak >= TILT_STREAK:
        return TiltAction.COUNTER
    return TiltAction.ANALYZE


def detect_tilt(battles: Sequence[Dict[str, Any]]) -> TiltDetection:
    """
    Detect the current run of non-wins.

    Args:
        battles: Raw battles, newest first

    Returns:
        TiltDetection for the run at the head of the list
    """
    streak = 0
    trophy_change: float = 0

    for battle in battles:
        if is_win(battle):
            break
        streak += 1
        trophy_change += get_trophy_change(battle)

    return TiltDetection(
        is_on_tilt=streak >= TILT_STREAK,
        consecutive_losses=streak,
        trophies_lost=abs(trophy_change),
        suggested_action=suggest_action(streak),
    )


def detect_tilt_history(battles: Sequence[Dict[str, Any]]) -> List[TiltEvent]:
    """
    Find every run of at least three non-wins.

    Runs whose first or last battle has no parseable time are dropped.

    Args:
        battles: Raw battles, newest first

    Returns:
        Tilt events, newest first
    """
    events: List[TiltEvent] = []
    run: List[Dict[str, Any]] = []

    def close_run() -> None:
        if len(run) < TILT_STREAK:
            return
        start_time = extract_battle_time(run[0])
        end_time = extract_battle_time(run[-1])
        if start_time is None or end_time is None:
            return
        events.append(
            TiltEvent(
                start_time=start_time,
                end_time=end_time,
                consecutive_losses=len(run),
                trophies_lost=abs(sum(get_trophy_change(b) for b in run)),
            )
        )

    # oldest first
    for battle in reversed(battles):
        if is_win(battle):
            close_run()
            run = []
        else:
            run.append(battle)
    close_run()

    events.reverse()
    return events
