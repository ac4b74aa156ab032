"""
Push session clustering.

A push session is an uninterrupted block of play, inferred purely from the
time gaps between battles. Sessions are a computed view over a battle list
and are never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from clashboard.features.battles.normalizer import (
    extract_battle_time,
    get_trophy_change,
    is_loss,
    is_win,
)
from clashboard.utils.statistics import safe_percentage

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    """Clustering parameters."""

    max_gap_minutes: int = 30
    min_battles: int = 2

    @property
    def max_gap(self) -> timedelta:
        return timedelta(minutes=self.max_gap_minutes)


@dataclass
class PushSession:
    """One cluster of battles played without a long break."""

    start_time: datetime
    end_time: datetime
    battles: List[Dict[str, Any]] = field(default_factory=list)
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0
    net_trophies: float = 0

    @property
    def size(self) -> int:
        return len(self.battles)

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


def _build_session(cluster: Sequence[Tuple[datetime, Dict[str, Any]]]) -> PushSession:
    times = [battle_time for battle_time, _ in cluster]
    battles = [battle for _, battle in cluster]

    wins = sum(1 for battle in battles if is_win(battle))
    losses = sum(1 for battle in battles if is_loss(battle))

    return PushSession(
        start_time=min(times),
        end_time=max(times),
        battles=battles,
        wins=wins,
        losses=losses,
        draws=len(battles) - wins - losses,
        win_rate=safe_percentage(wins, len(battles)),
        net_trophies=sum(get_trophy_change(battle) for battle in battles),
    )


def cluster_push_sessions(
    battles: Sequence[Dict[str, Any]], config: Optional[SessionConfig] = None
) -> List[PushSession]:
    """
    Group battles into push sessions by time gap.

    Battles are sorted newest first; each battle joins the current cluster
    when it lies within ``max_gap_minutes`` of the battle added last,
    otherwise the cluster is closed. Clusters smaller than ``min_battles``
    are dropped silently.

    Args:
        battles: Raw battles in any order
        config: Clustering parameters (defaults to 30 minutes / 2 battles)

    Returns:
        Sessions, newest first
    """
    config = config or SessionConfig()
    if not battles or len(battles) < max(config.min_battles, 1):
        return []

    timed = [
        (battle_time, battle)
        for battle_time, battle in ((extract_battle_time(b), b) for b in battles)
        if battle_time is not None
    ]
    timed.sort(key=lambda item: item[0], reverse=True)

    sessions: List[PushSession] = []
    current: List[Tuple[datetime, Dict[str, Any]]] = []

    for battle_time, battle in timed:
        if current and abs(current[-1][0] - battle_time) > config.max_gap:
            if len(current) >= config.min_battles:
                sessions.append(_build_session(current))
            current = []
        current.append((battle_time, battle))

    if current and len(current) >= config.min_battles:
        sessions.append(_build_session(current))

    logger.debug(
        "push_sessions_clustered",
        battles=len(battles),
        timed=len(timed),
        sessions=len(sessions),
        max_gap_minutes=config.max_gap_minutes,
    )

    return sessions


def compute_consecutive_losses(battles: Sequence[Dict[str, Any]]) -> int:
    """Count battles from the start of the list until the first win.

    Draws count as losses here.
    """
    count = 0
    for battle in battles:
        if is_win(battle):
            break
        count += 1
    return count
