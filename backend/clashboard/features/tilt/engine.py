"""
Tilt state engine.

Two stages: an instant classification of the most recent battles, then a
time decay that lets the risk fade while the player stays away. A fresh loss
streak resets the elapsed time and re-triggers the instant level.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

import structlog

from clashboard.core.enums import DecayStage, TiltLevel
from clashboard.features.battles.normalizer import (
    extract_battle_time,
    get_trophy_change,
    is_win,
)
from clashboard.utils.statistics import round_half_up, safe_percentage

logger = structlog.get_logger(__name__)

# (min_hours, stage, multiplier), checked in order
DecayStageRule = Tuple[float, DecayStage, float]

DEFAULT_DECAY_STAGES: Tuple[DecayStageRule, ...] = (
    (12, DecayStage.TWELVE_HOURS, 0.0),
    (6, DecayStage.SIX_HOURS, 0.4),
    (2, DecayStage.TWO_HOURS, 0.7),
)


@dataclass(frozen=True)
class TiltConfig:
    """Tilt classification and decay parameters."""

    recent_window: int = 10
    high_base_risk: int = 100
    medium_base_risk: int = 60
    high_risk_threshold: int = 70
    medium_risk_threshold: int = 40
    loss_streak_threshold: int = 3
    high_max_win_rate: float = 40.0
    high_max_net_trophies: float = -60
    medium_min_win_rate: float = 40.0
    medium_max_win_rate: float = 50.0
    decay_stages: Tuple[DecayStageRule, ...] = DEFAULT_DECAY_STAGES


@dataclass
class TiltState:
    """Point-in-time tilt estimate."""

    base_level: TiltLevel
    base_risk: int
    decay_stage: DecayStage
    risk: int
    level: TiltLevel
    alert: bool
    last_battle_at: Optional[datetime] = None
    hours_since_last_battle: Optional[float] = None


def compute_tilt_level(
    battles: Sequence[Dict[str, Any]], config: Optional[TiltConfig] = None
) -> TiltLevel:
    """
    Classify tilt from the most recent battles alone.

    Only wins break a losing run; draws count against the player.

    Args:
        battles: Raw battles, newest first
        config: Tilt parameters

    Returns:
        Base tilt level
    """
    config = config or TiltConfig()
    recent = list(battles[: config.recent_window])
    if not recent:
        return TiltLevel.NONE

    wins = 0
    net_trophies: float = 0
    run = 0
    max_run = 0

    for battle in recent:
        if is_win(battle):
            wins += 1
            run = 0
        else:
            run += 1
            max_run = max(max_run, run)
        net_trophies += get_trophy_change(battle)

    win_rate = safe_percentage(wins, len(recent))

    if max_run >= config.loss_streak_threshold or (
        win_rate < config.high_max_win_rate
        and net_trophies <= config.high_max_net_trophies
    ):
        return TiltLevel.HIGH

    if (
        config.medium_min_win_rate <= win_rate <= config.medium_max_win_rate
        and net_trophies < 0
    ):
        return TiltLevel.MEDIUM

    return TiltLevel.NONE


def risk_from_level(level: TiltLevel, config: Optional[TiltConfig] = None) -> int:
    """Base risk score of a tilt level."""
    config = config or TiltConfig()
    if level == TiltLevel.HIGH:
        return config.high_base_risk
    if level == TiltLevel.MEDIUM:
        return config.medium_base_risk
    return 0


def level_from_risk(risk: float, config: Optional[TiltConfig] = None) -> TiltLevel:
    """Re-derive a tilt level from a (decayed) risk score."""
    config = config or TiltConfig()
    if risk >= config.high_risk_threshold:
        return TiltLevel.HIGH
    if risk >= config.medium_risk_threshold:
        return TiltLevel.MEDIUM
    return TiltLevel.NONE


def resolve_decay_stage(
    hours: Optional[float], config: Optional[TiltConfig] = None
) -> Tuple[DecayStage, float]:
    """Bucket elapsed hours into a decay stage and its multiplier.

    Stage boundaries are inclusive at the lower end: exactly 2h is ``2h``.
    Unknown elapsed time means no decay.
    """
    config = config or TiltConfig()
    if hours is None:
        return DecayStage.NONE, 1.0

    for min_hours, stage, multiplier in sorted(
        config.decay_stages, key=lambda rule: rule[0], reverse=True
    ):
        if hours >= min_hours:
            return stage, multiplier
    return DecayStage.NONE, 1.0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def compute_tilt_state(
    battles: Sequence[Dict[str, Any]],
    now: datetime,
    config: Optional[TiltConfig] = None,
) -> TiltState:
    """
    Compute the decayed tilt state at ``now``.

    Args:
        battles: Raw battles, newest first
        now: Reference instant
        config: Tilt parameters

    Returns:
        TiltState with base and decayed level
    """
    config = config or TiltConfig()
    base_level = compute_tilt_level(battles, config)
    base_risk = risk_from_level(base_level, config)

    times = [t for t in (extract_battle_time(b) for b in battles) if t is not None]
    last_battle_at = max(times) if times else None

    hours: Optional[float] = None
    if last_battle_at is not None:
        elapsed = (_as_utc(now) - last_battle_at).total_seconds()
        hours = max(0.0, elapsed) / 3600

    stage, multiplier = resolve_decay_stage(hours, config)
    risk = round_half_up(base_risk * multiplier)
    level = level_from_risk(risk, config)

    logger.debug(
        "tilt_state_computed",
        base_level=base_level.value,
        decay_stage=stage.value,
        risk=risk,
        level=level.value,
    )

    return TiltState(
        base_level=base_level,
        base_risk=base_risk,
        decay_stage=stage,
        risk=risk,
        level=level,
        alert=level == TiltLevel.HIGH,
        last_battle_at=last_battle_at,
        hours_since_last_battle=hours,
    )
