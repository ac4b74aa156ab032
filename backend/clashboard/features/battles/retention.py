"""
Tier-aware retention policy for stored battles.

Free users keep only their most recent battles; pro users keep a rolling
window. The policy is a pure decision: the repository executes the plan,
always scoped to a single (user, player tag) pair.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from clashboard.core.enums import SubscriptionTier

from .normalizer import order_newest_first

# (battle_key, battle_time)
StoredBattleRef = Tuple[str, datetime]


@dataclass(frozen=True)
class RetentionConfig:
    """Retention and history-query limits per subscription tier."""

    free_battle_limit: int = 10
    pro_history_max_days: int = 60
    pro_history_default_days: int = 60
    pro_history_max_limit: int = 2000
    pro_history_default_limit: int = 2000


@dataclass(frozen=True)
class RetentionPlan:
    """What to keep for one (user, tag) after an ingestion.

    Exactly one of ``keep_keys`` (free tier allow-list) or ``cutoff`` (pro
    tier age limit) is set.
    """

    tier: SubscriptionTier
    keep_keys: Optional[Tuple[str, ...]] = None
    cutoff: Optional[datetime] = None

    def select_deletions(self, stored: Iterable[StoredBattleRef]) -> List[str]:
        """Keys from ``stored`` that this plan removes."""
        if self.keep_keys is not None:
            keep = set(self.keep_keys)
            return [key for key, _ in stored if key not in keep]
        if self.cutoff is not None:
            return [key for key, battle_time in stored if battle_time < self.cutoff]
        return []


def pro_history_cutoff(
    now: datetime, config: RetentionConfig, days: Optional[int] = None
) -> datetime:
    """Oldest battle time still inside the pro window."""
    return now - timedelta(days=days if days is not None else config.pro_history_max_days)


def build_retention_plan(
    stored: Sequence[StoredBattleRef],
    tier: SubscriptionTier,
    now: datetime,
    config: RetentionConfig,
) -> RetentionPlan:
    """Decide which stored battles survive a sync.

    :param stored: Keys and battle times currently stored for (user, tag)
    :param tier: Subscription tier of the user
    :param now: Reference instant for the pro window
    :param config: Retention limits
    :returns: Plan with a keep allow-list (free) or age cutoff (pro)
    """
    if tier == SubscriptionTier.PRO:
        return RetentionPlan(tier=tier, cutoff=pro_history_cutoff(now, config))

    newest_first = sorted(stored, key=lambda ref: ref[1], reverse=True)
    keep = tuple(key for key, _ in newest_first[: config.free_battle_limit])
    return RetentionPlan(tier=tier, keep_keys=keep)


def select_battles_to_store(
    battles: Sequence[Dict[str, Any]],
    tier: SubscriptionTier,
    config: RetentionConfig,
) -> List[Dict[str, Any]]:
    """Battles of a payload worth storing, newest first.

    Battles without a parseable time are dropped. Free users only get the
    ``free_battle_limit`` most recent battles, whatever the payload order.

    :param battles: Raw battle payloads in any order
    :param tier: Subscription tier of the user
    :param config: Retention limits
    :returns: Selected battles ordered by battle time, newest first
    """
    ordered = order_newest_first(battles)
    if tier == SubscriptionTier.PRO:
        return ordered
    return ordered[: config.free_battle_limit]


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _coerce_positive_int(value: Any) -> Optional[int]:
    """Parse query-style input; None when non-numeric or not positive.

    Strings keep their leading integer part (``"30days"`` -> 30); positive
    fractions floor toward zero before clamping.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return None
        parsed: float = int(match.group(1))
    elif isinstance(value, (int, float)):
        parsed = value
    else:
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return math.floor(parsed)


def clamp_history_days(value: Any, config: RetentionConfig = RetentionConfig()) -> int:
    """Clamp a requested pro history window to ``[1, max_days]``.

    Non-numeric or non-positive input falls back to the default window.
    """
    parsed = _coerce_positive_int(value)
    if parsed is None:
        return config.pro_history_default_days
    return min(config.pro_history_max_days, max(1, parsed))


def clamp_history_limit(value: Any, config: RetentionConfig = RetentionConfig()) -> int:
    """Clamp a requested pro history row limit to ``[1, max_limit]``.

    Non-numeric or non-positive input falls back to the default limit.
    """
    parsed = _coerce_positive_int(value)
    if parsed is None:
        return config.pro_history_default_limit
    return min(config.pro_history_max_limit, max(1, parsed))
