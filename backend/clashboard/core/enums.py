"""Shared enums used across features.

This module provides a single source of truth for enums used in both models and schemas.
"""

from enum import Enum


class SubscriptionTier(str, Enum):
    """Subscription level controlling retention and history limits."""

    FREE = "free"
    PRO = "pro"


class GoalType(str, Enum):
    """Kinds of user-declared goals."""

    TROPHIES = "trophies"
    STREAK = "streak"
    WINRATE = "winrate"
    CUSTOM = "custom"


class TiltLevel(str, Enum):
    """Discrete tilt classification."""

    HIGH = "high"
    MEDIUM = "medium"
    NONE = "none"


class DecayStage(str, Enum):
    """Bucket of elapsed time since the last battle."""

    NONE = "none"
    TWO_HOURS = "2h"
    SIX_HOURS = "6h"
    TWELVE_HOURS = "12h"


class StreakType(str, Enum):
    """Direction of the current result streak."""

    WIN = "win"
    LOSS = "loss"
    NONE = "none"


class TiltAction(str, Enum):
    """Coaching action suggested for the current loss streak."""

    BREAK = "break"
    COUNTER = "counter"
    ANALYZE = "analyze"


class HistoryRange(str, Enum):
    """Named time ranges for trophy progression queries."""

    TODAY = "today"
    WEEK = "week"
    SEASON = "season"
