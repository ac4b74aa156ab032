"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .database import get_db, db_manager
from .exceptions import (
    ServiceException,
    DatabaseError,
    ValidationError,
    InvalidPlayerTagError,
)
from .enums import (
    SubscriptionTier,
    GoalType,
    TiltLevel,
    DecayStage,
    StreakType,
    TiltAction,
    HistoryRange,
)
from .models import Base

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_global_settings",
    # Database
    "get_db",
    "db_manager",
    # Exceptions
    "ServiceException",
    "DatabaseError",
    "ValidationError",
    "InvalidPlayerTagError",
    # Enums
    "SubscriptionTier",
    "GoalType",
    "TiltLevel",
    "DecayStage",
    "StreakType",
    "TiltAction",
    "HistoryRange",
    # Models
    "Base",
]
