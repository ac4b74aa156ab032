"""Utility functions shared across features."""

from .statistics import round_half_up, safe_percentage

__all__ = ["round_half_up", "safe_percentage"]
