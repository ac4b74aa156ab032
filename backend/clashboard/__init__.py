"""
Clashboard Backend Application Package.

This package contains the battle analytics engine for the Clashboard player
dashboard: battle ingestion and retention, push session clustering, tilt
tracking and goal progress.
"""

__version__ = "1.0.0"
__author__ = "Clashboard Team"
