"""Tilt state engine and loss-streak detection."""
