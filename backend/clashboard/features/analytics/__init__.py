"""Session, stats and tilt analytics over supplied or stored battles."""
