"""Feature packages: one vertical slice per domain concern."""
