"""Push session clustering and battle summaries."""
