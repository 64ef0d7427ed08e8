"""Per-owner resource services."""
