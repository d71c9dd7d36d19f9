"""Analysis engine sources."""
