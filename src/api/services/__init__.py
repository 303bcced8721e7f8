"""API-layer services."""
