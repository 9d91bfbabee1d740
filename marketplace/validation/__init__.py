"""Request validation."""
