"""Core models, errors and clock."""
