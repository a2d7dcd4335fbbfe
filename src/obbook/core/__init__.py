"""Core package: shared models."""
