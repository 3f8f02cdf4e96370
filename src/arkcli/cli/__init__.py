"""Command-line interface for arkcli."""

__all__ = []
