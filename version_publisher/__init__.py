"""Scheduled version publishing for content items."""

__version__ = "0.1.0"
