"""Exception types shared across the publisher."""

from __future__ import annotations


class PublisherError(Exception):
    """Base exception for publisher failures."""

    pass


class StoreError(PublisherError):
    """Persistence operation failed (timeout, lock contention, bad schema)."""

    def __init__(self, operation: str, error: str) -> None:
        self.operation = operation
        self.error = error
        super().__init__(f"Store operation '{operation}' failed: {error}")


class ConfigError(PublisherError):
    """Configuration is missing or invalid."""

    pass
