"""
Clock port.

All timestamps handled by the publisher are timezone-aware UTC.
Substitutable so passes can be replayed at a fixed instant in tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    def now_utc(self) -> datetime:
        """Return the current instant (UTC, timezone-aware)."""
        ...
