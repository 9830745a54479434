"""
Clock used to stamp snapshots.

Contract: ``now()`` returns a tz-aware UTC datetime.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock that returns a set instant until advanced (for tests and replays)."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self.instant

    def advance(self, seconds: float = 1.0) -> datetime:
        self.instant = self.instant + timedelta(seconds=seconds)
        return self.instant
