from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


class Clock:
    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FrozenClock(Clock):
    def __init__(self, now: Optional[datetime] = None) -> None:
        self._now = now or datetime.now(tz=timezone.utc)

    def now(self) -> datetime:
        return self._now
