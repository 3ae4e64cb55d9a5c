"""Wall-clock abstraction so time-dependent logic can be tested."""

from datetime import datetime


class Clock:
    """Source of the current time."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Local wall clock, naive like the stored schedule fields."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given instant until ``set`` is called."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = instant
