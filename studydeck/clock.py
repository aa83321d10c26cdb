"""Injectable time sources for the review service."""

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock time in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given moment, advanced manually (tests, batch recompute)"""

    def __init__(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, delta) -> datetime:
        self.moment = self.moment + delta
        return self.moment
