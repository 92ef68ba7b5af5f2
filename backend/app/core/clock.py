"""Strict Clock: UTC timestamps that never repeat or go backwards within a process."""

from datetime import datetime, timedelta, timezone

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(moment: datetime) -> str:
    """ISO-8601 with microseconds and a Z suffix."""
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


class StrictClock:
    """Hands out strictly increasing timestamps.

    Wall-clock resolution can repeat a reading between two fast calls (or step
    back after an NTP adjustment); in that case the previous reading is bumped
    by one microsecond.
    """

    def __init__(self, source=utc_now):
        self._source = source
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = self._source()
        if self._last is not None and current <= self._last:
            current = self._last + _TICK
        self._last = current
        return current

    def isoformat(self) -> str:
        return isoformat_z(self.now())
