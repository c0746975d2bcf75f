"""Daily operating window for the supervised server."""

from __future__ import annotations

from datetime import date, datetime, time

SECONDS_PER_DAY = 24 * 60 * 60


def _seconds_between(earlier: time, later: time) -> float:
    anchor = date(2000, 1, 1)
    delta = datetime.combine(anchor, later) - datetime.combine(anchor, earlier)
    return delta.total_seconds()


class ScheduleWindow:
    """A ``[start, end)`` interval of wall-clock time that may wrap past midnight.

    When ``start`` is later than ``end`` the window spans midnight, e.g.
    ``22:00``-``02:00``.  Equal endpoints describe an empty window.
    """

    def __init__(self, start: time, end: time) -> None:
        self.start = start
        self.end = end

    @property
    def wraps_midnight(self) -> bool:
        return self.start > self.end

    def contains(self, now: time) -> bool:
        if self.start <= self.end:
            return self.start <= now < self.end
        return now >= self.start or now < self.end

    def minutes_left(self, now: time) -> int:
        """Whole minutes (truncated) until the window closes.

        Assumes ``now`` is inside the window.
        """

        seconds = _seconds_between(now, self.end)
        if self.wraps_midnight and now >= self.end:
            seconds += SECONDS_PER_DAY
        return int(seconds // 60)

    def __repr__(self) -> str:
        return f"ScheduleWindow({self.start:%H:%M}-{self.end:%H:%M})"
