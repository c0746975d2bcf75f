"""Countdown warnings sent to the server console before a scheduled stop."""

from __future__ import annotations

from typing import Iterable, Optional, Set, Tuple

DEFAULT_THRESHOLDS: Tuple[int, ...] = (10, 5, 1)


def notice_command(minutes: int) -> str:
    unit = "minute" if minutes == 1 else "minutes"
    return f"say Server will stop in {minutes} {unit}!"


class ShutdownNotices:
    """Track which countdown warnings were already sent for the current run."""

    def __init__(self, thresholds: Iterable[int] = DEFAULT_THRESHOLDS) -> None:
        self.thresholds = tuple(sorted(set(thresholds), reverse=True))
        self._sent: Set[int] = set()

    def reset(self) -> None:
        self._sent.clear()

    def due(self, minutes_left: int) -> Optional[str]:
        """Return the console command to send for ``minutes_left``, if any.

        Only an exact threshold match fires, and each threshold fires once
        until :meth:`reset` is called.  Call :meth:`mark_sent` once the
        command actually reached the server.
        """

        if minutes_left in self.thresholds and minutes_left not in self._sent:
            return notice_command(minutes_left)
        return None

    def mark_sent(self, minutes_left: int) -> None:
        self._sent.add(minutes_left)

    @property
    def sent(self) -> Set[int]:
        return set(self._sent)
