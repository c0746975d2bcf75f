"""Restart limiter for a server that keeps dying."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List

logger = logging.getLogger(__name__)


class CrashWatchdog:
    """Remember recent start attempts and refuse restarts when there are too many.

    Every start attempt counts, successful or not, because a server that dies
    right after launching looks the same as one that fails to launch.
    """

    def __init__(
        self,
        limit: int = 3,
        window: timedelta = timedelta(minutes=5),
        cooldown: float = 60.0,
    ) -> None:
        self.limit = limit
        self.window = window
        self.cooldown = cooldown
        self.history: List[datetime] = []

    def _prune(self, now: datetime) -> None:
        window_minutes = int(self.window.total_seconds() // 60)
        self.history = [
            started
            for started in self.history
            if int((now - started).total_seconds() // 60) <= window_minutes
        ]

    def record_start(self, now: datetime) -> None:
        self.history.append(now)

    def allows_restart(self, now: datetime) -> bool:
        self._prune(now)
        if len(self.history) >= self.limit:
            logger.warning(
                "Watchdog: %d starts within %s, refusing to restart",
                len(self.history),
                self.window,
            )
            return False
        return True
