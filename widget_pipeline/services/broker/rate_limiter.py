"""
RateLimiter — Per-widget cooldown ledger.

Single Responsibility: remember when a request for a given key was last
admitted and answer whether a new one may be sent.  No timers, no HTTP.

Keys are composite ``plugin:instance:widget-name`` strings.  The ledger
stores the admission timestamp; entries are never evicted, a newer
admission simply supersedes the older one.

The clock is injectable so tests can move time by hand::

    clock = ManualClock()
    limiter = RateLimiter(cooldown_seconds=60, clock=clock)
    limiter.record_admission("jira:main:Open issues")
    clock.advance(15)
    limiter.time_remaining_ms("jira:main:Open issues")   # 45000
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Protocol

from widget_pipeline.core.config import settings

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def now(self) -> float:
        """Current time in seconds."""
        ...


class MonotonicClock:
    """Wall-clock-independent time source."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class RateLimiter:
    """
    Cooldown ledger shared by every widget instance in the process.

    All access happens on the event-loop thread between awaits, so the
    plain dict needs no lock.
    """

    def __init__(
        self,
        cooldown_seconds: Optional[float] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.cooldown_seconds = (
            cooldown_seconds
            if cooldown_seconds is not None
            else settings.RATE_LIMIT_COOLDOWN_SECONDS
        )
        self.clock: Clock = clock or MonotonicClock()
        self._ledger: Dict[str, float] = {}

    def should_admit(self, key: str) -> bool:
        """``True`` if no request for *key* was admitted within the window."""
        last = self._ledger.get(key)
        if last is None:
            return True
        return self.clock.now() - last >= self.cooldown_seconds

    def record_admission(self, key: str) -> None:
        """Stamp *key* with the current time (at send, not at completion)."""
        self._ledger[key] = self.clock.now()

    def time_remaining_ms(self, key: str) -> int:
        """Milliseconds until *key* is admitted again (``0`` if it already is)."""
        last = self._ledger.get(key)
        if last is None:
            return 0
        remaining = self.cooldown_seconds - (self.clock.now() - last)
        return max(0, int(round(remaining * 1000)))

    def last_admission(self, key: str) -> Optional[float]:
        return self._ledger.get(key)

    def clear(self) -> None:
        self._ledger.clear()

    def __len__(self) -> int:
        return len(self._ledger)


# ── Singleton ────────────────────────────────────────────────────
rate_limiter = RateLimiter()
