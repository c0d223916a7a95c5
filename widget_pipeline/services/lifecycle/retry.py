"""
Silent retry of deferred fetches.

Single Responsibility: own the one timer that re-runs a widget's fetch
after a ``RequestDeferred``.  A new schedule replaces the pending one,
so a widget never has two retries queued, and ``cancel()`` is all that
unmount needs.

The delay comes from the deferral itself:
  cooldown            → remaining ledger time + padding
  upstream_rate_limit → fixed delay (65 s by default)

Usage::

    scheduler = RetryScheduler(RetryPolicy(), callback=controller.request_fetch)
    scheduler.schedule(deferral)   # inside the event loop
    scheduler.pending.delay        # → 61.0
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from widget_pipeline.core.exceptions import RequestDeferred

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """``max_attempts=None`` retries forever; ``upstream_delay`` overrides 65 s."""
    max_attempts: Optional[int] = None
    upstream_delay: Optional[float] = None

    def delay_for(self, deferral: RequestDeferred) -> float:
        if (
            deferral.reason == RequestDeferred.UPSTREAM_RATE_LIMIT
            and self.upstream_delay is not None
        ):
            return self.upstream_delay
        return deferral.delay_seconds

    def allows(self, attempt: int) -> bool:
        return self.max_attempts is None or attempt <= self.max_attempts


@dataclass(frozen=True)
class RetryTicket:
    delay: float
    reason: str
    attempt: int


class RetryScheduler:
    """Single pending retry per widget instance."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        callback: Optional[Callable[[], None]] = None,
        name: str = "",
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._callback = callback
        self._name = name
        self._handle: Optional[asyncio.TimerHandle] = None
        self.pending: Optional[RetryTicket] = None
        self.attempts = 0

    def schedule(self, deferral: RequestDeferred) -> bool:
        """
        Arm the retry timer for *deferral*, replacing any pending one.

        Returns ``False`` when the policy has run out of attempts.
        """
        self.cancel()
        attempt = self.attempts + 1
        if not self.policy.allows(attempt):
            logger.warning(
                f"[RetryScheduler] '{self._name}' gave up after {self.attempts} retries"
            )
            return False

        delay = self.policy.delay_for(deferral)
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire)
        self.pending = RetryTicket(delay=delay, reason=deferral.reason, attempt=attempt)
        self.attempts = attempt
        logger.debug(
            f"[RetryScheduler] '{self._name}' retry #{attempt} in {delay:.1f}s "
            f"({deferral.reason})"
        )
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self.pending = None

    def reset(self) -> None:
        """Forget the attempt count after a successful fetch."""
        self.attempts = 0

    def _fire(self) -> None:
        self._handle = None
        self.pending = None
        if self._callback is not None:
            self._callback()
