"""
RefreshBus — out-of-band "refresh now" signals addressed by instance key.

A toolbar (or the refresh-all orchestration) broadcasts a key; the
controller mounted under that key fetches immediately.  The signal
bypasses the refresh interval but not the rate limiter.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], None]


class RefreshBus:

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[RefreshCallback]] = {}

    def subscribe(self, key: str, callback: RefreshCallback) -> Callable[[], None]:
        """Register *callback* for *key*; returns the matching unsubscribe."""
        self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(key)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
                if not callbacks:
                    del self._subscribers[key]

        return unsubscribe

    def broadcast(self, key: str) -> bool:
        """Signal *key*.  Returns ``False`` when nobody listens."""
        callbacks = list(self._subscribers.get(key, []))
        if not callbacks:
            logger.debug(f"[RefreshBus] No subscriber for '{key}'")
            return False
        for callback in callbacks:
            callback()
        return True

    def broadcast_all(self) -> int:
        """Signal every key; returns how many keys were signalled."""
        keys = list(self._subscribers)
        for key in keys:
            self.broadcast(key)
        return len(keys)

    def keys(self) -> List[str]:
        return list(self._subscribers)


# ── Singleton ────────────────────────────────────────────────────
refresh_bus = RefreshBus()
