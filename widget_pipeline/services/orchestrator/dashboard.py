"""
Dashboard — registry of mounted widget controllers.

Single Responsibility: own the set of live ``WidgetController``s keyed by
instance key and coordinate page-level actions on them.  It does no
fetching of its own; refreshes travel through the ``RefreshBus`` like
any other force-refresh signal.

Refresh-all is staggered so a full dashboard does not hit every plugin
at once: widgets are ordered by business priority, then signalled in
batches with a short pause between widgets and a longer one between
batches.

Usage::

    from widget_pipeline.services.orchestrator import dashboard

    await dashboard.mount(config, entity=entity)
    await dashboard.refresh_all()
    dashboard.snapshot("12")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from widget_pipeline.core.config import Settings, settings as default_settings
from widget_pipeline.models.widget import EntityContext, WidgetConfig
from widget_pipeline.services.broker.query_executor import QueryExecutor
from widget_pipeline.services.lifecycle.controller import WidgetController
from widget_pipeline.services.lifecycle.refresh_bus import RefreshBus

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

# (keywords, rank): first match wins, unmatched widgets go last.
_PRIORITY_RULES: List[Tuple[Tuple[str, ...], int]] = [
    (("security", "critical"), 1),
    (("high priority", "incident"), 2),
    (("open", "unresolved"), 3),
    (("activity", "recent"), 4),
]
_DEFAULT_PRIORITY = 5


def refresh_priority(name: str) -> int:
    lowered = (name or "").lower()
    for keywords, rank in _PRIORITY_RULES:
        if any(k in lowered for k in keywords):
            return rank
    return _DEFAULT_PRIORITY


class Dashboard:
    """Mounted widgets for one page."""

    def __init__(
        self,
        executor: Optional[QueryExecutor] = None,
        bus: Optional[RefreshBus] = None,
        settings: Optional[Settings] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.executor = executor or QueryExecutor(settings=self.settings)
        self.bus = bus or RefreshBus()
        self._sleep = sleep or asyncio.sleep
        self._controllers: Dict[str, WidgetController] = {}
        self._refreshing = False

    # ─────────────────────────────────────────────────────────
    #  PUBLIC API
    # ─────────────────────────────────────────────────────────

    async def mount(
        self,
        config: WidgetConfig,
        entity: Optional[EntityContext] = None,
        path: Optional[str] = None,
        preview_data: Any = None,
    ) -> WidgetController:
        """Mount *config*; an instance already mounted under its key is replaced."""
        key = config.instance_key
        if key in self._controllers:
            self.unmount(key)

        controller = WidgetController(
            config,
            self.executor,
            self.bus,
            entity=entity,
            path=path,
            preview_data=preview_data,
            settings=self.settings,
        )
        self._controllers[key] = controller
        await controller.mount()
        return controller

    def unmount(self, key: str) -> bool:
        controller = self._controllers.pop(key, None)
        if controller is None:
            return False
        controller.unmount()
        return True

    def get(self, key: str) -> Optional[WidgetController]:
        return self._controllers.get(key)

    def snapshot(self, key: str) -> Optional[Dict[str, Any]]:
        controller = self._controllers.get(key)
        return controller.snapshot() if controller else None

    def keys(self) -> List[str]:
        return list(self._controllers)

    def refresh(self, key: str) -> bool:
        """Force-refresh one widget.  ``False`` when nothing is mounted under *key*."""
        return self.bus.broadcast(key)

    async def refresh_all(self) -> List[str]:
        """
        Signal every mounted widget, staggered by batch.

        Returns the keys in the order they were signalled.  A call made
        while a refresh-all is already running returns ``[]``.
        """
        if self._refreshing:
            logger.info("[Dashboard] Refresh-all already running, ignored")
            return []

        self._refreshing = True
        try:
            ordered = self.refresh_order()
            batch_size = max(1, self.settings.REFRESH_BATCH_SIZE)
            logger.info(
                f"[Dashboard] Refreshing {len(ordered)} widget(s) "
                f"in batches of {batch_size}"
            )

            signalled: List[str] = []
            for start in range(0, len(ordered), batch_size):
                if start > 0:
                    await self._sleep(self.settings.REFRESH_BATCH_DELAY_SECONDS)
                batch = ordered[start:start + batch_size]
                for index, key in enumerate(batch):
                    if index > 0:
                        await self._sleep(self.settings.REFRESH_WIDGET_DELAY_SECONDS)
                    if self.bus.broadcast(key):
                        signalled.append(key)
            return signalled
        finally:
            self._refreshing = False

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    def loading_keys(self) -> List[str]:
        return [k for k, c in self._controllers.items() if c.state.is_loading]

    def shutdown(self) -> None:
        """Unmount everything (application shutdown)."""
        for key in list(self._controllers):
            self.unmount(key)
        logger.info("[Dashboard] All widgets unmounted")

    def refresh_order(self) -> List[str]:
        """Mounted, non-preview keys sorted by priority (stable)."""
        live = [
            (key, c) for key, c in self._controllers.items()
            if not c.is_preview
        ]
        live.sort(key=lambda item: refresh_priority(item[1].config.name))
        return [key for key, _ in live]


# ── Singleton ────────────────────────────────────────────────────
dashboard = Dashboard()
