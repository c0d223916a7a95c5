"""
WidgetController — fetch / refresh lifecycle of one mounted widget.

Single Responsibility: decide *when* a widget fetches and fold every
outcome into its ``FetchState``.  What is fetched belongs to the
QueryExecutor; how it looks belongs to the transformer and dispatcher.

Lifecycle::

    mount() ──► preview data? ──yes──► Loaded (no timers, no traffic)
                    │
                    no
                    ▼
              fetch now + interval task (refreshInterval > 0)
              + RefreshBus subscription
                    │
    unmount() ──► cancel interval + pending retry, unsubscribe

Outcome handling in ``fetch()``:
  success            → Loaded, retry attempts reset
  RequestDeferred    → silent retry through RetryScheduler (no error shown)
  WidgetPipelineError→ Error phase, previous data kept
  anything else      → logged with traceback, Error phase

Every fetch gets a sequence number.  A completion older than the newest
one already applied, or that lands after unmount, is discarded.
Deferred fetches are never applied, so they cannot make a request
that is still in flight look stale.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Set

from widget_pipeline.core.config import Settings, settings as default_settings
from widget_pipeline.core.exceptions import RequestDeferred, WidgetPipelineError
from widget_pipeline.models.widget import EntityContext, WidgetConfig
from widget_pipeline.services.broker.envelope import is_rate_limit_message
from widget_pipeline.services.broker.query_executor import QueryExecutor
from widget_pipeline.services.context.resolver import ContextResolver, context_resolver
from widget_pipeline.services.lifecycle.refresh_bus import RefreshBus
from widget_pipeline.services.lifecycle.retry import RetryPolicy, RetryScheduler
from widget_pipeline.services.lifecycle.state import FetchState, Phase
from widget_pipeline.services.render import RenderResult, render_dispatcher
from widget_pipeline.services.render.base import placeholder
from widget_pipeline.services.transform import transform

logger = logging.getLogger(__name__)

LoadingCallback = Callable[[bool], None]
StateCallback = Callable[[FetchState], None]

_FALLBACK_ERROR = "Failed to fetch data"
_LOADING_MESSAGE = "Loading..."


class WidgetController:
    """Lifecycle owner for a single widget instance."""

    def __init__(
        self,
        config: WidgetConfig,
        executor: QueryExecutor,
        bus: RefreshBus,
        entity: Optional[EntityContext] = None,
        path: Optional[str] = None,
        preview_data: Any = None,
        on_loading_change: Optional[LoadingCallback] = None,
        on_state_change: Optional[StateCallback] = None,
        retry_policy: Optional[RetryPolicy] = None,
        resolver: Optional[ContextResolver] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.config = config
        self.key = config.instance_key
        self.entity = entity
        self.path = path
        self.preview_data = preview_data

        self._executor = executor
        self._bus = bus
        self._resolver = resolver or context_resolver
        self._settings = settings or default_settings
        self._on_loading_change = on_loading_change
        self._on_state_change = on_state_change

        self.state = FetchState()
        self.retry = RetryScheduler(retry_policy, callback=self.request_fetch, name=self.key)

        self._mounted = False
        self._seq = 0
        self._applied_seq = 0
        self._interval_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: Set[asyncio.Task] = set()

    # ─────────────────────────────────────────────────────────
    #  PUBLIC API
    # ─────────────────────────────────────────────────────────

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def is_preview(self) -> bool:
        return self.preview_data is not None

    async def mount(self) -> None:
        """Start the widget: preview short-circuit or first fetch + timers."""
        if self._mounted:
            return
        self._mounted = True

        if self.is_preview:
            logger.debug(f"[WidgetController] '{self.key}' mounted with preview data")
            self._set_state(self.state.loaded(self.preview_data))
            return

        self._unsubscribe = self._bus.subscribe(self.key, self.request_fetch)
        interval = self.config.refresh_interval
        if interval > 0:
            self._interval_task = asyncio.create_task(self._interval_loop(interval))
        logger.info(f"[WidgetController] '{self.key}' mounted (interval={interval}s)")
        await self.fetch()

    async def fetch(self) -> None:
        """One fetch cycle.  Never raises."""
        if not self._mounted or self.is_preview:
            return

        self._seq += 1
        seq = self._seq
        if not self.state.has_data:
            self._set_state(self.state.loading())

        try:
            context = self._resolver.resolve(self.path, self.entity)
            data = await self._executor.execute(self.config, context)
        except RequestDeferred as deferral:
            if self._accepts(seq):
                self._defer(deferral)
            return
        except WidgetPipelineError as exc:
            if self._accepts(seq):
                logger.warning(f"[WidgetController] '{self.key}' failed: {exc.message}")
                self.retry.cancel()
                self._apply(seq, self.state.failed(exc.message))
            return
        except Exception as exc:
            if not self._accepts(seq):
                return
            message = str(exc) or _FALLBACK_ERROR
            if is_rate_limit_message(message, self._settings.RATE_LIMIT_SIGNATURES):
                self._defer(RequestDeferred(
                    self._settings.BUSINESS_RATE_LIMIT_RETRY_SECONDS,
                    RequestDeferred.UPSTREAM_RATE_LIMIT,
                ))
                return
            logger.error(
                f"[WidgetController] '{self.key}' unexpected error: {exc}",
                exc_info=True,
            )
            self._apply(seq, self.state.failed(message))
            return

        if self._accepts(seq):
            self.retry.reset()
            self._apply(seq, self.state.loaded(data))

    async def refresh(self) -> None:
        """Out-of-band fetch.  Still subject to the rate limiter."""
        await self.fetch()

    def request_fetch(self) -> None:
        """Schedule a fetch on the running loop (timer and bus entry point)."""
        if not self._mounted:
            return
        task = asyncio.ensure_future(self.fetch())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def unmount(self) -> None:
        """Cancel timers and subscriptions.  In-flight fetches are ignored."""
        if not self._mounted:
            return
        self._mounted = False
        if self._interval_task is not None:
            self._interval_task.cancel()
            self._interval_task = None
        self.retry.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        logger.info(f"[WidgetController] '{self.key}' unmounted")

    def render(self) -> RenderResult:
        """
        Transform + dispatch the current data.

        Error and loading phases replace the content with a message;
        the data kept in ``state`` is not shown until the next success.
        """
        if self.state.phase == Phase.ERROR:
            return placeholder(
                self.config, self.state.error_message or _FALLBACK_ERROR, error=True,
            )
        if self.state.is_loading:
            return placeholder(self.config, _LOADING_MESSAGE, loading=True)
        return render_dispatcher.render(self.config, transform(self.config, self.state.data))

    def snapshot(self) -> dict:
        return {
            "key": self.key,
            "state": self.state.to_dict(),
            "render": self.render().to_dict(),
            "retry": (
                {"delay": self.retry.pending.delay, "reason": self.retry.pending.reason}
                if self.retry.pending else None
            ),
        }

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    def _accepts(self, seq: int) -> bool:
        """
        Mounted guard + stale-completion guard.

        Only applied outcomes advance ``_applied_seq``; a deferred fetch
        never supersedes a request that is still in flight.
        """
        if not self._mounted:
            return False
        if seq <= self._applied_seq:
            logger.debug(
                f"[WidgetController] '{self.key}' dropped stale result #{seq} "
                f"(already applied #{self._applied_seq})"
            )
            return False
        return True

    def _apply(self, seq: int, new_state: FetchState) -> None:
        self._applied_seq = seq
        self._set_state(new_state)

    def _defer(self, deferral: RequestDeferred) -> None:
        logger.info(
            f"[WidgetController] '{self.key}' deferred {deferral.delay_seconds:.1f}s "
            f"({deferral.reason})"
        )
        if not self.retry.schedule(deferral) and self.state.phase == Phase.LOADING:
            self._set_state(self.state.failed(_FALLBACK_ERROR))

    async def _interval_loop(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            if not self._mounted:
                return
            self.request_fetch()

    def _set_state(self, new_state: FetchState) -> None:
        was_loading = self.state.is_loading
        self.state = new_state
        if self._on_loading_change is not None and was_loading != new_state.is_loading:
            self._on_loading_change(new_state.is_loading)
        if self._on_state_change is not None:
            self._on_state_change(new_state)
