"""
Refresh Lifecycle Controller.

Modules:
  state       : Phase, FetchState.
  retry       : RetryPolicy, RetryScheduler (one pending retry per widget).
  refresh_bus : RefreshBus (force-refresh by instance key).
  controller  : WidgetController (mount / fetch / refresh / unmount).
"""

from widget_pipeline.services.lifecycle.controller import WidgetController
from widget_pipeline.services.lifecycle.refresh_bus import RefreshBus, refresh_bus
from widget_pipeline.services.lifecycle.retry import RetryPolicy, RetryScheduler
from widget_pipeline.services.lifecycle.state import FetchState, Phase

__all__ = [
    "FetchState",
    "Phase",
    "RefreshBus",
    "RetryPolicy",
    "RetryScheduler",
    "WidgetController",
    "refresh_bus",
]
