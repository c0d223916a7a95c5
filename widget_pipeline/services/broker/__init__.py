"""
Plugin broker — everything between a widget and the plugin gateway.

Modules:
  rate_limiter   : Cooldown ledger keyed by plugin/instance/widget + clocks.
  http_client    : Async httpx wrapper with auth, timeout, error handling.
  envelope       : Response-envelope unwrapping and failure classification.
  query_executor : Builds the request, enforces the ledger, normalizes data.

Public API::

    from widget_pipeline.services.broker import QueryExecutor, rate_limiter
"""

from widget_pipeline.services.broker.http_client import PluginHTTPClient
from widget_pipeline.services.broker.query_executor import QueryExecutor
from widget_pipeline.services.broker.rate_limiter import (
    ManualClock,
    MonotonicClock,
    RateLimiter,
    rate_limiter,
)

__all__ = [
    "ManualClock",
    "MonotonicClock",
    "PluginHTTPClient",
    "QueryExecutor",
    "RateLimiter",
    "rate_limiter",
]
