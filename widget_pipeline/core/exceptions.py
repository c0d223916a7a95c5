"""
Error taxonomy for the widget data pipeline.

  WidgetConfigurationError → invalid WidgetConfig, detected before any request.
  TransportError           → non-2xx status, network failure, timeout, bad JSON.
  BusinessDataError        → upstream ``success: false`` that is not a rate limit.
  RequestDeferred          → not an error for the user: the request must be
                             retried later (local cooldown or upstream rate limit).
"""

from __future__ import annotations

from typing import Optional


class WidgetPipelineError(Exception):
    """Base class for every pipeline failure surfaced to a widget."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class WidgetConfigurationError(WidgetPipelineError):
    """The widget violates the queryType / queryId / customQuery invariant."""

    default_message = "Invalid widget configuration"

    def __init__(self, detail: Optional[str] = None) -> None:
        message = self.default_message
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.detail = detail


class TransportError(WidgetPipelineError):
    """HTTP-level failure talking to the plugin gateway."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class BusinessDataError(WidgetPipelineError):
    """The plugin answered ``success: false`` for a non-transient reason."""


class RequestDeferred(WidgetPipelineError):
    """
    The request was not sent (or must be re-sent) after ``delay_seconds``.

    ``reason`` is ``"cooldown"`` for the local rate-limit ledger and
    ``"upstream_rate_limit"`` when the plugin reported a rate limit.
    """

    COOLDOWN = "cooldown"
    UPSTREAM_RATE_LIMIT = "upstream_rate_limit"

    def __init__(self, delay_seconds: float, reason: str) -> None:
        super().__init__(f"Deferred for {delay_seconds:.1f}s ({reason})")
        self.delay_seconds = delay_seconds
        self.reason = reason
