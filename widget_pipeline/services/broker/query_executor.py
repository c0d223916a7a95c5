"""
QueryExecutor — Widget configuration → plugin request → normalized data.

Single Responsibility: turn a ``WidgetConfig`` plus resolved context into
one gateway request and return the unwrapped payload.  Decides nothing
about *when* to run; the refresh controller owns timing.

Pipeline per call:
  1. Validate the queryType invariant (fail fast, nothing is sent).
  2. Consult the rate-limit ledger; stamp it at send time.
  3. Build endpoint + body, POST through PluginHTTPClient.
  4. Classify failures (transport / upstream rate limit / business).
  5. Unwrap one level of response envelope.

Rate-limit conditions are raised as ``RequestDeferred`` so the caller can
retry silently; every other failure is a ``WidgetPipelineError``.

Usage::

    executor = QueryExecutor(PluginHTTPClient(), rate_limiter)
    data = await executor.execute(widget, {"clientId": 42})
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from widget_pipeline.core.config import Settings, settings as default_settings
from widget_pipeline.core.exceptions import (
    BusinessDataError,
    RequestDeferred,
    TransportError,
)
from widget_pipeline.models.widget import QueryType, WidgetConfig
from widget_pipeline.services.broker.envelope import (
    failure_message,
    is_business_failure,
    is_rate_limit_message,
    unwrap_envelope,
)
from widget_pipeline.services.broker.http_client import PluginHTTPClient
from widget_pipeline.services.broker.rate_limiter import RateLimiter, rate_limiter
from widget_pipeline.services.context.resolver import ParamMap, merge_parameters

logger = logging.getLogger(__name__)

_CUSTOM_QUERY_SUFFIX = "query"


class QueryExecutor:
    """Builds, sends and normalizes widget queries."""

    def __init__(
        self,
        client: Optional[PluginHTTPClient] = None,
        limiter: Optional[RateLimiter] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.client = client or PluginHTTPClient(self.settings)
        self.limiter = limiter if limiter is not None else rate_limiter

    # ─────────────────────────────────────────────────────────
    #  PUBLIC API
    # ─────────────────────────────────────────────────────────

    async def execute(self, config: WidgetConfig, context: Optional[ParamMap] = None) -> Any:
        """
        Run the widget's query and return the normalized payload.

        Raises:
            WidgetConfigurationError: queryType/queryId/customQuery mismatch, nothing sent.
            RequestDeferred:          cooldown active or upstream rate limit.
            TransportError:           non-2xx, network failure, timeout.
            BusinessDataError:        ``success: false`` from the plugin.
        """
        config.validate_query()

        key = config.rate_limit_key
        if not self.limiter.should_admit(key):
            remaining_ms = self.limiter.time_remaining_ms(key)
            delay = remaining_ms / 1000.0 + self.settings.retry_padding_seconds
            logger.debug(
                f"[QueryExecutor] '{key}' in cooldown, deferring {delay:.1f}s"
            )
            raise RequestDeferred(delay, RequestDeferred.COOLDOWN)

        endpoint = self.build_endpoint(config)
        body = self.build_body(config, context)

        self.limiter.record_admission(key)
        result = await self.client.post_json(endpoint, body)

        if not result["ok"]:
            error = result.get("error") or "Request failed"
            self._raise_if_rate_limited(key, error)
            raise TransportError(error, status=result.get("status", 0))

        payload = result.get("data")
        if is_business_failure(payload):
            message = failure_message(payload)
            self._raise_if_rate_limited(key, message)
            logger.warning(f"[QueryExecutor] '{key}' business error: {message}")
            raise BusinessDataError(message)

        return unwrap_envelope(payload)

    def build_endpoint(self, config: WidgetConfig) -> str:
        """Gateway path for the widget's default or custom query."""
        base = (
            f"/plugins/{_segment(config.plugin_name)}"
            f"/instances/{_segment(config.instance_id)}"
        )
        if config.query_type == QueryType.DEFAULT:
            return f"{base}/default-query/{_segment(config.query_id or '')}"
        return f"{base}/{_CUSTOM_QUERY_SUFFIX}"

    @staticmethod
    def build_body(config: WidgetConfig, context: Optional[ParamMap] = None) -> Dict[str, Any]:
        """
        JSON body for the gateway.  Directives that are not set are
        omitted rather than sent as ``null``.
        """
        body: Dict[str, Any] = {
            "query": config.custom_query if config.query_type == QueryType.CUSTOM else None,
            "method": config.query_method,
            "parameters": merge_parameters(config.query_parameters, context),
            "filters": _dump_list(config.filters),
            "aggregation": _dump(config.aggregation),
            "groupBy": _dump(config.group_by),
            "fieldSelection": _dump(config.field_selection),
            "context": dict(context) if context else None,
        }
        return {k: v for k, v in body.items() if v is not None}

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    def _raise_if_rate_limited(self, key: str, message: str) -> None:
        if is_rate_limit_message(message, self.settings.RATE_LIMIT_SIGNATURES):
            delay = self.settings.BUSINESS_RATE_LIMIT_RETRY_SECONDS
            logger.info(
                f"[QueryExecutor] '{key}' upstream rate limit, retrying in {delay:.0f}s"
            )
            raise RequestDeferred(delay, RequestDeferred.UPSTREAM_RATE_LIMIT)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _dump(model: Any) -> Optional[Dict[str, Any]]:
    if model is None:
        return None
    return model.model_dump(by_alias=True, mode="json")


def _dump_list(models: Any) -> Optional[list]:
    if models is None:
        return None
    return [m.model_dump(by_alias=True, mode="json") for m in models]
