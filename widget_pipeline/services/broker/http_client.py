"""
PluginHTTPClient — Async HTTP wrapper for the plugin gateway.

Single Responsibility: POST one JSON body to one gateway path.
No rate limiting, no envelope sniffing, no widget knowledge.

Handles:
  - Auth injection (bearer, api_key, basic) from settings.
  - Explicit timeout (the gateway has none of its own).
  - Structured error handling — never raises; returns result dicts.

Usage::

    from widget_pipeline.services.broker.http_client import PluginHTTPClient

    result = await client.post_json("/plugins/jira/instances/main/query", body)
    # result = {"ok": True, "data": {...}, "status": 200}
    # or      {"ok": False, "error": "Timeout after 30.0s", "status": 0}
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from widget_pipeline.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Reusable result type
APIResult = Dict[str, Any]


class PluginHTTPClient:
    """
    Executes authenticated POST requests against the plugin gateway.

    Each call opens and closes its own ``httpx.AsyncClient``; pass
    ``transport`` to route requests somewhere other than the network
    (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or default_settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self.settings.PLUGIN_API_BASE_URL.rstrip("/")

    @property
    def timeout(self) -> float:
        return self.settings.REQUEST_TIMEOUT_SECONDS

    async def post_json(
        self,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> APIResult:
        """
        POST *body* as JSON to ``base_url + path``.

        Returns:
            ``{"ok": True, "data": ..., "status": int}``
            or ``{"ok": False, "error": str, "status": int, "data": None}``
        """
        url = f"{self.base_url}{path}"
        headers = self._build_headers(extra_headers)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport,
            ) as client:
                response = await client.post(url, headers=headers, json=body)

            if not response.is_success:
                return self._error_result(
                    url,
                    f"HTTP {response.status_code}: {response.text[:200]}",
                    response.status_code,
                )

            try:
                data = response.json()
            except ValueError:
                return self._error_result(
                    url, "Invalid JSON in plugin response", response.status_code,
                )

            return {"ok": True, "data": data, "status": response.status_code}

        except httpx.TimeoutException:
            return self._error_result(url, f"Timeout after {self.timeout}s", 0)
        except httpx.ConnectError as exc:
            return self._error_result(url, f"Connection failed: {exc}", 0)
        except httpx.HTTPError as exc:
            return self._error_result(url, f"Request failed: {exc}", 0)

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    def _build_headers(self, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        """Merge JSON headers + extra headers + auth header."""
        headers = {"Accept": "application/json", **(extra or {})}
        auth_header = self._resolve_auth()
        if auth_header:
            headers.update(auth_header)
        return headers

    def _resolve_auth(self) -> Optional[Dict[str, str]]:
        """
        Build the auth header from settings.

        Supports: bearer, api_key, basic, none.
        """
        auth_type = self.settings.PLUGIN_API_AUTH_TYPE.lower()
        token = self.settings.PLUGIN_API_TOKEN
        if auth_type == "none":
            return None
        if not token:
            logger.debug("[PluginHTTPClient] PLUGIN_API_TOKEN is empty")
            return None

        if auth_type == "bearer":
            return {"Authorization": f"Bearer {token}"}
        if auth_type == "api_key":
            return {"X-API-Key": token}
        if auth_type == "basic":
            encoded = base64.b64encode(token.encode()).decode()
            return {"Authorization": f"Basic {encoded}"}

        logger.warning(f"[PluginHTTPClient] Unknown auth type '{auth_type}'")
        return None

    @staticmethod
    def _error_result(url: str, error: str, status: int) -> APIResult:
        """Build a standardized error result dict."""
        logger.warning(f"[PluginHTTPClient] {url}: {error}")
        return {
            "ok": False,
            "error": error,
            "status": status,
            "data": None,
        }
