"""
Response envelope handling.

Plugin adapters wrap their payloads inconsistently, so the executor
sniffs the top-level shape instead of relying on a declared schema:

  ``{"success": ..., "response": X}``  → X
  ``{"data": X}``                      → X   (only without a sibling ``value``)
  ``{"results": X}``                   → X   (same guard)
  anything else                        → unchanged

Exactly one level is removed; ``{"data": {"data": 1}}`` → ``{"data": 1}``.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from widget_pipeline.core.config import settings

_DEFAULT_FAILURE_MESSAGE = "Failed to fetch data"


def unwrap_envelope(payload: Any) -> Any:
    """Remove at most one known wrapper from *payload*."""
    if not isinstance(payload, dict):
        return payload

    if "success" in payload and "response" in payload:
        return payload["response"]
    if "data" in payload and "value" not in payload:
        return payload["data"]
    if "results" in payload and "value" not in payload:
        return payload["results"]
    return payload


def is_business_failure(payload: Any) -> bool:
    """``True`` for an explicit ``{"success": false, ...}`` answer."""
    return isinstance(payload, dict) and payload.get("success") is False


def failure_message(payload: Any) -> str:
    """Best human-readable message carried by a failure payload."""
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return _DEFAULT_FAILURE_MESSAGE


def is_rate_limit_message(
    message: Optional[str],
    signatures: Optional[Iterable[str]] = None,
) -> bool:
    """Case-insensitive match against the configured rate-limit signatures."""
    if not message:
        return False
    lowered = message.lower()
    sigs = signatures if signatures is not None else settings.RATE_LIMIT_SIGNATURES
    return any(sig.lower() in lowered for sig in sigs)
