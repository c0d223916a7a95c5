"""
Number: probed value plus an optional percent change.

Change comes from an explicit ``change``/``trend`` field, otherwise it
is derived from a ``previous`` (or ``baseline``) field.  A zero
baseline reports no change.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import (
    clean_number,
    compact_number,
    js_round,
    percent_change,
    probe_value,
    to_number,
)


class NumberRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        explicit = self.config.aggregation.field if self.config.aggregation else None
        value, source = probe_value(self.data, explicit=explicit)
        payload: Dict[str, Any] = {
            "value": clean_number(value),
            "formatted": compact_number(value),
            "source": source,
        }
        change = derive_change(self.data, value)
        if change is not None:
            payload["change"] = change
        return self._result("number", payload)


def explicit_change(data: Any) -> Optional[float]:
    """``change``/``trend``/``changePercent`` as supplied by the plugin."""
    if not isinstance(data, dict):
        return None
    for key in ("change", "trend", "changePercent"):
        explicit = to_number(data.get(key))
        if explicit is not None:
            return js_round(explicit, 1)
    return None


def derive_change(data: Any, current: float) -> Optional[float]:
    """Percent change carried by or derivable from *data*."""
    explicit = explicit_change(data)
    if explicit is not None or not isinstance(data, dict):
        return explicit
    for key in ("previous", "previousValue", "baseline"):
        previous = to_number(data.get(key))
        if previous is not None:
            return js_round(percent_change(current, previous), 1)
    return None
