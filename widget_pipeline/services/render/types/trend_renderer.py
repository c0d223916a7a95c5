"""
Trend: current value, previous value and direction of change.

  mapping → an explicit ``change``/``trend`` field, otherwise
            ``current``/``value`` against ``previous``/``baseline``
  list    → last point against the one before it
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import (
    clean_number,
    js_round,
    numbers_in,
    percent_change,
    probe_value,
    to_number,
)
from widget_pipeline.services.render.types.number_renderer import explicit_change


class TrendRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        current, previous, change = self._probe(self.data)
        if change is None:
            change = js_round(percent_change(current, previous), 1) if previous is not None else 0.0

        payload: Dict[str, Any] = {
            "value": clean_number(current),
            "previous": clean_number(previous) if previous is not None else None,
            "change": clean_number(change),
            "direction": _direction(change),
        }
        return self._result("trend", payload)

    def _probe(self, data: Any) -> Tuple[float, Optional[float], Optional[float]]:
        if isinstance(data, list):
            numbers = numbers_in(data)
            if len(numbers) >= 2:
                return numbers[-1], numbers[-2], None
            if numbers:
                return numbers[0], None, None
            return float(len(data)), None, None

        if isinstance(data, dict):
            current, _ = probe_value(data, preferred=("current", "value", "count", "total"))
            previous = None
            for key in ("previous", "previousValue", "baseline"):
                previous = to_number(data.get(key))
                if previous is not None:
                    break
            return current, previous, explicit_change(data)

        value, _ = probe_value(data)
        return value, None, None


def _direction(change: float) -> str:
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "flat"
