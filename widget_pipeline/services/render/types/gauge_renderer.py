"""
Gauge: value on a 0–max dial with a high/medium/low tier.

An explicit ``percentage`` field overrides the computed one.  The
percentage is clamped to [0, 100]; a zero max reads as 0%.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import (
    clamp,
    clean_number,
    js_round,
    probe_value,
    tier,
    to_number,
)


class GaugeRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        value, maximum, explicit_pct = self._probe(self.data)

        if explicit_pct is not None:
            percentage = clamp(explicit_pct)
        elif maximum > 0:
            percentage = clamp(value / maximum * 100)
        else:
            percentage = 0.0
        percentage = js_round(percentage)

        high = self.options.get("high", 80)
        medium = self.options.get("medium", 60)
        return self._result(
            "gauge",
            {
                "value": clean_number(value),
                "max": clean_number(maximum),
                "percentage": percentage,
                "tier": tier(percentage, high, medium),
            },
        )

    def _probe(self, data: Any) -> Tuple[float, float, Optional[float]]:
        maximum = float(self.options.get("max", 100))
        if isinstance(data, dict):
            value = to_number(data.get("value"))
            if value is None:
                value, _ = probe_value(data)
            target = to_number(data.get("max"))
            return value, target if target is not None else maximum, to_number(data.get("percentage"))
        value, _ = probe_value(data)
        return value, maximum, None
