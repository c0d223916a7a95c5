"""Progress: value against a target, as a bar percentage."""

from __future__ import annotations

from typing import Any, Tuple

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import (
    clamp,
    clean_number,
    js_round,
    probe_value,
    to_number,
)

_TARGET_KEYS = ("max", "target", "goal", "total")


class ProgressRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        value, maximum = self._probe(self.data)
        percentage = js_round(clamp(value / maximum * 100), 1) if maximum > 0 else 0
        return self._result(
            "progress",
            {
                "value": clean_number(value),
                "max": clean_number(maximum),
                "percentage": clean_number(percentage),
            },
        )

    def _probe(self, data: Any) -> Tuple[float, float]:
        default_max = float(self.options.get("max", 100))
        if isinstance(data, dict):
            value, _ = probe_value(data, preferred=("value", "current", "completed", "count"))
            for key in _TARGET_KEYS:
                target = to_number(data.get(key))
                if target is not None:
                    return value, target
            return value, default_max
        value, _ = probe_value(data)
        return value, default_max
