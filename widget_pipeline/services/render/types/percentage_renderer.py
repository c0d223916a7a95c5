"""
Percentage: rounded percent with a high/medium/low tier.

When the widget aggregates with ``avg``, ``average``/``avg``/``mean``
fields are preferred over the generic probe order.
"""

from __future__ import annotations

from typing import Any, Sequence, Tuple

from widget_pipeline.models.widget import AggregationFunction
from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import (
    js_round,
    numbers_in,
    probe_value,
    tier,
)

_GENERIC_KEYS = ("percentage", "percent", "rate", "value")
_AVERAGE_KEYS = ("average", "avg", "mean")


class PercentageRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        raw, source = self._probe(self.data)
        percentage = js_round(raw)
        high = self.options.get("high", 90)
        medium = self.options.get("medium", 70)
        return self._result(
            "percentage",
            {
                "value": percentage,
                "formatted": f"{percentage}%",
                "tier": tier(percentage, high, medium),
            },
            source=source,
        )

    def _probe(self, data: Any) -> Tuple[float, str]:
        aggregation = self.config.aggregation
        averaging = aggregation is not None and aggregation.function == AggregationFunction.AVG

        if isinstance(data, list):
            numbers = numbers_in(data)
            if not numbers:
                return 0.0, "none"
            return sum(numbers) / len(numbers), "mean"

        keys: Sequence[str] = _GENERIC_KEYS
        if averaging:
            keys = _AVERAGE_KEYS + _GENERIC_KEYS
        explicit = aggregation.field if aggregation is not None else None
        return probe_value(data, preferred=keys, explicit=explicit)
