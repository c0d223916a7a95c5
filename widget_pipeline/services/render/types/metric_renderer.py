"""
Metric: one headline number with a label.

  list    → item count ("Count")
  mapping → count / total / value, else the number of keys ("Properties")
  scalar  → the value itself
"""

from __future__ import annotations

from typing import Any, Tuple

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import clean_number, compact_number, to_number

_LABELLED_KEYS = (("count", "Count"), ("total", "Total"), ("value", "Value"))


class MetricRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        value, label = self._probe(self.data)
        number = to_number(value)
        formatted = compact_number(number) if number is not None else str(value)
        return self._result(
            "metric",
            {
                "value": clean_number(number) if number is not None else value,
                "label": label,
                "formatted": formatted,
            },
        )

    def _probe(self, data: Any) -> Tuple[Any, str]:
        if isinstance(data, list):
            return len(data), "Count"
        if isinstance(data, dict):
            explicit = self.config.aggregation.field if self.config.aggregation else None
            if explicit and explicit in data:
                return data[explicit], explicit
            for key, label in _LABELLED_KEYS:
                if key in data:
                    return data[key], label
            return len(data), "Properties"
        return data, "Value"
