"""
Chart: series of ``{name, value}`` points → chart description.

The data arrives already grouped (or coerced) by the transformer.  An
unrecognized chart type is drawn as a table instead.
"""

from __future__ import annotations

from typing import Any, Dict, List

from widget_pipeline.models.widget import ChartType
from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import clean_number, to_number
from widget_pipeline.services.render.types.table_renderer import TableRenderer


class ChartRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        chart_type = self.config.chart_type
        if chart_type is None:
            fallback = TableRenderer(self.ctx).render()
            fallback.metadata["fallback"] = "table"
            return fallback

        points = self.data
        if not isinstance(points, list) or not points:
            return self._placeholder("No chart data available")

        x_key = self.options.get("x_key", "name")
        y_key = self.options.get("y_key", "value")

        labels: List[str] = []
        values: List[float] = []
        for i, point in enumerate(points):
            if isinstance(point, dict):
                labels.append(str(point.get(x_key, f"Item {i + 1}")))
                number = to_number(point.get(y_key))
            else:
                labels.append(f"Item {i + 1}")
                number = to_number(point)
            values.append(clean_number(number) if number is not None else 0)

        payload: Dict[str, Any] = {
            "chart_type": chart_type.value,
            "x_key": x_key,
            "y_key": y_key,
            "series": points,
            "labels": labels,
            "values": values,
        }
        if chart_type == ChartType.PIE:
            total = sum(values)
            payload["shares"] = [
                round(v / total * 100, 1) if total else 0 for v in values
            ]

        return self._result("chart", payload, points=len(points))
