"""
Statistic: headline value with supporting descriptive statistics.

A list of numbers (or of ``{value}`` objects) is described with pandas;
a mapping contributes whichever of the usual statistic fields it has.
"""

from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.render.helpers import (
    clean_number,
    compact_number,
    js_round,
    numbers_in,
    probe_value,
    to_number,
)

_STAT_KEYS = ("count", "sum", "total", "avg", "average", "mean", "min", "max")


class StatisticRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        data = self.data
        stats: Dict[str, Any] = {}

        if isinstance(data, list):
            numbers = numbers_in(data)
            if numbers:
                series = pd.Series(numbers, dtype=float)
                stats = {
                    "count": int(series.count()),
                    "sum": clean_number(js_round(float(series.sum()), 2)),
                    "avg": clean_number(js_round(float(series.mean()), 2)),
                    "min": clean_number(float(series.min())),
                    "max": clean_number(float(series.max())),
                }
                value = float(series.sum())
            else:
                value = float(len(data))
                stats = {"count": len(data)}
        else:
            value, _ = probe_value(data)
            if isinstance(data, dict):
                for key in _STAT_KEYS:
                    number = to_number(data.get(key))
                    if number is not None:
                        stats[key] = clean_number(number)

        return self._result(
            "statistic",
            {
                "value": clean_number(value),
                "formatted": compact_number(value),
                "stats": stats,
            },
        )
