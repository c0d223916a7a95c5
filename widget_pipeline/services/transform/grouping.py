"""
Grouping & aggregation — raw records → chart-ready series.

Partition records by the string value of ``group_by.field`` and reduce
each partition to one scalar:

  count             → partition size
  sum/avg/min/max   → over ``value_field`` coerced to a number; entries
                      that do not coerce to a finite number are dropped
                      from the statistic (they never abort it).  Without
                      a ``value_field`` they behave like ``count``.

Each group is emitted dual-keyed so a chart can address the value either
as ``value`` or under its semantic name::

    {"<field>": key, "name": key, "value": v, "<value_field>": v, "count": n}
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from widget_pipeline.core.config import settings
from widget_pipeline.models.widget import AggregationFunction, GroupByConfig, SortOrder

logger = logging.getLogger(__name__)

UNKNOWN_GROUP = "Unknown"

Record = Dict[str, Any]


def group_records(data: Any, group_by: GroupByConfig) -> List[Record]:
    """
    Group *data* per *group_by*, sort by value and truncate.

    Non-list input cannot be partitioned and goes through the generic
    chart coercion instead.
    """
    if not isinstance(data, list):
        return coerce_chart_data(data)
    if not data:
        return []

    field = group_by.field
    value_field = group_by.value_field
    function = group_by.aggregation_function

    keys = [_group_label(row.get(field) if isinstance(row, dict) else None) for row in data]
    raw_values = [
        row.get(value_field) if isinstance(row, dict) and value_field else None
        for row in data
    ]

    frame = pd.DataFrame({
        "key": keys,
        "number": _to_finite_numbers(raw_values),
    })
    grouped = frame.groupby("key", sort=False)["number"]

    sizes = grouped.size()
    if function == AggregationFunction.COUNT or not value_field:
        values = sizes.astype(float)
    elif function == AggregationFunction.SUM:
        values = grouped.sum(min_count=0)
    elif function == AggregationFunction.AVG:
        values = grouped.mean()
    elif function == AggregationFunction.MIN:
        values = grouped.min()
    else:
        values = grouped.max()

    value_key = value_field or "value"
    rows: List[Record] = []
    for key, size in sizes.items():
        value = _clean_number(values.get(key))
        row: Record = {field: key, "name": key, "value": value}
        row[value_key] = value
        row["count"] = int(size)
        rows.append(row)

    descending = group_by.sort_by != SortOrder.ASC
    rows.sort(key=lambda r: r["value"], reverse=descending)

    limit = group_by.limit or settings.DEFAULT_GROUP_LIMIT
    logger.debug(
        f"[Grouping] {len(data)} records → {len(rows)} groups "
        f"by '{field}' ({function.value}), keeping {limit}"
    )
    return rows[:limit]


def coerce_chart_data(data: Any) -> Any:
    """
    Generic coercion used when no ``groupBy`` is configured.

      [1, 2]              → [{"name": "Item 1", "value": 1}, ...]
      [{...}, {...}]      → unchanged
      {"a": 1, "b": 2}    → [{"name": "a", "value": 1}, ...]
    """
    if isinstance(data, list):
        if data and not isinstance(data[0], dict):
            return [{"name": f"Item {i + 1}", "value": v} for i, v in enumerate(data)]
        return data
    if isinstance(data, dict):
        return [{"name": str(k), "value": v} for k, v in data.items()]
    return data


# ── Private helpers ──────────────────────────────────────────────

def _group_label(value: Any) -> str:
    if value is None or value == "":
        return UNKNOWN_GROUP
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dict):
        # Nested objects (e.g. Jira "status": {"name": ...}) group by their name.
        return str(value.get("name") or value.get("value") or UNKNOWN_GROUP)
    return str(value)


def _to_finite_numbers(values: List[Any]) -> pd.Series:
    """Coerce to float; anything non-numeric or infinite becomes NaN."""
    cleaned = [None if isinstance(v, (dict, list)) else v for v in values]
    numbers = pd.to_numeric(pd.Series(cleaned, dtype="object"), errors="coerce")
    return numbers.astype(float).replace([np.inf, -np.inf], np.nan)


def _clean_number(value: Optional[float]) -> float:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return 0
    value = float(value)
    return int(value) if value.is_integer() else value
