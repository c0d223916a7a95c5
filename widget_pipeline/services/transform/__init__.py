"""
Data Transformer — shapes normalized data for its display type.

Modules:
  grouping : group_records (partition + aggregate) and coerce_chart_data.
  fields   : select_fields, first_record, prettify_field_name.

Only two display types are transformed here:
  chart → grouping (or generic coercion when no groupBy is configured)
  cards → first record + field selection
Every other display type receives the data unchanged.
"""

from __future__ import annotations

from typing import Any

from widget_pipeline.models.widget import DisplayType, WidgetConfig
from widget_pipeline.services.transform.fields import (
    first_record,
    prettify_field_name,
    select_fields,
)
from widget_pipeline.services.transform.grouping import (
    coerce_chart_data,
    group_records,
)


def transform(config: WidgetConfig, data: Any) -> Any:
    """Apply the transformation stage for ``config.display_type``."""
    if data is None:
        return None

    if config.display_type == DisplayType.CHART:
        if config.group_by is not None and config.group_by.field:
            return group_records(data, config.group_by)
        return coerce_chart_data(data)

    if config.display_type == DisplayType.CARDS:
        record = first_record(data)
        if not isinstance(record, dict):
            return data
        return select_fields(record, config.field_selection)

    return data


__all__ = [
    "coerce_chart_data",
    "first_record",
    "group_records",
    "prettify_field_name",
    "select_fields",
    "transform",
]
