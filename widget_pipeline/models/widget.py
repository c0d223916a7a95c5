"""
Widget configuration models.

``WidgetConfig`` is the unit of configuration produced by the widget
builder: immutable once fetched, replaced wholesale on edit.  Field
names are snake_case in Python and camelCase on the wire
(``pluginName``, ``queryParameters``, ``groupBy`` …).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from widget_pipeline.core.exceptions import WidgetConfigurationError


# ── Enumerations ─────────────────────────────────────────────────

class QueryType(str, Enum):
    DEFAULT = "default"
    CUSTOM = "custom"


class DisplayType(str, Enum):
    TABLE = "table"
    CHART = "chart"
    METRIC = "metric"
    LIST = "list"
    GAUGE = "gauge"
    QUERY = "query"
    NUMBER = "number"
    PERCENTAGE = "percentage"
    PROGRESS = "progress"
    TREND = "trend"
    STATISTIC = "statistic"
    SUMMARY = "summary"
    CARDS = "cards"


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"


class AggregationFunction(str, Enum):
    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ── Nested directives ────────────────────────────────────────────

class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class GroupByConfig(_CamelModel):
    """Client-side partition-and-aggregate directive for charts."""
    field: str
    value_field: Optional[str] = None
    aggregation_function: AggregationFunction = AggregationFunction.COUNT
    limit: Optional[int] = 10
    sort_by: SortOrder = SortOrder.DESC

    @field_validator("value_field", mode="before")
    @classmethod
    def _blank_value_field(cls, value: Any) -> Any:
        return value or None

    @field_validator("sort_by", mode="before")
    @classmethod
    def _lenient_sort(cls, value: Any) -> Any:
        return "asc" if str(value).lower() == "asc" else "desc"


class FieldSelection(_CamelModel):
    """Card-layout field restriction."""
    enabled: bool = False
    selected_fields: List[str] = Field(default_factory=list)
    exclude_null_fields: bool = True


class AggregationConfig(_CamelModel):
    function: AggregationFunction = AggregationFunction.COUNT
    field: Optional[str] = None


class FilterRule(_CamelModel):
    field: str
    operator: str = "equals"
    value: Any = None


class WidgetStyling(_CamelModel):
    """Presentation-only selectors; passed through untouched."""
    width: str = "full"
    height: str = "medium"
    show_border: bool = True
    show_header: bool = True


class EntityContext(_CamelModel):
    """
    Attributes of the entity the dashboard is scoped to
    (e.g. the client whose detail page hosts the widget).
    """
    entity_type: str = "client"
    short_name: Optional[str] = None
    name: Optional[str] = None
    domain: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


# ── WidgetConfig ─────────────────────────────────────────────────

class WidgetConfig(_CamelModel):
    """
    Declarative widget definition.

    The queryType invariant is checked by ``validate_query()`` rather
    than at parse time so that a broken widget can still be mounted
    and report a configuration error in its own content area.
    """
    id: Optional[str] = None
    name: str
    description: str = ""
    plugin_name: str
    instance_id: str
    query_type: QueryType = QueryType.DEFAULT
    query_id: Optional[str] = None
    custom_query: Optional[str] = None
    query_method: str = "GET"
    query_parameters: Dict[str, Any] = Field(default_factory=dict)
    filters: Optional[List[FilterRule]] = None
    aggregation: Optional[AggregationConfig] = None
    group_by: Optional[GroupByConfig] = None
    field_selection: Optional[FieldSelection] = None
    display_type: Optional[DisplayType] = DisplayType.TABLE
    chart_type: Optional[ChartType] = None
    refresh_interval: int = 0
    styling: WidgetStyling = Field(default_factory=WidgetStyling)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if value is not None else None

    @field_validator("display_type", "chart_type", mode="before")
    @classmethod
    def _unknown_variant_is_none(cls, value: Any, info) -> Any:
        # Unknown variants are tolerated: the dispatcher degrades them.
        enum_cls = DisplayType if info.field_name == "display_type" else ChartType
        if value is None or isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(str(value).lower())
        except ValueError:
            return None

    @field_validator("refresh_interval", mode="before")
    @classmethod
    def _non_negative_interval(cls, value: Any) -> Any:
        try:
            return max(0, int(value or 0))
        except (TypeError, ValueError):
            return 0

    # ── Invariant ────────────────────────────────────────────

    def validate_query(self) -> None:
        """Raise ``WidgetConfigurationError`` if the query cannot be built."""
        if self.query_type == QueryType.DEFAULT and not self.query_id:
            raise WidgetConfigurationError("default query requires a queryId")
        if self.query_type == QueryType.CUSTOM and not (self.custom_query or "").strip():
            raise WidgetConfigurationError("custom query requires a customQuery")

    # ── Keys ─────────────────────────────────────────────────

    @property
    def rate_limit_key(self) -> str:
        """Ledger key: plugin + instance + widget name."""
        return f"{self.plugin_name}:{self.instance_id}:{self.name}"

    @property
    def instance_key(self) -> str:
        """Identifier used for refresh broadcasts and dashboard lookups."""
        return self.id or self.rate_limit_key
