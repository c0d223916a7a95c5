"""
Render Registry Configuration.

Maps every display type to the renderer class that draws it.  This file
is the ONLY place where a display type is bound to a renderer; the
dispatcher resolves classes from here and refuses to import when a
display type has no entry.

Keys:
  display type value → str : a ``DisplayType`` value.

Values: dict with:
  renderer       → str  : class name in ``services/render/types/``
                          (module name is its snake_case form).
  category       → str  : "tabular" | "chart" | "kpi" | "text"
  default_config → dict : renderer-specific defaults.

To add a new display type:
  1. Add the value to ``DisplayType``.
  2. Create the renderer class in widget_pipeline/services/render/types/
  3. Add an entry here.
"""

RENDER_REGISTRY: dict[str, dict] = {
    # ── Tabular ──────────────────────────────────────────────
    "table": {
        "renderer": "TableRenderer",
        "category": "tabular",
        "default_config": {},
    },
    "list": {
        "renderer": "ListRenderer",
        "category": "tabular",
        "default_config": {},
    },
    "cards": {
        "renderer": "CardsRenderer",
        "category": "tabular",
        "default_config": {},
    },

    # ── Charts ───────────────────────────────────────────────
    "chart": {
        "renderer": "ChartRenderer",
        "category": "chart",
        "default_config": {"x_key": "name", "y_key": "value"},
    },

    # ── KPIs ─────────────────────────────────────────────────
    "metric": {
        "renderer": "MetricRenderer",
        "category": "kpi",
        "default_config": {},
    },
    "number": {
        "renderer": "NumberRenderer",
        "category": "kpi",
        "default_config": {},
    },
    "percentage": {
        "renderer": "PercentageRenderer",
        "category": "kpi",
        "default_config": {"high": 90, "medium": 70},
    },
    "progress": {
        "renderer": "ProgressRenderer",
        "category": "kpi",
        "default_config": {"max": 100},
    },
    "gauge": {
        "renderer": "GaugeRenderer",
        "category": "kpi",
        "default_config": {"max": 100, "high": 80, "medium": 60},
    },
    "trend": {
        "renderer": "TrendRenderer",
        "category": "kpi",
        "default_config": {},
    },
    "statistic": {
        "renderer": "StatisticRenderer",
        "category": "kpi",
        "default_config": {},
    },

    # ── Text ─────────────────────────────────────────────────
    "summary": {
        "renderer": "SummaryRenderer",
        "category": "text",
        "default_config": {},
    },
    "query": {
        "renderer": "QueryRenderer",
        "category": "text",
        "default_config": {},
    },
}
