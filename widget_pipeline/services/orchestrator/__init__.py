"""
Dashboard orchestration.

Modules:
  dashboard   : Dashboard (mounted controllers, staggered refresh-all).
  definitions : WidgetDefinitionLoader (widgets.yml → WidgetConfig).
"""

from widget_pipeline.services.orchestrator.dashboard import (
    Dashboard,
    dashboard,
    refresh_priority,
)
from widget_pipeline.services.orchestrator.definitions import (
    WidgetDefinitionLoader,
    widget_definitions,
)

__all__ = [
    "Dashboard",
    "WidgetDefinitionLoader",
    "dashboard",
    "refresh_priority",
    "widget_definitions",
]
