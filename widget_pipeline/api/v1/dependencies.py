"""
FastAPI dependencies.

Endpoints reach the process-wide dashboard and definition loader through
these callables so tests can swap them with
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException

from widget_pipeline.services.lifecycle.controller import WidgetController
from widget_pipeline.services.orchestrator import (
    Dashboard,
    WidgetDefinitionLoader,
    dashboard,
    widget_definitions,
)


def get_dashboard() -> Dashboard:
    return dashboard


def get_definitions() -> WidgetDefinitionLoader:
    return widget_definitions


def require_widget(
    key: str,
    board: Dashboard = Depends(get_dashboard),
) -> WidgetController:
    """Dependency: the controller mounted under ``key`` or 404."""
    controller = board.get(key)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Widget '{key}' is not mounted")
    return controller
