"""
Widget API Endpoints — upward boundary of the widget pipeline.

  POST   /api/v1/widgets/preview        → render supplied test data (no network)
  POST   /api/v1/widgets/mount          → mount an instance, first fetch included
  GET    /api/v1/widgets/definitions    → widgets.yml definitions
  POST   /api/v1/widgets/refresh-all    → staggered refresh of every instance
  GET    /api/v1/widgets/{key}          → FetchState + render description
  POST   /api/v1/widgets/{key}/refresh  → force refresh (still rate limited)
  DELETE /api/v1/widgets/{key}          → unmount
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from widget_pipeline.api.v1.dependencies import (
    get_dashboard,
    get_definitions,
    require_widget,
)
from widget_pipeline.models.widget import EntityContext, WidgetConfig
from widget_pipeline.services.lifecycle.controller import WidgetController
from widget_pipeline.services.orchestrator import Dashboard, WidgetDefinitionLoader
from widget_pipeline.services.render import render_dispatcher
from widget_pipeline.services.transform import transform

router = APIRouter(prefix="/widgets", tags=["widgets"])


# ── Pydantic request models ──────────────────────────────────────

class WidgetPreviewRequest(BaseModel):
    """Body for POST /widgets/preview (the builder's "test query")."""
    config: WidgetConfig
    data: Any = Field(None, description="Test data rendered as if fetched.")


class WidgetMountRequest(BaseModel):
    """Body for POST /widgets/mount."""
    config: WidgetConfig
    entity: Optional[EntityContext] = Field(
        None, description="Entity the page is scoped to (client, contract…).",
    )
    path: Optional[str] = Field(
        None, description="Navigation path, e.g. '/clients/42/overview'.",
    )
    preview_data: Any = Field(
        None, description="If set, used instead of querying the plugin.",
    )


# ── Endpoints ────────────────────────────────────────────────────

@router.post("/preview")
async def preview_widget(request: WidgetPreviewRequest):
    """Transform + render test data with no fetch and no lifecycle."""
    result = render_dispatcher.render(request.config, transform(request.config, request.data))
    return result.to_dict()


@router.post("/mount")
async def mount_widget(
    request: WidgetMountRequest,
    board: Dashboard = Depends(get_dashboard),
):
    controller = await board.mount(
        request.config,
        entity=request.entity,
        path=request.path,
        preview_data=request.preview_data,
    )
    return controller.snapshot()


@router.get("/definitions")
async def list_definitions(loader: WidgetDefinitionLoader = Depends(get_definitions)):
    definitions = loader.get_all()
    return {
        "count": len(definitions),
        "widgets": {
            key: config.model_dump(by_alias=True, mode="json", exclude_none=True)
            for key, config in definitions.items()
        },
    }


@router.post("/refresh-all")
async def refresh_all_widgets(
    background_tasks: BackgroundTasks,
    board: Dashboard = Depends(get_dashboard),
):
    """Start a staggered refresh; the signals go out after the response."""
    if board.refreshing:
        raise HTTPException(status_code=409, detail="Refresh already in progress")
    order: List[str] = board.refresh_order()
    background_tasks.add_task(board.refresh_all)
    return {"status": "scheduled", "order": order}


@router.get("/{key}")
async def get_widget(controller: WidgetController = Depends(require_widget)):
    return controller.snapshot()


@router.post("/{key}/refresh")
async def refresh_widget(
    key: str,
    board: Dashboard = Depends(get_dashboard),
) -> Dict[str, Any]:
    if not board.refresh(key):
        raise HTTPException(status_code=404, detail=f"Widget '{key}' is not mounted")
    return {"status": "refresh_requested", "key": key}


@router.delete("/{key}")
async def unmount_widget(
    key: str,
    board: Dashboard = Depends(get_dashboard),
):
    if not board.unmount(key):
        raise HTTPException(status_code=404, detail=f"Widget '{key}' is not mounted")
    return {"status": "unmounted", "key": key}
