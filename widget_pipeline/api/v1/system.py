"""System endpoints — health check."""

from fastapi import APIRouter, Depends

from widget_pipeline.api.v1.dependencies import get_dashboard
from widget_pipeline.core.config import settings
from widget_pipeline.services.orchestrator import Dashboard

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health_check(board: Dashboard = Depends(get_dashboard)):
    """Basic liveness probe."""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "mounted_widgets": len(board.keys()),
        "loading": board.loading_keys(),
        "refreshing": board.refreshing,
    }
