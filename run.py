"""
Widget Pipeline — Application Runner.

Usage:
    python run.py        → FastAPI on API_HOST:API_PORT (default 0.0.0.0:8000)
"""

import uvicorn

from widget_pipeline.core.config import settings


def run_api() -> None:
    """Start the FastAPI app."""
    print(f"🚀 FastAPI → http://localhost:{settings.API_PORT}")
    if settings.DEBUG:
        print(f"📄 Docs    → http://localhost:{settings.API_PORT}/api/docs")
    uvicorn.run(
        "widget_pipeline.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run_api()
