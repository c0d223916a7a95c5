"""
Logging setup driven by ``Settings.LOG_LEVEL`` / ``Settings.LOG_FILE``.

Modules keep using ``logging.getLogger(__name__)``; this only installs
the root handlers once, at application start-up.
"""

from __future__ import annotations

import logging
from pathlib import Path

from widget_pipeline.core.config import Settings

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install console (and optional file) handlers on the root logger."""
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())

    if getattr(root, "_widget_pipeline_configured", False):
        return

    formatter = logging.Formatter(_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root._widget_pipeline_configured = True  # type: ignore[attr-defined]
