"""
RenderDispatcher — display type → renderer, via Registry Pattern.

Single Responsibility: given a widget configuration and its transformed
data, instantiate the renderer registered for the display type and
return its ``RenderResult``.

Uses ``RENDER_REGISTRY`` for metadata and Python's module system for
class resolution.  Every ``DisplayType`` must be registered; a missing
entry is a programming error and fails at import time.

``render()`` never raises.  Unusable data, an unknown display type or a
renderer crash all produce a placeholder result.

Usage::

    from widget_pipeline.services.render.dispatcher import render_dispatcher

    result = render_dispatcher.render(config, data)
    payload = result.to_dict()
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, List, Optional, Type

from widget_pipeline.config.render_registry import RENDER_REGISTRY
from widget_pipeline.core.config import Settings, settings as default_settings
from widget_pipeline.models.widget import DisplayType, WidgetConfig
from widget_pipeline.services.render.base import (
    BaseRenderer,
    RenderContext,
    RenderResult,
    placeholder,
)
from widget_pipeline.services.render.helpers import business_name, widget_category

logger = logging.getLogger(__name__)

# Module path where concrete renderers live
_RENDER_MODULE = "widget_pipeline.services.render.types"


def _check_registry() -> None:
    missing = [dt.value for dt in DisplayType if dt.value not in RENDER_REGISTRY]
    if missing:
        raise RuntimeError(f"Display types without a renderer: {', '.join(missing)}")


_check_registry()


class RenderDispatcher:
    """
    Dynamic renderer resolver and executor.

    Pipeline per widget:
      1. Guard: unknown display type / no data → placeholder.
      2. Look up metadata in RENDER_REGISTRY.
      3. Import the concrete class from ``services/render/types/``.
      4. Call ``renderer.render()`` → RenderResult.
      5. Attach widget-level metadata (category, business title).
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or default_settings
        # Cache: class_name → class object (avoids repeated imports)
        self._class_cache: Dict[str, Type[BaseRenderer]] = {}

    def render(self, config: WidgetConfig, data: Any) -> RenderResult:
        """Render one widget.  Never raises."""
        result = self._render(config, data)
        result.metadata.setdefault("category", widget_category(config.name))
        result.metadata.setdefault("title", business_name(config.name))
        return result

    def _render(self, config: WidgetConfig, data: Any) -> RenderResult:
        if config.display_type is None:
            return placeholder(config, "Unsupported display type")
        if data is None:
            return placeholder(config, "No data available")

        entry = RENDER_REGISTRY[config.display_type.value]
        class_name = entry["renderer"]
        renderer_cls = self._resolve_class(class_name)
        if renderer_cls is None:
            return placeholder(config, "Data not available", error=True)

        ctx = RenderContext(
            config=config,
            data=data,
            options=dict(entry.get("default_config", {})),
            settings=self._settings,
        )
        try:
            return renderer_cls(ctx).render()
        except Exception as exc:
            logger.error(
                f"[RenderDispatcher] Error rendering '{config.name}' "
                f"as {config.display_type.value}: {exc}",
                exc_info=True,
            )
            return placeholder(config, "Data not available", error=True)

    def _resolve_class(self, class_name: str) -> Optional[Type[BaseRenderer]]:
        """
        Import and cache the renderer class by its name.

        ``GaugeRenderer`` → ``types/gauge_renderer.py``
        """
        if class_name in self._class_cache:
            return self._class_cache[class_name]

        full_path = f"{_RENDER_MODULE}.{self._class_to_module(class_name)}"
        try:
            module = importlib.import_module(full_path)
        except ImportError as exc:
            logger.error(f"[RenderDispatcher] Cannot import {full_path}: {exc}")
            return None

        cls = getattr(module, class_name, None)
        if isinstance(cls, type) and issubclass(cls, BaseRenderer):
            self._class_cache[class_name] = cls
            return cls
        logger.error(
            f"[RenderDispatcher] {full_path} does not export '{class_name}' "
            f"as a BaseRenderer subclass"
        )
        return None

    @staticmethod
    def _class_to_module(class_name: str) -> str:
        """``TableRenderer`` → ``table_renderer``"""
        result: List[str] = []
        for i, ch in enumerate(class_name):
            if ch.isupper() and i > 0:
                result.append("_")
            result.append(ch.lower())
        return "".join(result)


# ── Singleton ────────────────────────────────────────────────────
render_dispatcher = RenderDispatcher()


def render(config: WidgetConfig, data: Any) -> RenderResult:
    return render_dispatcher.render(config, data)
