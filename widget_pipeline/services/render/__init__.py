"""
Presentation Dispatcher — transformed data → renderable description.

Modules:
  base       : BaseRenderer, RenderContext, RenderResult.
  helpers    : number probing, tiers, compact formatting, widget metadata.
  dispatcher : RenderDispatcher (registry-driven, never raises).
  types/     : one renderer per display type.
"""

from widget_pipeline.services.render.base import RenderResult
from widget_pipeline.services.render.dispatcher import (
    RenderDispatcher,
    render,
    render_dispatcher,
)

__all__ = ["RenderDispatcher", "RenderResult", "render", "render_dispatcher"]
