"""
BaseRenderer — Abstract base class for all display-type renderers.

Single Responsibility: define the contract that every renderer follows.
Renderers are pure: they receive already-transformed data plus the
widget configuration and return a JSON-ready ``RenderResult``.  They do
no I/O and start no timers.

A renderer must tolerate any data shape.  When the shape is unusable it
returns ``self._placeholder(...)`` instead of raising.

Usage in a concrete renderer::

    from widget_pipeline.services.render.base import BaseRenderer, RenderResult

    class GaugeRenderer(BaseRenderer):
        def render(self) -> RenderResult:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict

from widget_pipeline.core.config import Settings, settings as default_settings
from widget_pipeline.models.widget import WidgetConfig


@dataclass
class RenderContext:
    """Everything a renderer needs."""
    config: WidgetConfig
    data: Any = None
    options: Dict[str, Any] = field(default_factory=dict)
    settings: Settings = field(default_factory=lambda: default_settings)


@dataclass
class RenderResult:
    """
    Renderable description of one widget.

    ``kind`` is the display type actually produced (``"table"`` when a
    chart falls back, ``"placeholder"`` when data is unusable).
    """
    widget_id: str
    widget_name: str
    display_type: str
    kind: str
    data: Any
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_placeholder(self) -> bool:
        return self.kind == "placeholder"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "widget_id": self.widget_id,
            "widget_name": self.widget_name,
            "display_type": self.display_type,
            "kind": self.kind,
            "data": self.data,
            "metadata": self.metadata,
        }


class BaseRenderer(ABC):
    """
    Abstract base class for all renderers.

    Subclasses MUST implement ``render()``.
    """

    def __init__(self, ctx: RenderContext) -> None:
        self.ctx = ctx

    @abstractmethod
    def render(self) -> RenderResult:
        """Build the render description for ``self.ctx``."""
        ...

    # ── Convenience properties ───────────────────────────────────

    @property
    def config(self) -> WidgetConfig:
        return self.ctx.config

    @property
    def data(self) -> Any:
        return self.ctx.data

    @property
    def options(self) -> Dict[str, Any]:
        return self.ctx.options

    @property
    def display_type(self) -> str:
        dt = self.config.display_type
        return dt.value if dt is not None else "unknown"

    # ── Result builders ──────────────────────────────────────────

    def _result(self, kind: str, data: Any, **meta: Any) -> RenderResult:
        """Shorthand to build a RenderResult."""
        return RenderResult(
            widget_id=self.config.instance_key,
            widget_name=self.config.name,
            display_type=self.display_type,
            kind=kind,
            data=data,
            metadata=meta,
        )

    def _placeholder(self, message: str, **meta: Any) -> RenderResult:
        """Standard "not available" description."""
        return placeholder(self.config, message, **meta)


def placeholder(config: WidgetConfig, message: str, **meta: Any) -> RenderResult:
    """Placeholder result usable outside a renderer (dispatcher guards)."""
    dt = config.display_type
    return RenderResult(
        widget_id=config.instance_key,
        widget_name=config.name,
        display_type=dt.value if dt is not None else "unknown",
        kind="placeholder",
        data={"message": message},
        metadata={"empty": True, **meta},
    )
