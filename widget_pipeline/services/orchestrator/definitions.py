"""
WidgetDefinitionLoader — YAML loader for persisted widget configurations.

Single Responsibility: parse ``widgets.yml`` into validated
``WidgetConfig`` objects.  Read-only; creating and editing widgets
belongs to the management layer, not to this pipeline.

File shape (camelCase, same as the builder UI produces)::

    open-issues:
      id: "12"
      name: Open Jira Issues
      pluginName: jira
      instanceId: jira-main
      queryType: default
      queryId: open_issues
      displayType: metric
      refreshInterval: 300

Usage::

    from widget_pipeline.services.orchestrator.definitions import widget_definitions

    configs = widget_definitions.get_all()        # dict[str, WidgetConfig]
    cfg = widget_definitions.get("open-issues")   # WidgetConfig | None
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from widget_pipeline.core.config import settings
from widget_pipeline.models.widget import WidgetConfig

logger = logging.getLogger(__name__)


class WidgetDefinitionLoader:
    """
    Loads and caches widget definitions from YAML.

    The YAML is read once on first access and cached in memory.
    Call ``reload()`` to re-read after manual edits.
    """

    def __init__(self, config_path: Union[str, Path, None] = None):
        self._config_path = Path(config_path or settings.WIDGETS_FILE)
        self._definitions: Dict[str, WidgetConfig] = {}
        self._loaded = False

    def get_all(self) -> Dict[str, WidgetConfig]:
        """Return every valid definition, keyed by its YAML key."""
        self._ensure_loaded()
        return dict(self._definitions)

    def get(self, key: str) -> Optional[WidgetConfig]:
        self._ensure_loaded()
        return self._definitions.get(key)

    def list_keys(self) -> List[str]:
        self._ensure_loaded()
        return list(self._definitions.keys())

    def reload(self) -> None:
        """Force re-read of the YAML file."""
        self._loaded = False
        self._definitions.clear()
        self._ensure_loaded()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ── Internal ─────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._load()

    def _load(self) -> None:
        if not self._config_path.exists():
            logger.warning(f"[WidgetDefinitions] File not found: {self._config_path}")
            self._loaded = True
            return

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.error(f"[WidgetDefinitions] YAML parse error: {exc}")
            self._loaded = True
            return

        if not raw or not isinstance(raw, dict):
            logger.info("[WidgetDefinitions] No widgets defined in YAML")
            self._loaded = True
            return

        for key, definition in raw.items():
            if not isinstance(definition, dict):
                logger.error(f"[WidgetDefinitions] Skipping '{key}': not a mapping")
                continue
            try:
                self._definitions[str(key)] = WidgetConfig.model_validate(definition)
            except ValidationError as exc:
                logger.error(
                    f"[WidgetDefinitions] Skipping invalid entry '{key}': "
                    f"{exc.error_count()} error(s)"
                )

        self._loaded = True
        logger.info(f"[WidgetDefinitions] Loaded {len(self._definitions)} widget(s)")


# ── Singleton ────────────────────────────────────────────────────
widget_definitions = WidgetDefinitionLoader()
