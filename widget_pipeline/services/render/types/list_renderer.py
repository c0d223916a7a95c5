"""List: key/value items, first N shown."""

from __future__ import annotations

from typing import Any, Dict

from widget_pipeline.services.render.base import BaseRenderer, RenderResult


class ListRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        data = self.data
        if isinstance(data, list):
            items = [_item(i, entry) for i, entry in enumerate(data)]
        elif isinstance(data, dict):
            items = [{"key": str(k), "value": v} for k, v in data.items()]
        else:
            items = [{"key": "Value", "value": data}]

        if not items:
            return self._placeholder("No items to display")

        limit = self.ctx.settings.LIST_PREVIEW_ITEMS
        shown = items[:limit]
        return self._result(
            "list",
            {"items": shown},
            total_items=len(items),
            truncated=len(items) > len(shown),
        )


def _item(index: int, entry: Any) -> Dict[str, Any]:
    if isinstance(entry, dict):
        key = entry.get("key") or entry.get("name") or f"Item {index + 1}"
        value = entry.get("value", entry.get("count"))
        return {"key": str(key), "value": value}
    return {"key": f"Item {index + 1}", "value": entry}
