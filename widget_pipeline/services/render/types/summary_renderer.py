"""
Summary: short textual overview of whatever came back.

  mapping → its scalar fields with readable labels
  list    → record count and the field names of the first record
  scalar  → the value itself
"""

from __future__ import annotations

from typing import Any, Dict, List

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.transform.fields import prettify_field_name


class SummaryRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        data = self.data

        if isinstance(data, dict):
            items: List[Dict[str, Any]] = [
                {"key": k, "label": prettify_field_name(str(k)), "value": v}
                for k, v in data.items()
                if not isinstance(v, (dict, list))
            ]
            if not items:
                return self._placeholder("Nothing to summarize")
            return self._result("summary", {"items": items}, source="object")

        if isinstance(data, list):
            first = data[0] if data else None
            fields = list(first.keys()) if isinstance(first, dict) else []
            text = f"{len(data)} record{'s' if len(data) != 1 else ''}"
            if fields:
                text += f" with fields: {', '.join(fields)}"
            return self._result(
                "summary",
                {"type": "list", "text": text, "count": len(data), "fields": fields},
                source="list",
            )

        return self._result(
            "summary",
            {"type": type(data).__name__, "text": str(data), "value": data},
            source="scalar",
        )
