"""Query: raw result pretty-printed, with record and field counts."""

from __future__ import annotations

import json

from widget_pipeline.services.render.base import BaseRenderer, RenderResult


class QueryRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        data = self.data
        if isinstance(data, list):
            record_count = len(data)
            first = data[0] if data else None
        else:
            record_count = 1
            first = data
        field_count = len(first) if isinstance(first, dict) else 0

        text = json.dumps(data, indent=2, default=str, ensure_ascii=False)
        return self._result(
            "query",
            {"text": text},
            record_count=record_count,
            field_count=field_count,
        )
