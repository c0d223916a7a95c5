"""
Table: array of records → columns + first N rows.

Columns come from the first record; primitive rows are shown under a
single ``value`` column.  Nested values are serialized so every cell is
a scalar.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from widget_pipeline.services.render.base import BaseRenderer, RenderResult


class TableRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        data = self.data
        if not isinstance(data, list):
            return self._placeholder("Data is not in table format")
        if not data:
            return self._placeholder("No data to display")

        limit = self.ctx.settings.TABLE_PREVIEW_ROWS
        shown = data[:limit]

        if isinstance(shown[0], dict):
            columns = list(shown[0].keys())
            rows = [
                {c: _cell(row.get(c)) if isinstance(row, dict) else None for c in columns}
                for row in shown
            ]
        else:
            columns = ["value"]
            rows = [{"value": _cell(v)} for v in shown]

        total = len(data)
        meta: Dict[str, Any] = {
            "total_rows": total,
            "shown_rows": len(rows),
            "truncated": total > len(rows),
        }
        if total > len(rows):
            meta["footer"] = f"Showing {len(rows)} of {total} rows"

        return self._result("table", {"columns": columns, "rows": rows}, **meta)


def _cell(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return value
