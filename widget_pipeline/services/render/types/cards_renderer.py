"""Cards: one labelled field per card, from the record the transformer selected."""

from __future__ import annotations

from widget_pipeline.services.render.base import BaseRenderer, RenderResult
from widget_pipeline.services.transform.fields import prettify_field_name


class CardsRenderer(BaseRenderer):

    def render(self) -> RenderResult:
        record = self.data
        if not isinstance(record, dict) or not record:
            return self._placeholder("No fields available")

        cards = [
            {"key": key, "label": prettify_field_name(str(key)), "value": value}
            for key, value in record.items()
        ]
        return self._result("cards", {"cards": cards}, field_count=len(cards))
