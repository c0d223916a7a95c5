"""Field selection and field-name labels for card-style layouts."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from widget_pipeline.models.widget import FieldSelection

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_CUSTOM_FIELD = re.compile(r"^customfield_(\d+)$", re.IGNORECASE)


def select_fields(record: Any, selection: Optional[FieldSelection]) -> Dict[str, Any]:
    """
    Restrict *record* to the selected keys, then optionally drop
    ``None`` / empty-string values.

    Selection only applies when enabled; an empty ``selected_fields``
    list keeps every key.
    """
    if not isinstance(record, dict):
        return {}
    if selection is None or not selection.enabled:
        return dict(record)

    if selection.selected_fields:
        selected = {k: record[k] for k in selection.selected_fields if k in record}
    else:
        selected = dict(record)

    if selection.exclude_null_fields:
        selected = {k: v for k, v in selected.items() if not _is_blank(v)}
    return selected


def first_record(data: Any) -> Any:
    """The record a card displays: the object itself or the first object of a list."""
    if isinstance(data, list):
        return next((row for row in data if isinstance(row, dict)), None)
    return data


def prettify_field_name(key: str) -> str:
    """
    ``created_at`` → ``Created At``, ``issueCount`` → ``Issue Count``,
    ``customfield_10010`` → ``Custom Field 10010``.
    """
    match = _CUSTOM_FIELD.match(key)
    if match:
        return f"Custom Field {match.group(1)}"
    spaced = _CAMEL_BOUNDARY.sub(" ", key).replace("_", " ").replace("-", " ")
    return " ".join(word.capitalize() for word in spaced.split())


def _is_blank(value: Any) -> bool:
    return value is None or value == ""
