"""
ContextResolver — Ambient variables for widget queries.

Single Responsibility: turn the current navigation location and an
optional entity record into a flat ``{name: value}`` mapping that is
merged into a widget's ``queryParameters``.

  ``/clients/42/contracts/7``   → ``{"clientId": 42, "contractId": 7}``
  ``EntityContext(short_name="ACME")`` → ``{"clientShortName": "ACME"}``

No key is required — a path without a known collection simply yields
nothing for it.

Usage::

    from widget_pipeline.services.context import context_resolver

    ctx = context_resolver.resolve(path="/clients/42", entity=entity)
    params = merge_parameters(widget.query_parameters, ctx)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

from widget_pipeline.core.config import settings
from widget_pipeline.models.widget import EntityContext

logger = logging.getLogger(__name__)

ParamMap = Dict[str, Any]


class ContextResolver:
    """Derives context variables from a path and an entity record."""

    def __init__(self, collections: Optional[Iterable[str]] = None) -> None:
        names = collections if collections is not None else settings.ENTITY_COLLECTIONS
        self._collections = {name.lower(): _singular(name.lower()) for name in names}

    def resolve(
        self,
        path: Optional[str] = None,
        entity: Optional[EntityContext] = None,
    ) -> ParamMap:
        """Path-derived ids, overlaid with explicit entity attributes."""
        context: ParamMap = {}
        if path:
            context.update(self.from_path(path))
        if entity is not None:
            context.update(self.from_entity(entity))
        return context

    def from_path(self, path: str) -> ParamMap:
        """
        Detect ``<collection>/<numeric id>`` pairs in the path.

        Query string and fragment are ignored; segments are matched
        case-insensitively against the configured collections.
        """
        segments = _segments(path)
        found: ParamMap = {}

        for current, following in zip(segments, segments[1:]):
            entity = self._collections.get(current.lower())
            if entity and following.isdigit():
                found[f"{entity}Id"] = int(following)

        if found:
            logger.debug(f"[ContextResolver] {path!r} → {found}")
        return found

    @staticmethod
    def from_entity(entity: EntityContext) -> ParamMap:
        """Prefix explicit entity attributes with the entity type."""
        prefix = entity.entity_type or "entity"
        attributes = {
            f"{prefix}ShortName": entity.short_name,
            f"{prefix}Name": entity.name,
            f"{prefix}Domain": entity.domain,
            **entity.extra,
        }
        return {k: v for k, v in attributes.items() if not _is_empty(v)}


def merge_parameters(params: Optional[ParamMap], context: Optional[ParamMap]) -> ParamMap:
    """
    Merge context into static query parameters.

    A context value wins only when it is non-empty; the statically
    configured parameter is the fallback otherwise.
    """
    merged: ParamMap = dict(params or {})
    for key, value in (context or {}).items():
        if _is_empty(value):
            continue
        merged[key] = value
    return merged


# ── Private helpers ──────────────────────────────────────────────

def _segments(path: str) -> List[str]:
    raw = urlsplit(path).path if "://" in path or "?" in path or "#" in path else path
    return [s for s in raw.split("/") if s]


def _singular(collection: str) -> str:
    if collection.endswith("ies"):
        return collection[:-3] + "y"
    if collection.endswith("s"):
        return collection[:-1]
    return collection


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ── Singleton ────────────────────────────────────────────────────
context_resolver = ContextResolver()
