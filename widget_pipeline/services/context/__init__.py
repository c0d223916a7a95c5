"""
Context resolution.

Modules:
  resolver : ContextResolver (path + entity → ParamMap) and merge_parameters.
"""

from widget_pipeline.services.context.resolver import (
    ContextResolver,
    context_resolver,
    merge_parameters,
)

__all__ = ["ContextResolver", "context_resolver", "merge_parameters"]
