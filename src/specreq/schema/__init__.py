"""Schema normalization: OpenAPI schema objects to promptable type trees."""

from specreq.schema.normalizer import describe, normalize, resolve_choices

__all__ = ["normalize", "resolve_choices", "describe"]
