"""Namespace allocation for embedded widgets."""

from inquiry_forms.namespace.lib import (
    EMBED_PREFIX,
    PREFIX,
    PREVIEW_PREFIX,
    Namespace,
    allocate,
    escape_id,
)

__all__ = [
    "Namespace",
    "allocate",
    "escape_id",
    "PREFIX",
    "EMBED_PREFIX",
    "PREVIEW_PREFIX",
]
