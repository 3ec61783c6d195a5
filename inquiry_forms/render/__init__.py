"""Field renderer: form schema to HTML markup."""

from inquiry_forms.render.lib import (
    ATTACHMENTS_LABEL,
    CHOOSE_LABEL,
    REQUIRED_MARKER,
    SUBMIT_LABEL,
    Layout,
    RenderMode,
    RenderResult,
    RenderWarning,
    render_field,
    render_form,
)

__all__ = [
    # Modes
    "RenderMode",
    "Layout",
    # Results
    "RenderResult",
    "RenderWarning",
    # Rendering
    "render_field",
    "render_form",
    # Labels
    "CHOOSE_LABEL",
    "SUBMIT_LABEL",
    "ATTACHMENTS_LABEL",
    "REQUIRED_MARKER",
]
