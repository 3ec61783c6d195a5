"""Deterministic id and class-prefix allocation for embedded widgets.

Every DOM id a widget emits derives from the form id (and field id), so two
widgets on one host page never collide, and regenerating an unchanged form
yields byte-identical ids.

Characters outside ``[A-Za-z0-9]`` are escaped as ``_xx`` (lowercase hex
of each UTF-8 byte). ``_`` and ``-`` are escaped too, so the mapping is
injective and the ``-`` separators stay unambiguous: distinct schema ids
always produce distinct DOM ids.
"""

from dataclasses import dataclass

PREFIX = "ir-form"
EMBED_PREFIX = "inquiry-form"
PREVIEW_PREFIX = "preview"

_SAFE = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")


def _utf8(ch: str) -> bytes:
    # Lone surrogates can arrive through JSON input
    return ch.encode("utf-8", "surrogatepass")


def escape_id(raw: str) -> str:
    """Escape a schema id into a token valid in HTML ids and CSS selectors.

    Example:
        >>> escape_id("contact form")
        'contact_20form'
    """
    return "".join(
        ch if ch in _SAFE else "".join(f"_{b:02x}" for b in _utf8(ch))
        for ch in raw
    )


@dataclass(frozen=True)
class Namespace:
    """All DOM identifiers derived for one form.

    Attributes:
        form_id: The schema form id (unescaped).
        prefix: ``ir-form-{formId}`` (escaped), or ``preview-ir-form-...``.
    """

    form_id: str
    prefix: str

    @property
    def container_id(self) -> str:
        return f"{self.prefix}-container"

    @property
    def form_element_id(self) -> str:
        return f"{self.prefix}-form"

    @property
    def submit_id(self) -> str:
        return f"{self.prefix}-submit"

    @property
    def attachments_id(self) -> str:
        return f"{self.prefix}-attachments"

    def field_id(self, field_id: str) -> str:
        """DOM id of a field's control (first control for option groups)."""
        return f"{self.prefix}-field-{escape_id(field_id)}"

    def option_id(self, field_id: str, index: int) -> str:
        """DOM id of the ``index``-th radio/checkbox of a field."""
        return f"{self.field_id(field_id)}-{index}"

    def error_id(self, field_id: str) -> str:
        """DOM id of a field's inline error message."""
        return f"{self.field_id(field_id)}-error"

    @property
    def embed_id(self) -> str:
        """Container id used by the compact two-line embed."""
        return f"{EMBED_PREFIX}-{escape_id(self.form_id)}"

    @property
    def script_name(self) -> str:
        """File name of the hosted per-form script."""
        return f"{self.embed_id}.js"


def allocate(form_id: str, *, preview: bool = False) -> Namespace:
    """Allocate the namespace for a form.

    Args:
        form_id: The schema form id.
        preview: Prefix ids with ``preview-`` so an editor preview never
            collides with an exported widget on the same page.

    Returns:
        Namespace: The derived identifiers.
    """
    prefix = f"{PREFIX}-{escape_id(form_id)}"
    if preview:
        prefix = f"{PREVIEW_PREFIX}-{prefix}"
    return Namespace(form_id=form_id, prefix=prefix)
