"""Field renderer: maps form fields to HTML markup fragments.

Each FieldType registers one renderer producing a list of ``(depth, text)``
lines. The layout decides how lines are joined: COMPACT concatenates each
field onto one line, PRETTY indents by depth. All operator-supplied text
(labels, placeholders, options, ids) is HTML-escaped.

Two render modes exist:
    - PREVIEW: every control ``disabled``, ids prefixed ``preview-``, for a
      live non-interactive preview inside the editor.
    - EXPORT: namespaced ids, consumed by the script assembler.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from inquiry_forms.namespace import Namespace, allocate
from inquiry_forms.schema import FieldType, FileUploadSettings, Form, FormField

logger = logging.getLogger(__name__)

CHOOSE_LABEL = "Please choose"
SUBMIT_LABEL = "Submit"
ATTACHMENTS_LABEL = "Attachments"
REQUIRED_MARKER = " *"


class RenderMode(str, Enum):
    """Whether markup is for the editor preview or an exported widget."""

    PREVIEW = "preview"
    EXPORT = "export"


class Layout(str, Enum):
    """Whitespace layout of rendered markup."""

    COMPACT = "compact"
    PRETTY = "pretty"


@dataclass
class RenderWarning:
    """Something in the form that could not be rendered as written.

    Attributes:
        field_id: The field concerned.
        code: Machine-readable warning code.
        message: Human-readable explanation.
    """

    field_id: str
    code: str
    message: str


@dataclass
class RenderResult:
    """Rendered markup plus any warnings.

    Attributes:
        markup: The HTML fragment.
        warnings: Fields that were skipped or degraded.
    """

    markup: str
    warnings: list[RenderWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        """Check if any warnings were emitted."""
        return len(self.warnings) > 0


# A rendered line and its nesting depth.
Line = tuple[int, str]


@dataclass(frozen=True)
class _Context:
    namespace: Namespace
    mode: RenderMode
    number: int | None = None

    @property
    def disabled(self) -> str:
        return " disabled" if self.mode == RenderMode.PREVIEW else ""


def _esc(text: str | None) -> str:
    return html.escape(text or "", quote=True)


def _label_text(form_field: FormField, ctx: _Context) -> str:
    text = _esc(form_field.label)
    if ctx.number is not None:
        text = f"{ctx.number}. {text}"
    if form_field.required:
        text += f'<span class="ir-form-required" aria-hidden="true">{REQUIRED_MARKER}</span>'
    return text


def _common_attrs(form_field: FormField, ctx: _Context) -> str:
    ns = ctx.namespace
    return (
        f'id="{ns.field_id(form_field.id)}" name="{_esc(form_field.id)}" '
        f'aria-describedby="{ns.error_id(form_field.id)}"'
    )


def _length_attrs(form_field: FormField) -> str:
    validation = form_field.validation
    if validation is None:
        return ""
    attrs = ""
    if validation.min_length:
        attrs += f' minlength="{validation.min_length}"'
    if validation.max_length:
        attrs += f' maxlength="{validation.max_length}"'
    return attrs


def _label_line(form_field: FormField, ctx: _Context) -> Line:
    return (
        0,
        f'<label for="{ctx.namespace.field_id(form_field.id)}" class="ir-form-label">'
        f"{_label_text(form_field, ctx)}</label>",
    )


def _required_attr(form_field: FormField) -> str:
    return " required" if form_field.required else ""


def _wrap(form_field: FormField, inner: list[Line]) -> list[Line]:
    return [
        (0, f'<div class="ir-form-field" data-field-id="{_esc(form_field.id)}">'),
        *[(depth + 1, text) for depth, text in inner],
        (0, "</div>"),
    ]


# Renderer registry - one function per field type
_RENDERERS: dict[FieldType, Callable[[FormField, _Context], list[Line]]] = {}


def _renders(*field_types: FieldType):
    def decorator(func):
        for field_type in field_types:
            _RENDERERS[field_type] = func
        return func

    return decorator


@_renders(FieldType.TEXT)
def _render_text(form_field: FormField, ctx: _Context) -> list[Line]:
    return _wrap(
        form_field,
        [
            _label_line(form_field, ctx),
            (
                0,
                f'<input type="text" {_common_attrs(form_field, ctx)} class="ir-form-input" '
                f'placeholder="{_esc(form_field.placeholder)}"'
                f"{_length_attrs(form_field)}{_required_attr(form_field)}{ctx.disabled}>",
            ),
        ],
    )


@_renders(FieldType.TEXTAREA)
def _render_textarea(form_field: FormField, ctx: _Context) -> list[Line]:
    return _wrap(
        form_field,
        [
            _label_line(form_field, ctx),
            (
                0,
                f'<textarea {_common_attrs(form_field, ctx)} class="ir-form-textarea" '
                f'placeholder="{_esc(form_field.placeholder)}"'
                f"{_length_attrs(form_field)}{_required_attr(form_field)}{ctx.disabled}></textarea>",
            ),
        ],
    )


@_renders(FieldType.SELECT)
def _render_select(form_field: FormField, ctx: _Context) -> list[Line]:
    multiple = " multiple" if form_field.multiple else ""
    options = [(1, f'<option value="">{CHOOSE_LABEL}</option>')]
    options += [
        (1, f'<option value="{_esc(option)}">{_esc(option)}</option>')
        for option in form_field.options or []
    ]
    return _wrap(
        form_field,
        [
            _label_line(form_field, ctx),
            (
                0,
                f'<select {_common_attrs(form_field, ctx)} class="ir-form-select"'
                f"{multiple}{_required_attr(form_field)}{ctx.disabled}>",
            ),
            *options,
            (0, "</select>"),
        ],
    )


@_renders(FieldType.RADIO, FieldType.CHECKBOX)
def _render_option_group(form_field: FormField, ctx: _Context) -> list[Line]:
    ns = ctx.namespace
    kind = "radio" if form_field.type == FieldType.RADIO else "checkbox"
    # A required radio group needs one checked; checkboxes stay independent.
    required = _required_attr(form_field) if kind == "radio" else ""
    inputs: list[Line] = []
    for index, option in enumerate(form_field.options or []):
        inputs.append(
            (
                1,
                f'<label class="ir-form-{kind}-label">'
                f'<input type="{kind}" id="{ns.option_id(form_field.id, index)}" '
                f'name="{_esc(form_field.id)}" value="{_esc(option)}" '
                f'class="ir-form-{kind}"{required}{ctx.disabled}>'
                f'<span class="ir-form-{kind}-text">{_esc(option)}</span></label>',
            )
        )
    return _wrap(
        form_field,
        [
            (
                0,
                f'<fieldset id="{ns.field_id(form_field.id)}" class="ir-form-fieldset" '
                f'aria-describedby="{ns.error_id(form_field.id)}">',
            ),
            (1, f'<legend class="ir-form-legend">{_label_text(form_field, ctx)}</legend>'),
            *inputs,
            (0, "</fieldset>"),
        ],
    )


def _render_attachments(settings: FileUploadSettings, ctx: _Context) -> list[Line]:
    ns = ctx.namespace
    multiple = " multiple" if settings.max_files > 1 else ""
    accept = (
        f' accept="{_esc(",".join(settings.allowed_types))}"'
        if settings.allowed_types
        else ""
    )
    files = "file" if settings.max_files == 1 else "files"
    hint = f"Up to {settings.max_files} {files}, {settings.max_file_size} MB each."
    return [
        (0, '<div class="ir-form-field ir-form-file">'),
        (1, f'<label for="{ns.attachments_id}" class="ir-form-label">{ATTACHMENTS_LABEL}</label>'),
        (
            1,
            f'<input type="file" id="{ns.attachments_id}" class="ir-form-file-input" '
            f'aria-describedby="{ns.attachments_id}-error"{multiple}{accept}{ctx.disabled}>',
        ),
        (1, f'<p class="ir-form-hint">{hint}</p>'),
        (0, "</div>"),
    ]


def _layout(blocks: list[list[Line]], layout: Layout, depth: int = 0) -> str:
    if layout == Layout.COMPACT:
        return "\n".join("".join(text for _, text in block) for block in blocks)
    return "\n".join(
        "  " * (depth + line_depth) + text for block in blocks for line_depth, text in block
    )


def _field_lines(
    form_field: FormField, ctx: _Context
) -> tuple[list[Line], list[RenderWarning]]:
    if form_field.type == FieldType.FILE:
        logger.debug("Skipping per-field file input %s", form_field.id)
        return [], [
            RenderWarning(
                field_id=form_field.id,
                code="unsupported_file_field",
                message=(
                    f"File field '{form_field.id}' is not rendered; use the "
                    "form-level attachment block instead"
                ),
            )
        ]
    warnings: list[RenderWarning] = []
    if form_field.is_choice and not form_field.options:
        warnings.append(
            RenderWarning(
                field_id=form_field.id,
                code="missing_options",
                message=f"Choice field '{form_field.id}' has no options",
            )
        )
    return _RENDERERS[form_field.type](form_field, ctx), warnings


def render_field(
    form_field: FormField,
    namespace: Namespace,
    mode: RenderMode = RenderMode.EXPORT,
    layout: Layout = Layout.COMPACT,
) -> RenderResult:
    """Render one field to a markup fragment.

    Args:
        form_field: The field to render.
        namespace: Id namespace of the owning form.
        mode: PREVIEW (disabled controls) or EXPORT.
        layout: COMPACT or PRETTY whitespace.

    Returns:
        RenderResult: Markup (empty for ``file`` fields) and warnings.
    """
    ctx = _Context(namespace=namespace, mode=mode)
    lines, warnings = _field_lines(form_field, ctx)
    return RenderResult(markup=_layout([lines], layout) if lines else "", warnings=warnings)


def render_form(
    form: Form,
    mode: RenderMode = RenderMode.EXPORT,
    layout: Layout = Layout.COMPACT,
    *,
    depth: int = 0,
) -> RenderResult:
    """Render a form's ``<form>`` element.

    Fields are emitted in ``order``; the attachment block follows them
    when ``settings.file_upload.enabled``; a submit button closes the form.
    The form carries ``novalidate`` so the widget runtime, not the
    browser, reports validation errors.

    Args:
        form: The form to render.
        mode: PREVIEW or EXPORT.
        layout: COMPACT (one line per field) or PRETTY (indented).
        depth: Base indentation level for PRETTY output.

    Returns:
        RenderResult: The markup and any warnings.

    Example:
        >>> result = render_form(form, RenderMode.PREVIEW, Layout.PRETTY)
        >>> print(result.markup)
    """
    namespace = allocate(form.id, preview=mode == RenderMode.PREVIEW)
    base_ctx = _Context(namespace=namespace, mode=mode)
    disabled = base_ctx.disabled
    number_fields = bool(form.settings.show_field_numbers)

    blocks: list[list[Line]] = []
    warnings: list[RenderWarning] = []
    number = 0
    for form_field in form.ordered_fields():
        if form_field.type != FieldType.FILE:
            number += 1
        ctx = _Context(
            namespace=namespace,
            mode=mode,
            number=number if number_fields else None,
        )
        lines, field_warnings = _field_lines(form_field, ctx)
        warnings.extend(field_warnings)
        if lines:
            blocks.append([(d + 1, t) for d, t in lines])

    if form.settings.file_upload.enabled:
        attachments = _render_attachments(form.settings.file_upload, base_ctx)
        blocks.append([(d + 1, t) for d, t in attachments])

    blocks.append(
        [
            (
                1,
                f'<button type="submit" id="{namespace.submit_id}" '
                f'class="ir-form-submit"{disabled}>{SUBMIT_LABEL}</button>',
            )
        ]
    )

    open_tag = f'<form id="{namespace.form_element_id}" class="ir-form" novalidate>'
    blocks.insert(0, [(0, open_tag)])
    blocks.append([(0, "</form>")])
    return RenderResult(markup=_layout(blocks, layout, depth), warnings=warnings)
