"""Tool implementations behind the MCP server.

Plain functions over a FormStore so they can be called (and tested)
without the MCP protocol. Each returns a JSON-compatible dict.
"""

from __future__ import annotations

from typing import Any

from inquiry_forms.assembler import AssemblerConfig, OutputMode, build_artifact, build_hosted_script
from inquiry_forms.render import Layout, RenderMode, render_form
from inquiry_forms.schema import Form
from inquiry_forms.storage import FormStore
from inquiry_forms.validation import check_form as _check_form
from inquiry_forms.validation import validate_form


def _resolve(store: FormStore, form_id: str | None, form: dict[str, Any] | None) -> Form:
    """A stored form by id, or an inline definition."""
    if form is not None:
        return Form.model_validate(form)
    if not form_id:
        raise ValueError("Either form_id or form is required")
    return store.require_form(form_id)


def list_forms(store: FormStore) -> dict[str, Any]:
    forms = store.list_forms()
    return {
        "forms": [
            {
                "id": f.id,
                "name": f.name,
                "field_count": len(f.fields),
                "updated_at": f.updated_at,
            }
            for f in forms
        ],
        "count": len(forms),
    }


def get_form(store: FormStore, form_id: str) -> dict[str, Any]:
    return store.require_form(form_id).to_json_dict()


def check_form(
    store: FormStore,
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Structural and configuration check, split into errors and warnings."""
    issues = _check_form(_resolve(store, form_id, form))
    return {
        "saveable": not any(i.blocking for i in issues),
        "errors": [i.to_dict() for i in issues if i.blocking],
        "warnings": [i.to_dict() for i in issues if not i.blocking],
    }


def preview_form(
    store: FormStore,
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
    layout: str = "pretty",
) -> dict[str, Any]:
    result = render_form(_resolve(store, form_id, form), RenderMode.PREVIEW, Layout(layout))
    return {
        "markup": result.markup,
        "warnings": [
            {"field_id": w.field_id, "code": w.code, "message": w.message}
            for w in result.warnings
        ],
    }


def validate_values(
    store: FormStore,
    values: dict[str, Any],
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
) -> dict[str, Any]:
    errors = validate_form(_resolve(store, form_id, form).fields, values)
    return {"valid": not errors, "errors": errors}


def export_widget(
    store: FormStore,
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
    mode: str = "compact",
    config: AssemblerConfig | None = None,
) -> dict[str, Any]:
    """Build an artifact; compact exports also return the hosted script."""
    resolved = _resolve(store, form_id, form)
    artifact = build_artifact(resolved, mode, config)
    result: dict[str, Any] = {
        "mode": artifact.mode.value,
        "code": artifact.code,
        "warnings": [
            {"code": w.code, "message": w.message, "path": w.path}
            for w in artifact.warnings
        ],
    }
    if artifact.mode == OutputMode.COMPACT:
        result["hosted_script"] = build_hosted_script(resolved, config)
    return result
