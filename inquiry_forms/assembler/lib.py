"""Script assembler: one builder for every widget artifact variant.

Combines Field Renderer markup, namespace ids and the emitted runtime into
one of three variants selected by OutputMode:

    - COMPACT: two-line embed referencing the hosted per-form script
      (``build_hosted_script`` produces that file).
    - INLINE: self-contained block; the browser builds the markup from a
      string, then runs the minified runtime. Styles ship alongside.
    - DETAILED: static pretty-printed markup plus the readable runtime.
      Meant for debugging, not production embedding.

Export never fails on configuration problems. The widget ships, its
runtime refuses to submit, and the problems are returned as warnings.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from enum import Enum

from inquiry_forms.config import EnvVar, get_environment
from inquiry_forms.namespace import allocate
from inquiry_forms.render import Layout, RenderMode, render_form
from inquiry_forms.runtime import (
    DEFAULT_ENDPOINT,
    DEFAULT_TIMEOUT_MS,
    build_runtime,
    build_widget_config,
)
from inquiry_forms.schema import Form
from inquiry_forms.validation import IssueCategory, check_form

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_BASE_URL = "https://your-domain.com/forms"


class OutputMode(str, Enum):
    """Artifact variant."""

    COMPACT = "compact"
    INLINE = "inline"
    DETAILED = "detailed"


@dataclass
class AssemblerConfig:
    """Deployment values baked into artifacts.

    Attributes:
        endpoint: URL the widget POSTs inquiries to.
        script_base_url: Where hosted per-form scripts are served from.
        timeout_ms: Abort a pending submission after this long.
    """

    endpoint: str = DEFAULT_ENDPOINT
    script_base_url: str = DEFAULT_SCRIPT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @classmethod
    def from_environment(cls) -> AssemblerConfig:
        """Resolve every value through ``inquiry_forms.config``."""
        return cls(
            endpoint=get_environment(EnvVar.INQUIRY_ENDPOINT),
            script_base_url=get_environment(EnvVar.WIDGET_SCRIPT_BASE_URL),
            timeout_ms=get_environment(EnvVar.SUBMIT_TIMEOUT_MS),
        )


@dataclass
class ArtifactWarning:
    """A problem the exported widget will surface at runtime.

    Attributes:
        code: Machine-readable problem code.
        message: Human-readable explanation.
        path: Location in the form definition.
    """

    code: str
    message: str
    path: str = ""


@dataclass
class Artifact:
    """One generated widget artifact.

    Attributes:
        code: The text to paste into (or serve to) the host page.
        mode: Which variant was built.
        warnings: Problems found while building.
    """

    code: str
    mode: OutputMode
    warnings: list[ArtifactWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        """Check if any warnings were emitted."""
        return len(self.warnings) > 0


def _collect_warnings(form: Form) -> list[ArtifactWarning]:
    issues = check_form(form)
    config_issues = [i for i in issues if i.category == IssueCategory.CONFIGURATION]
    if config_issues:
        logger.warning(
            "Form %s exported with configuration problems; the widget will "
            "refuse to submit: %s",
            form.id,
            "; ".join(i.message for i in config_issues),
        )
    return [
        ArtifactWarning(code=i.error_type, message=i.message, path=i.path)
        for i in issues
    ]


def _header_comment(form: Form) -> str:
    # "--" may not appear inside an HTML comment
    name = html.escape(form.name).replace("--", "&#45;&#45;")
    return f"<!-- Inquiry form: {name} -->"


def _style_block(css: str) -> str:
    safe_css = css.replace("</", "<\\/")
    return f"<style>\n{safe_css}\n</style>"


def _script_url(form: Form, config: AssemblerConfig) -> str:
    base = config.script_base_url.rstrip("/")
    return f"{base}/{allocate(form.id).script_name}"


def _build_compact(form: Form, config: AssemblerConfig) -> str:
    namespace = allocate(form.id)
    src = html.escape(_script_url(form, config), quote=True)
    return (
        f'<div id="{namespace.embed_id}"></div>\n'
        f'<script src="{src}"></script>\n'
    )


def _build_inline(form: Form, config: AssemblerConfig) -> str:
    namespace = allocate(form.id)
    markup = render_form(form, RenderMode.EXPORT, Layout.COMPACT).markup
    widget_config = build_widget_config(
        form,
        namespace,
        mount_id=namespace.container_id,
        markup=markup,
        endpoint=config.endpoint,
        timeout_ms=config.timeout_ms,
    )
    script = build_runtime(form, widget_config, minify=True)
    return "\n".join(
        [
            _header_comment(form),
            f'<div id="{namespace.container_id}" class="ir-form-container"></div>',
            "<script>",
            script,
            "</script>",
            _style_block(form.styling.css),
            "",
        ]
    )


def _build_detailed(form: Form, config: AssemblerConfig) -> str:
    namespace = allocate(form.id)
    markup = render_form(form, RenderMode.EXPORT, Layout.PRETTY, depth=1).markup
    widget_config = build_widget_config(
        form,
        namespace,
        mount_id=namespace.container_id,
        endpoint=config.endpoint,
        timeout_ms=config.timeout_ms,
    )
    script = build_runtime(form, widget_config, minify=False)
    return "\n".join(
        [
            _header_comment(form),
            "<!-- Readable development build; use the compact or inline embed in production. -->",
            f'<div id="{namespace.container_id}" class="ir-form-container">',
            markup,
            "</div>",
            "",
            _style_block(form.styling.css),
            "",
            "<script>",
            script.rstrip("\n"),
            "</script>",
            "",
        ]
    )


_BUILDERS = {
    OutputMode.COMPACT: _build_compact,
    OutputMode.INLINE: _build_inline,
    OutputMode.DETAILED: _build_detailed,
}


def build_artifact(
    form: Form,
    mode: OutputMode | str = OutputMode.COMPACT,
    config: AssemblerConfig | None = None,
) -> Artifact:
    """Build one widget artifact for a form.

    Deterministic: an unchanged form and config give byte-identical code.

    Args:
        form: The form to export.
        mode: Artifact variant.
        config: Deployment values (resolved from the environment if None).

    Returns:
        Artifact: Code plus any warnings. Never raises on configuration
        problems.

    Example:
        >>> artifact = build_artifact(form, OutputMode.INLINE)
        >>> if artifact.has_warnings:
        ...     print(artifact.warnings)
    """
    mode = OutputMode(mode)
    config = config or AssemblerConfig.from_environment()
    warnings = _collect_warnings(form)
    code = _BUILDERS[mode](form, config)
    logger.debug("Built %s artifact for form %s (%d chars)", mode.value, form.id, len(code))
    return Artifact(code=code, mode=mode, warnings=warnings)


def build_hosted_script(form: Form, config: AssemblerConfig | None = None) -> str:
    """Build the per-form script the compact embed's ``src`` serves.

    The script mounts into ``<div id="inquiry-form-{id}">``, injects the
    namespaced stylesheet and markup, then runs the minified runtime.
    """
    config = config or AssemblerConfig.from_environment()
    namespace = allocate(form.id)
    form_markup = render_form(form, RenderMode.EXPORT, Layout.COMPACT).markup
    markup = (
        f'<div id="{namespace.container_id}" class="ir-form-container">'
        f"{form_markup}</div>"
    )
    widget_config = build_widget_config(
        form,
        namespace,
        mount_id=namespace.embed_id,
        markup=markup,
        css=form.styling.css,
        endpoint=config.endpoint,
        timeout_ms=config.timeout_ms,
    )
    return build_runtime(form, widget_config, minify=True) + "\n"
