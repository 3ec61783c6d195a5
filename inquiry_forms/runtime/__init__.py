"""Widget runtime: rule emission and the submission state machine script."""

from inquiry_forms.runtime.lib import (
    BUSY_LABEL,
    CONFIGURATION_MESSAGE,
    DEFAULT_ENDPOINT,
    DEFAULT_TIMEOUT_MS,
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    SenderFields,
    WidgetConfig,
    build_runtime,
    build_widget_config,
    compile_form_rules,
    emit_rules_js,
    emit_rules_module,
    minify_js,
    recipients_configured,
    resolve_sender_fields,
    script_json,
)

__all__ = [
    # Rule emission
    "compile_form_rules",
    "emit_rules_js",
    "emit_rules_module",
    # Runtime script
    "WidgetConfig",
    "build_widget_config",
    "build_runtime",
    "minify_js",
    "script_json",
    # Sender info
    "SenderFields",
    "resolve_sender_fields",
    "recipients_configured",
    # Defaults and messages
    "DEFAULT_ENDPOINT",
    "DEFAULT_TIMEOUT_MS",
    "BUSY_LABEL",
    "CONFIGURATION_MESSAGE",
    "SUCCESS_MESSAGE",
    "FAILURE_MESSAGE",
]
