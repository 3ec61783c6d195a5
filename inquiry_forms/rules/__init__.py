"""Validation rule IR shared by the editor interpreter and the widget."""

from inquiry_forms.rules.lib import (
    DEFAULT_PATTERNS,
    JS_WHITESPACE,
    PATTERN_MESSAGE,
    REQUIRED_MESSAGE,
    RULE_BACKENDS,
    TYPE_MESSAGES,
    Rule,
    RuleBackend,
    RuleKind,
    RuleSet,
    as_text,
    compile_pattern,
    compile_rules,
    is_blank,
    js_length,
    js_string,
    js_trim,
    max_length_message,
    min_length_message,
    run_rules,
    to_python_pattern,
)

__all__ = [
    # IR
    "Rule",
    "RuleKind",
    "RuleSet",
    "compile_rules",
    "run_rules",
    # Back ends
    "RuleBackend",
    "RULE_BACKENDS",
    # Messages and patterns
    "REQUIRED_MESSAGE",
    "PATTERN_MESSAGE",
    "TYPE_MESSAGES",
    "DEFAULT_PATTERNS",
    "min_length_message",
    "max_length_message",
    # JavaScript string semantics
    "JS_WHITESPACE",
    "js_trim",
    "js_length",
    "js_string",
    "as_text",
    "is_blank",
    "compile_pattern",
    "to_python_pattern",
]
