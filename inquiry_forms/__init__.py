"""inquiry-forms: Form Definition Compiler for embeddable inquiry widgets."""

from inquiry_forms.assembler import AssemblerConfig, Artifact, OutputMode, build_artifact, build_hosted_script
from inquiry_forms.errors import (
    ConfigurationError,
    FieldValidationError,
    InquiryFormError,
    SchemaError,
)
from inquiry_forms.render import Layout, RenderMode, render_form
from inquiry_forms.schema import FieldType, Form, FormField, ValidationType, create_form
from inquiry_forms.validation import check_form, validate_field, validate_form

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Schema
    "Form",
    "FormField",
    "FieldType",
    "ValidationType",
    "create_form",
    # Validation
    "validate_field",
    "validate_form",
    "check_form",
    # Rendering
    "render_form",
    "RenderMode",
    "Layout",
    # Export
    "build_artifact",
    "build_hosted_script",
    "AssemblerConfig",
    "Artifact",
    "OutputMode",
    # Errors
    "InquiryFormError",
    "SchemaError",
    "ConfigurationError",
    "FieldValidationError",
]
