"""Script assembler: builds the compact, inline and detailed widget artifacts."""

from inquiry_forms.assembler.lib import (
    DEFAULT_SCRIPT_BASE_URL,
    Artifact,
    ArtifactWarning,
    AssemblerConfig,
    OutputMode,
    build_artifact,
    build_hosted_script,
)

__all__ = [
    "OutputMode",
    "AssemblerConfig",
    "Artifact",
    "ArtifactWarning",
    "build_artifact",
    "build_hosted_script",
    "DEFAULT_SCRIPT_BASE_URL",
]
