"""Signatures module - auto-reply signatures, remote or local.

Example usage:
    >>> from inquiry_forms.signatures import SignatureService
    >>> service = SignatureService.from_environment(store)
    >>> service.default_signature().name
"""

from inquiry_forms.signatures.lib import (
    BUILTIN_SIGNATURES,
    SIGNATURES_PATH,
    SignatureClient,
    SignatureRequest,
    SignatureService,
)

__all__ = [
    # Client
    "SignatureClient",
    "SignatureRequest",
    "SIGNATURES_PATH",
    # Service
    "SignatureService",
    "BUILTIN_SIGNATURES",
]
