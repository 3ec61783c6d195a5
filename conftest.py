"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Node.js detection for tests that execute the generated widget
- Common form fixtures
"""

from __future__ import annotations

import shutil
import subprocess
from functools import lru_cache
from pathlib import Path

import pytest
from dotenv import load_dotenv

from inquiry_forms.schema import (
    FieldType,
    FieldValidation,
    Form,
    FormField,
    ValidationType,
    create_form,
)

# Load environment variables from .env file
load_dotenv()

REPO_ROOT = Path(__file__).parent


# =============================================================================
# Node.js Detection (Private Functions)
# =============================================================================


@lru_cache(maxsize=1)
def _node_binary() -> str | None:
    """Path of a working ``node`` binary, or None."""
    node = shutil.which("node")
    if node is None:
        return None
    try:
        result = subprocess.run([node, "--version"], capture_output=True, timeout=10)
    except (subprocess.TimeoutExpired, OSError):
        return None
    return node if result.returncode == 0 else None


@lru_cache(maxsize=1)
def _jsdom_available() -> bool:
    """Check whether ``require('jsdom')`` resolves from the repo root."""
    node = _node_binary()
    if node is None:
        return False
    try:
        result = subprocess.run(
            [node, "-e", "require('jsdom')"],
            capture_output=True,
            timeout=30,
            cwd=REPO_ROOT,
        )
    except (subprocess.TimeoutExpired, OSError):
        return False
    return result.returncode == 0


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    """Auto-skip tests marked ``node`` when no Node.js binary is available."""
    if _node_binary() is not None:
        return
    skip_node = pytest.mark.skip(reason="Node.js not available")
    for item in items:
        if "node" in item.keywords:
            item.add_marker(skip_node)


# =============================================================================
# Node Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def node_binary() -> str:
    """Path to the Node.js binary (skips when missing)."""
    node = _node_binary()
    if node is None:
        pytest.skip("Node.js not available")
    return node


@pytest.fixture(scope="session")
def jsdom_node(node_binary: str) -> str:
    """Node.js binary that can load jsdom (skips when jsdom is missing)."""
    if not _jsdom_available():
        pytest.skip("jsdom not installed (npm install jsdom)")
    return node_binary


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def contact_form() -> Form:
    """A saveable contact form covering every rendered field type.

    Returns:
        Form with name, email, phone, topic (select), channel (radio),
        interests (checkbox) and message (textarea) fields.
    """
    form = create_form("Contact us", form_id="contact", timestamp="2024-01-01T00:00:00.000Z")
    form.settings.allowed_domains = ["example.com"]
    form.settings.recipient_emails = ["owner@example.com"]
    form.fields = [
        FormField(id="name", type=FieldType.TEXT, label="Name", required=True, order=0),
        FormField(
            id="email",
            type=FieldType.TEXT,
            label="Email",
            required=True,
            validation=FieldValidation(type=ValidationType.EMAIL),
            order=1,
        ),
        FormField(
            id="phone",
            type=FieldType.TEXT,
            label="Phone",
            validation=FieldValidation(type=ValidationType.PHONE),
            order=2,
        ),
        FormField(
            id="topic",
            type=FieldType.SELECT,
            label="Topic",
            required=True,
            options=["Sales", "Support"],
            order=3,
        ),
        FormField(
            id="channel",
            type=FieldType.RADIO,
            label="Reply by",
            options=["Email", "Phone"],
            order=4,
        ),
        FormField(
            id="interests",
            type=FieldType.CHECKBOX,
            label="Interests",
            options=["A", "B", "C"],
            order=5,
        ),
        FormField(
            id="message",
            type=FieldType.TEXTAREA,
            label="Message",
            validation=FieldValidation(min_length=5, max_length=200),
            order=6,
        ),
    ]
    return form
