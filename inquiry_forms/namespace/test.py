"""Unit tests for namespace allocation."""

import json

import pytest

from inquiry_forms.namespace import allocate, escape_id


class TestAllocate:
    """Tests for allocate."""

    @pytest.mark.unit
    def test_derived_ids(self):
        ns = allocate("abc123")
        assert ns.prefix == "ir-form-abc123"
        assert ns.container_id == "ir-form-abc123-container"
        assert ns.form_element_id == "ir-form-abc123-form"
        assert ns.field_id("email") == "ir-form-abc123-field-email"
        assert ns.error_id("email") == "ir-form-abc123-field-email-error"
        assert ns.embed_id == "inquiry-form-abc123"
        assert ns.script_name == "inquiry-form-abc123.js"

    @pytest.mark.unit
    def test_preview_prefix(self):
        ns = allocate("abc", preview=True)
        assert ns.field_id("x") == "preview-ir-form-abc-field-x"
        assert ns.embed_id == "inquiry-form-abc"

    @pytest.mark.unit
    def test_deterministic(self):
        assert allocate("f1") == allocate("f1")
        assert allocate("f1").field_id("a b") == allocate("f1").field_id("a b")

    @pytest.mark.unit
    def test_distinct_forms_never_collide(self):
        first = allocate("a").field_id("b")
        second = allocate("a-field").field_id("b")
        assert first != second
        assert allocate("a").prefix != allocate("b").prefix


class TestEscapeId:
    """Tests for escape_id."""

    @pytest.mark.unit
    def test_safe_passthrough(self):
        assert escape_id("Abc09") == "Abc09"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,escaped",
        [("a b", "a_20b"), ("a_b", "a_5fb"), ("a-b", "a_2db"), ("é", "_c3_a9")],
    )
    def test_escapes(self, raw, escaped):
        assert escape_id(raw) == escaped

    @pytest.mark.unit
    def test_injective_on_underscore(self):
        assert escape_id("a_20b") != escape_id("a b")

    @pytest.mark.unit
    def test_hyphen_cannot_forge_suffixes(self):
        field_of_a = allocate("a").field_id("b-container")
        container_of_other = allocate("a-field-b").container_id
        assert field_of_a != container_of_other

    @pytest.mark.unit
    def test_lone_surrogate_is_escaped(self):
        assert escape_id(json.loads('"a\\udc00"')) == "a_ed_b0_80"
