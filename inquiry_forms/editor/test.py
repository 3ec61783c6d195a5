"""Unit tests for editor module."""

import pytest
from pydantic import ValidationError

from inquiry_forms.editor import FormEditor, duplicate_form
from inquiry_forms.errors import ConfigurationError, SchemaError
from inquiry_forms.schema import FieldType, create_form
from inquiry_forms.storage import FormStore, InMemoryRepository
from inquiry_forms.validation import check_form


@pytest.fixture
def store():
    return FormStore(InMemoryRepository())


@pytest.fixture
def editor(store):
    form = create_form("Contact", form_id="form1", timestamp="2024-01-01T00:00:00.000Z")
    form.settings.recipient_emails = ["owner@example.com"]
    return FormEditor(form, store)


def _orders(editor):
    return [(f.label, f.order) for f in editor.form.ordered_fields()]


class TestFormEditorState:
    """Tests for dirty tracking and validity."""

    @pytest.mark.unit
    def test_new_editor_is_clean_and_invalid(self, editor):
        """No fields means not valid yet."""
        assert not editor.is_dirty
        assert not editor.is_valid

    @pytest.mark.unit
    def test_mutation_marks_dirty(self, editor):
        editor.add_field(FieldType.TEXT, label="Name")
        assert editor.is_dirty
        assert editor.is_valid

    @pytest.mark.unit
    def test_blank_name_is_invalid(self, editor):
        editor.add_field(FieldType.TEXT)
        editor.update_form(name="   ")
        assert not editor.is_valid

    @pytest.mark.unit
    def test_reset_discards_changes(self, editor):
        editor.add_field(FieldType.TEXT)
        editor.update_form(name="Other")
        editor.reset()
        assert editor.form.fields == []
        assert editor.form.name == "Contact"
        assert not editor.is_dirty

    @pytest.mark.unit
    def test_editor_works_on_a_copy(self, store):
        form = create_form("Contact")
        FormEditor(form, store).add_field(FieldType.TEXT)
        assert form.fields == []


class TestFormOperations:
    """Tests for update_form."""

    @pytest.mark.unit
    def test_update_form_settings(self, editor):
        editor.update_form(settings={"completionUrl": "https://example.com/thanks"})
        assert editor.form.settings.completion_url == "https://example.com/thanks"

    @pytest.mark.unit
    def test_update_form_rejects_readonly(self, editor):
        with pytest.raises(ValueError, match="id"):
            editor.update_form(id="other")

    @pytest.mark.unit
    def test_update_form_validates(self, editor):
        with pytest.raises(ValidationError):
            editor.update_form(settings={"fileUpload": {"maxFiles": 99}})


class TestFieldOperations:
    """Tests for field CRUD and ordering."""

    @pytest.mark.unit
    def test_add_field_appends_in_order(self, editor):
        editor.add_field(FieldType.TEXT, label="A")
        select = editor.add_field(FieldType.SELECT, label="B")
        assert _orders(editor) == [("A", 0), ("B", 1)]
        assert select.options == ["Option 1", "Option 2"]

    @pytest.mark.unit
    def test_update_field(self, editor):
        field = editor.add_field(FieldType.TEXT)
        updated = editor.update_field(field.id, label="Email", required=True)
        assert updated.label == "Email"
        assert editor.form.get_field(field.id).required is True

    @pytest.mark.unit
    def test_type_change_normalizes_options(self, editor):
        field = editor.add_field(FieldType.TEXT)
        as_radio = editor.update_field(field.id, type="radio")
        assert as_radio.options == ["Option 1", "Option 2"]

        editor.update_option(field.id, 0, "Yes")
        as_select = editor.update_field(field.id, type=FieldType.SELECT, multiple=True)
        assert as_select.options == ["Yes", "Option 2"]

        as_text = editor.update_field(field.id, type=FieldType.TEXTAREA)
        assert as_text.options is None
        assert as_text.multiple is None

    @pytest.mark.unit
    def test_update_unknown_field(self, editor):
        with pytest.raises(KeyError):
            editor.update_field("missing", label="x")

    @pytest.mark.unit
    def test_update_field_rejects_order(self, editor):
        field = editor.add_field(FieldType.TEXT)
        with pytest.raises(ValueError):
            editor.update_field(field.id, order=5)

    @pytest.mark.unit
    def test_delete_field_keeps_order_dense(self, editor):
        a = editor.add_field(FieldType.TEXT, label="A")
        editor.add_field(FieldType.TEXT, label="B")
        editor.add_field(FieldType.TEXT, label="C")
        editor.delete_field(a.id)
        assert _orders(editor) == [("B", 0), ("C", 1)]

    @pytest.mark.unit
    def test_move_field(self, editor):
        editor.add_field(FieldType.TEXT, label="A")
        b = editor.add_field(FieldType.TEXT, label="B")
        assert editor.move_field(b.id, "up") is True
        assert _orders(editor) == [("B", 0), ("A", 1)]

    @pytest.mark.unit
    def test_move_field_at_boundary_is_noop(self, editor):
        a = editor.add_field(FieldType.TEXT, label="A")
        assert editor.move_field(a.id, "up") is False
        assert editor.move_field(a.id, "down") is False
        assert _orders(editor) == [("A", 0)]

    @pytest.mark.unit
    def test_duplicate_field(self, editor):
        source = editor.add_field(FieldType.CHECKBOX, label="Topics")
        editor.add_field(FieldType.TEXT, label="Name")
        copy = editor.duplicate_field(source.id)
        assert copy.id != source.id
        assert copy.label == "Topics (copy)"
        assert copy.options == source.options
        assert _orders(editor)[-1] == ("Topics (copy)", 2)


class TestOptionOperations:
    """Tests for option editing on choice fields."""

    @pytest.mark.unit
    def test_add_update_delete_option(self, editor):
        field = editor.add_field(FieldType.SELECT)
        assert editor.add_option(field.id) == ["Option 1", "Option 2", "New option"]
        assert editor.update_option(field.id, 2, "Other") == ["Option 1", "Option 2", "Other"]
        assert editor.delete_option(field.id, 0) == ["Option 2", "Other"]

    @pytest.mark.unit
    def test_move_option(self, editor):
        field = editor.add_field(FieldType.RADIO)
        editor.add_option(field.id, "Third")
        assert editor.move_option(field.id, 2, 0) == ["Third", "Option 1", "Option 2"]

    @pytest.mark.unit
    def test_options_on_text_field_rejected(self, editor):
        field = editor.add_field(FieldType.TEXT)
        with pytest.raises(ValueError, match="has no options"):
            editor.add_option(field.id)


class TestSave:
    """Tests for save and duplicate_form."""

    @pytest.mark.unit
    def test_save_persists_and_bumps_timestamp(self, editor, store):
        editor.add_field(FieldType.TEXT, label="Name")
        saved = editor.save()
        assert saved.updated_at != "2024-01-01T00:00:00.000Z"
        assert not editor.is_dirty
        assert store.get_form("form1").fields[0].label == "Name"

    @pytest.mark.unit
    def test_save_then_reset_returns_saved_state(self, editor):
        editor.add_field(FieldType.TEXT, label="Name")
        editor.save()
        editor.add_field(FieldType.TEXT, label="Extra")
        editor.reset()
        assert [f.label for f in editor.form.fields] == ["Name"]

    @pytest.mark.unit
    def test_save_blocks_schema_errors(self, editor, store):
        field = editor.add_field(FieldType.SELECT)
        editor.delete_option(field.id, 0)
        editor.delete_option(field.id, 0)
        with pytest.raises(SchemaError):
            editor.save()
        assert store.get_form("form1") is None
        assert editor.is_dirty

    @pytest.mark.unit
    def test_save_blocks_missing_recipients(self, store):
        editor = FormEditor(create_form("No recipients"), store)
        editor.add_field(FieldType.TEXT)
        with pytest.raises(ConfigurationError):
            editor.save()

    @pytest.mark.unit
    def test_edited_form_passes_checks(self, editor):
        """Any sequence of editor operations leaves a structurally valid form."""
        a = editor.add_field(FieldType.TEXT, label="A")
        b = editor.add_field(FieldType.SELECT, label="B")
        editor.duplicate_field(a.id)
        editor.move_field(b.id, "down")
        editor.delete_field(a.id)
        editor.update_field(b.id, type="text")
        assert check_form(editor.form) == []

    @pytest.mark.unit
    def test_duplicate_form(self, editor):
        editor.add_field(FieldType.TEXT, label="Name")
        copy = duplicate_form(editor.form, timestamp="2025-01-01T00:00:00.000Z")
        assert copy.id != editor.form.id
        assert copy.name == "Contact (copy)"
        assert copy.created_at == copy.updated_at == "2025-01-01T00:00:00.000Z"
        assert [f.label for f in copy.fields] == ["Name"]
        copy.fields[0].label = "Changed"
        assert editor.form.fields[0].label == "Name"
