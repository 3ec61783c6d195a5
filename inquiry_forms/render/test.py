"""Unit tests for the field renderer."""

import re

import pytest

from inquiry_forms.namespace import allocate
from inquiry_forms.render import (
    Layout,
    RenderMode,
    render_field,
    render_form,
)
from inquiry_forms.schema import (
    FieldType,
    FieldValidation,
    FileUploadSettings,
    FormField,
    create_form,
)


@pytest.fixture
def form():
    form = create_form("Contact", form_id="abc")
    form.fields = [
        FormField(id="name", type=FieldType.TEXT, label="Name", required=True, order=0),
        FormField(
            id="topic",
            type=FieldType.SELECT,
            label="Topic",
            options=["A", "B"],
            order=2,
        ),
        FormField(
            id="msg",
            type=FieldType.TEXTAREA,
            label="Message",
            placeholder="Tell us",
            order=1,
            validation=FieldValidation(min_length=5, max_length=500),
        ),
    ]
    return form


class TestRenderField:
    """Tests for render_field."""

    @pytest.mark.unit
    def test_text_input(self):
        field = FormField(id="name", type=FieldType.TEXT, label="Name", required=True)
        markup = render_field(field, allocate("abc")).markup
        assert 'id="ir-form-abc-field-name"' in markup
        assert 'name="name"' in markup
        assert 'class="ir-form-input"' in markup
        assert " required" in markup
        assert " *</span>" in markup

    @pytest.mark.unit
    def test_select_has_one_leading_empty_option(self):
        field = FormField(id="s", type=FieldType.SELECT, options=["A", "B"])
        markup = render_field(field, allocate("abc")).markup
        options = re.findall(r'<option value="([^"]*)">', markup)
        assert options == ["", "A", "B"]

    @pytest.mark.unit
    def test_multi_select(self):
        field = FormField(id="s", type=FieldType.SELECT, options=["A"], multiple=True)
        assert " multiple" in render_field(field, allocate("abc")).markup

    @pytest.mark.unit
    def test_radio_group_shares_name(self):
        field = FormField(
            id="size", type=FieldType.RADIO, label="Size", options=["S", "M", "L"]
        )
        markup = render_field(field, allocate("abc")).markup
        assert markup.count('name="size"') == 3
        assert markup.count('type="radio"') == 3
        assert "<legend" in markup and "<fieldset" in markup

    @pytest.mark.unit
    def test_checkbox_group(self):
        field = FormField(
            id="tags", type=FieldType.CHECKBOX, required=True, options=["x", "y"]
        )
        markup = render_field(field, allocate("abc")).markup
        assert markup.count('type="checkbox"') == 2
        assert " required" not in markup

    @pytest.mark.unit
    def test_escapes_operator_text(self):
        field = FormField(
            id="q",
            type=FieldType.SELECT,
            label='<script>alert("x")</script>',
            options=['"><img src=x>'],
        )
        markup = render_field(field, allocate("abc")).markup
        assert "<script>" not in markup
        assert "<img" not in markup
        assert "&lt;script&gt;" in markup
        assert "&quot;&gt;&lt;img src=x&gt;" in markup

    @pytest.mark.unit
    def test_file_field_skipped_with_warning(self):
        field = FormField(id="doc", type=FieldType.FILE)
        result = render_field(field, allocate("abc"))
        assert result.markup == ""
        assert result.has_warnings
        assert result.warnings[0].code == "unsupported_file_field"

    @pytest.mark.unit
    def test_choice_without_options_warns(self):
        field = FormField(id="s", type=FieldType.RADIO, options=[])
        result = render_field(field, allocate("abc"))
        assert [w.code for w in result.warnings] == ["missing_options"]

    @pytest.mark.unit
    def test_length_attributes(self):
        field = FormField(
            id="t",
            type=FieldType.TEXT,
            validation=FieldValidation(min_length=2, max_length=9),
        )
        markup = render_field(field, allocate("abc")).markup
        assert 'minlength="2"' in markup
        assert 'maxlength="9"' in markup


class TestRenderForm:
    """Tests for render_form."""

    @pytest.mark.unit
    def test_fields_in_order(self, form):
        markup = render_form(form).markup
        positions = [markup.index(f'data-field-id="{fid}"') for fid in ("name", "msg", "topic")]
        assert positions == sorted(positions)

    @pytest.mark.unit
    def test_compact_is_one_line_per_field(self, form):
        lines = render_form(form, layout=Layout.COMPACT).markup.splitlines()
        # form open, three fields, submit button, form close
        assert len(lines) == 6
        assert lines[0].startswith('<form id="ir-form-abc-form"')
        assert lines[-1] == "</form>"

    @pytest.mark.unit
    def test_pretty_is_indented(self, form):
        markup = render_form(form, layout=Layout.PRETTY).markup
        assert '\n  <div class="ir-form-field" data-field-id="name">' in markup
        assert '\n    <label for="ir-form-abc-field-name"' in markup

    @pytest.mark.unit
    def test_preview_disables_everything(self, form):
        markup = render_form(form, RenderMode.PREVIEW).markup
        assert 'id="preview-ir-form-abc-field-name"' in markup
        tags = re.findall(r"<(?:input|select|textarea|button)\b[^>]*>", markup)
        assert len(tags) == 4
        assert all(" disabled" in tag for tag in tags)

    @pytest.mark.unit
    def test_export_controls_enabled(self, form):
        markup = render_form(form).markup
        assert " disabled" not in markup
        assert "novalidate" in markup

    @pytest.mark.unit
    def test_attachment_block_only_when_enabled(self, form):
        assert 'type="file"' not in render_form(form).markup
        form.settings.file_upload = FileUploadSettings(
            enabled=True, max_files=3, max_file_size=5, allowed_types=[".pdf"]
        )
        markup = render_form(form).markup
        assert 'id="ir-form-abc-attachments"' in markup
        assert " multiple" in markup
        assert 'accept=".pdf"' in markup
        assert "Up to 3 files, 5 MB each." in markup

    @pytest.mark.unit
    def test_field_numbers(self, form):
        form.settings.show_field_numbers = True
        markup = render_form(form).markup
        assert ">1. Name<" in markup
        assert ">2. Message<" in markup

    @pytest.mark.unit
    def test_deterministic(self, form):
        assert render_form(form).markup == render_form(form).markup
